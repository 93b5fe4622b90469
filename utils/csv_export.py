"""CSV rendering for admin exports."""
from datetime import datetime, timezone
from typing import Any, Iterable

ORDER_CSV_HEADERS = [
    "Order ID",
    "Customer Name",
    "Customer Email",
    "Company Name",
    "NIP",
    "Phone",
    "Service Type",
    "Addons",
    "Total Amount",
    "Currency",
    "Payment Status",
    "Payment Intent ID",
    "Stripe Session ID",
    "Business Place ID",
    "Business Name",
    "Business Address",
    "Business Phone",
    "Business Website",
    "Business Rating",
    "Business Google URL",
    "IP Address",
    "User Agent",
    "Referer",
    "Session ID",
    "Created Date",
    "Updated Date",
]

SEARCHED_GMB_CSV_HEADERS = [
    "ID",
    "Place Name",
    "Place Address",
    "Place ID",
    "Phone",
    "Website",
    "Rating",
    "Rating Count",
    "Business Status",
    "Types",
    "Search Query",
    "Location",
    "Search Results Count",
    "Session ID",
    "IP Address",
    "User Agent",
    "Referer",
    "Created Date",
]


def _field(value: Any) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def to_csv(headers: list[str], rows: Iterable[Iterable[Any]]) -> str:
    """Header line joined by commas; every data field quoted with inner quotes doubled."""
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(_field(v) for v in row))
    return "\n".join(lines)


def _blank(value: Any) -> Any:
    return "" if value is None else value


def _timestamp(value: Any) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(str(value)).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return str(value)


def order_csv_row(order: dict) -> list:
    return [
        _blank(order.get("id")),
        _blank(order.get("customer_name")),
        _blank(order.get("customer_email")),
        _blank(order.get("company_name")),
        _blank(order.get("nip")),
        _blank(order.get("phone")),
        _blank(order.get("service_type")),
        "; ".join(order.get("addons") or []),
        _blank(order.get("total_amount")),
        _blank(order.get("currency")),
        _blank(order.get("payment_status")),
        _blank(order.get("payment_intent_id")),
        _blank(order.get("stripe_session_id")),
        _blank(order.get("business_place_id")),
        _blank(order.get("business_name")),
        _blank(order.get("business_address")),
        _blank(order.get("business_phone")),
        _blank(order.get("business_website")),
        _blank(order.get("business_rating")),
        _blank(order.get("business_google_url")),
        _blank(order.get("ip_address")),
        _blank(order.get("user_agent")),
        _blank(order.get("referer")),
        _blank(order.get("session_id")),
        _timestamp(order.get("created_at")),
        _timestamp(order.get("updated_at")),
    ]


def searched_gmb_csv_row(row: dict) -> list:
    return [
        _blank(row.get("id")),
        _blank(row.get("place_name")),
        _blank(row.get("place_address")),
        _blank(row.get("place_id")),
        _blank(row.get("place_phone")),
        _blank(row.get("place_website")),
        _blank(row.get("place_rating")),
        _blank(row.get("place_rating_count")),
        _blank(row.get("place_business_status")),
        "; ".join(row.get("place_types") or []),
        _blank(row.get("search_query")),
        _blank(row.get("location")),
        _blank(row.get("search_results_count")),
        _blank(row.get("session_id")),
        _blank(row.get("ip_address")),
        _blank(row.get("user_agent")),
        _blank(row.get("referer")),
        _timestamp(row.get("created_at")),
    ]


def csv_filename(kind: str) -> str:
    return f"{kind}-{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.csv"
