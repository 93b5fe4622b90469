"""
Analytics folds over visitor, order and search rows.

Every dimension is one call to group_and_count with a different key function.
"""
from collections import Counter
from typing import Any, Callable, Iterable, Optional
from urllib.parse import urlsplit

DIRECT = "Direct"
UNKNOWN = "unknown"


def group_and_count(
    rows: Iterable[dict],
    key_fn: Callable[[dict], Any],
    *,
    skip: Optional[Callable[[Any], bool]] = None,
) -> Counter:
    counts: Counter = Counter()
    for row in rows:
        key = key_fn(row)
        if skip is not None and skip(key):
            continue
        counts[key] += 1
    return counts


def top_n(counts: Counter, label: str, n: int = 10) -> list[dict]:
    """[{label: key, "count": c}] sorted by count desc, ties in first-seen order."""
    return [{label: key, "count": count} for key, count in counts.most_common(n)]


def referer_host(referer: Optional[str]) -> str:
    if not referer:
        return DIRECT
    try:
        host = urlsplit(str(referer)).hostname
    except ValueError:
        return DIRECT
    return host or DIRECT


def _day(row: dict) -> Optional[str]:
    created = row.get("created_at")
    if not created:
        return None
    return str(created)[:10]


def by_day(rows: Iterable[dict]) -> list[dict]:
    counts = group_and_count(rows, _day, skip=lambda k: k is None)
    return [{"date": day, "count": counts[day]} for day in sorted(counts)]


def _is_unknown(value: Any) -> bool:
    return value is None or str(value).strip().lower() in ("", UNKNOWN)


def _or_unknown(value: Any) -> str:
    return UNKNOWN if value in (None, "") else value


def _amount(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def revenue_totals(orders: list[dict]) -> dict:
    total = sum(_amount(o.get("total_amount")) for o in orders)
    avg = total / len(orders) if orders else 0
    return {"totalRevenue": round(total, 2), "avgOrderValue": round(avg, 2)}


def _top_pages(visitors: list[dict]) -> list[dict]:
    return top_n(group_and_count(visitors, lambda v: v.get("page_path") or ""), "page")


def visitor_analytics(visitors: list[dict]) -> dict:
    return {
        "totalVisitors": len(visitors),
        "uniqueIps": len({v.get("ip_address") for v in visitors}),
        "topPages": _top_pages(visitors),
        "visitorsByDay": by_day(visitors),
    }


def order_analytics(orders: list[dict]) -> dict:
    by_status = group_and_count(orders, lambda o: _or_unknown(o.get("payment_status")))
    by_service = group_and_count(orders, lambda o: _or_unknown(o.get("service_type")))
    return {
        "totalOrders": len(orders),
        **revenue_totals(orders),
        "ordersByStatus": [{"status": k, "count": c} for k, c in by_status.items()],
        "ordersByService": [{"service": k, "count": c} for k, c in by_service.items()],
    }


def search_analytics(searches: list[dict]) -> dict:
    return {
        "totalSearches": len(searches),
        "uniquePlaces": len({s.get("place_id") for s in searches if s.get("place_id")}),
        "topSearchQueries": top_n(
            group_and_count(
                searches,
                lambda s: (s.get("search_query") or "").strip(),
                skip=lambda k: not k,
            ),
            "query",
        ),
        "searchesByDay": by_day(searches),
    }


def visitor_stats(visitors: list[dict]) -> dict:
    """Summary block of GET /api/visitors."""
    return {
        "totalVisitors": len(visitors),
        "uniqueIps": len({v.get("ip_address") for v in visitors}),
        "uniqueCountries": len({v.get("country") for v in visitors if not _is_unknown(v.get("country"))}),
        "topPages": _top_pages(visitors),
        "topCountries": top_n(
            group_and_count(visitors, lambda v: v.get("country"), skip=_is_unknown), "country"
        ),
        "topReferers": top_n(group_and_count(visitors, lambda v: referer_host(v.get("referer"))), "referer"),
    }
