"""
Thin wrappers over the Stripe SDK plus the checkout payload builders.

Routers call these module functions (never `stripe` directly) so the
network edge stays in one place.
"""
import json
import time
from typing import Any, Optional

import stripe

from core.config import logger, STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET, SITE_URL, CURRENCY

stripe.api_key = STRIPE_SECRET_KEY

SERVICE_LABELS = {
    "remove": ("Profile Removal", "Complete removal"),
    "reset": ("Profile Reset", "Reset reviews"),
}
ADDON_DESCRIPTIONS = {
    "yearProtection": "Protection against future negative reviews for 1 year",
    "expressService": "Priority processing within 24-48 hours",
}
COUNTRY_CODES = {"poland": "PL", "united states": "US", "usa": "US"}


def to_minor_units(amount: float) -> int:
    return int(round(float(amount) * 100))


def generate_order_id() -> str:
    return f"ORDER_{int(time.time() * 1000)}"


def _flag(value: Any) -> str:
    return "true" if value else "false"


def _country_code(name: Optional[str]) -> str:
    raw = (name or "").strip()
    if len(raw) == 2:
        return raw.upper()
    return COUNTRY_CODES.get(raw.lower(), "US")


def build_customer_params(form: dict, order: dict, service_type: str) -> dict:
    business = order.get("selectedBusiness") or {}
    params: dict[str, Any] = {
        "email": form.get("email"),
        "name": f"{form.get('firstName', '')} {form.get('lastName', '')}".strip(),
        "phone": form.get("phone"),
        "metadata": {
            "orderType": "gmb_service",
            "businessName": business.get("name") or "",
            "serviceType": service_type,
            "yearProtection": _flag(order.get("yearProtection")),
            "expressService": _flag(order.get("expressService")),
        },
    }
    if form.get("isCompany") and form.get("companyName"):
        params["address"] = {
            "line1": form.get("companyAddress") or "",
            "city": form.get("companyCity") or "",
            "postal_code": form.get("companyZip") or "",
            "country": _country_code(form.get("companyCountry")),
        }
        params["metadata"]["companyName"] = form.get("companyName")
        params["metadata"]["isCompany"] = "true"
        if form.get("companyTaxId"):
            params["metadata"]["taxId"] = form.get("companyTaxId")
    return params


def build_line_items(catalog: dict, service_type: str, business_name: str, year_protection: bool, express_service: bool) -> list[dict]:
    """One line item for the base service, one per selected add-on."""
    title, verb = SERVICE_LABELS.get(service_type, (service_type, "Service"))
    base = catalog["services"][service_type]
    items = [{
        "price_data": {
            "currency": CURRENCY,
            "product_data": {
                "name": f"Google Maps {title} Service",
                "description": f"{verb} for {business_name}",
                "metadata": {"businessName": business_name, "serviceType": service_type},
            },
            "unit_amount": to_minor_units(base["price"]),
        },
        "quantity": 1,
    }]

    addons = catalog.get("addons") or {}
    for code, selected in (("yearProtection", year_protection), ("expressService", express_service)):
        if not selected or code not in addons:
            continue
        entry = addons[code]
        items.append({
            "price_data": {
                "currency": CURRENCY,
                "product_data": {
                    "name": entry.get("name") or code,
                    "description": entry.get("description") or ADDON_DESCRIPTIONS[code],
                },
                "unit_amount": to_minor_units(entry["price"]),
            },
            "quantity": 1,
        })
    return items


def processing_time(service_type: str, express_service: bool) -> str:
    if express_service:
        return "24-48 hours (Express)"
    return "3-5 business days" if service_type == "reset" else "5-7 business days"


def build_checkout_params(
    customer_id: str,
    line_items: list[dict],
    order_id: str,
    service_type: str,
    business: dict,
    customer_email: str,
    express_service: bool,
) -> dict:
    title, _ = SERVICE_LABELS.get(service_type, (service_type, ""))
    business_name = business.get("name") or ""
    return {
        "customer": customer_id,
        "mode": "payment",
        "line_items": line_items,
        "success_url": f"{SITE_URL}/payment/success?session_id={{CHECKOUT_SESSION_ID}}&success=true",
        "cancel_url": f"{SITE_URL}/?canceled=true",
        "metadata": {
            "orderId": order_id,
            "businessName": business_name,
            "serviceType": service_type,
            "customerEmail": customer_email,
        },
        "invoice_creation": {
            "enabled": True,
            "invoice_data": {
                "description": f"Google Maps {title} Service",
                "custom_fields": [
                    {"name": "Business & Service", "value": f"{business_name} - {title}"[:140]},
                    {"name": "Processing Time", "value": processing_time(service_type, express_service)},
                ],
                "metadata": {
                    "orderId": order_id,
                    "businessPlaceId": business.get("placeId") or business.get("place_id") or business.get("id") or "",
                },
            },
        },
        "payment_intent_data": {
            "metadata": {"orderId": order_id, "businessName": business_name, "serviceType": service_type},
        },
    }


# ---- Stripe edge ----

def create_customer(params: dict):
    return stripe.Customer.create(**params)


def create_checkout_session(params: dict):
    return stripe.checkout.Session.create(**params)


def retrieve_invoice(invoice_id: str):
    return stripe.Invoice.retrieve(invoice_id)


def send_invoice(invoice_id: str):
    return stripe.Invoice.send_invoice(invoice_id)


def construct_event(payload: bytes, signature: str) -> dict:
    """Verify a webhook payload and return the event as a plain dict.

    Raises ValueError or stripe.SignatureVerificationError.
    """
    if not STRIPE_WEBHOOK_SECRET:
        logger.error("[stripe] STRIPE_WEBHOOK_SECRET is not configured")
        raise ValueError("Webhook secret not configured")
    stripe.Webhook.construct_event(payload, signature, STRIPE_WEBHOOK_SECRET)
    return json.loads(payload)


def send_session_invoice(session: dict) -> bool:
    """Send the checkout session's invoice when still draft/open. Never raises."""
    invoice_ref = session.get("invoice")
    if isinstance(invoice_ref, dict):
        invoice_ref = invoice_ref.get("id")
    if not invoice_ref:
        return False
    try:
        invoice = retrieve_invoice(invoice_ref)
        if invoice["status"] in ("draft", "open"):
            send_invoice(invoice_ref)
            logger.info(f"[stripe.invoice] sent invoice {invoice_ref}")
            return True
    except Exception as ex:
        logger.error(f"[stripe.invoice] failed to send invoice {invoice_ref}: {ex}")
    return False
