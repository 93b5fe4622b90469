"""
Order intake: server-priced Stripe Checkout session + pending order row
"""
import stripe
from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import logger, CURRENCY
from core.database import get_db
from models.order import SERVICE_TYPES, STATUS_PENDING
from utils import payments
from utils.pricing import load_catalog, compute_total
from utils.request_info import get_request_info
from utils.tracking import log_order
from utils.validation import first_missing

router = APIRouter(prefix="/api", tags=["payments"])

REQUIRED_FORM_FIELDS = ("email", "firstName", "lastName", "phone")


@router.post("/create-payment")
async def create_payment(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
    except Exception:
        return JSONResponse({"error": "Missing required fields"}, status_code=400)
    if not isinstance(body, dict) or first_missing(body, ("orderData", "formData", "totalPrice", "serviceType")):
        return JSONResponse({"error": "Missing required fields"}, status_code=400)

    order_data = body["orderData"]
    form = body["formData"]
    service_type = body["serviceType"]
    if not isinstance(order_data, dict) or not isinstance(form, dict):
        return JSONResponse({"error": "Missing required fields"}, status_code=400)
    if service_type not in SERVICE_TYPES:
        return JSONResponse({"error": "Invalid service type"}, status_code=400)

    missing = first_missing(form, REQUIRED_FORM_FIELDS)
    if missing:
        return JSONResponse({"error": f"Missing required field: {missing}"}, status_code=400)
    business = order_data.get("selectedBusiness")
    if not isinstance(business, dict) or not business.get("name"):
        return JSONResponse({"error": "Missing selected business"}, status_code=400)

    year_protection = bool(order_data.get("yearProtection"))
    express_service = bool(order_data.get("expressService"))

    catalog = load_catalog(db)
    total = compute_total(catalog, service_type, year_protection, express_service)
    try:
        client_total = float(body.get("totalPrice"))
    except (TypeError, ValueError):
        client_total = None
    if client_total is None or abs(client_total - total) > 0.005:
        logger.warning(
            f"[payments.create] client total {body.get('totalPrice')!r} differs from server total {total} "
            f"for {form.get('email')}; using server total"
        )

    order_id = payments.generate_order_id()
    try:
        customer = payments.create_customer(payments.build_customer_params(form, order_data, service_type))
        line_items = payments.build_line_items(
            catalog, service_type, business["name"], year_protection, express_service
        )
        session = payments.create_checkout_session(payments.build_checkout_params(
            customer_id=customer["id"],
            line_items=line_items,
            order_id=order_id,
            service_type=service_type,
            business=business,
            customer_email=form["email"],
            express_service=express_service,
        ))
    except stripe.StripeError as ex:
        logger.error(f"[payments.create] stripe error for {form.get('email')}: {ex}")
        message = getattr(ex, "user_message", None) or str(ex)
        return JSONResponse({"error": f"Payment processing failed: {message}"}, status_code=400)
    except Exception as ex:
        logger.exception(f"[payments.create] failed to create checkout session: {ex}")
        return JSONResponse({"error": "Failed to process payment. Please try again."}, status_code=500)

    logger.info(
        f"[payments.create] checkout session {session['id']} order={order_id} "
        f"service={service_type} total={total}"
    )

    addons = [code for code, on in (("yearProtection", year_protection), ("expressService", express_service)) if on]
    is_company = bool(form.get("isCompany"))
    order = log_order(db, {
        "session_id": request.cookies.get("session_id"),
        "customer_email": form["email"],
        "customer_name": f"{form['firstName']} {form['lastName']}",
        "company_name": form.get("companyName") if is_company else None,
        "nip": form.get("companyTaxId") if is_company else None,
        "phone": form.get("phone"),
        "service_type": service_type,
        "addons": addons,
        "total_amount": total,
        "currency": CURRENCY.upper(),
        "payment_status": STATUS_PENDING,
        "stripe_session_id": session["id"],
        "business_place_id": business.get("placeId") or business.get("id"),
        "business_name": business.get("name"),
        "business_address": business.get("formatted_address") or business.get("address"),
        "business_phone": business.get("formatted_phone_number") or business.get("phoneNumber"),
        "business_website": business.get("website"),
        "business_rating": business.get("rating"),
        "business_google_url": business.get("googleMapsUrl"),
        **get_request_info(request),
    })
    if order is None:
        # Checkout already exists; the order log is best-effort
        logger.error(f"[payments.create] order row not written for session {session['id']}")

    return {
        "success": True,
        "sessionId": session["id"],
        "customerId": customer["id"],
        "checkoutUrl": session["url"],
    }
