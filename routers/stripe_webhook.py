"""
Stripe webhook: signature-verified order status transitions
"""
from fastapi import APIRouter, Request, BackgroundTasks, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import logger
from core.database import get_db
from models.order import Order
from utils import payments
from utils.emailing import send_order_notification
from utils.tracking import complete_order_by_session, fail_pending_orders_by_email

router = APIRouter(prefix="/api/stripe", tags=["stripe"])


def _handle_checkout_completed(db: Session, session: dict, background_tasks: BackgroundTasks) -> None:
    session_id = session.get("id")
    payment_intent = session.get("payment_intent")
    if isinstance(payment_intent, dict):
        payment_intent = payment_intent.get("id")

    try:
        updated = complete_order_by_session(db, session_id, payment_intent)
    except Exception as ex:
        db.rollback()
        logger.exception(f"[stripe.webhook] failed to complete order for session {session_id}: {ex}")
        return
    metadata = session.get("metadata") or {}
    logger.info(
        f"[stripe.webhook] checkout completed session={session_id} order={metadata.get('orderId')} updated={updated}"
    )
    # Replays find no pending row; side effects run on the first completion only
    if not updated:
        return

    payments.send_session_invoice(session)

    order = db.query(Order).filter(Order.stripe_session_id == session_id).first()
    if order is not None:
        background_tasks.add_task(send_order_notification, order.to_dict())


def _handle_invoice_failed(db: Session, invoice: dict) -> None:
    email = invoice.get("customer_email")
    if not email:
        logger.warning(f"[stripe.webhook] invoice {invoice.get('id')} failed without customer_email")
        return
    try:
        updated = fail_pending_orders_by_email(db, email)
    except Exception as ex:
        db.rollback()
        logger.exception(f"[stripe.webhook] failed to mark orders failed for {email}: {ex}")
        return
    logger.info(f"[stripe.webhook] invoice {invoice.get('id')} payment failed; {updated} pending order(s) failed")


@router.post("/webhook")
async def stripe_webhook(request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        return JSONResponse({"error": "Missing stripe-signature header"}, status_code=400)

    try:
        event = payments.construct_event(payload, signature)
    except Exception as ex:
        logger.warning(f"[stripe.webhook] signature verification failed: {ex}")
        return JSONResponse({"error": "Webhook signature verification failed"}, status_code=400)

    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}
    try:
        if event_type == "checkout.session.completed":
            _handle_checkout_completed(db, obj, background_tasks)
        elif event_type == "invoice.payment_failed":
            _handle_invoice_failed(db, obj)
        else:
            logger.info(f"[stripe.webhook] unhandled event type {event_type}")
    except Exception as ex:
        db.rollback()
        # Verified events are always acknowledged; redelivery would not fix a local failure
        logger.exception(f"[stripe.webhook] handler failed for {event_type}: {ex}")

    return {"received": True}
