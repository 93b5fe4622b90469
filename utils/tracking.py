"""
Log store writes and reads for visitors, orders and searched GMBs.

Visitor and selection logging are best-effort: failures are logged and
swallowed so they never block the page or the order flow.
"""
from datetime import datetime, timezone, time as dtime
from typing import Any, Optional

from sqlalchemy.orm import Session

from core import database
from core.config import logger
from models.order import Order, STATUS_PENDING, STATUS_COMPLETED, STATUS_FAILED
from models.searched_gmb import SearchedGmb
from models.visitor import Visitor

VISITOR_FIELDS = (
    "ip_address", "user_agent", "referer", "page_path", "country", "city", "session_id",
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content", "gtm_from",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_date_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse YYYY-MM-DD or an ISO timestamp. Bare end dates cover the whole day."""
    raw = (value or "").strip()
    if not raw:
        return None
    if len(raw) == 10:
        day = datetime.strptime(raw, "%Y-%m-%d").date()
        return datetime.combine(day, dtime.max if end_of_day else dtime.min)
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    # Stored timestamps are compared as naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def log_visitor(record: dict) -> bool:
    """Fire-and-forget insert of one page view. Never raises."""
    db = None
    try:
        db = database.SessionLocal()
        db.add(Visitor(**{k: record.get(k) for k in VISITOR_FIELDS}))
        db.commit()
        return True
    except Exception as ex:
        logger.error(f"[tracking.visitor] failed to log visitor for {record.get('page_path')}: {ex}")
        if db is not None:
            try:
                db.rollback()
            except Exception:
                pass
        return False
    finally:
        if db is not None:
            db.close()


def select_for_order(
    db: Session,
    details: dict,
    search_query: Optional[str] = None,
    location: Optional[str] = None,
    session_id: Optional[str] = None,
    search_results_count: Optional[int] = None,
    request_info: Optional[dict] = None,
) -> Optional[SearchedGmb]:
    """Persist a selected business as a lead. Returns None when the write fails."""
    info = request_info or {}
    row = SearchedGmb(
        session_id=session_id,
        search_query=search_query or None,
        location=location or None,
        place_id=details.get("placeId") or details.get("id"),
        place_name=details.get("name"),
        place_address=details.get("formatted_address") or details.get("address"),
        place_phone=details.get("formatted_phone_number") or details.get("phoneNumber"),
        place_website=details.get("website"),
        place_rating=details.get("rating"),
        place_rating_count=details.get("user_ratings_total"),
        place_business_status=details.get("businessStatus"),
        place_types=list(details.get("types") or []),
        place_geometry=details.get("geometry") or None,
        search_results_count=search_results_count,
        ip_address=info.get("ip_address"),
        user_agent=info.get("user_agent"),
        referer=info.get("referer"),
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except Exception as ex:
        db.rollback()
        logger.error(f"[tracking.gmb] failed to log selected place {row.place_id}: {ex}")
        return None


def log_order(db: Session, data: dict[str, Any]) -> Optional[Order]:
    """Insert a pending order row. Returns None on failure."""
    try:
        order = Order(**{**data, "addons": list(data.get("addons") or [])})
        db.add(order)
        db.commit()
        db.refresh(order)
        return order
    except Exception as ex:
        db.rollback()
        logger.error(f"[tracking.order] failed to log order for session {data.get('stripe_session_id')}: {ex}")
        return None


def complete_order_by_session(db: Session, stripe_session_id: str, payment_intent_id: Optional[str]) -> int:
    """pending -> completed for the order matching a checkout session.

    Rows already in a terminal status are left untouched, so replays are no-ops.
    """
    updated = (
        db.query(Order)
        .filter(Order.stripe_session_id == stripe_session_id, Order.payment_status == STATUS_PENDING)
        .update(
            {
                Order.payment_status: STATUS_COMPLETED,
                Order.payment_intent_id: payment_intent_id,
                Order.updated_at: _utcnow(),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    return updated


def fail_pending_orders_by_email(db: Session, customer_email: str) -> int:
    updated = (
        db.query(Order)
        .filter(Order.customer_email == customer_email, Order.payment_status == STATUS_PENDING)
        .update(
            {Order.payment_status: STATUS_FAILED, Order.updated_at: _utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    return updated


def _in_range(query, column, start: Optional[datetime], end: Optional[datetime]):
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column <= end)
    return query


def get_visitors(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> list[dict]:
    q = _in_range(db.query(Visitor), Visitor.created_at, start, end)
    return [v.to_dict() for v in q.order_by(Visitor.created_at.desc(), Visitor.id.desc()).all()]


def get_orders(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> list[dict]:
    q = _in_range(db.query(Order), Order.created_at, start, end)
    return [o.to_dict() for o in q.order_by(Order.created_at.desc(), Order.id.desc()).all()]


def get_searches(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> list[dict]:
    q = _in_range(db.query(SearchedGmb), SearchedGmb.created_at, start, end)
    return [s.to_dict() for s in q.order_by(SearchedGmb.created_at.desc(), SearchedGmb.id.desc()).all()]
