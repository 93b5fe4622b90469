"""
Admin orders: filtered listing, CSV export and manual status resolution
"""
import math
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse, Response
from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.config import logger
from core.auth import require_admin
from core.database import get_db
from models.order import Order, STATUS_PENDING, TERMINAL_STATUSES
from utils.csv_export import to_csv, ORDER_CSV_HEADERS, order_csv_row, csv_filename
from utils.tracking import parse_date_bound

router = APIRouter(prefix="/api/admin/orders", tags=["admin"])


def _search_filter(term: str):
    pattern = f"%{term}%"
    clauses = [
        Order.customer_email.ilike(pattern),
        Order.customer_name.ilike(pattern),
        Order.company_name.ilike(pattern),
    ]
    if term.isdigit():
        clauses.append(Order.id == int(term))
    return or_(*clauses)


@router.get("")
async def list_orders(
    request: Request,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    status: Optional[str] = None,
    service: Optional[str] = None,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    export: Optional[str] = None,
    db: Session = Depends(get_db),
):
    denied = require_admin(request)
    if denied:
        return denied

    try:
        start = parse_date_bound(startDate)
        end = parse_date_bound(endDate, end_of_day=True)
    except ValueError:
        return JSONResponse({"error": "Invalid date format"}, status_code=400)

    page = max(1, page)
    limit = max(1, min(limit, 500))

    try:
        q = db.query(Order)
        term = (search or "").strip()
        if term:
            q = q.filter(_search_filter(term))
        if status:
            q = q.filter(Order.payment_status == status)
        if service:
            q = q.filter(Order.service_type == service)
        if start is not None:
            q = q.filter(Order.created_at >= start)
        if end is not None:
            q = q.filter(Order.created_at <= end)
        q = q.order_by(Order.created_at.desc(), Order.id.desc())

        if (export or "").lower() == "csv":
            orders = [o.to_dict() for o in q.all()]
            content = to_csv(ORDER_CSV_HEADERS, (order_csv_row(o) for o in orders))
            logger.info(f"[admin.orders] exported {len(orders)} orders to CSV")
            return Response(
                content,
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{csv_filename("orders")}"'},
            )

        total = q.count()
        orders = q.offset((page - 1) * limit).limit(limit).all()
    except Exception as ex:
        logger.exception(f"[admin.orders] failed to fetch orders: {ex}")
        return JSONResponse({"error": "Failed to fetch orders"}, status_code=500)

    return {
        "success": True,
        "data": [o.to_dict() for o in orders],
        "pagination": {
            "page": page,
            "totalPages": math.ceil(total / limit) if total else 0,
            "totalItems": total,
            "limit": limit,
        },
    }


@router.patch("")
async def update_order_status(request: Request, db: Session = Depends(get_db)):
    denied = require_admin(request)
    if denied:
        return denied

    try:
        body = await request.json()
    except Exception:
        body = {}
    if not isinstance(body, dict):
        body = {}
    order_id = body.get("orderId")
    status = body.get("status")
    if not order_id or not status:
        return JSONResponse({"error": "Order ID and status are required"}, status_code=400)
    if status not in TERMINAL_STATUSES:
        return JSONResponse({"error": "status must be 'completed' or 'failed'"}, status_code=400)
    try:
        order_id = int(order_id)
    except (TypeError, ValueError):
        return JSONResponse({"error": "Order not found"}, status_code=404)

    order = db.query(Order).filter(Order.id == order_id).first()
    if order is None:
        return JSONResponse({"error": "Order not found"}, status_code=404)
    if order.payment_status != STATUS_PENDING:
        return JSONResponse(
            {"error": f"Order is already {order.payment_status}", "data": order.to_dict()},
            status_code=409,
        )

    try:
        order.payment_status = status
        order.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
        db.commit()
        db.refresh(order)
    except Exception as ex:
        db.rollback()
        logger.exception(f"[admin.orders] failed to update order {order_id}: {ex}")
        return JSONResponse({"error": "Failed to update order"}, status_code=500)

    logger.info(f"[admin.orders] order {order_id} marked {status}")
    return {"success": True, "data": order.to_dict()}
