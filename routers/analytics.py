"""
Analytics Router
Raw visitor / order / search rows plus summary folds for the admin dashboard
"""
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import logger
from core.auth import require_admin
from core.database import get_db
from utils.aggregation import visitor_analytics, order_analytics, search_analytics
from utils.tracking import get_visitors, get_orders, get_searches, parse_date_bound

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

ANALYTICS_TYPES = ("visitors", "orders", "searches", "all")


@router.get("")
async def get_analytics(
    request: Request,
    type: Optional[str] = None,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    db: Session = Depends(get_db),
):
    denied = require_admin(request)
    if denied:
        return denied

    kind = (type or "all").lower()
    if kind not in ANALYTICS_TYPES:
        return JSONResponse({"error": f"type must be one of {', '.join(ANALYTICS_TYPES)}"}, status_code=400)
    try:
        start = parse_date_bound(startDate)
        end = parse_date_bound(endDate, end_of_day=True)
    except ValueError:
        return JSONResponse({"error": "Invalid date format"}, status_code=400)

    response: dict = {}
    try:
        if kind in ("visitors", "all"):
            visitors = get_visitors(db, start, end)
            response["visitors"] = visitors
            response["analytics"] = visitor_analytics(visitors)
        if kind in ("orders", "all"):
            orders = get_orders(db, start, end)
            response["orders"] = orders
            response["orderAnalytics"] = order_analytics(orders)
        if kind in ("searches", "all"):
            searches = get_searches(db, start, end)
            response["searches"] = searches
            response["searchAnalytics"] = search_analytics(searches)
    except Exception as ex:
        logger.exception(f"[analytics] failed to build analytics ({kind}): {ex}")
        return JSONResponse({"error": "Failed to fetch analytics data"}, status_code=500)

    return response
