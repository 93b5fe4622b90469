"""
Admin visitors listing with per-range stats
"""
import math
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import logger
from core.auth import require_admin
from core.database import get_db
from utils.aggregation import visitor_stats
from utils.tracking import get_visitors, parse_date_bound

router = APIRouter(prefix="/api/visitors", tags=["visitors"])


@router.get("")
async def list_visitors(
    request: Request,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
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
        visitors = get_visitors(db, start, end)
    except Exception as ex:
        logger.exception(f"[visitors] failed to fetch visitors: {ex}")
        return JSONResponse({"error": "Failed to fetch visitors data"}, status_code=500)

    total = len(visitors)
    total_pages = math.ceil(total / limit) if total else 0
    offset = (page - 1) * limit
    return {
        "visitors": visitors[offset:offset + limit],
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages,
            "totalCount": total,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        },
        "stats": visitor_stats(visitors),
    }
