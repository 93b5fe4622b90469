"""
Searched GMB leads: public select logging and admin listing / CSV export
"""
import math
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse, Response
from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.config import logger
from core.auth import require_admin
from core.database import get_db
from models.searched_gmb import SearchedGmb
from utils.csv_export import to_csv, SEARCHED_GMB_CSV_HEADERS, searched_gmb_csv_row, csv_filename
from utils.request_info import get_request_info
from utils.tracking import select_for_order, parse_date_bound

router = APIRouter(prefix="/api/searched-gmb", tags=["searched-gmb"])


@router.post("")
async def log_searched_gmb(request: Request, db: Session = Depends(get_db)):
    try:
        body = await request.json()
    except Exception:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    details = body.get("details") if isinstance(body, dict) else None
    if not isinstance(details, dict) or not details.get("name") or not (details.get("placeId") or details.get("id")):
        return JSONResponse({"error": "Missing required place details"}, status_code=400)

    results_count = body.get("searchResultsCount")
    try:
        results_count = int(results_count) if results_count is not None else None
    except (TypeError, ValueError):
        results_count = None

    row = select_for_order(
        db,
        details,
        search_query=body.get("searchQuery"),
        location=body.get("location"),
        session_id=request.cookies.get("session_id"),
        search_results_count=results_count,
        request_info=get_request_info(request),
    )
    if row is None:
        return JSONResponse({"error": "Failed to save data to database"}, status_code=500)
    return {"success": True, "data": row.to_dict()}


@router.get("")
async def list_searched_gmbs(
    request: Request,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
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
        q = db.query(SearchedGmb)
        term = (search or "").strip()
        if term:
            pattern = f"%{term}%"
            q = q.filter(or_(
                SearchedGmb.place_name.ilike(pattern),
                SearchedGmb.place_address.ilike(pattern),
                SearchedGmb.search_query.ilike(pattern),
            ))
        if start is not None:
            q = q.filter(SearchedGmb.created_at >= start)
        if end is not None:
            q = q.filter(SearchedGmb.created_at <= end)
        q = q.order_by(SearchedGmb.created_at.desc(), SearchedGmb.id.desc())

        if (export or "").lower() == "csv":
            rows = [r.to_dict() for r in q.all()]
            content = to_csv(SEARCHED_GMB_CSV_HEADERS, (searched_gmb_csv_row(r) for r in rows))
            return Response(
                content,
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{csv_filename("searched-gmbs")}"'},
            )

        total = q.count()
        rows = q.offset((page - 1) * limit).limit(limit).all()
    except Exception as ex:
        logger.exception(f"[searched_gmb.list] failed: {ex}")
        return JSONResponse({"error": "Failed to fetch searched businesses"}, status_code=500)

    return {
        "success": True,
        "data": [r.to_dict() for r in rows],
        "pagination": {
            "page": page,
            "totalPages": math.ceil(total / limit) if total else 0,
            "totalItems": total,
            "limit": limit,
        },
    }
