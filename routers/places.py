"""
Business lookup: Google Places search, details view and select-for-order
"""
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.config import logger
from core.database import get_db
from utils import places
from utils.places import PlacesError, PlacesRateLimited, PlacesNotFound
from utils.request_info import get_request_info
from utils.tracking import select_for_order

router = APIRouter(prefix="/api", tags=["places"])

_TRUE_VALUES = ("true", "1", "yes")


class SelectPlacePayload(BaseModel):
    placeId: str
    searchQuery: Optional[str] = None
    location: Optional[str] = None
    searchResultsCount: Optional[int] = None


def _error_response(ex: PlacesError, **extra) -> JSONResponse:
    if isinstance(ex, PlacesRateLimited):
        return JSONResponse(
            {"error": str(ex), "retryAfter": ex.retry_after},
            status_code=429,
            headers={"Retry-After": str(ex.retry_after)},
        )
    if isinstance(ex, PlacesNotFound):
        return JSONResponse({"error": str(ex), **extra}, status_code=404)
    return JSONResponse({"error": str(ex)}, status_code=500)


@router.get("/gmb-search")
async def gmb_search(query: Optional[str] = None):
    if not (query or "").strip():
        return JSONResponse({"error": "Search query is required"}, status_code=400)
    try:
        locations = await places.search_places(query)
    except PlacesError as ex:
        return _error_response(ex, locations=[])
    except Exception as ex:
        logger.exception(f"[places.search] unexpected error: {ex}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)
    return {"locations": locations}


async def _select(request: Request, db: Session, payload: SelectPlacePayload):
    try:
        details = await places.get_place_details(payload.placeId)
    except PlacesError as ex:
        return _error_response(ex)
    except Exception as ex:
        logger.exception(f"[places.select] unexpected error: {ex}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    row = select_for_order(
        db,
        details,
        search_query=payload.searchQuery,
        location=payload.location,
        session_id=request.cookies.get("session_id"),
        search_results_count=payload.searchResultsCount,
        request_info=get_request_info(request),
    )
    if row is not None:
        logger.info(f"[places.select] selected {details.get('placeId')} for order")
    return {"details": details, "logged": row is not None}


@router.get("/places-details")
async def place_details(
    request: Request,
    placeId: Optional[str] = None,
    proceedingToOrder: Optional[str] = None,
    isSelected: Optional[str] = None,
    searchQuery: Optional[str] = None,
    location: Optional[str] = None,
    searchResultsCount: Optional[int] = None,
    db: Session = Depends(get_db),
):
    if not (placeId or "").strip():
        return JSONResponse({"error": "Place ID is required"}, status_code=400)

    # Legacy flag form of the select step
    if (proceedingToOrder or "").lower() in _TRUE_VALUES or (isSelected or "").lower() in _TRUE_VALUES:
        payload = SelectPlacePayload(
            placeId=placeId,
            searchQuery=searchQuery,
            location=location,
            searchResultsCount=searchResultsCount,
        )
        return await _select(request, db, payload)

    try:
        details = await places.get_place_details(placeId)
    except PlacesError as ex:
        return _error_response(ex)
    except Exception as ex:
        logger.exception(f"[places.details] unexpected error: {ex}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)
    return {"details": details}


@router.post("/places-details/select")
async def select_place(request: Request, payload: SelectPlacePayload, db: Session = Depends(get_db)):
    if not payload.placeId.strip():
        return JSONResponse({"error": "Place ID is required"}, status_code=400)
    return await _select(request, db, payload)
