"""
Pricing catalog API: public read, admin create / update
"""
from decimal import Decimal, InvalidOperation

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.config import logger
from core.auth import require_admin
from core.database import get_db
from models.pricing import PricingItem, PRICING_TYPES
from utils.pricing import active_items, build_catalog
from utils.validation import first_missing

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


def _parse_price(value):
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except Exception:
        return {}
    return body if isinstance(body, dict) else {}


@router.get("")
async def get_pricing(db: Session = Depends(get_db)):
    try:
        items = active_items(db)
    except Exception as ex:
        logger.exception(f"[pricing.get] failed to fetch pricing: {ex}")
        return JSONResponse({"error": "Failed to fetch pricing data"}, status_code=500)
    return {"pricing": build_catalog(items)}


@router.post("")
async def create_pricing(request: Request, db: Session = Depends(get_db)):
    denied = require_admin(request)
    if denied:
        return denied

    data = await _json_body(request)
    if first_missing(data, ("name", "code", "price", "type")):
        return JSONResponse({"error": "Missing required fields: name, code, price, type"}, status_code=400)
    if data["type"] not in PRICING_TYPES:
        return JSONResponse({"error": "type must be 'service' or 'addon'"}, status_code=400)
    price = _parse_price(data["price"])
    if price is None:
        return JSONResponse({"error": "price must be a non-negative number"}, status_code=400)

    code = str(data["code"]).strip()
    exists = (
        db.query(PricingItem)
        .filter(PricingItem.code == code, PricingItem.is_active.is_(True))
        .first()
    )
    if exists:
        return JSONResponse({"error": f"An active pricing entry with code '{code}' already exists"}, status_code=409)

    item = PricingItem(
        name=str(data["name"]).strip(),
        code=code,
        price=price,
        type=data["type"],
        description=data.get("description") or None,
        is_active=True,
    )
    try:
        db.add(item)
        db.commit()
        db.refresh(item)
    except Exception as ex:
        db.rollback()
        logger.exception(f"[pricing.create] failed to insert {code}: {ex}")
        return JSONResponse({"error": "Failed to insert pricing data"}, status_code=500)

    logger.info(f"[pricing.create] created {item.type} {item.code} at {item.price}")
    return {"message": "Pricing created successfully", "data": item.to_dict()}


@router.put("")
async def update_pricing(request: Request, db: Session = Depends(get_db)):
    denied = require_admin(request)
    if denied:
        return denied

    data = await _json_body(request)
    if not data.get("id"):
        return JSONResponse({"error": "Missing pricing ID"}, status_code=400)

    item = db.query(PricingItem).filter(PricingItem.id == data["id"]).first()
    if item is None:
        return JSONResponse({"error": "Pricing entry not found"}, status_code=404)

    if data.get("name"):
        item.name = str(data["name"]).strip()
    if data.get("price") is not None:
        price = _parse_price(data["price"])
        if price is None:
            return JSONResponse({"error": "price must be a non-negative number"}, status_code=400)
        item.price = price
    if "description" in data:
        item.description = data.get("description") or None
    if data.get("is_active") is not None:
        item.is_active = bool(data["is_active"])

    try:
        db.commit()
        db.refresh(item)
    except Exception as ex:
        db.rollback()
        logger.exception(f"[pricing.update] failed to update {data['id']}: {ex}")
        return JSONResponse({"error": "Failed to update pricing data"}, status_code=500)

    logger.info(f"[pricing.update] updated {item.code} (active={item.is_active})")
    return {"message": "Pricing updated successfully", "data": item.to_dict()}
