"""
Pricing catalog reads and order totals.

The catalog shape shared by the order flow and GET /api/pricing:
    {"services": {code: {name, price, description}}, "addons": {...}}
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from core.config import logger
from models.pricing import PricingItem

FALLBACK_PRICING = {
    "services": {
        "remove": {"name": "Remove Google Business Profile", "price": 499.0, "description": None},
        "reset": {"name": "Reset Google Business Profile", "price": 299.0, "description": None},
    },
    "addons": {
        "yearProtection": {"name": "1 Year Protection", "price": 199.0, "description": None},
        "expressService": {"name": "Express Service", "price": 99.0, "description": None},
    },
}

DEFAULT_PRICING_ROWS = [
    {"code": code, "type": "service", **entry} for code, entry in FALLBACK_PRICING["services"].items()
] + [
    {"code": code, "type": "addon", **entry} for code, entry in FALLBACK_PRICING["addons"].items()
]


def build_catalog(items: list[PricingItem]) -> dict:
    catalog: dict = {"services": {}, "addons": {}}
    for item in items:
        bucket = "services" if item.type == "service" else "addons"
        catalog[bucket][item.code] = {
            "name": item.name,
            "price": float(item.price) if item.price is not None else 0.0,
            "description": item.description,
        }
    return catalog


def active_items(db: Session) -> list[PricingItem]:
    return (
        db.query(PricingItem)
        .filter(PricingItem.is_active.is_(True))
        .order_by(PricingItem.created_at.asc(), PricingItem.id.asc())
        .all()
    )


def load_catalog(db: Session) -> dict:
    """Active catalog, or FALLBACK_PRICING when the store fails or is empty."""
    try:
        items = active_items(db)
    except Exception as ex:
        logger.error(f"[pricing] catalog fetch failed, using fallback pricing: {ex}")
        try:
            db.rollback()
        except Exception:
            pass
        return FALLBACK_PRICING
    if not items:
        logger.warning("[pricing] no active pricing rows, using fallback pricing")
        return FALLBACK_PRICING
    return build_catalog(items)


def _price(section: dict, code: str) -> Optional[float]:
    entry = section.get(code)
    if not entry:
        return None
    return float(entry.get("price") or 0)


def compute_total(catalog: dict, service_type: str, year_protection: bool = False, express_service: bool = False) -> float:
    """Base service price plus selected add-ons. Unknown service raises ValueError."""
    base = _price(catalog.get("services") or {}, service_type)
    if base is None:
        raise ValueError(f"Unknown service type: {service_type}")

    addons = catalog.get("addons") or {}
    total = Decimal(str(base))
    if year_protection:
        total += Decimal(str(_price(addons, "yearProtection") or 0))
    if express_service:
        total += Decimal(str(_price(addons, "expressService") or 0))
    return float(total)


def seed_default_pricing(db: Session) -> int:
    """Insert the default catalog when no active rows exist. Returns rows inserted."""
    if db.query(PricingItem).filter(PricingItem.is_active.is_(True)).count():
        return 0
    for row in DEFAULT_PRICING_ROWS:
        db.add(PricingItem(
            code=row["code"],
            name=row["name"],
            price=row["price"],
            type=row["type"],
            description=row["description"],
            is_active=True,
        ))
    db.commit()
    logger.info(f"[pricing] seeded {len(DEFAULT_PRICING_ROWS)} default pricing rows")
    return len(DEFAULT_PRICING_ROWS)
