"""
Order log model
Created as pending at checkout-session time; the webhook or an admin moves it
to a terminal status exactly once.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, Float, JSON
from sqlalchemy.sql import func

from core.database import Base

SERVICE_TYPES = ("remove", "reset")
ADDON_CODES = ("yearProtection", "expressService")

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_FAILED)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(128), nullable=True, index=True)

    # Customer
    customer_email = Column(String(255), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=True)
    nip = Column(String(64), nullable=True)  # company tax id
    phone = Column(String(64), nullable=True)

    # Service selection
    service_type = Column(String(32), nullable=False, index=True)
    addons = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")

    # Payment
    payment_status = Column(String(32), nullable=False, default=STATUS_PENDING, index=True)
    payment_intent_id = Column(String(255), nullable=True)
    stripe_session_id = Column(String(255), nullable=False, unique=True, index=True)

    # Business being handled
    business_place_id = Column(String(255), nullable=True)
    business_name = Column(String(512), nullable=True)
    business_address = Column(Text, nullable=True)
    business_phone = Column(String(64), nullable=True)
    business_website = Column(Text, nullable=True)
    business_rating = Column(Float, nullable=True)
    business_google_url = Column(Text, nullable=True)

    # Request tracking
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    referer = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "session_id": self.session_id,
            "customer_email": self.customer_email,
            "customer_name": self.customer_name,
            "company_name": self.company_name,
            "nip": self.nip,
            "phone": self.phone,
            "service_type": self.service_type,
            "addons": list(self.addons or []),
            "total_amount": float(self.total_amount) if self.total_amount is not None else None,
            "currency": self.currency,
            "payment_status": self.payment_status,
            "payment_intent_id": self.payment_intent_id,
            "stripe_session_id": self.stripe_session_id,
            "business_place_id": self.business_place_id,
            "business_name": self.business_name,
            "business_address": self.business_address,
            "business_phone": self.business_phone,
            "business_website": self.business_website,
            "business_rating": self.business_rating,
            "business_google_url": self.business_google_url,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "referer": self.referer,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
