"""
Visitor log model
One append-only row per page view
"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from core.database import Base


class Visitor(Base):
    __tablename__ = "visitors"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Request info
    ip_address = Column(String(64), nullable=True, index=True)
    user_agent = Column(Text, nullable=True)
    referer = Column(Text, nullable=True)
    page_path = Column(String(1024), nullable=False, index=True)

    # Geo (filled by upstream proxies/enrichment when available)
    country = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)

    session_id = Column(String(128), nullable=True, index=True)

    # Campaign attribution
    utm_source = Column(String(255), nullable=True)
    utm_medium = Column(String(255), nullable=True)
    utm_campaign = Column(String(255), nullable=True)
    utm_term = Column(String(255), nullable=True)
    utm_content = Column(String(255), nullable=True)
    gtm_from = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "referer": self.referer,
            "page_path": self.page_path,
            "country": self.country,
            "city": self.city,
            "session_id": self.session_id,
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
            "utm_term": self.utm_term,
            "utm_content": self.utm_content,
            "gtm_from": self.gtm_from,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
