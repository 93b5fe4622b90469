"""
Searched GMB log model
Written only when a visitor selects a business to proceed toward an order
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Float, JSON
from sqlalchemy.sql import func

from core.database import Base


class SearchedGmb(Base):
    __tablename__ = "searched_gmbs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(128), nullable=True, index=True)

    # Search context
    search_query = Column(String(512), nullable=True, index=True)
    location = Column(String(255), nullable=True)

    # Place snapshot
    place_id = Column(String(255), nullable=False, index=True)
    place_name = Column(String(512), nullable=False)
    place_address = Column(Text, nullable=True)
    place_phone = Column(String(64), nullable=True)
    place_website = Column(Text, nullable=True)
    place_rating = Column(Float, nullable=True)
    place_rating_count = Column(Integer, nullable=True)
    place_business_status = Column(String(64), nullable=True)
    place_types = Column(JSON, nullable=False, default=list)
    place_geometry = Column(JSON, nullable=True)
    search_results_count = Column(Integer, nullable=True)

    # Request tracking
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    referer = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "session_id": self.session_id,
            "search_query": self.search_query,
            "location": self.location,
            "place_id": self.place_id,
            "place_name": self.place_name,
            "place_address": self.place_address,
            "place_phone": self.place_phone,
            "place_website": self.place_website,
            "place_rating": self.place_rating,
            "place_rating_count": self.place_rating_count,
            "place_business_status": self.place_business_status,
            "place_types": list(self.place_types or []),
            "place_geometry": self.place_geometry,
            "search_results_count": self.search_results_count,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "referer": self.referer,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
