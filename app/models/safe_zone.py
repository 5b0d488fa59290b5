# app/models/safe_zone.py
"""
Safe zones - admin-curated public locations for in-person buyer/seller meetings.
Soft-deleted by setting status = inactive; never removed while meetings reference them.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, Float, Boolean, JSON
from app.database import Base

ZONE_TYPES = ("police_station", "community_center", "library", "mall", "bank",
              "government_building", "fire_station", "hospital", "retail_store", "other")
ZONE_STATUSES = ("active", "inactive", "temporarily_closed", "pending_verification")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def default_operating_hours() -> dict:
    weekday = {"open": "09:00", "close": "17:00", "closed": False}
    return {
        "monday": dict(weekday),
        "tuesday": dict(weekday),
        "wednesday": dict(weekday),
        "thursday": dict(weekday),
        "friday": dict(weekday),
        "saturday": {"open": "10:00", "close": "16:00", "closed": False},
        "sunday": {"open": None, "close": None, "closed": True},
    }


class SafeZone(Base):
    __tablename__ = "safe_zones"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text)
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(50), nullable=False)
    zip_code = Column(String(20), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    phone = Column(String(20))
    email = Column(String(255))
    website = Column(String(500))

    is_verified = Column(Boolean, default=False, nullable=False)
    zone_type = Column(String(50), nullable=False)
    status = Column(String(30), default="pending_verification", nullable=False, index=True)
    operating_hours = Column(JSON, default=default_operating_hours)
    features = Column(JSON, default=list)
    security_level = Column(Integer, default=3, nullable=False)

    total_meetings = Column(Integer, default=0, nullable=False)
    completed_meetings = Column(Integer, default=0, nullable=False)
    average_rating = Column(Float, default=0.0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)

    created_by = Column(String(36))
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<SafeZone {self.id} name={self.name!r} status={self.status}>"
