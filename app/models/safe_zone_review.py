# app/models/safe_zone_review.py
"""User reviews of safe zones. One review per user per zone."""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey, UniqueConstraint
from app.database import Base


class SafeZoneReview(Base):
    __tablename__ = "safe_zone_reviews"
    __table_args__ = (UniqueConstraint("safe_zone_id", "user_id", name="uq_review_zone_user"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    safe_zone_id = Column(String(36), ForeignKey("safe_zones.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)

    rating = Column(Integer, nullable=False)
    review_text = Column(Text)
    safety_score = Column(Integer)
    would_recommend = Column(Boolean, default=True, nullable=False)
    parking_rating = Column(Integer)
    lighting_rating = Column(Integer)
    security_rating = Column(Integer)
    cleanliness_rating = Column(Integer)
    accessibility_rating = Column(Integer)

    is_flagged = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<SafeZoneReview {self.id} zone={self.safe_zone_id} rating={self.rating}>"
