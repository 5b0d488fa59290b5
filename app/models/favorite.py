# app/models/favorite.py
"""Listings a user has saved. One row per (user, listing)."""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from app.database import Base


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "listing_id", name="uq_favorite_user_listing"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    listing_id = Column(String(36), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Favorite user={self.user_id} listing={self.listing_id}>"
