# app/models/user_profile.py
"""Marketplace profile for a user held by the external auth provider (same id)."""

from sqlalchemy import Column, String, DateTime
from app.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<UserProfile {self.id} {self.first_name} {self.last_name}>"
