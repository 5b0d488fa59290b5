# app/models/listing.py
"""Motorcycle listings posted by sellers. Removed listings are kept with status = removed."""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, Float
from app.database import Base


class Listing(Base):
    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)   # seller
    title = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Float, nullable=False)
    make = Column(String(100))
    model = Column(String(100))
    year = Column(Integer)
    mileage = Column(Integer)
    vin = Column(String(17), index=True)
    city = Column(String(100))
    zip_code = Column(String(20))
    status = Column(String(20), default="active", nullable=False, index=True)   # active | sold | removed
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Listing {self.id} title={self.title!r} status={self.status}>"
