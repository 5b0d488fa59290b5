# app/schemas/listing.py
from pydantic import Field
from datetime import datetime
from typing import Optional
from app.schemas.common import CamelModel


class ListingCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: float = Field(..., gt=0)
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1885, le=2100)
    mileage: Optional[int] = Field(None, ge=0)
    vin: Optional[str] = Field(None, max_length=32)
    city: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)


class ListingOut(CamelModel):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    price: float
    make: Optional[str]
    model: Optional[str]
    year: Optional[int]
    mileage: Optional[int]
    vin: Optional[str]
    status: str
    location: Optional[str] = None   # masked, never the raw city/ZIP pair
    created_at: datetime
