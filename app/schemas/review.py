# app/schemas/review.py
from pydantic import Field
from datetime import datetime
from typing import Optional
from app.schemas.common import CamelModel


class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=2000)
    safety_score: Optional[int] = Field(None, ge=1, le=5)
    would_recommend: bool = True
    parking_rating: Optional[int] = Field(None, ge=1, le=5)
    lighting_rating: Optional[int] = Field(None, ge=1, le=5)
    security_rating: Optional[int] = Field(None, ge=1, le=5)
    cleanliness_rating: Optional[int] = Field(None, ge=1, le=5)
    accessibility_rating: Optional[int] = Field(None, ge=1, le=5)


class ReviewOut(CamelModel):
    id: str
    safe_zone_id: str
    user_id: str
    rating: int
    review_text: Optional[str]
    safety_score: Optional[int]
    would_recommend: bool
    parking_rating: Optional[int]
    lighting_rating: Optional[int]
    security_rating: Optional[int]
    cleanliness_rating: Optional[int]
    accessibility_rating: Optional[int]
    created_at: datetime
