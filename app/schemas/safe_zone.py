# app/schemas/safe_zone.py
from pydantic import Field, field_validator
from datetime import datetime
from typing import Literal, Optional
from app.schemas.common import CamelModel, TIME_OF_DAY_PATTERN, PHONE_PATTERN

ZoneType = Literal["police_station", "community_center", "library", "mall", "bank",
                   "government_building", "fire_station", "hospital", "retail_store", "other"]
ZoneStatus = Literal["active", "inactive", "temporarily_closed", "pending_verification"]


class DaySchedule(CamelModel):
    open: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    close: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    closed: bool = False


class OperatingHours(CamelModel):
    monday: DaySchedule
    tuesday: DaySchedule
    wednesday: DaySchedule
    thursday: DaySchedule
    friday: DaySchedule
    saturday: DaySchedule
    sunday: DaySchedule


class SafeZoneCreate(CamelModel):
    name: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    address: str = Field(..., min_length=10, max_length=500)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=50)
    zip_code: str = Field(..., min_length=5, max_length=20)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    zone_type: ZoneType
    operating_hours: Optional[OperatingHours] = None
    features: Optional[list[str]] = None
    security_level: Optional[int] = Field(None, ge=1, le=5)

    @field_validator("name", "address", "city", "state", "zip_code")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()


class SafeZoneUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    address: Optional[str] = Field(None, min_length=10, max_length=500)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    state: Optional[str] = Field(None, min_length=2, max_length=50)
    zip_code: Optional[str] = Field(None, min_length=5, max_length=20)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    zone_type: Optional[ZoneType] = None
    status: Optional[ZoneStatus] = None
    is_verified: Optional[bool] = None
    operating_hours: Optional[OperatingHours] = None
    features: Optional[list[str]] = None
    security_level: Optional[int] = Field(None, ge=1, le=5)


class SafeZoneOut(CamelModel):
    id: str
    name: str
    description: Optional[str]
    address: str
    city: str
    state: str
    zip_code: str
    latitude: float
    longitude: float
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    is_verified: bool
    zone_type: str
    status: str
    operating_hours: Optional[dict]
    features: Optional[list[str]]
    security_level: int
    total_meetings: int
    completed_meetings: int
    average_rating: float
    total_reviews: int
    created_at: datetime
    updated_at: datetime


class SafeZoneNearbyOut(SafeZoneOut):
    distance_km: float
