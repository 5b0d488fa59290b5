# app/schemas/meeting.py
import re
from pydantic import Field, model_validator
from datetime import datetime
from typing import Literal, Optional
from app.config import settings
from app.schemas.common import CamelModel, UUIDStr, PHONE_PATTERN, to_utc_naive

MeetingStatus = Literal["scheduled", "confirmed", "in_progress", "completed", "cancelled", "no_show"]
DURATION_PATTERN = r"^\d+\s+(minutes?|hours?)$"


def parse_duration_minutes(text: str) -> int:
    """'30 minutes' → 30, '1 hour' → 60."""
    match = re.match(r"^(\d+)\s+(minute|hour)s?$", text.strip())
    if not match:
        return settings.DEFAULT_MEETING_DURATION_MINUTES
    amount = int(match.group(1))
    return amount * 60 if match.group(2) == "hour" else amount


class AvailabilityCheckRequest(CamelModel):
    safe_zone_id: UUIDStr
    requested_datetime: datetime = Field(..., alias="datetime")
    duration_minutes: int = Field(30, ge=15, le=240)

    @model_validator(mode="after")
    def in_future(self):
        if to_utc_naive(self.requested_datetime) <= datetime.utcnow():
            raise ValueError("Check availability for future times only")
        return self


class MeetingCreate(CamelModel):
    safe_zone_id: UUIDStr
    listing_id: UUIDStr
    buyer_id: UUIDStr
    seller_id: UUIDStr
    scheduled_datetime: datetime
    estimated_duration: str = Field("30 minutes", pattern=DURATION_PATTERN)
    meeting_notes: Optional[str] = Field(None, max_length=1000)
    emergency_contact_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)

    @model_validator(mode="after")
    def check_parties_and_time(self):
        if self.buyer_id == self.seller_id:
            raise ValueError("Buyer and seller must be different users")
        if to_utc_naive(self.scheduled_datetime) <= datetime.utcnow():
            raise ValueError("Meeting must be scheduled in the future")
        minutes = parse_duration_minutes(self.estimated_duration)
        if not 15 <= minutes <= settings.MAX_MEETING_DURATION_MINUTES:
            raise ValueError(f"Meeting duration must be between 15 and {settings.MAX_MEETING_DURATION_MINUTES} minutes")
        return self

    @property
    def duration_minutes(self) -> int:
        return parse_duration_minutes(self.estimated_duration)


class MeetingUpdate(CamelModel):
    status: Optional[MeetingStatus] = None
    buyer_confirmed: Optional[bool] = None
    seller_confirmed: Optional[bool] = None
    buyer_checked_in: Optional[bool] = None
    seller_checked_in: Optional[bool] = None
    meeting_successful: Optional[bool] = None
    transaction_completed: Optional[bool] = None
    cancellation_reason: Optional[str] = Field(None, max_length=500)
    meeting_notes: Optional[str] = Field(None, max_length=1000)


class MeetingOut(CamelModel):
    id: str
    safe_zone_id: str
    listing_id: str
    buyer_id: str
    seller_id: str
    scheduled_datetime: datetime
    estimated_duration: int
    meeting_notes: Optional[str]
    status: str
    buyer_confirmed: bool
    seller_confirmed: bool
    buyer_checked_in: bool
    seller_checked_in: bool
    buyer_checkin_time: Optional[datetime]
    seller_checkin_time: Optional[datetime]
    meeting_completed_time: Optional[datetime]
    emergency_contact_phone: Optional[str]
    safety_code: Optional[str]
    meeting_successful: Optional[bool]
    transaction_completed: bool
    cancellation_reason: Optional[str]
    cancelled_by: Optional[str]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class UserMeetingOut(MeetingOut):
    user_role: str


class ZoneRef(CamelModel):
    id: str
    name: str


class ConflictSummary(CamelModel):
    conflicting_meetings: int
    next_available_time: Optional[datetime] = None


class AvailabilityOut(CamelModel):
    available: bool
    reason: Optional[str] = None
    code: Optional[str] = None
    safe_zone: Optional[ZoneRef] = None
    requested_time: datetime
    duration: int
    conflicts: Optional[ConflictSummary] = None
