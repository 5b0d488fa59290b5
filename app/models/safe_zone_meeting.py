# app/models/safe_zone_meeting.py
"""
Scheduled buyer/seller meetings at a safe zone.
Lifecycle: scheduled → confirmed → in_progress → completed; cancelled and no_show are terminal.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey
from app.database import Base

ACTIVE_MEETING_STATUSES = ("scheduled", "confirmed", "in_progress")
TERMINAL_MEETING_STATUSES = ("completed", "cancelled", "no_show")


class SafeZoneMeeting(Base):
    __tablename__ = "safe_zone_meetings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    safe_zone_id = Column(String(36), ForeignKey("safe_zones.id", ondelete="RESTRICT"), nullable=False, index=True)
    listing_id = Column(String(36), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)
    buyer_id = Column(String(36), nullable=False, index=True)
    seller_id = Column(String(36), nullable=False, index=True)

    scheduled_datetime = Column(DateTime, nullable=False, index=True)
    estimated_duration = Column(Integer, default=30, nullable=False)   # minutes
    meeting_notes = Column(Text)

    status = Column(String(20), default="scheduled", nullable=False, index=True)
    buyer_confirmed = Column(Boolean, default=False, nullable=False)
    seller_confirmed = Column(Boolean, default=False, nullable=False)

    buyer_checked_in = Column(Boolean, default=False, nullable=False)
    seller_checked_in = Column(Boolean, default=False, nullable=False)
    buyer_checkin_time = Column(DateTime)
    seller_checkin_time = Column(DateTime)
    meeting_completed_time = Column(DateTime)

    emergency_contact_phone = Column(String(20))
    safety_code = Column(String(10))

    meeting_successful = Column(Boolean)
    transaction_completed = Column(Boolean, default=False, nullable=False)
    cancellation_reason = Column(Text)
    cancelled_by = Column(String(36))
    cancelled_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<SafeZoneMeeting {self.id} zone={self.safe_zone_id} at={self.scheduled_datetime} status={self.status}>"
