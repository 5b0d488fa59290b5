# app/services/meeting_service.py
"""
Safe-zone meeting scheduling.

Availability is decided in this order: zone exists → zone active → inside the
day's operating window [open, close) → no overlapping active meeting at the
zone → the user has no other active meeting within MEETING_BUFFER_MINUTES.

create_meeting locks the zone row (SELECT ... FOR UPDATE) before re-checking,
so two bookings for the same zone are serialised and cannot both pass the
check before either is inserted.
"""

import random
import string
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models.listing import Listing
from app.models.safe_zone import SafeZone, WEEKDAYS
from app.models.safe_zone_meeting import SafeZoneMeeting, ACTIVE_MEETING_STATUSES
from app.models.user_profile import UserProfile
from app.schemas.common import to_utc_naive
from app.schemas.meeting import MeetingCreate, MeetingUpdate
from app.services.auth_service import AuthenticatedUser
from app.utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)

SAFETY_CODE_ALPHABET = string.ascii_uppercase + string.digits
SAFETY_CODE_LENGTH = 6

# status → statuses it may move to
STATUS_TRANSITIONS = {
    "scheduled": {"confirmed", "in_progress", "cancelled", "no_show"},
    "confirmed": {"in_progress", "cancelled", "no_show"},
    "in_progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
    "no_show": set(),
}


@dataclass
class AvailabilityResult:
    available: bool
    reason: Optional[str] = None
    code: Optional[str] = None
    zone: Optional[SafeZone] = None
    conflicts: list = field(default_factory=list)


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def check_operating_hours(zone: SafeZone, proposed_start: datetime) -> Optional[str]:
    """None when the start falls inside the day's window, otherwise the reason."""
    day = WEEKDAYS[proposed_start.weekday()]
    schedule = (zone.operating_hours or {}).get(day)
    if not schedule:
        return None
    if schedule.get("closed"):
        return f"Safe zone is closed on {day.capitalize()}"
    if schedule.get("open") and schedule.get("close"):
        opens, closes = _parse_hhmm(schedule["open"]), _parse_hhmm(schedule["close"])
        wall_clock = proposed_start.time().replace(second=0, microsecond=0)
        if not (opens <= wall_clock < closes):
            return f"Safe zone is closed at this time (open {schedule['open']}-{schedule['close']})"
    return None


def find_zone_conflicts(db: Session, zone_id: str, start: datetime, end: datetime,
                        exclude_id: Optional[str] = None) -> list:
    """Active meetings at the zone whose [start, start+duration) overlaps [start, end)."""
    earliest = start - timedelta(minutes=settings.MAX_MEETING_DURATION_MINUTES)
    q = db.query(SafeZoneMeeting).filter(
        SafeZoneMeeting.safe_zone_id == zone_id,
        SafeZoneMeeting.status.in_(ACTIVE_MEETING_STATUSES),
        SafeZoneMeeting.scheduled_datetime < end,
        SafeZoneMeeting.scheduled_datetime > earliest,
    )
    if exclude_id:
        q = q.filter(SafeZoneMeeting.id != exclude_id)
    return [m for m in q.all()
            if m.scheduled_datetime + timedelta(minutes=m.estimated_duration or 0) > start]


def has_user_conflict(db: Session, user_id: str, start: datetime) -> bool:
    buffer = timedelta(minutes=settings.MEETING_BUFFER_MINUTES)
    hit = db.query(SafeZoneMeeting.id).filter(
        or_(SafeZoneMeeting.buyer_id == user_id, SafeZoneMeeting.seller_id == user_id),
        SafeZoneMeeting.status.in_(ACTIVE_MEETING_STATUSES),
        SafeZoneMeeting.scheduled_datetime >= start - buffer,
        SafeZoneMeeting.scheduled_datetime <= start + buffer,
    ).first()
    return hit is not None


def check_availability(db: Session, zone_id: str, proposed_start: datetime,
                       duration_minutes: int, user_id: Optional[str] = None,
                       lock: bool = False) -> AvailabilityResult:
    """
    Raises NotFoundError(SAFE_ZONE_NOT_FOUND) for an unknown zone; every other
    outcome is an AvailabilityResult. With lock=True the zone row stays locked
    until the caller's transaction ends.
    """
    q = db.query(SafeZone).filter(SafeZone.id == zone_id)
    if lock:
        # reload the row: the session may hold a copy read before the lock was taken
        q = q.with_for_update().populate_existing()
    zone = q.first()
    if not zone:
        raise NotFoundError("Safe zone not found", code="SAFE_ZONE_NOT_FOUND")

    if zone.status != "active":
        return AvailabilityResult(False, "Safe zone is not active", "SAFE_ZONE_INACTIVE", zone)

    closed_reason = check_operating_hours(zone, proposed_start)
    if closed_reason:
        return AvailabilityResult(False, closed_reason, "OUTSIDE_OPERATING_HOURS", zone)

    start = to_utc_naive(proposed_start)
    end = start + timedelta(minutes=duration_minutes)
    conflicts = find_zone_conflicts(db, zone.id, start, end)
    if conflicts:
        return AvailabilityResult(False, "This time slot is not available at the selected safe zone",
                                  "TIME_SLOT_UNAVAILABLE", zone, conflicts)

    if user_id and has_user_conflict(db, user_id, start):
        return AvailabilityResult(False, "You have another meeting scheduled within an hour of this time",
                                  "USER_CONFLICT", zone)

    return AvailabilityResult(True, zone=zone)


def generate_safety_code() -> str:
    return "".join(random.choices(SAFETY_CODE_ALPHABET, k=SAFETY_CODE_LENGTH))


def create_meeting(db: Session, user: AuthenticatedUser, payload: MeetingCreate) -> SafeZoneMeeting:
    if user.id not in (payload.buyer_id, payload.seller_id):
        raise ForbiddenError("You can only schedule meetings you are part of")
    if payload.buyer_id == payload.seller_id:
        raise ValidationError("Buyer and seller must be different users")

    try:
        # the zone row stays locked from here until commit/rollback
        zone = (db.query(SafeZone).filter(SafeZone.id == payload.safe_zone_id)
                .with_for_update().populate_existing().first())
        if not zone:
            raise NotFoundError("Safe zone not found", code="SAFE_ZONE_NOT_FOUND")
        if zone.status != "active":
            raise ValidationError("Cannot schedule meetings at inactive safe zones", code="SAFE_ZONE_INACTIVE")

        listing = db.query(Listing).filter(Listing.id == payload.listing_id).first()
        if not listing:
            raise NotFoundError("Listing not found", code="LISTING_NOT_FOUND")
        if listing.user_id != payload.seller_id:
            raise ValidationError("Seller must be the listing owner", code="INVALID_SELLER")

        profiles = db.query(UserProfile.id).filter(
            UserProfile.id.in_([payload.buyer_id, payload.seller_id])).all()
        if len(profiles) < 2:
            raise NotFoundError("Buyer or seller not found", code="USER_NOT_FOUND")

        result = check_availability(db, payload.safe_zone_id, payload.scheduled_datetime,
                                    payload.duration_minutes, user_id=user.id, lock=True)
        if result.code == "SAFE_ZONE_INACTIVE":
            raise ValidationError("Cannot schedule meetings at inactive safe zones", code="SAFE_ZONE_INACTIVE")
        if result.code == "OUTSIDE_OPERATING_HOURS":
            raise ValidationError(result.reason, code="OUTSIDE_OPERATING_HOURS")
        if result.code in ("TIME_SLOT_UNAVAILABLE", "USER_CONFLICT"):
            raise ConflictError(result.reason, code=result.code)

        now = datetime.utcnow()
        meeting = SafeZoneMeeting(
            safe_zone_id=payload.safe_zone_id,
            listing_id=payload.listing_id,
            buyer_id=payload.buyer_id,
            seller_id=payload.seller_id,
            scheduled_datetime=to_utc_naive(payload.scheduled_datetime),
            estimated_duration=payload.duration_minutes,
            meeting_notes=payload.meeting_notes,
            emergency_contact_phone=payload.emergency_contact_phone,
            safety_code=generate_safety_code(),
            status="scheduled",
            created_at=now,
            updated_at=now,
        )
        db.add(meeting)
        db.query(SafeZone).filter(SafeZone.id == payload.safe_zone_id).update(
            {SafeZone.total_meetings: func.coalesce(SafeZone.total_meetings, 0) + 1, SafeZone.updated_at: now},
            synchronize_session=False,
        )
        zone_name = result.zone.name
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(meeting)
    logger.info(f"[MEETING] {meeting.id} scheduled at {zone_name} for {meeting.scheduled_datetime}")
    return meeting


def list_user_meetings(db: Session, user_id: str, status: Optional[str] = None,
                       upcoming: Optional[bool] = None, sort_by: str = "date_asc",
                       page: int = 1, limit: int = 10):
    """Returns (rows, total). Each row is a dict with user_role; safety codes are hidden once a meeting is past."""
    q = db.query(SafeZoneMeeting).filter(
        or_(SafeZoneMeeting.buyer_id == user_id, SafeZoneMeeting.seller_id == user_id))
    if status:
        q = q.filter(SafeZoneMeeting.status == status)

    now = datetime.utcnow()
    if upcoming is True:
        q = q.filter(SafeZoneMeeting.scheduled_datetime >= now)
    elif upcoming is False:
        q = q.filter(SafeZoneMeeting.scheduled_datetime < now)

    if sort_by == "date_desc":
        q = q.order_by(SafeZoneMeeting.scheduled_datetime.desc())
    elif sort_by == "created_desc":
        q = q.order_by(SafeZoneMeeting.created_at.desc())
    else:
        q = q.order_by(SafeZoneMeeting.scheduled_datetime.asc())

    total = q.count()
    meetings = q.offset((page - 1) * limit).limit(limit).all()

    rows = []
    for m in meetings:
        row = {c.name: getattr(m, c.name) for c in SafeZoneMeeting.__table__.columns}
        row["user_role"] = "buyer" if m.buyer_id == user_id else "seller"
        if m.scheduled_datetime < now:
            row["safety_code"] = None
        rows.append(row)
    return rows, total


def update_meeting(db: Session, user: AuthenticatedUser, meeting_id: str, payload: MeetingUpdate) -> SafeZoneMeeting:
    meeting = db.query(SafeZoneMeeting).filter(SafeZoneMeeting.id == meeting_id).first()
    if not meeting:
        raise NotFoundError("Meeting not found", code="MEETING_NOT_FOUND")

    is_buyer = meeting.buyer_id == user.id
    is_seller = meeting.seller_id == user.id
    if not (is_buyer or is_seller or user.is_admin):
        raise ForbiddenError("You are not a party to this meeting")

    changes = payload.model_dump(exclude_unset=True)
    now = datetime.utcnow()

    # Each party may only confirm / check in for themselves
    if "buyer_confirmed" in changes or "buyer_checked_in" in changes:
        if not (is_buyer or user.is_admin):
            raise ForbiddenError("Only the buyer can confirm or check in as buyer")
    if "seller_confirmed" in changes or "seller_checked_in" in changes:
        if not (is_seller or user.is_admin):
            raise ForbiddenError("Only the seller can confirm or check in as seller")

    if meeting.status not in ACTIVE_MEETING_STATUSES and set(changes) - {"meeting_notes"}:
        raise ConflictError(f"Meeting is already {meeting.status}", code="INVALID_STATUS_TRANSITION")

    for flag in ("buyer_confirmed", "seller_confirmed"):
        if flag in changes:
            setattr(meeting, flag, bool(changes[flag]))
    if changes.get("buyer_checked_in") and not meeting.buyer_checked_in:
        meeting.buyer_checked_in = True
        meeting.buyer_checkin_time = now
    if changes.get("seller_checked_in") and not meeting.seller_checked_in:
        meeting.seller_checked_in = True
        meeting.seller_checkin_time = now
    for attr in ("meeting_successful", "transaction_completed", "meeting_notes"):
        if attr in changes:
            setattr(meeting, attr, changes[attr])

    new_status = changes.get("status")
    if new_status is None:
        if meeting.status == "scheduled" and meeting.buyer_confirmed and meeting.seller_confirmed:
            new_status = "confirmed"
        if meeting.buyer_checked_in and meeting.seller_checked_in and meeting.status in ("scheduled", "confirmed"):
            new_status = "in_progress"

    if new_status and new_status != meeting.status:
        _transition(db, meeting, new_status, user, changes.get("cancellation_reason"), now)

    meeting.updated_at = now
    db.commit()
    db.refresh(meeting)
    logger.info(f"[MEETING] {meeting.id} updated by {user.id}: status={meeting.status}")
    return meeting


def _transition(db: Session, meeting: SafeZoneMeeting, new_status: str, user: AuthenticatedUser,
                reason: Optional[str], now: datetime):
    if new_status not in STATUS_TRANSITIONS.get(meeting.status, set()):
        raise ConflictError(f"Cannot change meeting status from {meeting.status} to {new_status}",
                            code="INVALID_STATUS_TRANSITION")

    if new_status == "cancelled":
        meeting.cancellation_reason = reason
        meeting.cancelled_by = user.id
        meeting.cancelled_at = now
    elif new_status == "completed":
        meeting.meeting_completed_time = now
        zone = db.query(SafeZone).filter(SafeZone.id == meeting.safe_zone_id).first()
        if zone:
            zone.completed_meetings = (zone.completed_meetings or 0) + 1
            zone.updated_at = now

    meeting.status = new_status
