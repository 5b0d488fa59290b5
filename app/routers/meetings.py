# app/routers/meetings.py
"""
Meeting scheduling at safe zones.
Registered before the safe_zones router so /safe-zones/meetings/... is not
captured by /safe-zones/{zone_id}.
"""

from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope, Page, Pagination
from app.schemas.meeting import (
    AvailabilityCheckRequest, AvailabilityOut, ConflictSummary, ZoneRef,
    MeetingCreate, MeetingUpdate, MeetingOut, MeetingStatus, UserMeetingOut,
)
from app.services import meeting_service
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils.rate_limiter import rate_limit, STANDARD, MEETINGS

router = APIRouter()


@router.post("/safe-zones/meetings/availability", response_model=Envelope[AvailabilityOut],
             dependencies=[Depends(rate_limit(STANDARD))])
def check_meeting_availability(body: AvailabilityCheckRequest, db: Session = Depends(get_db),
                               user: AuthenticatedUser = Depends(get_current_user)):
    result = meeting_service.check_availability(db, body.safe_zone_id, body.requested_datetime,
                                                body.duration_minutes, user_id=user.id)
    out = AvailabilityOut(
        available=result.available,
        reason=result.reason,
        code=result.code,
        safe_zone=ZoneRef(id=result.zone.id, name=result.zone.name),
        requested_time=body.requested_datetime,
        duration=body.duration_minutes,
        conflicts=ConflictSummary(conflicting_meetings=len(result.conflicts)) if result.conflicts else None,
    )
    return Envelope[AvailabilityOut](data=out, message="Availability checked")


@router.post("/safe-zones/meetings", response_model=Envelope[MeetingOut], status_code=201,
             dependencies=[Depends(rate_limit(MEETINGS))])
def schedule_meeting(body: MeetingCreate, db: Session = Depends(get_db),
                     user: AuthenticatedUser = Depends(get_current_user)):
    meeting = meeting_service.create_meeting(db, user, body)
    return Envelope[MeetingOut](data=MeetingOut.model_validate(meeting), message="Meeting scheduled successfully")


@router.get("/safe-zones/meetings/user", response_model=Page[UserMeetingOut],
            dependencies=[Depends(rate_limit(STANDARD))])
def my_meetings(
    status: Optional[MeetingStatus] = None,
    upcoming: Optional[bool] = None,
    sort_by: Literal["date_asc", "date_desc", "created_desc"] = Query("date_asc", alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=20),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Meetings where the caller is buyer or seller. Safety codes are hidden for past meetings."""
    rows, total = meeting_service.list_user_meetings(db, user.id, status, upcoming, sort_by, page, limit)
    return Page[UserMeetingOut](data=[UserMeetingOut.model_validate(r) for r in rows],
                                pagination=Pagination.build(page, limit, total))


@router.patch("/safe-zones/meetings/{meeting_id}", response_model=Envelope[MeetingOut],
              dependencies=[Depends(rate_limit(STANDARD))])
def update_meeting(meeting_id: str, body: MeetingUpdate, db: Session = Depends(get_db),
                   user: AuthenticatedUser = Depends(get_current_user)):
    meeting = meeting_service.update_meeting(db, user, meeting_id, body)
    return Envelope[MeetingOut](data=MeetingOut.model_validate(meeting), message="Meeting updated successfully")
