# app/services/safe_zone_service.py
"""Safe zone catalogue: filtered listing, nearby search, admin create/update/soft-delete."""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.safe_zone import SafeZone, default_operating_hours
from app.models.safe_zone_meeting import SafeZoneMeeting, ACTIVE_MEETING_STATUSES
from app.schemas.safe_zone import SafeZoneCreate, SafeZoneUpdate
from app.services.auth_service import AuthenticatedUser
from app.utils.errors import ConflictError, NotFoundError
from app.utils.geo import haversine_km
from app.utils.logger import get_logger

logger = get_logger(__name__)

KM_PER_DEGREE_LAT = 111.0


def list_zones(db: Session, city: Optional[str] = None, state: Optional[str] = None,
               zone_type: Optional[str] = None, status: Optional[str] = "active",
               verified_only: bool = False, min_rating: float = 0, search: Optional[str] = None,
               page: int = 1, limit: int = 20):
    """Returns (zones, total), best rated first."""
    q = db.query(SafeZone)
    if status:
        q = q.filter(SafeZone.status == status)
    if city:
        q = q.filter(SafeZone.city.ilike(f"%{city}%"))
    if state:
        q = q.filter(SafeZone.state == state)
    if zone_type:
        q = q.filter(SafeZone.zone_type == zone_type)
    if verified_only:
        q = q.filter(SafeZone.is_verified.is_(True))
    if min_rating:
        q = q.filter(SafeZone.average_rating >= min_rating)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(SafeZone.name.ilike(pattern),
                         SafeZone.address.ilike(pattern),
                         SafeZone.description.ilike(pattern)))

    total = q.count()
    zones = (q.order_by(SafeZone.average_rating.desc(), SafeZone.total_reviews.desc(), SafeZone.created_at.desc())
              .offset((page - 1) * limit).limit(limit).all())
    return zones, total


def get_zone(db: Session, zone_id: str) -> SafeZone:
    zone = db.query(SafeZone).filter(SafeZone.id == zone_id).first()
    if not zone:
        raise NotFoundError("Safe zone not found", code="SAFE_ZONE_NOT_FOUND")
    return zone


def find_nearby_zones(db: Session, lat: float, lng: float, radius_km: float = 25, limit: int = 10,
                      zone_type: Optional[str] = None, verified_only: bool = False,
                      min_rating: float = 0) -> list:
    """
    Active zones within radius_km of (lat, lng), nearest first.
    Each returned zone carries a `distance_km` attribute rounded to 0.01 km.
    """
    # Latitude band prefilter; longitude is left to the exact distance check
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    q = db.query(SafeZone).filter(
        SafeZone.status == "active",
        SafeZone.latitude.between(lat - lat_delta, lat + lat_delta),
    )
    if zone_type:
        q = q.filter(SafeZone.zone_type == zone_type)
    if verified_only:
        q = q.filter(SafeZone.is_verified.is_(True))
    if min_rating:
        q = q.filter(SafeZone.average_rating >= min_rating)

    nearby = []
    for zone in q.all():
        distance = haversine_km(lat, lng, zone.latitude, zone.longitude)
        if distance <= radius_km:
            zone.distance_km = round(distance, 2)
            nearby.append(zone)
    nearby.sort(key=lambda z: z.distance_km)
    return nearby[:limit]


def create_zone(db: Session, admin: AuthenticatedUser, payload: SafeZoneCreate) -> SafeZone:
    data = payload.model_dump(exclude_none=True)
    if "operating_hours" not in data:
        data["operating_hours"] = default_operating_hours()
    now = datetime.utcnow()
    zone = SafeZone(**data, status="pending_verification", is_verified=False,
                    created_by=admin.id, created_at=now, updated_at=now)
    db.add(zone)
    db.commit()
    db.refresh(zone)
    logger.info(f"[ADMIN] {admin.id} created safe zone {zone.id} ({zone.name})")
    return zone


def update_zone(db: Session, admin: AuthenticatedUser, zone_id: str, payload: SafeZoneUpdate) -> SafeZone:
    zone = get_zone(db, zone_id)
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(zone, key, value)
    zone.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(zone)
    logger.info(f"[ADMIN] {admin.id} updated safe zone {zone.id}: {sorted(changes)}")
    return zone


def delete_zone(db: Session, admin: AuthenticatedUser, zone_id: str) -> SafeZone:
    """Soft delete. Refused while upcoming active meetings reference the zone."""
    zone = get_zone(db, zone_id)
    upcoming = db.query(SafeZoneMeeting.id).filter(
        SafeZoneMeeting.safe_zone_id == zone.id,
        SafeZoneMeeting.status.in_(ACTIVE_MEETING_STATUSES),
        SafeZoneMeeting.scheduled_datetime >= datetime.utcnow(),
    ).first()
    if upcoming:
        raise ConflictError("Cannot delete safe zone with active meetings", code="CANNOT_DELETE")

    zone.status = "inactive"
    zone.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(zone)
    logger.info(f"[ADMIN] {admin.id} deactivated safe zone {zone.id}")
    return zone
