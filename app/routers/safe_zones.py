# app/routers/safe_zones.py
"""Safe zone catalogue, nearby search and admin management."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope, Page, Pagination
from app.schemas.safe_zone import SafeZoneCreate, SafeZoneUpdate, SafeZoneOut, SafeZoneNearbyOut, ZoneType, ZoneStatus
from app.services import safe_zone_service
from app.services.auth_service import AuthenticatedUser, require_admin
from app.utils.rate_limiter import rate_limit, STANDARD, ADMIN

router = APIRouter()


@router.get("/safe-zones", response_model=Page[SafeZoneOut], dependencies=[Depends(rate_limit(STANDARD))])
def list_safe_zones(
    city: Optional[str] = None,
    state: Optional[str] = None,
    zone_type: Optional[ZoneType] = Query(None, alias="zoneType"),
    status: ZoneStatus = "active",
    verified_only: bool = Query(False, alias="verifiedOnly"),
    min_rating: float = Query(0, ge=0, le=5, alias="minRating"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
):
    zones, total = safe_zone_service.list_zones(db, city, state, zone_type, status, verified_only,
                                                min_rating, search, page, limit)
    return Page[SafeZoneOut](data=[SafeZoneOut.model_validate(z) for z in zones],
                             pagination=Pagination.build(page, limit, total))


@router.get("/safe-zones/nearby", response_model=Envelope[list[SafeZoneNearbyOut]],
            dependencies=[Depends(rate_limit(STANDARD))])
def nearby_safe_zones(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(25, ge=1, le=100, alias="radiusKm"),
    limit: int = Query(10, ge=1, le=20),
    zone_type: Optional[ZoneType] = Query(None, alias="zoneType"),
    verified_only: bool = Query(False, alias="verifiedOnly"),
    min_rating: float = Query(0, ge=0, le=5, alias="minRating"),
    db: Session = Depends(get_db),
):
    """Active zones within radiusKm, nearest first."""
    zones = safe_zone_service.find_nearby_zones(db, latitude, longitude, radius_km, limit,
                                                zone_type, verified_only, min_rating)
    return Envelope[list[SafeZoneNearbyOut]](
        data=[SafeZoneNearbyOut.model_validate(z) for z in zones],
        message=f"Found {len(zones)} safe zones within {radius_km:g}km",
    )


@router.post("/safe-zones", response_model=Envelope[SafeZoneOut], status_code=201,
             dependencies=[Depends(rate_limit(ADMIN))])
def create_safe_zone(body: SafeZoneCreate, db: Session = Depends(get_db),
                     admin: AuthenticatedUser = Depends(require_admin)):
    zone = safe_zone_service.create_zone(db, admin, body)
    return Envelope[SafeZoneOut](data=SafeZoneOut.model_validate(zone), message="Safe zone created successfully")


@router.get("/safe-zones/{zone_id}", response_model=Envelope[SafeZoneOut],
            dependencies=[Depends(rate_limit(STANDARD))])
def get_safe_zone(zone_id: str, db: Session = Depends(get_db)):
    zone = safe_zone_service.get_zone(db, zone_id)
    return Envelope[SafeZoneOut](data=SafeZoneOut.model_validate(zone))


@router.put("/safe-zones/{zone_id}", response_model=Envelope[SafeZoneOut],
            dependencies=[Depends(rate_limit(ADMIN))])
def update_safe_zone(zone_id: str, body: SafeZoneUpdate, db: Session = Depends(get_db),
                     admin: AuthenticatedUser = Depends(require_admin)):
    zone = safe_zone_service.update_zone(db, admin, zone_id, body)
    return Envelope[SafeZoneOut](data=SafeZoneOut.model_validate(zone), message="Safe zone updated successfully")


@router.delete("/safe-zones/{zone_id}", response_model=Envelope[SafeZoneOut],
               dependencies=[Depends(rate_limit(ADMIN))])
def delete_safe_zone(zone_id: str, db: Session = Depends(get_db),
                     admin: AuthenticatedUser = Depends(require_admin)):
    """Soft delete: the zone is set inactive and kept for meeting history."""
    zone = safe_zone_service.delete_zone(db, admin, zone_id)
    return Envelope[SafeZoneOut](data=SafeZoneOut.model_validate(zone), message="Safe zone deactivated")
