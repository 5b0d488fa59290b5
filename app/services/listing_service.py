# app/services/listing_service.py
"""
Motorcycle listings. A supplied VIN must be structurally valid and must not
be reported stolen; public responses expose only the masked location.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.listing import Listing
from app.schemas.listing import ListingCreate
from app.services.auth_service import AuthenticatedUser
from app.services.stolen_vehicle_service import verify_vin
from app.services.vin_validator import clean_vin
from app.utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.utils.geo import mask_location
from app.utils.logger import get_logger

logger = get_logger(__name__)


def with_masked_location(listing: Listing) -> Listing:
    listing.location = mask_location(listing.city, listing.zip_code)["masked"]
    return listing


def list_listings(db: Session, make: Optional[str] = None, min_price: Optional[float] = None,
                  max_price: Optional[float] = None, page: int = 1, limit: int = 20):
    q = db.query(Listing).filter(Listing.status == "active")
    if make:
        q = q.filter(Listing.make.ilike(f"%{make}%"))
    if min_price is not None:
        q = q.filter(Listing.price >= min_price)
    if max_price is not None:
        q = q.filter(Listing.price <= max_price)
    total = q.count()
    listings = q.order_by(Listing.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return [with_masked_location(listing) for listing in listings], total


def get_listing(db: Session, listing_id: str) -> Listing:
    listing = db.query(Listing).filter(Listing.id == listing_id, Listing.status != "removed").first()
    if not listing:
        raise NotFoundError("Listing not found", code="LISTING_NOT_FOUND")
    return with_masked_location(listing)


def create_listing(db: Session, user: AuthenticatedUser, payload: ListingCreate) -> Listing:
    data = payload.model_dump(exclude_none=True)

    if "vin" in data:
        vin = clean_vin(data["vin"])
        if len(vin) != 17:
            raise ValidationError("VIN must be exactly 17 characters", code="INVALID_VIN")
        report = verify_vin(db, vin)
        if not report["is_valid"]:
            raise ValidationError("VIN format validation failed", code="INVALID_VIN",
                                  details=report["validation"]["errors"])
        if report["is_stolen"]:
            logger.warning(f"[LISTING] Blocked listing by {user.id}: VIN {vin} reported stolen")
            raise ConflictError("This vehicle has been reported stolen and cannot be listed",
                                code="VEHICLE_REPORTED_STOLEN")
        data["vin"] = vin

    now = datetime.utcnow()
    listing = Listing(**data, user_id=user.id, status="active", created_at=now, updated_at=now)
    db.add(listing)
    db.commit()
    db.refresh(listing)
    logger.info(f"[LISTING] {listing.id} created by {user.id}")
    return with_masked_location(listing)


def delete_listing(db: Session, user: AuthenticatedUser, listing_id: str) -> Listing:
    listing = db.query(Listing).filter(Listing.id == listing_id, Listing.status != "removed").first()
    if not listing:
        raise NotFoundError("Listing not found", code="LISTING_NOT_FOUND")
    if listing.user_id != user.id and not user.is_admin:
        raise ForbiddenError("You can only remove your own listings")
    listing.status = "removed"
    listing.updated_at = datetime.utcnow()
    db.commit()
    logger.info(f"[LISTING] {listing.id} removed by {user.id}")
    return listing
