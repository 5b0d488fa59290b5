# app/services/review_service.py
"""Safe zone reviews. One per user per zone; the zone's rating aggregates are recomputed on every insert."""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.safe_zone import SafeZone
from app.models.safe_zone_review import SafeZoneReview
from app.schemas.review import ReviewCreate
from app.services.auth_service import AuthenticatedUser
from app.utils.errors import ConflictError, NotFoundError, ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)

REVIEW_ORDERING = {
    "newest": SafeZoneReview.created_at.desc(),
    "oldest": SafeZoneReview.created_at.asc(),
    "highest_rating": SafeZoneReview.rating.desc(),
    "lowest_rating": SafeZoneReview.rating.asc(),
}


def list_reviews(db: Session, zone_id: str, sort_by: str = "newest", page: int = 1, limit: int = 10):
    if not db.query(SafeZone.id).filter(SafeZone.id == zone_id).first():
        raise NotFoundError("Safe zone not found", code="SAFE_ZONE_NOT_FOUND")
    q = db.query(SafeZoneReview).filter(SafeZoneReview.safe_zone_id == zone_id,
                                        SafeZoneReview.is_flagged.is_(False))
    total = q.count()
    reviews = (q.order_by(REVIEW_ORDERING.get(sort_by, REVIEW_ORDERING["newest"]))
                .offset((page - 1) * limit).limit(limit).all())
    return reviews, total


def create_review(db: Session, user: AuthenticatedUser, zone_id: str, payload: ReviewCreate) -> SafeZoneReview:
    zone = db.query(SafeZone).filter(SafeZone.id == zone_id).first()
    if not zone:
        raise NotFoundError("Safe zone not found", code="SAFE_ZONE_NOT_FOUND")
    if zone.status != "active":
        raise ValidationError("Cannot review inactive safe zones", code="SAFE_ZONE_INACTIVE")

    existing = db.query(SafeZoneReview.id).filter(SafeZoneReview.safe_zone_id == zone_id,
                                                  SafeZoneReview.user_id == user.id).first()
    if existing:
        raise ConflictError("You have already reviewed this safe zone", code="DUPLICATE_REVIEW")

    review = SafeZoneReview(safe_zone_id=zone_id, user_id=user.id, created_at=datetime.utcnow(),
                            **payload.model_dump(exclude_none=True))
    db.add(review)
    try:
        db.flush()
    except IntegrityError:
        # concurrent submission won the unique (zone, user) constraint
        db.rollback()
        raise ConflictError("You have already reviewed this safe zone", code="DUPLICATE_REVIEW")

    refresh_zone_rating(db, zone)
    db.commit()
    db.refresh(review)
    logger.info(f"[REVIEW] {user.id} rated zone {zone_id}: {review.rating}/5")
    return review


def refresh_zone_rating(db: Session, zone: SafeZone):
    avg, count = db.query(func.avg(SafeZoneReview.rating), func.count(SafeZoneReview.id)).filter(
        SafeZoneReview.safe_zone_id == zone.id, SafeZoneReview.is_flagged.is_(False)).one()
    zone.average_rating = round(float(avg or 0), 2)
    zone.total_reviews = count or 0
    zone.updated_at = datetime.utcnow()
