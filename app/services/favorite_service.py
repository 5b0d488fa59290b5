# app/services/favorite_service.py
"""Saved listings. Users cannot save their own listings; removed listings drop out of the list."""

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.models.listing import Listing
from app.services.auth_service import AuthenticatedUser
from app.services.listing_service import with_masked_location
from app.utils.errors import ConflictError, NotFoundError, ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)


def list_favorites(db: Session, user: AuthenticatedUser) -> list:
    rows = (db.query(Favorite, Listing)
              .join(Listing, Listing.id == Favorite.listing_id)
              .filter(Favorite.user_id == user.id, Listing.status != "removed")
              .order_by(Favorite.created_at.desc())
              .all())
    favorites = []
    for favorite, listing in rows:
        favorite.listing = with_masked_location(listing)
        favorites.append(favorite)
    return favorites


def add_favorite(db: Session, user: AuthenticatedUser, listing_id: str) -> Favorite:
    listing = db.query(Listing).filter(Listing.id == listing_id, Listing.status != "removed").first()
    if not listing:
        raise NotFoundError("Listing not found", code="LISTING_NOT_FOUND")
    if listing.user_id == user.id:
        raise ValidationError("Cannot favorite your own listing", code="CANNOT_FAVORITE_OWN_LISTING")

    existing = db.query(Favorite.id).filter(Favorite.user_id == user.id, Favorite.listing_id == listing_id).first()
    if existing:
        raise ConflictError("Listing already in favorites", code="ALREADY_FAVORITED")

    favorite = Favorite(user_id=user.id, listing_id=listing_id, created_at=datetime.utcnow())
    db.add(favorite)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Listing already in favorites", code="ALREADY_FAVORITED")
    db.refresh(favorite)
    favorite.listing = with_masked_location(listing)
    logger.info(f"[FAVORITE] {user.id} saved listing {listing_id}")
    return favorite


def remove_favorite(db: Session, user: AuthenticatedUser, listing_id: str) -> bool:
    """Idempotent: returns False when the listing was not saved."""
    deleted = db.query(Favorite).filter(Favorite.user_id == user.id,
                                        Favorite.listing_id == listing_id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0
