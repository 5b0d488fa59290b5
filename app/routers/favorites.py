# app/routers/favorites.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope
from app.schemas.favorite import FavoriteOut
from app.services import favorite_service
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils.rate_limiter import rate_limit, STANDARD

router = APIRouter(prefix="/favorites", dependencies=[Depends(rate_limit(STANDARD))])


@router.get("", response_model=Envelope[list[FavoriteOut]])
def list_favorites(db: Session = Depends(get_db), user: AuthenticatedUser = Depends(get_current_user)):
    favorites = favorite_service.list_favorites(db, user)
    return Envelope[list[FavoriteOut]](data=[FavoriteOut.model_validate(f) for f in favorites])


@router.post("/{listing_id}", response_model=Envelope[FavoriteOut], status_code=201)
def add_favorite(listing_id: str, db: Session = Depends(get_db),
                 user: AuthenticatedUser = Depends(get_current_user)):
    favorite = favorite_service.add_favorite(db, user, listing_id)
    return Envelope[FavoriteOut](data=FavoriteOut.model_validate(favorite), message="Added to favorites")


@router.delete("/{listing_id}", response_model=Envelope[dict])
def remove_favorite(listing_id: str, db: Session = Depends(get_db),
                    user: AuthenticatedUser = Depends(get_current_user)):
    removed = favorite_service.remove_favorite(db, user, listing_id)
    return Envelope[dict](data={"listingId": listing_id, "removed": removed},
                          message="Removed from favorites" if removed else "Listing was not in favorites")
