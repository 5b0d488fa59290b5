# app/routers/listings.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope, Page, Pagination
from app.schemas.listing import ListingCreate, ListingOut
from app.services import listing_service
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils.rate_limiter import rate_limit, STANDARD

router = APIRouter(dependencies=[Depends(rate_limit(STANDARD))])


@router.get("/listings", response_model=Page[ListingOut])
def list_listings(
    make: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
):
    listings, total = listing_service.list_listings(db, make, min_price, max_price, page, limit)
    return Page[ListingOut](data=[ListingOut.model_validate(listing) for listing in listings],
                            pagination=Pagination.build(page, limit, total))


@router.get("/listings/{listing_id}", response_model=Envelope[ListingOut])
def get_listing(listing_id: str, db: Session = Depends(get_db)):
    listing = listing_service.get_listing(db, listing_id)
    return Envelope[ListingOut](data=ListingOut.model_validate(listing))


@router.post("/listings", response_model=Envelope[ListingOut], status_code=201)
def create_listing(body: ListingCreate, db: Session = Depends(get_db),
                   user: AuthenticatedUser = Depends(get_current_user)):
    """A supplied VIN is verified first; stolen vehicles are refused with 409."""
    listing = listing_service.create_listing(db, user, body)
    return Envelope[ListingOut](data=ListingOut.model_validate(listing), message="Listing created successfully")


@router.delete("/listings/{listing_id}", response_model=Envelope[dict])
def delete_listing(listing_id: str, db: Session = Depends(get_db),
                   user: AuthenticatedUser = Depends(get_current_user)):
    listing = listing_service.delete_listing(db, user, listing_id)
    return Envelope[dict](data={"id": listing.id, "status": listing.status}, message="Listing removed")
