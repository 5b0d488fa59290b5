# app/routers/reviews.py
from typing import Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope, Page, Pagination
from app.schemas.review import ReviewCreate, ReviewOut
from app.services import review_service
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils.rate_limiter import rate_limit, STANDARD, REVIEWS

router = APIRouter()


@router.get("/safe-zones/{zone_id}/reviews", response_model=Page[ReviewOut],
            dependencies=[Depends(rate_limit(STANDARD))])
def list_zone_reviews(
    zone_id: str,
    sort_by: Literal["newest", "oldest", "highest_rating", "lowest_rating"] = Query("newest", alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    reviews, total = review_service.list_reviews(db, zone_id, sort_by, page, limit)
    return Page[ReviewOut](data=[ReviewOut.model_validate(r) for r in reviews],
                           pagination=Pagination.build(page, limit, total))


@router.post("/safe-zones/{zone_id}/reviews", response_model=Envelope[ReviewOut], status_code=201,
             dependencies=[Depends(rate_limit(REVIEWS))])
def create_zone_review(zone_id: str, body: ReviewCreate, db: Session = Depends(get_db),
                       user: AuthenticatedUser = Depends(get_current_user)):
    review = review_service.create_review(db, user, zone_id, body)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review), message="Review submitted successfully")
