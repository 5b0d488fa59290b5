# app/schemas/favorite.py
from datetime import datetime
from app.schemas.common import CamelModel
from app.schemas.listing import ListingOut


class FavoriteOut(CamelModel):
    id: str
    listing_id: str
    created_at: datetime
    listing: ListingOut
