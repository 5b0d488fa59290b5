# app/schemas/common.py
"""Shared schema pieces: camelCase wire format, UUID strings, datetime normalisation."""

import math
import uuid
from datetime import datetime, timezone
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel


def _check_uuid(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise ValueError("must be a valid UUID")


UUIDStr = Annotated[str, AfterValidator(_check_uuid)]

TIME_OF_DAY_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
PHONE_PATTERN = r"^\+?[\d\s\-\(\)]{10,20}$"


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


T = TypeVar("T")


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages,
                   has_next=page < total_pages, has_prev=page > 1)


class Envelope(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class Page(CamelModel, Generic[T]):
    data: list[T]
    pagination: Pagination
