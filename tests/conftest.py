# tests/conftest.py
"""Shared fixtures: in-memory SQLite session, API client with dependency overrides, model factories."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["NICB_API_KEY"] = ""

import uuid
import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient

from app import models  # noqa
from app.database import Base, SessionLocal, engine, get_db
from app.main import app as api
from app.models.listing import Listing
from app.models.safe_zone import SafeZone, default_operating_hours
from app.models.safe_zone_meeting import SafeZoneMeeting
from app.models.user_profile import UserProfile
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils import rate_limiter

BUYER_ID = "11111111-1111-4111-8111-111111111111"
SELLER_ID = "22222222-2222-4222-8222-222222222222"
OTHER_ID = "33333333-3333-4333-8333-333333333333"


def upcoming(weekday: int, hour: int, minute: int = 0) -> datetime:
    """Next occurrence (at least one day ahead) of weekday (Mon=0) at hour:minute."""
    today = datetime.utcnow().date()
    days = (weekday - today.weekday()) % 7 or 7
    day = today + timedelta(days=days)
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.store.reset()
    yield
    rate_limiter.store.reset()


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def buyer():
    return AuthenticatedUser(id=BUYER_ID, email="buyer@example.com", first_name="Bea")


@pytest.fixture
def seller():
    return AuthenticatedUser(id=SELLER_ID, email="seller@example.com", first_name="Sam")


@pytest.fixture
def admin():
    return AuthenticatedUser(id=OTHER_ID, email="ops@safetrade-admin.com", role="admin", is_admin=True)


@pytest.fixture
def client(db_session):
    def override_db():
        yield db_session

    api.dependency_overrides[get_db] = override_db
    yield TestClient(api)
    api.dependency_overrides.clear()


@pytest.fixture
def login():
    """login(user) makes every following request authenticate as `user`."""
    def _login(user: AuthenticatedUser):
        api.dependency_overrides[get_current_user] = lambda: user
    return _login


@pytest.fixture
def make_zone(db_session):
    def _make(**overrides) -> SafeZone:
        now = datetime.utcnow()
        data = {
            "name": "Los Angeles Police Department - Downtown",
            "address": "100 W 1st St, Los Angeles, CA 90012",
            "city": "Los Angeles", "state": "CA", "zip_code": "90012",
            "latitude": 34.0522, "longitude": -118.2437,
            "zone_type": "police_station",
            "status": "active",
            "is_verified": True,
            "operating_hours": default_operating_hours(),
            "features": ["parking"],
            "created_at": now, "updated_at": now,
        }
        data.update(overrides)
        zone = SafeZone(**data)
        db_session.add(zone)
        db_session.commit()
        return zone
    return _make


@pytest.fixture
def make_profile(db_session):
    def _make(user_id: str, first_name: str = "Test") -> UserProfile:
        profile = UserProfile(id=user_id, first_name=first_name, last_name="User", created_at=datetime.utcnow())
        db_session.add(profile)
        db_session.commit()
        return profile
    return _make


@pytest.fixture
def make_listing(db_session):
    def _make(owner_id: str = SELLER_ID, **overrides) -> Listing:
        now = datetime.utcnow()
        data = {"user_id": owner_id, "title": "2019 Harley-Davidson Street Glide", "price": 18500.0,
                "make": "Harley-Davidson", "city": "Hoboken", "zip_code": "07030",
                "status": "active", "created_at": now, "updated_at": now}
        data.update(overrides)
        listing = Listing(**data)
        db_session.add(listing)
        db_session.commit()
        return listing
    return _make


@pytest.fixture
def make_meeting(db_session):
    def _make(zone: SafeZone, listing: Listing, start: datetime, duration: int = 30,
              buyer_id: str = BUYER_ID, seller_id: str = SELLER_ID, status: str = "scheduled") -> SafeZoneMeeting:
        now = datetime.utcnow()
        meeting = SafeZoneMeeting(
            safe_zone_id=zone.id, listing_id=listing.id, buyer_id=buyer_id, seller_id=seller_id,
            scheduled_datetime=start, estimated_duration=duration, status=status,
            safety_code="ABC123", created_at=now, updated_at=now,
        )
        db_session.add(meeting)
        db_session.commit()
        return meeting
    return _make


@pytest.fixture
def parties(make_profile, make_listing):
    """Buyer and seller profiles plus a listing owned by the seller."""
    make_profile(BUYER_ID, "Bea")
    make_profile(SELLER_ID, "Sam")
    return make_listing()


def new_id() -> str:
    return str(uuid.uuid4())
