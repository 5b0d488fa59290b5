# app/services/auth_service.py
"""
Bearer-token authentication delegated to the external auth provider.

The token is validated by calling GET {AUTH_PROVIDER_URL}/auth/v1/user with the
caller's token; the provider's user record is combined with the local
user_profiles row. Exposed to routers as FastAPI dependencies.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user_profile import UserProfile
from app.utils.errors import UnauthorizedError, ForbiddenError
from app.utils.logger import get_logger, mask_email

logger = get_logger(__name__)


@dataclass
class AuthenticatedUser:
    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: bool = False


def extract_bearer_token(request: Request) -> str:
    header = request.headers.get("authorization") or ""
    if not header.startswith("Bearer ") or not header[7:].strip():
        raise UnauthorizedError("Missing or invalid authorization header")
    return header[7:].strip()


async def fetch_provider_user(token: str) -> dict:
    """Ask the auth provider who owns this token. Raises UnauthorizedError."""
    headers = {"Authorization": f"Bearer {token}"}
    if settings.AUTH_PROVIDER_API_KEY:
        headers["apikey"] = settings.AUTH_PROVIDER_API_KEY
    url = f"{settings.AUTH_PROVIDER_URL.rstrip('/')}/auth/v1/user"

    try:
        async with httpx.AsyncClient(timeout=settings.EXTERNAL_TIMEOUT_SECONDS) as client:
            resp = await client.get(url, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Auth provider unreachable: {e}")
        raise UnauthorizedError("Authentication failed", code="AUTH_ERROR")

    if resp.status_code != 200:
        raise UnauthorizedError("Invalid or expired token", code="INVALID_TOKEN")
    data = resp.json()
    if not data or not data.get("id"):
        raise UnauthorizedError("Invalid or expired token", code="INVALID_TOKEN")
    return data


def is_admin_user(provider_user: dict) -> bool:
    user_meta = provider_user.get("user_metadata") or {}
    app_meta = provider_user.get("app_metadata") or {}
    email = provider_user.get("email") or ""
    return (user_meta.get("role") == "admin"
            or app_meta.get("role") == "admin"
            or (bool(settings.ADMIN_EMAIL_DOMAIN) and email.endswith(f"@{settings.ADMIN_EMAIL_DOMAIN}")))


def build_user(provider_user: dict, profile: Optional[UserProfile]) -> AuthenticatedUser:
    user_meta = provider_user.get("user_metadata") or {}
    app_meta = provider_user.get("app_metadata") or {}
    return AuthenticatedUser(
        id=provider_user["id"],
        email=provider_user.get("email"),
        role=user_meta.get("role") or app_meta.get("role"),
        first_name=(profile.first_name if profile else None) or user_meta.get("first_name"),
        last_name=(profile.last_name if profile else None) or user_meta.get("last_name"),
        is_admin=is_admin_user(provider_user),
    )


async def get_current_user(request: Request, db: Session = Depends(get_db)) -> AuthenticatedUser:
    token = extract_bearer_token(request)
    provider_user = await fetch_provider_user(token)
    profile = db.query(UserProfile).filter(UserProfile.id == provider_user["id"]).first()
    user = build_user(provider_user, profile)
    logger.debug(f"Authenticated {user.id} ({mask_email(user.email)}) admin={user.is_admin}")
    return user


async def require_admin(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    if not user.is_admin:
        raise ForbiddenError("Admin privileges required")
    return user
