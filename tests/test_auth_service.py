# tests/test_auth_service.py
"""Unit tests for bearer-token authentication against the auth provider."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.models.user_profile import UserProfile
from app.services.auth_service import (
    extract_bearer_token, fetch_provider_user, get_current_user, require_admin, is_admin_user,
    AuthenticatedUser,
)
from app.utils.errors import UnauthorizedError, ForbiddenError

PROVIDER_USER = {
    "id": "11111111-1111-4111-8111-111111111111",
    "email": "rider@example.com",
    "user_metadata": {"first_name": "Meta", "last_name": "Name"},
    "app_metadata": {},
}


def mock_provider(response=None, error=None):
    """Patch httpx.AsyncClient so `async with ... as client: await client.get()` returns `response`."""
    client = AsyncMock()
    if error is not None:
        client.get.side_effect = error
    else:
        client.get.return_value = response
    patcher = patch("app.services.auth_service.httpx.AsyncClient")
    async_client = patcher.start()
    async_client.return_value.__aenter__.return_value = client
    async_client.return_value.__aexit__.return_value = False
    return patcher, client


def provider_response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def make_request(headers):
    request = MagicMock()
    request.headers = headers
    return request


class TestBearerToken:
    def test_extracts_token(self):
        assert extract_bearer_token(make_request({"authorization": "Bearer tok-123"})) == "tok-123"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "bearer tok"])
    def test_rejects_missing_or_malformed(self, header):
        headers = {} if header is None else {"authorization": header}
        with pytest.raises(UnauthorizedError) as exc:
            extract_bearer_token(make_request(headers))
        assert exc.value.code == "UNAUTHORIZED"


class TestProviderLookup:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        patcher, client = mock_provider(provider_response(200, PROVIDER_USER))
        try:
            user = await fetch_provider_user("tok")
        finally:
            patcher.stop()
        assert user["id"] == PROVIDER_USER["id"]
        assert client.get.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        patcher, _ = mock_provider(provider_response(401, {"msg": "invalid JWT"}))
        try:
            with pytest.raises(UnauthorizedError) as exc:
                await fetch_provider_user("expired")
        finally:
            patcher.stop()
        assert exc.value.code == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_provider_unreachable(self):
        patcher, _ = mock_provider(error=httpx.ConnectError("connection refused"))
        try:
            with pytest.raises(UnauthorizedError) as exc:
                await fetch_provider_user("tok")
        finally:
            patcher.stop()
        assert exc.value.code == "AUTH_ERROR"


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_profile_names_win_over_metadata(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = UserProfile(
            id=PROVIDER_USER["id"], first_name="Bea", last_name="Rider")

        with patch("app.services.auth_service.fetch_provider_user", new_callable=AsyncMock,
                   return_value=PROVIDER_USER):
            user = await get_current_user(make_request({"authorization": "Bearer tok"}), db)

        assert user.id == PROVIDER_USER["id"]
        assert user.first_name == "Bea"
        assert user.last_name == "Rider"
        assert user.is_admin is False

    @pytest.mark.asyncio
    async def test_metadata_used_without_profile(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = None
        with patch("app.services.auth_service.fetch_provider_user", new_callable=AsyncMock,
                   return_value=PROVIDER_USER):
            user = await get_current_user(make_request({"authorization": "Bearer tok"}), db)
        assert user.first_name == "Meta"

    @pytest.mark.asyncio
    async def test_require_admin(self):
        with pytest.raises(ForbiddenError):
            await require_admin(AuthenticatedUser(id="u1"))
        admin = AuthenticatedUser(id="u2", is_admin=True)
        assert await require_admin(admin) is admin


class TestAdminDetection:
    def test_role_in_metadata(self):
        assert is_admin_user({"id": "x", "user_metadata": {"role": "admin"}})
        assert is_admin_user({"id": "x", "app_metadata": {"role": "admin"}})

    def test_admin_email_domain(self):
        assert is_admin_user({"id": "x", "email": "ops@safetrade-admin.com"})
        assert not is_admin_user({"id": "x", "email": "ops@safetrade-admin.com.evil.net"})
        assert not is_admin_user({"id": "x", "email": "rider@example.com"})
