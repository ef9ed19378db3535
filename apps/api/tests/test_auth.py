"""Tests for bearer-token authentication and tenant resolution."""
import uuid

import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.core.security import create_access_token, extract_bearer_token


TENANT_RESOURCES = ["/api/patients", "/api/claims", "/api/appeals", "/api/analytics"]


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("bearer abc") == "abc"
    assert extract_bearer_token("Basic abc") is None
    assert extract_bearer_token("Bearer ") is None
    assert extract_bearer_token(None) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("path", TENANT_RESOURCES + ["/api/auth/profile"])
async def test_missing_token_is_unauthorized(client: AsyncClient, path: str):
    response = await client.get(path)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_non_bearer_scheme_is_unauthorized(client: AsyncClient):
    response = await client.get("/api/patients", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_write_without_token_is_unauthorized_before_validation(client: AsyncClient):
    """An unauthenticated POST with an empty body gets 401, not a validation error."""
    response = await client.post("/api/patients", json={})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_invalid(client: AsyncClient):
    response = await client.get("/api/patients", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_invalid(client: AsyncClient, tenant_a):
    token = create_access_token(tenant_a.profile.id, secret="some-other-secret-entirely-0123456789")
    response = await client.get("/api/patients", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_expired_token_is_invalid(client: AsyncClient, tenant_a):
    token = create_access_token(tenant_a.profile.id, expires_minutes=-5)
    response = await client.get("/api/patients", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_previous_secret_accepted_during_rotation(client: AsyncClient, tenant_a, monkeypatch):
    old_secret = "previous-secret-still-valid-during-rotation"
    token = create_access_token(tenant_a.profile.id, secret=old_secret)
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET_PREVIOUS", old_secret)

    response = await client.get("/api/patients", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("path", TENANT_RESOURCES)
async def test_user_without_org_is_forbidden(orphan_client: AsyncClient, path: str):
    response = await orphan_client.get(path)
    assert response.status_code == 403
    assert response.json() == {"error": "User not associated with an organization"}


@pytest.mark.asyncio
async def test_valid_token_without_profile_is_forbidden(client: AsyncClient, db):
    token = create_access_token(uuid.uuid4(), email="ghost@test.com")
    response = await client.get("/api/claims", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403
