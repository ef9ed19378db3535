"""Tests for the caller's own profile endpoint."""
import uuid

import pytest
from httpx import AsyncClient

from app.core.security import create_access_token


@pytest.mark.asyncio
async def test_get_profile_embeds_organization(client_a: AsyncClient, tenant_a):
    response = await client_a.get("/api/auth/profile")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == str(tenant_a.profile.id)
    assert data["organization"]["id"] == str(tenant_a.org.id)
    assert data["organization"]["subscription_plan"] == "free"


@pytest.mark.asyncio
async def test_profile_works_without_organization(orphan_client: AsyncClient):
    response = await orphan_client.get("/api/auth/profile")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["organization_id"] is None
    assert data["organization"] is None


@pytest.mark.asyncio
async def test_missing_profile_is_not_found(client: AsyncClient):
    token = create_access_token(uuid.uuid4())
    response = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404
    assert response.json() == {"error": "Profile not found"}


@pytest.mark.asyncio
async def test_update_only_touches_allowlisted_fields(client_a: AsyncClient, tenant_a, org_b):
    response = await client_a.put(
        "/api/auth/profile",
        json={
            "first_name": "Grace",
            "job_title": "Billing Lead",
            "preferences": {"theme": "dark"},
            "organization_id": str(org_b.id),
            "role": "admin",
            "email": "hijack@test.com",
        },
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["first_name"] == "Grace"
    assert data["job_title"] == "Billing Lead"
    assert data["preferences"] == {"theme": "dark"}
    assert data["organization_id"] == str(tenant_a.org.id)
    assert data["role"] == "member"
    assert data["email"] == tenant_a.profile.email
