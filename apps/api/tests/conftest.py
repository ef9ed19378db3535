"""
Test configuration and fixtures.

Provides:
- In-memory SQLite schema, created and dropped around each test
- Two organizations with one member each, plus a profile without an org
- Bearer-token HTTPX AsyncClients for each caller
- Fake external collaborators (AI, HubSpot, Stripe) via dependency overrides
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before the app (and its settings/engine/limiter) is imported
os.environ["TESTING"] = "1"
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
os.environ["AI_APPEALS_URL"] = ""
os.environ["AI_RISK_URL"] = ""
os.environ["HUBSPOT_ACCESS_TOKEN"] = ""
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["SENTRY_DSN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from app.core.deps import get_ai_client, get_billing_client, get_db, get_hubspot_client
from app.core.security import create_access_token
from app.db.base import Base
from app.db.models import Organization, Profile
from app.db.session import SessionLocal, engine
from app.main import app
from app.services.ai_service import AIClient
from app.services.hubspot_service import HubSpotClient


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    Requests get their own sessions on the same in-memory database, so
    fixtures commit and tests call db.expire_all() before re-reading rows.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@dataclass
class Tenant:
    """A caller with an organization and a bearer token."""
    org: Organization
    profile: Profile
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _make_tenant(db: Session, name: str) -> Tenant:
    org = Organization(name=name, slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}")
    db.add(org)
    db.flush()
    profile = Profile(
        id=uuid.uuid4(),
        organization_id=org.id,
        email=f"user-{uuid.uuid4().hex[:8]}@test.com",
        first_name="Test",
        last_name="User",
    )
    db.add(profile)
    db.commit()
    token = create_access_token(profile.id, email=profile.email)
    return Tenant(org=org, profile=profile, token=token)


@pytest.fixture(scope="function")
def tenant_a(db: Session) -> Tenant:
    return _make_tenant(db, "Org A")


@pytest.fixture(scope="function")
def tenant_b(db: Session) -> Tenant:
    return _make_tenant(db, "Org B")


@pytest.fixture(scope="function")
def org_a(tenant_a: Tenant) -> Organization:
    return tenant_a.org


@pytest.fixture(scope="function")
def org_b(tenant_b: Tenant) -> Organization:
    return tenant_b.org


@pytest.fixture(scope="function")
def orphan_profile(db: Session) -> Profile:
    """A signed-up user who has not joined an organization yet."""
    profile = Profile(id=uuid.uuid4(), email="orphan@test.com", first_name="No", last_name="Org")
    db.add(profile)
    db.commit()
    return profile


# =============================================================================
# External Collaborators
# =============================================================================

@pytest.fixture(autouse=True)
def fake_collaborators() -> Generator[None, None, None]:
    """
    Default overrides: AI and HubSpot unconfigured, billing disabled.

    Tests swap in configured clients by setting app.dependency_overrides.
    """
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: AIClient()
    app.dependency_overrides[get_hubspot_client] = lambda: HubSpotClient()
    app.dependency_overrides[get_billing_client] = lambda: None
    yield
    app.dependency_overrides.clear()


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client for public endpoints and auth failures."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture(scope="function")
async def client_a(tenant_a: Tenant) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=tenant_a.headers,
    ) as c:
        yield c


@pytest.fixture(scope="function")
async def client_b(tenant_b: Tenant) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=tenant_b.headers,
    ) as c:
        yield c


@pytest.fixture(scope="function")
async def orphan_client(orphan_profile: Profile) -> AsyncGenerator[AsyncClient, None]:
    token = create_access_token(orphan_profile.id, email=orphan_profile.email)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as c:
        yield c
