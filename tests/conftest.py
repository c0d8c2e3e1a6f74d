"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from secondleash.config.settings import get_settings
from secondleash.models.database import Shelter
from secondleash.policy.identity import CallerIdentity
from secondleash.services.dogs import DogService
from secondleash.storage.repositories.dogs import InMemoryDogRepository
from secondleash.types import Role
from secondleash.web.app import create_app

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
SHELTER_A = "shelter-a"
SHELTER_B = "shelter-b"


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch):
    """Pin settings to the in-memory store and a known signing key."""
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("USE_DATABASE", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> InMemoryDogRepository:
    return InMemoryDogRepository()


@pytest.fixture()
def service(store: InMemoryDogRepository, clock: FakeClock) -> DogService:
    return DogService(store, clock=clock)


@pytest.fixture()
def super_admin() -> CallerIdentity:
    return CallerIdentity(role=Role.SUPER_ADMIN, shelter_id=SHELTER_A, user_id="u-super")


@pytest.fixture()
def admin_a() -> CallerIdentity:
    return CallerIdentity(role=Role.SHELTER_ADMIN, shelter_id=SHELTER_A, user_id="u-admin-a")


@pytest.fixture()
def staff_a() -> CallerIdentity:
    return CallerIdentity(role=Role.STAFF, shelter_id=SHELTER_A, user_id="u-staff-a")


@pytest.fixture()
def staff_b() -> CallerIdentity:
    return CallerIdentity(role=Role.STAFF, shelter_id=SHELTER_B, user_id="u-staff-b")


@pytest.fixture()
def volunteer_a() -> CallerIdentity:
    return CallerIdentity(role=Role.VOLUNTEER, shelter_id=SHELTER_A, user_id="u-vol-a")


def mint_token(
    role: str, shelter_id: str | None = None, sub: str = "user-1", **claims: object
) -> str:
    """Sign a bearer token the way the authentication service would."""
    payload: dict[str, object] = {"sub": sub, "role": role, **claims}
    if shelter_id is not None:
        payload["shelter_id"] = shelter_id
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    def _headers(role: str, shelter_id: str | None = None, sub: str = "user-1") -> dict[str, str]:
        return {"Authorization": f"Bearer {mint_token(role, shelter_id, sub)}"}

    return _headers


@pytest.fixture()
def app():
    """Create a fresh app instance (with its own in-memory store) for tests."""
    return create_app()


@pytest.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture()
async def async_engine():
    """In-memory SQLite engine with all tables created + two shelters."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSession(engine) as session:
        session.add(Shelter(id=SHELTER_A, name="Shelter A", city="Bologna", country="IT"))
        session.add(Shelter(id=SHELTER_B, name="Shelter B", city="Milano", country="IT"))
        await session.commit()

    yield engine
    await engine.dispose()
