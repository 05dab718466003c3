"""
tests/conftest.py -- Shared test fixtures for the onboarding service.

This module provides:
  - FakeClock: a settable clock so token expiry can be tested without sleeping
  - settings / store / service: isolated unit-test components
  - api_client: TestClient over the real app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API client because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format shares one in-memory instance across all
connections in the same process. Unit tests that stay on one thread use plain
sqlite:///:memory:.

Environment variables must be set before any api/auth/core import so the
cached Settings singleton sees them.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

# CRITICAL: set before importing the app -- get_settings() is cached.
TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SECRET_KEY", TEST_SECRET)
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.limiter import configure_limits
from api.main import app
from auth.passwords import PasswordHasher
from auth.service import AccountService
from auth.store import AccountStore
from core.config import Settings

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock returning a fixed aware datetime until advanced."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# ---------------------------------------------------------------------------
# Unit-test components
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key=TEST_SECRET, bcrypt_rounds=4, token_expire_seconds=3600)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(store: AccountStore, settings: Settings, hasher: PasswordHasher, clock: FakeClock) -> AccountService:
    return AccountService(store, settings, hasher=hasher, clock=clock)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


@dataclass
class ApiHarness:
    client: TestClient
    store: AccountStore
    clock: FakeClock
    settings: Settings

    def register(self, company: str, email: str, password: str = "correct-horse"):
        return self.client.post(
            "/api/auth/register",
            json={"companyName": company, "adminEmail": email, "password": password},
        )

    def login(self, email: str, password: str = "correct-horse"):
        return self.client.post("/api/auth/login", json={"email": email, "password": password})

    def token_for(self, company: str, email: str, password: str = "correct-horse") -> str:
        assert self.register(company, email, password).status_code == 201
        resp = self.login(email, password)
        assert resp.status_code == 200
        return resp.json()["token"]


def _patch_lifespan(store: AccountStore, service: AccountService, settings: Settings):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and service into app.state so routes see an
    isolated in-memory database and the fake clock. Rate-limit counters are
    reset so each test starts with a full login allowance.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        configure_limits(settings)
        app.state.settings = settings
        app.state.account_store = store
        app.state.account_service = service
        yield

    return test_lifespan


def _build_harness(settings: Settings) -> Generator[ApiHarness, None, None]:
    db_url = f"sqlite:///file:test_onboarding_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    store = AccountStore(db_url)
    clock = FakeClock(datetime.now(timezone.utc))
    service = AccountService(store, settings, hasher=PasswordHasher(rounds=4), clock=clock)

    app.router.lifespan_context = _patch_lifespan(store, service, settings)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(client=client, store=store, clock=clock, settings=settings)

    store.close()


@pytest.fixture
def api_client() -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness over the real app with a fresh database per test."""
    settings = Settings(
        secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        token_expire_seconds=3600,
        login_rate_limit="1000/minute",
    )
    yield from _build_harness(settings)


@pytest.fixture
def limited_api_client() -> Generator[ApiHarness, None, None]:
    """Same as api_client, but login allows only three attempts per minute."""
    settings = Settings(
        secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        token_expire_seconds=3600,
        login_rate_limit="3/minute",
    )
    yield from _build_harness(settings)
