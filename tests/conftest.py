"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# JWT_SECRET is validated when levelup.api.deps is imported, so it must be
# in the environment before any test module pulls in the API.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from levelup.config import LevelUpConfig  # noqa: E402
from levelup.database.engine import (  # noqa: E402
    enable_sqlite_savepoints,
    get_session,
    init_db,
)
from levelup.database.models import User  # noqa: E402

TEST_WEBHOOK_SECRET = "whsec-test-" + "y" * 24


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with every LevelUp table and the seeded catalog.

    StaticPool keeps one shared connection so route handlers running on
    ``asyncio.to_thread`` see the same database as the test.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    init_db(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


def make_user(session: Session, whop_user_id: str = "user_1", **fields) -> User:
    """Insert a bare user (no First Steps unlock) and flush."""
    values = {"username": f"member-{whop_user_id}", "level": 1, "xp": 0,
              "total_points": 0, "streak": 0}
    values.update(fields)
    user = User(whop_user_id=whop_user_id, **values)
    session.add(user)
    session.flush()
    return user


def create_user(engine: Engine, whop_user_id: str = "user_1", **fields) -> int:
    """Commit a user in its own session and return its id."""
    with get_session(engine) as session:
        return make_user(session, whop_user_id, **fields).id


def make_token(user_id: int, whop_user_id: str = "user_1") -> str:
    from levelup.api.deps import create_access_token

    return create_access_token(user_id, whop_user_id)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app_config() -> LevelUpConfig:
    return LevelUpConfig(app_name="LevelUp Test")


@pytest.fixture
def client(db_engine: Engine, app_config: LevelUpConfig):
    """FastAPI TestClient bound to the in-memory database.

    The lifespan hook is not entered, so no DATABASE_URL is needed.
    """
    from fastapi.testclient import TestClient

    from levelup.api.deps import get_config, get_engine
    from levelup.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: app_config
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
