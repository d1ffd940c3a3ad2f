"""Shared fixtures: a throwaway SQLite database, an API client and factories."""

import os
import tempfile
from datetime import datetime

# Must be set before link_server reads its configuration
_tmp = tempfile.mkdtemp(prefix="link_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp}/test.db"
os.environ["MEDIA_ROOT"] = os.path.join(_tmp, "media")
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from link_server.database import Base, SessionLocal, engine  # noqa: E402
from link_server.main import app  # noqa: E402
from link_server.models import Trip, User  # noqa: E402
from link_server.ratelimit import limiter  # noqa: E402
from link_server.security import create_session_token, hash_password  # noqa: E402

limiter.enabled = False


@pytest.fixture(autouse=True)
def _reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(email: str | None = None, name: str = "Tester", password: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            name=name,
            hashed_password=hash_password(password) if password else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_trip(db):
    def _make(user: User, title: str = "Trip", is_bookmarked: bool = False, **fields) -> Trip:
        trip = Trip(
            user_id=user.id,
            title=title,
            destination=fields.pop("destination", "Jeju"),
            start_date=fields.pop("start_date", datetime(2024, 11, 1)),
            end_date=fields.pop("end_date", datetime(2024, 11, 4)),
            is_bookmarked=is_bookmarked,
            **fields,
        )
        db.add(trip)
        db.commit()
        db.refresh(trip)
        return trip

    return _make


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_session_token(user.id, user.email)}"}


@pytest.fixture
def headers_for():
    return auth_headers
