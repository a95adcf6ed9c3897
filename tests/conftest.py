import os
import tempfile
from datetime import datetime, timedelta, timezone

# Must be set before research_partner is imported: settings are read at import time
_LOG_DIR = tempfile.mkdtemp(prefix="research_partner_logs_")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = os.path.join(_LOG_DIR, "logs.txt")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_DEFAULT"] = "5/minute"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-auth-suite"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from research_partner.core.config import settings
from research_partner.core.dependencies import get_clock, get_db, get_notification_sender
from research_partner.db.base import Base
from research_partner.main import app


class CapturingSender:
    """Notification sender stub that records every code handed to it"""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.raise_error = False

    def send(self, email, code, purpose):
        if self.raise_error:
            raise ConnectionError("smtp down")
        self.sent.append((email, code, purpose))
        return not self.fail

    @property
    def last_code(self):
        return self.sent[-1][1]

    @property
    def last_purpose(self):
        return self.sent[-1][2]


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sender():
    return CapturingSender()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def now(clock):
    return clock.now


@pytest.fixture
def client(session_factory, sender, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sender] = lambda: sender
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api():
    return f"{settings.API_V1_STR}/auth"


@pytest.fixture
def otp_codes(monkeypatch):
    """Make issued codes predictable: 123456, then 654321, 246810, ..."""
    from research_partner.services import auth_service

    codes = iter(["123456", "654321", "246810", "135790", "112233", "445566", "778899"])
    monkeypatch.setattr(auth_service, "generate_otp", lambda: next(codes))
    return codes
