import os

# Settings are read at import time by agency_admin.main
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# FORCE model registration
import agency_admin.models  # noqa

from agency_admin.core.config import Settings
from agency_admin.core.deps import get_clock
from agency_admin.db.base import Base
from agency_admin.main import create_app
from agency_admin.models.enums import AccountRole
from agency_admin.tests.factories import PASSWORD, login, make_account  # noqa: F401


class FakeClock:
    """Callable clock the tests move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        jwt_secret_key="test-secret-key",
        upload_dir=str(tmp_path / "uploads"),
        public_base_url="https://agency.test",
        upload_max_bytes=1024,
    )


@pytest.fixture
def app(settings, clock):
    application = create_app(settings)
    Base.metadata.create_all(application.state.engine)
    application.dependency_overrides[get_clock] = lambda: clock
    try:
        yield application
    finally:
        application.dependency_overrides.clear()
        Base.metadata.drop_all(application.state.engine)
        application.state.engine.dispose()


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def upload_dir(settings):
    return settings.upload_dir


@pytest.fixture
def admin(db):
    return make_account(db, "admin@agency.test", role=AccountRole.ADMIN, handle="boss")


@pytest.fixture
def admin_headers(client, admin):
    return login(client, admin.email)
