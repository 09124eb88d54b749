"""Shared test fixtures for Top GA Posts."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import DatabaseSettings, GoogleSettings, Settings, SiteSettings
from src.common.database import init_db
from src.top_ga.credentials import CredentialRecord
from src.top_ga.plugin import TopGA

from tests.fakes import NOW, PROPERTY_ID, SITE_URL, FakeClock, FakeSession


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def db_path(tmp_path) -> str:
    """Path to an initialized temporary SQLite database."""
    path = str(tmp_path / "test_top_ga.db")
    init_db(path)
    return path


@pytest.fixture
def config(db_path) -> Settings:
    """Settings pointing at the temp database, without retries."""
    return Settings(
        database=DatabaseSettings(db_path=db_path),
        google=GoogleSettings(max_retries=1),
        site=SiteSettings(site_url=SITE_URL),
    )


@pytest.fixture
def google(config) -> GoogleSettings:
    return config.google


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def app(config, fake_session, clock) -> TopGA:
    """Activated TopGA wired to the fake session and clock."""
    top_ga = TopGA(config, session=fake_session, clock=clock)
    top_ga.activate()
    return top_ga


@pytest.fixture
def connected_record() -> CredentialRecord:
    """A connected record whose token is valid for another hour."""
    return CredentialRecord(
        client_id="client-123.apps.googleusercontent.com",
        client_secret="secret-xyz",
        access_token="ya29.valid-token",
        refresh_token="1//refresh-token",
        expires_at=NOW + 3600,
        email="owner@example.com",
        property_id=PROPERTY_ID,
    )


@pytest.fixture
def connected_app(app, connected_record) -> TopGA:
    app.store.save(connected_record)
    return app
