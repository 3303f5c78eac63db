"""Shared fixtures: a fresh app, store and client for every test."""

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.session import ClinicDatabase
from app.main import create_app


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.ALLOWED_HOSTS = ["testserver"]
    s.RATE_LIMIT_ENABLED = False
    s.SEED_SAMPLE_DATA = False
    s.VERIFY_INVOICE_TOTALS = False
    return s


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db(app) -> ClinicDatabase:
    return app.state.db


@pytest.fixture
def store() -> ClinicDatabase:
    """Bare stores, no web app."""
    return ClinicDatabase()
