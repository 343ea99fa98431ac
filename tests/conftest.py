"""
Shared fixtures: a temporary SQLite database per test, seeded with the bundled
catalog, and a TestClient bound to a freshly built app.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from storefront.core import config as core_config
from storefront.core.rate_limiter import reset_rate_limits
from storefront.db import session as db_session
from storefront.db.create_tables import create_all, drop_all
from storefront.repositories.catalog_seed import seed_catalog
from storefront.services.auth_service import AuthService


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point the app at a throwaway SQLite file and reset every cache that read the old env."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("SEED_ON_STARTUP", "1")
    for name in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD", "CONTACT_RECIPIENT", "TAX_RATE", "EGP_RATE"):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    db_session.reset_caches()
    reset_rate_limits()

    drop_all()
    create_all()

    yield db_file

    drop_all()
    db_session.reset_caches()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def seeded_db(temp_db):
    seed_catalog()
    return temp_db


@pytest.fixture()
def client(seeded_db):
    from storefront.app import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def staff_client(client):
    AuthService().create_staff("boss", "supersecret1", "admin")
    resp = client.post("/api/auth/login", json={"username": "boss", "password": "supersecret1"})
    assert resp.status_code == 200
    return client
