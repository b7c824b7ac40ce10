# tests/conftest.py
from __future__ import annotations
import os

# Env must be in place before agency_crm.services.config is imported.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["RATE_LIMIT_DISABLED"] = "1"
os.environ["SEED_DEMO_DATA"] = "1"
os.environ["SIMULATED_LATENCY_MS"] = "0"

from typing import Dict

import pytest
from starlette.testclient import TestClient

from agency_crm.main import app
from agency_crm.services import config
from agency_crm.services.security import clear_rate_limits
from agency_crm.store.db import reset_db
from agency_crm.store.seed import DEMO_PASSWORD

# Seeded accounts (see agency_crm/store/seed.py)
ADMIN_ID, SUB_ADMIN_ID, KARA_ID, ALEX_ID, LAURA_ID, WILLIAM_ID = 1, 2, 3, 4, 6, 7
KARA_EMAIL = "kara.t@newhollandfinancial.com"
ALEX_EMAIL = "alex.r@newhollandfinancial.com"
SUB_ADMIN_EMAIL = "subadmin@newhollandfinancial.com"
LAURA_EMAIL = "laura.r@newhollandfinancial.com"


@pytest.fixture(autouse=True)
def fresh_db(monkeypatch):
    """Every test starts from the seeded demo database in source-behaviour mode."""
    monkeypatch.setattr(config, "STRICT_LEAD_TRANSITIONS", False)
    monkeypatch.setattr(config, "RATE_LIMIT_DISABLED", True)
    reset_db(seed=True)
    clear_rate_limits()
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def anyio_backend():
    return "asyncio"


def auth_headers(client: TestClient, email: str, password: str = DEMO_PASSWORD) -> Dict[str, str]:
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return auth_headers(client, config.ADMIN_EMAIL, config.ADMIN_PASSWORD)


@pytest.fixture
def sub_admin_headers(client):
    return auth_headers(client, SUB_ADMIN_EMAIL)


@pytest.fixture
def kara_headers(client):
    return auth_headers(client, KARA_EMAIL)


@pytest.fixture
def alex_headers(client):
    return auth_headers(client, ALEX_EMAIL)
