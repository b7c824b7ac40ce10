# tests/test_auth_flow.py
# Registration, email verification, login gates and rate limiting.

from __future__ import annotations
from http import HTTPStatus

from agency_crm.services import config
from agency_crm.services.auth_service import create_access_token, decode_token
from agency_crm.store.repository import unit_of_work

from conftest import KARA_EMAIL, KARA_ID, LAURA_EMAIL


def _register(client, email="sam.anders@example.com", role="Agent"):
    return client.post(
        "/api/auth/register",
        json={"name": "Sam Anders", "email": email, "password": "pyramid42", "role": role},
    )


def test_register_creates_unverified_user_and_pending_agent(client):
    r = _register(client)
    assert r.status_code == HTTPStatus.CREATED, r.text
    j = r.json()
    user_id = j["user"]["id"]
    assert j["user"]["is_verified"] is False
    assert j["user"]["title"] == "Agent Applicant"
    assert "password_hash" not in j["user"]
    assert len(j["verification_code"]) == 6

    with unit_of_work() as uow:
        agent = uow.agents.get(user_id)
        assert agent.status == "Pending"
        assert agent.slug == f"sam-anders-{user_id}"
        assert agent.commission_rate == 0.75


def test_register_duplicate_email_is_conflict(client):
    r = _register(client, email=KARA_EMAIL.upper())
    assert r.status_code == HTTPStatus.CONFLICT
    assert r.json()["message"] == "An account with this email already exists."


def test_register_rejects_admin_role(client):
    r = _register(client, role="Admin")
    assert r.status_code == HTTPStatus.BAD_REQUEST


def test_unverified_login_is_forbidden_with_flag(client):
    _register(client)
    r = client.post("/api/auth/login", json={"email": "sam.anders@example.com", "password": "pyramid42"})
    assert r.status_code == HTTPStatus.FORBIDDEN
    assert r.json()["requires_verification"] is True


def test_verify_then_pending_login_is_still_forbidden(client):
    j = _register(client).json()
    bad = client.post("/api/auth/verify", json={"user_id": j["user"]["id"], "code": "WRONG0"})
    assert bad.status_code == HTTPStatus.BAD_REQUEST

    ok = client.post("/api/auth/verify", json={"user_id": j["user"]["id"], "code": j["verification_code"]})
    assert ok.status_code == HTTPStatus.OK
    assert ok.json() == {"success": True}

    r = client.post("/api/auth/login", json={"email": "sam.anders@example.com", "password": "pyramid42"})
    assert r.status_code == HTTPStatus.FORBIDDEN
    assert r.json()["agent_status"] == "Pending"


def test_pending_seeded_agent_cannot_log_in(client):
    r = client.post("/api/auth/login", json={"email": LAURA_EMAIL, "password": "password123"})
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_bad_password_is_unauthorized(client):
    r = client.post("/api/auth/login", json={"email": KARA_EMAIL, "password": "nope"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED
    assert r.json()["error"] == "Unauthorized"


def test_login_returns_token_and_me(client):
    r = client.post("/api/auth/login", json={"email": KARA_EMAIL, "password": "password123"})
    assert r.status_code == HTTPStatus.OK
    j = r.json()
    claims = decode_token(j["token"])
    assert claims["user_id"] == KARA_ID
    assert claims["role"] == "Agent"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {j['token']}"})
    assert me.status_code == HTTPStatus.OK
    assert me.json()["agent_status"] == "Active"


def test_admin_login_with_configured_credentials(client):
    r = client.post("/api/auth/login", json={"email": config.ADMIN_EMAIL, "password": config.ADMIN_PASSWORD})
    assert r.status_code == HTTPStatus.OK
    assert r.json()["user"]["role"] == "Admin"


def test_token_for_deleted_user_is_rejected(client):
    token = create_access_token(999, "Agent")
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED


def test_expired_token_is_rejected(client):
    token = create_access_token(KARA_ID, "Agent", ttl_minutes=-1)
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED


def test_login_rate_limit(client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_DISABLED", False)
    monkeypatch.setattr(config, "RL_LOGIN_USER_MAX", 2)
    for _ in range(2):
        client.post("/api/auth/login", json={"email": KARA_EMAIL, "password": "wrong"})
    r = client.post("/api/auth/login", json={"email": KARA_EMAIL, "password": "password123"})
    assert r.status_code == HTTPStatus.TOO_MANY_REQUESTS


def test_update_my_profile_syncs_agent(client, kara_headers):
    r = client.put("/api/users/me", json={"name": "Kara 'Starbuck' Thrace", "avatar": "https://img/k.png"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.OK
    with unit_of_work() as uow:
        agent = uow.agents.get(KARA_ID)
        assert agent.name == "Kara 'Starbuck' Thrace"
        assert agent.avatar == "https://img/k.png"
