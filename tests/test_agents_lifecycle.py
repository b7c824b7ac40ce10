# tests/test_agents_lifecycle.py
# Approve / deactivate / reactivate / reject / delete through the HTTP API.

from __future__ import annotations
from http import HTTPStatus

from agency_crm.services import config
from agency_crm.store.repository import unit_of_work

from conftest import ALEX_ID, KARA_EMAIL, KARA_ID, LAURA_EMAIL, LAURA_ID, auth_headers


def _clients_of(agent_id: int) -> int:
    with unit_of_work() as uow:
        return len(uow.clients.find(agent_id=agent_id))


def _user(user_id: int):
    with unit_of_work() as uow:
        return uow.users.find_by_id(user_id)


def test_approve_pending_agent(client, admin_headers):
    r = client.post(f"/api/agents/{LAURA_ID}/approve", json={"role": "Sub-Admin"}, headers=admin_headers)
    assert r.status_code == HTTPStatus.OK, r.text
    j = r.json()
    assert j["agent"]["status"] == "Active"
    assert j["agent"]["join_date"]
    assert j["user"]["role"] == "Sub-Admin"
    assert j["user"]["title"] == "Lead Manager"

    with unit_of_work() as uow:
        notes = uow.notifications.find(user_id=LAURA_ID, type="agent_approved")
        assert len(notes) == 1
        assert notes[0].link == "dashboard"

    # the approved applicant can now log in
    assert "Authorization" in auth_headers(client, LAURA_EMAIL)


def test_approve_rejects_admin_role(client, admin_headers):
    r = client.post(f"/api/agents/{LAURA_ID}/approve", json={"role": "Admin"}, headers=admin_headers)
    assert r.status_code == HTTPStatus.BAD_REQUEST


def test_approve_requires_admin(client, sub_admin_headers):
    r = client.post(f"/api/agents/{LAURA_ID}/approve", json={}, headers=sub_admin_headers)
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_approve_unknown_agent_is_404(client, admin_headers):
    r = client.post("/api/agents/999/approve", json={}, headers=admin_headers)
    assert r.status_code == HTTPStatus.NOT_FOUND
    assert r.json()["error"] == "NotFound"


def test_deactivate_removes_login_and_unassigns(client, admin_headers):
    assert _clients_of(KARA_ID) > 0
    r = client.post(f"/api/agents/{KARA_ID}/deactivate", headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["status"] == "Inactive"
    assert _user(KARA_ID) is None
    assert _clients_of(KARA_ID) == 0

    r = client.post("/api/auth/login", json={"email": KARA_EMAIL, "password": "password123"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED


def test_reactivate_recreates_login(client, admin_headers):
    client.post(f"/api/agents/{KARA_ID}/deactivate", headers=admin_headers)
    r = client.post(f"/api/agents/{KARA_ID}/reactivate", headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["status"] == "Active"

    user = _user(KARA_ID)
    assert user is not None
    assert user.role == "Agent"
    assert user.is_verified is True
    assert "Authorization" in auth_headers(client, KARA_EMAIL, config.DEFAULT_AGENT_PASSWORD)


def test_reject_only_from_pending(client, admin_headers):
    r = client.post(f"/api/agents/{KARA_ID}/reject", headers=admin_headers)
    assert r.status_code == HTTPStatus.CONFLICT

    r = client.post(f"/api/agents/{LAURA_ID}/reject", headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["status"] == "Inactive"
    assert _user(LAURA_ID) is None


def test_delete_agent_removes_both_records(client, admin_headers):
    r = client.delete(f"/api/agents/{ALEX_ID}", headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["unassigned_clients"] == 1
    with unit_of_work() as uow:
        assert uow.agents.find_by_id(ALEX_ID) is None
        assert uow.users.find_by_id(ALEX_ID) is None
    assert _clients_of(ALEX_ID) == 0


def test_status_endpoint_dispatches_transitions(client, admin_headers):
    r = client.put(f"/api/agents/{LAURA_ID}/status", json={"status": "Active"}, headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["status"] == "Active"

    r = client.put(f"/api/agents/{LAURA_ID}/status", json={"status": "Inactive"}, headers=admin_headers)
    assert r.json()["status"] == "Inactive"
    assert _user(LAURA_ID) is None

    r = client.put(f"/api/agents/{LAURA_ID}/status", json={"status": "Pending"}, headers=admin_headers)
    assert r.status_code == HTTPStatus.BAD_REQUEST


def test_agent_profile_self_edit_cannot_touch_counters(client, kara_headers):
    r = client.put(
        f"/api/agents/{KARA_ID}",
        json={"bio": "Updated bio", "commission_rate": 1.0},
        headers=kara_headers,
    )
    assert r.status_code == HTTPStatus.OK
    j = r.json()
    assert j["bio"] == "Updated bio"
    assert j["commission_rate"] == 0.80

    r = client.put(f"/api/agents/{ALEX_ID}", json={"bio": "x"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_conversion_rate_tracks_counters(client, admin_headers):
    r = client.get("/api/agents", headers=admin_headers)
    for agent in r.json():
        expected = agent["client_count"] / agent["leads"] if agent["leads"] else 0
        assert abs(agent["conversion_rate"] - expected) < 1e-9


def test_public_profile_by_slug(client):
    r = client.get("/api/agents/by-slug/kara-thrace")
    assert r.status_code == HTTPStatus.OK
    j = r.json()
    assert j["name"] == "Kara Thrace"
    assert "commission_rate" not in j
    assert len(j["testimonials"]) == 1

    assert client.get("/api/agents/by-slug/laura-roslin").status_code == HTTPStatus.NOT_FOUND


def test_reactivate_when_email_was_taken_is_conflict(client, admin_headers):
    client.post(f"/api/agents/{ALEX_ID}/deactivate", headers=admin_headers)
    r = client.post(
        "/api/auth/register",
        json={"name": "Alex Newcomer", "email": "alex.r@newhollandfinancial.com", "password": "pyramid42"},
    )
    assert r.status_code == HTTPStatus.CREATED

    r = client.post(f"/api/agents/{ALEX_ID}/reactivate", headers=admin_headers)
    assert r.status_code == HTTPStatus.CONFLICT
    assert r.json()["message"] == "An account with this email already exists."
    with unit_of_work() as uow:
        assert uow.agents.get(ALEX_ID).status == "Inactive"


def test_agent_email_change_syncs_login(client, kara_headers):
    r = client.put(f"/api/agents/{KARA_ID}", json={"email": "starbuck@newhollandfinancial.com"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.OK
    assert _user(KARA_ID).email == "starbuck@newhollandfinancial.com"
    assert "Authorization" in auth_headers(client, "starbuck@newhollandfinancial.com")

    r = client.put(f"/api/agents/{KARA_ID}", json={"email": "ALEX.R@newhollandfinancial.com"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.CONFLICT
