# tests/test_data_and_renewals.py
# Role-scoped data load and the renewal reminder scan that runs inside it.

from __future__ import annotations
from datetime import timedelta
from http import HTTPStatus

from agency_crm.common.date_rules import today
from agency_crm.services.renewals import scan_expiring_policies
from agency_crm.store.repository import unit_of_work

from conftest import ADMIN_ID, KARA_ID


def _renewals(user_id: int):
    with unit_of_work() as uow:
        return uow.notifications.find(user_id=user_id, type="policy_renewal")


def test_scan_creates_one_reminder_per_expiring_policy():
    with unit_of_work() as uow:
        created = scan_expiring_policies(uow)
    assert len(created) == 1
    notes = _renewals(KARA_ID)
    assert len(notes) == 1
    note = notes[0]
    assert note.policy_id == 20
    assert note.link == "client/10"
    expected_end = (today() + timedelta(days=25)).isoformat()
    assert note.message == f"Policy #AUT-12345 for John Doe is expiring on {expected_end}."


def test_scan_is_idempotent():
    for _ in range(3):
        with unit_of_work() as uow:
            scan_expiring_policies(uow)
    assert len(_renewals(KARA_ID)) == 1


def test_scan_window_bounds_are_inclusive():
    with unit_of_work() as uow:
        uow.policies.update(21, {"end_date": today() + timedelta(days=30)})
        uow.policies.update(22, {"end_date": today() - timedelta(days=1)})
        created = scan_expiring_policies(uow)
        assert sorted(n.policy_id for n in created) == [20, 21]


def test_scan_skips_inactive_and_unassigned():
    with unit_of_work() as uow:
        uow.policies.update(20, {"status": "Cancelled"})
        uow.policies.update(22, {"end_date": today() + timedelta(days=3)})
        uow.clients.update(12, {"agent_id": None})
        assert scan_expiring_policies(uow) == []


def test_data_load_runs_scan_and_includes_reminder(client, kara_headers):
    r = client.get("/api/data", headers=kara_headers)
    assert r.status_code == HTTPStatus.OK
    j = r.json()
    assert [n["type"] for n in j["notifications"]].count("policy_renewal") == 1

    client.get("/api/data", headers=kara_headers)
    assert len(_renewals(KARA_ID)) == 1


def test_agent_data_is_scoped(client, kara_headers):
    j = client.get("/api/data", headers=kara_headers).json()
    assert {c["id"] for c in j["clients"]} == {10}
    assert {p["client_id"] for p in j["policies"]} == {10}
    assert all(i["client_id"] == 10 for i in j["interactions"])
    assert {t["id"] for t in j["tasks"]} == {31}
    assert all(l["agent_id"] == KARA_ID for l in j["licenses"])
    assert all(KARA_ID in (m["sender_id"], m["receiver_id"]) for m in j["messages"])
    assert all(n["user_id"] == KARA_ID for n in j["notifications"])
    assert j["calendar_notes"] == []


def test_admin_sees_everything_but_own_notifications(client, admin_headers):
    client.get("/api/data", headers=admin_headers)
    j = client.get("/api/data", headers=admin_headers).json()
    assert len(j["clients"]) == 4
    assert len(j["policies"]) == 3
    assert all(n["user_id"] == ADMIN_ID for n in j["notifications"])


def test_passwords_never_leave_the_server(client, admin_headers):
    j = client.get("/api/data", headers=admin_headers).json()
    for user in j["users"]:
        assert "password_hash" not in user
        assert "verification_code" not in user


def test_data_requires_token(client):
    r = client.get("/api/data")
    assert r.status_code == HTTPStatus.UNAUTHORIZED
    r = client.get("/api/data", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED
