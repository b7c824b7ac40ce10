# tests/test_messaging.py
# Edit window, trash/restore rules, broadcast fan-out and read marking.

from __future__ import annotations
from datetime import timedelta
from http import HTTPStatus

from agency_crm.common.date_rules import utcnow
from agency_crm.store.repository import unit_of_work

from conftest import ADMIN_ID, ALEX_ID, KARA_ID, WILLIAM_ID


def _send(client, headers, receiver_id: int, text: str = "Ping") -> int:
    r = client.post("/api/messages", json={"receiver_id": receiver_id, "text": text}, headers=headers)
    assert r.status_code == HTTPStatus.CREATED, r.text
    return r.json()["id"]


def _age(message_id: int, **delta) -> None:
    with unit_of_work() as uow:
        uow.messages.update(message_id, {"timestamp": utcnow() - timedelta(**delta)})


def test_send_notifies_receiver(client, kara_headers):
    mid = _send(client, kara_headers, ALEX_ID, "Lunch?")
    with unit_of_work() as uow:
        msg = uow.messages.get(mid)
        assert msg.status == "active"
        assert msg.is_read is False
        notes = uow.notifications.find(user_id=ALEX_ID, type="new_message")
        assert len(notes) == 1
        assert notes[0].link == f"messages/{KARA_ID}"


def test_edit_within_window(client, kara_headers):
    mid = _send(client, kara_headers, ALEX_ID)
    r = client.put(f"/api/messages/{mid}", json={"text": "Pong"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["text"] == "Pong"
    assert r.json()["edited"] is True


def test_edit_after_window_is_forbidden(client, kara_headers):
    mid = _send(client, kara_headers, ALEX_ID)
    _age(mid, seconds=121)
    r = client.put(f"/api/messages/{mid}", json={"text": "late"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_edit_by_receiver_is_forbidden(client, kara_headers, alex_headers):
    mid = _send(client, kara_headers, ALEX_ID)
    r = client.put(f"/api/messages/{mid}", json={"text": "mine now"}, headers=alex_headers)
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_sender_trash_within_a_day_is_hard_delete(client, kara_headers):
    mid = _send(client, kara_headers, ALEX_ID)
    r = client.put(f"/api/messages/{mid}/trash", headers=kara_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["deleted"] is True
    with unit_of_work() as uow:
        assert uow.messages.find_by_id(mid) is None


def test_sender_trash_after_a_day_is_recoverable(client, kara_headers):
    mid = _send(client, kara_headers, ALEX_ID)
    _age(mid, hours=25)
    r = client.put(f"/api/messages/{mid}/trash", headers=kara_headers)
    assert r.json()["status"] == "trashed"
    assert r.json()["deleted_by"] == KARA_ID

    r = client.put(f"/api/messages/{mid}/restore", headers=kara_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["status"] == "active"
    assert r.json()["deleted_by"] is None


def test_receiver_trash_is_soft_and_only_they_restore(client, kara_headers, alex_headers, admin_headers):
    mid = _send(client, kara_headers, ALEX_ID)
    r = client.put(f"/api/messages/{mid}/trash", headers=alex_headers)
    assert r.json()["status"] == "trashed"

    assert client.put(f"/api/messages/{mid}/restore", headers=kara_headers).status_code == HTTPStatus.FORBIDDEN
    assert client.put(f"/api/messages/{mid}/restore", headers=admin_headers).status_code == HTTPStatus.OK


def test_outsider_cannot_trash(client, kara_headers, alex_headers):
    r = client.put("/api/messages/40/trash", headers=alex_headers)  # admin -> Kara
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_permanent_delete_is_admin_only(client, kara_headers, admin_headers):
    assert client.delete("/api/messages/41", headers=kara_headers).status_code == HTTPStatus.FORBIDDEN
    r = client.delete("/api/messages/41", headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json() == {"success": True}


def test_broadcast_reaches_each_active_agent(client, admin_headers):
    # leave exactly three active agents/lead managers besides the admin
    client.post(f"/api/agents/{WILLIAM_ID}/deactivate", headers=admin_headers)
    with unit_of_work() as uow:
        msgs_before = len(uow.messages.find(sender_id=ADMIN_ID))
        notes_before = len(uow.notifications.find(type="broadcast"))

    r = client.post("/api/messages/broadcast", json={"text": "Team meeting at 3pm"}, headers=admin_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["count"] == 3

    with unit_of_work() as uow:
        assert len(uow.messages.find(sender_id=ADMIN_ID)) == msgs_before + 3
        assert len(uow.notifications.find(type="broadcast")) == notes_before + 3


def test_broadcast_requires_admin(client, kara_headers):
    r = client.post("/api/messages/broadcast", json={"text": "hi"}, headers=kara_headers)
    assert r.status_code == HTTPStatus.FORBIDDEN


def test_mark_conversation_as_read(client, kara_headers, alex_headers):
    _send(client, kara_headers, ALEX_ID, "one")
    _send(client, kara_headers, ALEX_ID, "two")
    r = client.put("/api/messages/mark-as-read", json={"sender_id": KARA_ID}, headers=alex_headers)
    assert r.status_code == HTTPStatus.OK
    assert r.json()["count"] == 2
    with unit_of_work() as uow:
        assert uow.messages.find(sender_id=KARA_ID, receiver_id=ALEX_ID, is_read=False) == []


def test_list_only_shows_own_conversations(client, alex_headers, admin_headers):
    assert client.get("/api/messages", headers=alex_headers).json() == []
    assert len(client.get("/api/messages", headers=admin_headers).json()) == 2
