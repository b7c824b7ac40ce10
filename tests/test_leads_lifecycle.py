# tests/test_leads_lifecycle.py
# Counter reconciliation for lead assignment, conversion and deletion.

from __future__ import annotations

import pytest

from agency_crm.common.enums import ClientStatus, NotificationType
from agency_crm.services import config, leads
from agency_crm.services.errors import Forbidden, NotFound
from agency_crm.store.repository import unit_of_work

from conftest import ALEX_ID, KARA_ID


def _set_counters(agent_id: int, leads_: int, clients: int) -> None:
    with unit_of_work() as uow:
        uow.agents.update(agent_id, {"leads": leads_, "client_count": clients})


def _agent(agent_id: int):
    with unit_of_work() as uow:
        return uow.agents.get(agent_id)


def _new_lead_notes(agent_id: int) -> int:
    with unit_of_work() as uow:
        return len(uow.notifications.find(user_id=agent_id, type=NotificationType.NEW_LEAD))


def _new_unassigned_lead() -> int:
    with unit_of_work() as uow:
        return leads.create_lead(uow, {"first_name": "Lee", "last_name": "Adama"}).id


def test_scenario_assign_then_convert_moves_rate():
    _set_counters(KARA_ID, 10, 8)
    assert _agent(KARA_ID).conversion_rate == pytest.approx(0.8)

    lead_id = _new_unassigned_lead()
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": KARA_ID})
    agent = _agent(KARA_ID)
    assert agent.leads == 11
    assert agent.conversion_rate == pytest.approx(8 / 11)

    with unit_of_work() as uow:
        leads.convert_to_active(uow, lead_id)
    agent = _agent(KARA_ID)
    assert agent.client_count == 9
    assert agent.leads == 11
    assert agent.conversion_rate == pytest.approx(9 / 11)


def test_create_lead_with_agent_notifies_once():
    before = _new_lead_notes(ALEX_ID)
    leads_before = _agent(ALEX_ID).leads
    with unit_of_work() as uow:
        client = leads.create_lead(uow, {"first_name": "Starbuck", "last_name": "Jr", "agent_id": ALEX_ID})
        assert client.status == ClientStatus.LEAD.value
        assert client.join_date is not None
    assert _agent(ALEX_ID).leads == leads_before + 1
    assert _new_lead_notes(ALEX_ID) == before + 1


def test_unassigned_lead_sends_no_notification():
    with unit_of_work() as uow:
        total = len(uow.notifications.find())
    _new_unassigned_lead()
    with unit_of_work() as uow:
        assert len(uow.notifications.find()) == total


def test_assign_notification_links_to_client():
    lead_id = _new_unassigned_lead()
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": ALEX_ID})
        notes = uow.notifications.find(user_id=ALEX_ID, type=NotificationType.NEW_LEAD)
        assert notes[-1].link == f"client/{lead_id}"
        assert notes[-1].is_read is False


def test_plain_edit_leaves_counters_alone():
    before = _agent(KARA_ID).leads
    with unit_of_work() as uow:
        leads.update_lead(uow, 11, {"phone": "555-9999"})
        assert uow.clients.get(11).phone == "555-9999"
    assert _agent(KARA_ID).leads == before


def test_reassignment_keeps_previous_agent_count_by_default():
    lead_id = _new_unassigned_lead()
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": KARA_ID})
    kara_leads, alex_leads = _agent(KARA_ID).leads, _agent(ALEX_ID).leads
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": ALEX_ID})
    assert _agent(KARA_ID).leads == kara_leads
    assert _agent(ALEX_ID).leads == alex_leads


def test_strict_mode_moves_counter_on_reassignment(monkeypatch):
    monkeypatch.setattr(config, "STRICT_LEAD_TRANSITIONS", True)
    lead_id = _new_unassigned_lead()
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": KARA_ID})
    kara_leads, alex_leads = _agent(KARA_ID).leads, _agent(ALEX_ID).leads
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": ALEX_ID})
    assert _agent(KARA_ID).leads == kara_leads - 1
    assert _agent(ALEX_ID).leads == alex_leads + 1


def test_repeated_conversion_double_counts_by_default():
    before = _agent(KARA_ID).client_count
    with unit_of_work() as uow:
        leads.convert_to_active(uow, 10)
        leads.convert_to_active(uow, 10)
    assert _agent(KARA_ID).client_count == before + 2


def test_strict_mode_ignores_repeated_conversion(monkeypatch):
    monkeypatch.setattr(config, "STRICT_LEAD_TRANSITIONS", True)
    before = _agent(KARA_ID).client_count
    with unit_of_work() as uow:
        leads.convert_to_active(uow, 10)  # already Active
    assert _agent(KARA_ID).client_count == before


def test_delete_lead_decrements_and_floors_at_zero():
    with unit_of_work() as uow:
        lead = leads.create_lead(uow, {"first_name": "Tom", "last_name": "Zarek", "agent_id": ALEX_ID})
        lead_id = lead.id
    _set_counters(ALEX_ID, 0, 0)
    with unit_of_work() as uow:
        assert leads.delete_lead(uow, lead_id) is True
    assert _agent(ALEX_ID).leads == 0


def test_delete_active_client_leaves_counters():
    agent = _agent(KARA_ID)
    before = (agent.leads, agent.client_count)
    with unit_of_work() as uow:
        leads.delete_lead(uow, 10)
    agent = _agent(KARA_ID)
    assert (agent.leads, agent.client_count) == before


def test_update_client_status_change_converts():
    lead_id = _new_unassigned_lead()
    with unit_of_work() as uow:
        leads.update_lead(uow, lead_id, {"agent_id": ALEX_ID})
    before = _agent(ALEX_ID).client_count
    with unit_of_work() as uow:
        client = leads.update_client(uow, lead_id, {"status": ClientStatus.ACTIVE})
        assert client.status == ClientStatus.ACTIVE.value
    assert _agent(ALEX_ID).client_count == before + 1


def test_agent_cannot_touch_other_agents_client():
    actor = {"id": ALEX_ID, "role": "Agent"}
    with pytest.raises(Forbidden):
        with unit_of_work() as uow:
            leads.update_client(uow, 10, {"phone": "000"}, actor=actor)


def test_agent_created_client_is_owned_by_agent():
    actor = {"id": ALEX_ID, "role": "Agent"}
    with unit_of_work() as uow:
        client = leads.create_client(uow, {"first_name": "Anastasia", "last_name": "Dualla", "agent_id": KARA_ID}, actor=actor)
        assert client.agent_id == ALEX_ID


def test_assign_to_unknown_agent_is_not_found():
    lead_id = _new_unassigned_lead()
    with pytest.raises(NotFound):
        with unit_of_work() as uow:
            leads.update_lead(uow, lead_id, {"agent_id": 999})
    with unit_of_work() as uow:
        assert uow.clients.get(lead_id).agent_id is None


def test_profile_lead_creates_system_message():
    with unit_of_work() as uow:
        client = leads.create_from_profile(
            uow, {"first_name": "Helo", "last_name": "Agathon", "email": "helo@example.com", "message": "Call me"}, KARA_ID
        )
        msgs = uow.messages.find(receiver_id=KARA_ID, source="public_profile")
        assert client.agent_id == KARA_ID
        assert len(msgs) == 1
        assert msgs[0].sender_id == 0
        assert "Helo Agathon" in msgs[0].text
        assert "Call me" in msgs[0].text


def test_lead_route_status_change_converts(client, sub_admin_headers):
    r = client.post("/api/leads", json={"first_name": "Anastasia", "last_name": "Dualla", "agent_id": KARA_ID},
                    headers=sub_admin_headers)
    lead_id = r.json()["id"]
    before = _agent(KARA_ID)

    r = client.put(f"/api/leads/{lead_id}", json={"status": "Active"}, headers=sub_admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == ClientStatus.ACTIVE.value

    after = _agent(KARA_ID)
    assert after.client_count == before.client_count + 1
    assert after.leads == before.leads
    assert after.conversion_rate == pytest.approx(after.client_count / after.leads)
