# agency_crm/services/leads.py
"""
Lead lifecycle: creation, assignment, conversion and deletion of Client rows
with status=Lead, keeping the owning agent's counters in step.

Counter rules
-------------
- assigning an unassigned lead (agent_id empty -> set): agent.leads += 1 and
  one notification to the agent
- converting Lead -> Active with an agent: agent.client_count += 1
- deleting a still-Lead client with an agent: agent.leads -= 1 (floored at 0)

``config.STRICT_LEAD_TRANSITIONS`` additionally moves the lead counter on
reassignment and turns a repeated conversion into a no-op.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from agency_crm.common.date_rules import today, utcnow
from agency_crm.common.enums import (
    ClientStatus,
    MessageSource,
    MessageStatus,
    NotificationType,
    SYSTEM_SENDER_ID,
    UserRole,
)
from agency_crm.models import Agent, Client
from agency_crm.services import config
from agency_crm.services.errors import BadRequest, Forbidden
from agency_crm.services.notifications import notify
from agency_crm.store.repository import UnitOfWork

logger = logging.getLogger(__name__)


def _status(value: Any) -> str:
    return value.value if isinstance(value, ClientStatus) else str(value or "")


def _agent_for(uow: UnitOfWork, agent_id: Optional[int]) -> Agent:
    if not agent_id:
        raise BadRequest("agent_id is required.")
    return uow.agents.get(agent_id)


def _bump_leads(uow: UnitOfWork, agent: Agent, delta: int) -> None:
    uow.agents.update(agent, {"leads": max(0, int(agent.leads or 0) + delta)})


def _notify_new_lead(uow: UnitOfWork, agent: Agent, client: Client) -> None:
    notify(
        uow,
        agent.id,
        f"You have a new lead: {client.first_name} {client.last_name}.",
        link=f"client/{client.id}",
        type_=NotificationType.NEW_LEAD,
    )


def _assign(uow: UnitOfWork, client: Client, agent: Agent) -> None:
    _bump_leads(uow, agent, +1)
    _notify_new_lead(uow, agent, client)
    logger.info("lead %s assigned to agent %s (leads=%s)", client.id, agent.id, agent.leads)


def check_client_access(actor: Dict[str, Any], client: Client) -> None:
    """Agents only reach their own clients; Admin and Sub-Admin reach all."""
    if actor.get("role") == UserRole.AGENT.value and client.agent_id != actor["id"]:
        raise Forbidden("You can only manage your own clients.")


def create_lead(uow: UnitOfWork, data: Dict[str, Any]) -> Client:
    values = dict(data)
    values["status"] = ClientStatus.LEAD
    values["join_date"] = today()
    agent = _agent_for(uow, values["agent_id"]) if values.get("agent_id") else None
    client = uow.clients.create(values)
    if agent is not None:
        _assign(uow, client, agent)
    return client


def create_client(uow: UnitOfWork, data: Dict[str, Any], actor: Optional[Dict[str, Any]] = None) -> Client:
    """Generic client creation. Leads go through ``create_lead``; agents always own what they create."""
    values = dict(data)
    if actor and actor.get("role") == UserRole.AGENT.value:
        values["agent_id"] = actor["id"]
    if _status(values.get("status") or ClientStatus.LEAD) == ClientStatus.LEAD.value:
        return create_lead(uow, values)
    if values.get("agent_id"):
        _agent_for(uow, values["agent_id"])
    values.setdefault("join_date", today())
    return uow.clients.create(values)


def update_lead(uow: UnitOfWork, client_id: int, changes: Dict[str, Any]) -> Client:
    client = uow.clients.get(client_id)
    old_agent_id = client.agent_id
    values = dict(changes)

    if "agent_id" not in values:
        return uow.clients.update(client, values)

    new_agent_id = values.get("agent_id") or None
    values["agent_id"] = new_agent_id
    if not old_agent_id and new_agent_id:
        agent = _agent_for(uow, new_agent_id)
        uow.clients.update(client, values)
        _assign(uow, client, agent)
        return client

    strict_move = (
        config.STRICT_LEAD_TRANSITIONS
        and old_agent_id
        and new_agent_id
        and old_agent_id != new_agent_id
        and client.status == ClientStatus.LEAD.value
    )
    if strict_move:
        new_agent = _agent_for(uow, new_agent_id)
        old_agent = uow.agents.find_by_id(old_agent_id)
        uow.clients.update(client, values)
        if old_agent is not None:
            _bump_leads(uow, old_agent, -1)
        _assign(uow, client, new_agent)
        return client

    # default: moving an assigned lead leaves both lead counters as they are
    if new_agent_id:
        _agent_for(uow, new_agent_id)
    return uow.clients.update(client, values)


def convert_to_active(uow: UnitOfWork, client_id: int) -> Client:
    client = uow.clients.get(client_id)
    if config.STRICT_LEAD_TRANSITIONS and client.status == ClientStatus.ACTIVE.value:
        return client
    uow.clients.update(client, {"status": ClientStatus.ACTIVE})
    if client.agent_id:
        agent = uow.agents.find_by_id(client.agent_id)
        if agent is not None:
            uow.agents.update(agent, {"client_count": int(agent.client_count or 0) + 1})
            logger.info("client %s converted for agent %s (clients=%s)", client.id, agent.id, agent.client_count)
    return client


def update_client(uow: UnitOfWork, client_id: int, changes: Dict[str, Any], actor: Optional[Dict[str, Any]] = None) -> Client:
    """
    Generic client edit: field merge with assignment semantics, plus
    conversion when the status moves from Lead to Active.
    """
    client = uow.clients.get(client_id)
    values = dict(changes)
    if actor is not None:
        check_client_access(actor, client)
        if actor.get("role") == UserRole.AGENT.value:
            values.pop("agent_id", None)

    old_status = client.status
    new_status = _status(values.pop("status", None)) or None

    update_lead(uow, client_id, values)
    if new_status and new_status != old_status:
        if new_status == ClientStatus.ACTIVE.value and old_status == ClientStatus.LEAD.value:
            convert_to_active(uow, client_id)
        else:
            uow.clients.update(client, {"status": new_status})
    return client


def delete_lead(uow: UnitOfWork, client_id: int, actor: Optional[Dict[str, Any]] = None) -> bool:
    client = uow.clients.get(client_id)
    if actor is not None:
        check_client_access(actor, client)
    if client.status == ClientStatus.LEAD.value and client.agent_id:
        agent = uow.agents.find_by_id(client.agent_id)
        if agent is not None:
            _bump_leads(uow, agent, -1)
    return uow.clients.delete(client)


def create_from_profile(uow: UnitOfWork, lead_data: Dict[str, Any], agent_id: int) -> Client:
    """Lead captured on an agent's public profile page."""
    note = str(lead_data.get("message") or "").strip()
    client = create_lead(uow, {**lead_data, "agent_id": agent_id})
    uow.messages.create({
        "sender_id": SYSTEM_SENDER_ID,
        "receiver_id": agent_id,
        "text": (
            "New lead from your profile page:\n\n"
            f"Name: {client.first_name} {client.last_name}\n"
            f"Email: {client.email or ''}\n"
            f"Phone: {client.phone or ''}\n\n"
            f"Message:\n{note}"
        ),
        "timestamp": utcnow(),
        "status": MessageStatus.ACTIVE,
        "source": MessageSource.PUBLIC_PROFILE,
        "is_read": False,
    })
    return client
