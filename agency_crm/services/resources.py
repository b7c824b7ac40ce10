# agency_crm/services/resources.py
"""
Generic CRUD for the secondary tables (policies, interactions, tasks,
licenses, calendar notes, testimonials).

Admins and lead managers reach every row except calendar notes, which are
always private to their owner. Agents reach rows tied to their own clients or
their own agent id; ownership columns are forced to the caller on create.
"""
from __future__ import annotations

from typing import Any, Dict, List

from agency_crm.common.date_rules import today
from agency_crm.common.enums import TestimonialStatus, UserRole
from agency_crm.services.errors import BadRequest, Forbidden, NotFound
from agency_crm.store.repository import UnitOfWork

Actor = Dict[str, Any]

# resource -> how ownership is decided for agents
CLIENT_SCOPED = {"policies", "interactions"}
AGENT_SCOPED = {"licenses", "testimonials"}
USER_SCOPED = {"calendar_notes"}
MIXED_SCOPED = {"tasks"}
MANAGED_RESOURCES = tuple(sorted(CLIENT_SCOPED | AGENT_SCOPED | USER_SCOPED | MIXED_SCOPED))


def _is_agent(actor: Actor) -> bool:
    return actor.get("role") == UserRole.AGENT.value


def _own_client_ids(uow: UnitOfWork, actor: Actor) -> set:
    return {c.id for c in uow.clients.find(agent_id=actor["id"])}


def _owns(uow: UnitOfWork, actor: Actor, name: str, row: Any) -> bool:
    if name in USER_SCOPED:
        return row.user_id == actor["id"]
    if not _is_agent(actor):
        return True
    if name in AGENT_SCOPED:
        return row.agent_id == actor["id"]
    if name in CLIENT_SCOPED:
        return row.client_id in _own_client_ids(uow, actor)
    return row.agent_id == actor["id"] or (bool(row.client_id) and row.client_id in _own_client_ids(uow, actor))


def _check_name(name: str) -> None:
    if name not in MANAGED_RESOURCES:
        raise NotFound(f"Unknown resource '{name}'.")


def _stamp_owner(uow: UnitOfWork, actor: Actor, name: str, values: Dict[str, Any]) -> None:
    if name in USER_SCOPED:
        values["user_id"] = actor["id"]
    elif name in AGENT_SCOPED:
        if _is_agent(actor):
            values["agent_id"] = actor["id"]
        elif not values.get("agent_id"):
            raise BadRequest("agent_id is required.")
    elif name in MIXED_SCOPED and _is_agent(actor):
        values["agent_id"] = actor["id"]
        if values.get("client_id") and values["client_id"] not in _own_client_ids(uow, actor):
            raise Forbidden("You can only manage your own clients.")
    elif name in CLIENT_SCOPED:
        client = uow.clients.find_by_id(values.get("client_id") or 0)
        if client is None:
            raise BadRequest("client_id must reference an existing client.")
        if _is_agent(actor) and client.agent_id != actor["id"]:
            raise Forbidden("You can only manage your own clients.")


def list_rows(uow: UnitOfWork, actor: Actor, name: str) -> List[Dict[str, Any]]:
    _check_name(name)
    return [r.to_dict() for r in uow.resource(name).find() if _owns(uow, actor, name, r)]


def get_row(uow: UnitOfWork, actor: Actor, name: str, record_id: int) -> Any:
    _check_name(name)
    row = uow.resource(name).get(record_id)
    if not _owns(uow, actor, name, row):
        raise Forbidden("You do not have access to this record.")
    return row


def create_row(uow: UnitOfWork, actor: Actor, name: str, data: Dict[str, Any]) -> Any:
    _check_name(name)
    values = dict(data)
    _stamp_owner(uow, actor, name, values)
    if name == "testimonials":
        values["status"] = TestimonialStatus.PENDING
        values["submission_date"] = today()
    return uow.resource(name).create(values)


def update_row(uow: UnitOfWork, actor: Actor, name: str, record_id: int, data: Dict[str, Any]) -> Any:
    row = get_row(uow, actor, name, record_id)
    values = dict(data)
    # ownership never moves through a generic edit; managers may reassign tasks
    values.pop("user_id", None)
    if name != "tasks" or _is_agent(actor):
        values.pop("agent_id", None)
    if name in CLIENT_SCOPED and "client_id" in values:
        _stamp_owner(uow, actor, name, {"client_id": values["client_id"]})
    if name == "tasks" and _is_agent(actor) and values.get("client_id"):
        if values["client_id"] not in _own_client_ids(uow, actor):
            raise Forbidden("You can only manage your own clients.")
    if name == "testimonials" and _is_agent(actor):
        values.pop("status", None)
    return uow.resource(name).update(row, values)


def delete_row(uow: UnitOfWork, actor: Actor, name: str, record_id: int) -> bool:
    row = get_row(uow, actor, name, record_id)
    return uow.resource(name).delete(row)
