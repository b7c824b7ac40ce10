# agency_crm/services/data.py
from __future__ import annotations

from typing import Any, Dict, List

from agency_crm.common.enums import UserRole
from agency_crm.services.renewals import scan_expiring_policies
from agency_crm.store.repository import UnitOfWork


def _dump(rows: List[Any]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in rows]


def load_all_data(uow: UnitOfWork, actor: Dict[str, Any]) -> Dict[str, Any]:
    """
    Everything the dashboard needs in one payload, scoped to the caller.

    The renewal scan runs first so reminders created by this call are part
    of the returned notifications. Agents see only their own clients and the
    records hanging off them; every caller sees only their own notifications,
    and only their own conversations unless they are Admin.
    """
    scan_expiring_policies(uow)
    uid = actor["id"]
    role = actor.get("role")

    users = [u.to_public() for u in uow.users.find()]
    agents = _dump(uow.agents.find())
    clients = uow.clients.find()
    policies = uow.policies.find()
    interactions = uow.resource("interactions").find()
    tasks = uow.resource("tasks").find()
    licenses = uow.resource("licenses").find()
    testimonials = uow.resource("testimonials").find()
    calendar_notes = uow.resource("calendar_notes").find(user_id=uid)
    notifications = uow.notifications.find(user_id=uid)
    messages = uow.messages.find()

    if role == UserRole.AGENT.value:
        clients = [c for c in clients if c.agent_id == uid]
        client_ids = {c.id for c in clients}
        policies = [p for p in policies if p.client_id in client_ids]
        interactions = [i for i in interactions if i.client_id in client_ids]
        tasks = [t for t in tasks if t.agent_id == uid or (t.client_id and t.client_id in client_ids)]
        licenses = [l for l in licenses if l.agent_id == uid]
        testimonials = [t for t in testimonials if t.agent_id == uid]

    if role != UserRole.ADMIN.value:
        messages = [m for m in messages if uid in (m.sender_id, m.receiver_id)]

    notifications.sort(key=lambda n: (n.timestamp is None, n.timestamp), reverse=True)
    return {
        "users": users,
        "agents": agents,
        "clients": _dump(clients),
        "policies": _dump(policies),
        "interactions": _dump(interactions),
        "tasks": _dump(tasks),
        "messages": _dump(messages),
        "licenses": _dump(licenses),
        "notifications": _dump(notifications),
        "calendar_notes": _dump(calendar_notes),
        "testimonials": _dump(testimonials),
    }
