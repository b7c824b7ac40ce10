# agency_crm/services/agents.py
"""
Agent lifecycle state machine.

    Pending --approve--> Active <--deactivate/reactivate--> Inactive
    Pending --reject---> Inactive
    any     --delete---> (removed)

An Inactive agent has no User row, so it cannot log in; every client it owned
is unassigned on deactivation or deletion.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from agency_crm.common.date_rules import today
from agency_crm.common.enums import AgentStatus, NotificationType, UserRole
from agency_crm.models import Agent
from agency_crm.services import config
from agency_crm.services.auth_service import hash_password
from agency_crm.services.errors import BadRequest, Conflict, Forbidden
from agency_crm.services.notifications import notify
from agency_crm.store.repository import UnitOfWork

logger = logging.getLogger(__name__)

APPROVED_MESSAGE = "Congratulations! Your application has been approved. Welcome to New Holland Financial."

# Fields an agent may edit on its own profile; admins may also set these.
SELF_EDITABLE = {"name", "slug", "location", "phone", "languages", "bio", "calendar_link", "avatar", "socials", "email"}
ADMIN_EDITABLE = SELF_EDITABLE | {"commission_rate"}


def title_for(role: str) -> str:
    return "Lead Manager" if role == UserRole.SUB_ADMIN.value else "Insurance Agent"


def approve(uow: UnitOfWork, agent_id: int, role: UserRole = UserRole.AGENT) -> Dict[str, Any]:
    role_value = role.value if isinstance(role, UserRole) else str(role)
    if role_value not in (UserRole.AGENT.value, UserRole.SUB_ADMIN.value):
        raise BadRequest("Approved agents must be given the Agent or Sub-Admin role.")
    agent = uow.agents.get(agent_id)
    user = uow.users.get(agent_id)
    uow.agents.update(agent, {"status": AgentStatus.ACTIVE, "join_date": today()})
    uow.users.update(user, {"role": role_value, "title": title_for(role_value)})
    notify(uow, agent_id, APPROVED_MESSAGE, link="dashboard", type_=NotificationType.AGENT_APPROVED)
    logger.info("agent %s approved as %s", agent_id, role_value)
    return {"agent": agent.to_dict(), "user": user.to_public()}


def _check_email_free(uow: UnitOfWork, email: str, agent_id: int) -> None:
    # a deactivated agent's email is free for registration while it has no login
    other = uow.users.find_by_email(email)
    if other is not None and other.id != agent_id:
        raise Conflict("An account with this email already exists.")


def _drop_login_and_clients(uow: UnitOfWork, agent: Agent) -> int:
    user = uow.users.find_by_id(agent.id)
    if user is not None:
        uow.users.delete(user)
    return uow.agents.unassign_clients(agent.id)


def deactivate(uow: UnitOfWork, agent_id: int) -> Agent:
    agent = uow.agents.get(agent_id)
    uow.agents.update(agent, {"status": AgentStatus.INACTIVE})
    released = _drop_login_and_clients(uow, agent)
    logger.info("agent %s deactivated; %s client(s) unassigned", agent_id, released)
    return agent


def reactivate(uow: UnitOfWork, agent_id: int) -> Agent:
    agent = uow.agents.get(agent_id)
    user = uow.users.find_by_id(agent_id)
    if user is None:
        _check_email_free(uow, agent.email, agent_id)
    uow.agents.update(agent, {"status": AgentStatus.ACTIVE})
    if user is None:
        # Simulation: the recreated login uses the configured default password.
        uow.users.create({
            "name": agent.name,
            "email": agent.email,
            "password_hash": hash_password(config.DEFAULT_AGENT_PASSWORD),
            "role": UserRole.AGENT,
            "avatar": agent.avatar or "",
            "title": title_for(UserRole.AGENT.value),
            "is_verified": True,
        }, record_id=agent_id)
        logger.info("agent %s reactivated; login recreated", agent_id)
    else:
        uow.users.update(user, {"title": title_for(user.role)})
    if agent.join_date is None:
        uow.agents.update(agent, {"join_date": today()})
    return agent


def reject(uow: UnitOfWork, agent_id: int) -> Agent:
    agent = uow.agents.get(agent_id)
    if agent.status != AgentStatus.PENDING.value:
        raise Conflict("Only pending applications can be rejected.")
    uow.agents.update(agent, {"status": AgentStatus.INACTIVE})
    _drop_login_and_clients(uow, agent)
    logger.info("agent application %s rejected", agent_id)
    return agent


def delete(uow: UnitOfWork, agent_id: int) -> Dict[str, Any]:
    agent = uow.agents.get(agent_id)
    released = _drop_login_and_clients(uow, agent)
    uow.agents.delete(agent)
    logger.info("agent %s deleted; %s client(s) unassigned", agent_id, released)
    return {"success": True, "unassigned_clients": released}


def update_status(uow: UnitOfWork, agent_id: int, status: AgentStatus, role: Optional[UserRole] = None) -> Agent:
    """Map a requested status onto the lifecycle transitions."""
    agent = uow.agents.get(agent_id)
    target = status.value if isinstance(status, AgentStatus) else str(status)
    current = agent.status
    if target == AgentStatus.ACTIVE.value:
        if current == AgentStatus.PENDING.value:
            approve(uow, agent_id, role or UserRole.AGENT)
        else:
            reactivate(uow, agent_id)
    elif target == AgentStatus.INACTIVE.value:
        if current == AgentStatus.PENDING.value:
            reject(uow, agent_id)
        else:
            deactivate(uow, agent_id)
    else:
        raise BadRequest(f"Cannot move an agent to status '{target}'.")
    return agent


def update_profile(uow: UnitOfWork, actor: Dict[str, Any], agent_id: int, changes: Dict[str, Any]) -> Agent:
    is_admin = actor.get("role") == UserRole.ADMIN.value
    if not is_admin and actor["id"] != agent_id:
        raise Forbidden("You can only edit your own profile.")
    allowed = ADMIN_EDITABLE if is_admin else SELF_EDITABLE
    values = {k: v for k, v in changes.items() if k in allowed}
    agent = uow.agents.get(agent_id)
    if "slug" in values:
        other = uow.agents.find_by_slug(values["slug"])
        if other is not None and other.id != agent_id:
            raise Conflict("That profile URL is already taken.")
    if "commission_rate" in values and not 0 <= float(values["commission_rate"]) <= 1:
        raise BadRequest("commission_rate must be between 0 and 1.")
    if "email" in values:
        values["email"] = str(values["email"]).strip()
        _check_email_free(uow, values["email"], agent_id)
    uow.agents.update(agent, values)
    user = uow.users.find_by_id(agent_id)
    synced = {k: values[k] for k in ("name", "avatar", "email") if k in values}
    if user is not None and synced:
        uow.users.update(user, synced)
    return agent
