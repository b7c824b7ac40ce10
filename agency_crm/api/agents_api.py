# agency_crm/api/agents_api.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Annotated
from fastapi import APIRouter, Depends

from agency_crm.common.enums import AgentStatus, TestimonialStatus, UserRole
from agency_crm.schemas import AgentStatusIn, AgentUpdate, ApproveIn, changes
from agency_crm.services import agents, commissions
from agency_crm.services.errors import Forbidden, NotFound
from agency_crm.services.roles import require_admin, require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/agents", tags=["Agents"])

# ----- Annotated aliases -----
CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]
Admin = Annotated[Dict[str, Any], Depends(require_admin)]


def _self_or_manager(current_user: Dict[str, Any], agent_id: int) -> None:
    if current_user["role"] == UserRole.AGENT.value and current_user["id"] != agent_id:
        raise Forbidden("You can only view your own figures.")


@router.get("")
def list_agents(_current_user: CurrentUser, status: Optional[AgentStatus] = None) -> List[Dict[str, Any]]:
    with unit_of_work() as uow:
        rows = uow.agents.find(status=status) if status else uow.agents.find()
        return [a.to_dict() for a in rows]


@router.get("/by-slug/{slug}")
def public_profile(slug: str) -> Dict[str, Any]:
    """Public agent page: Active agents only, with approved testimonials and licenses."""
    with unit_of_work() as uow:
        agent = uow.agents.find_by_slug(slug)
        if agent is None or agent.status != AgentStatus.ACTIVE.value:
            raise NotFound("Agent not found.")
        testimonials = uow.resource("testimonials").find(agent_id=agent.id, status=TestimonialStatus.APPROVED)
        licenses = uow.resource("licenses").find(agent_id=agent.id)
        return {
            **agent.to_dict(exclude=("commission_rate",)),
            "testimonials": [t.to_dict() for t in testimonials],
            "licenses": [l.to_dict(exclude=("file_name",)) for l in licenses],
        }


@router.get("/{agent_id}")
def get_agent(agent_id: int, _current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return uow.agents.get(agent_id).to_dict()


@router.put("/{agent_id}")
def update_agent(agent_id: int, payload: AgentUpdate, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return agents.update_profile(uow, current_user, agent_id, changes(payload)).to_dict()


@router.post("/{agent_id}/approve")
def approve_agent(agent_id: int, _current_user: Admin, payload: Optional[ApproveIn] = None) -> Dict[str, Any]:
    role = payload.role if payload else UserRole.AGENT
    with unit_of_work() as uow:
        return agents.approve(uow, agent_id, role)


@router.put("/{agent_id}/status")
def update_agent_status(agent_id: int, payload: AgentStatusIn, _current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return agents.update_status(uow, agent_id, payload.status, payload.role).to_dict()


@router.post("/{agent_id}/deactivate")
def deactivate_agent(agent_id: int, _current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return agents.deactivate(uow, agent_id).to_dict()


@router.post("/{agent_id}/reactivate")
def reactivate_agent(agent_id: int, _current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return agents.reactivate(uow, agent_id).to_dict()


@router.post("/{agent_id}/reject")
def reject_agent(agent_id: int, _current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return agents.reject(uow, agent_id).to_dict()


@router.delete("/{agent_id}")
def delete_agent(agent_id: int, _current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return agents.delete(uow, agent_id)


@router.get("/{agent_id}/performance")
def agent_performance(agent_id: int, current_user: CurrentUser, year: Optional[int] = None) -> Dict[str, Any]:
    _self_or_manager(current_user, agent_id)
    with unit_of_work() as uow:
        return commissions.performance(uow, agent_id, year)


@router.get("/{agent_id}/commissions")
def agent_commissions(agent_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    _self_or_manager(current_user, agent_id)
    with unit_of_work() as uow:
        return commissions.agent_commissions(uow, agent_id)
