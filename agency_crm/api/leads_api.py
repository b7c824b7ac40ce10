# agency_crm/api/leads_api.py
from __future__ import annotations

from typing import Any, Dict, List, Annotated
from fastapi import APIRouter, Depends

from agency_crm.common.enums import AgentStatus, ClientStatus
from agency_crm.schemas import ClientUpdate, LeadCreate, ProfileLeadIn, changes
from agency_crm.services import leads
from agency_crm.services.errors import NotFound
from agency_crm.services.roles import require_lead_manager, require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/leads", tags=["Leads"])

# ----- Annotated aliases -----
CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]
LeadManager = Annotated[Dict[str, Any], Depends(require_lead_manager)]


@router.get("")
def list_leads(_current_user: LeadManager, unassigned: bool = False) -> List[Dict[str, Any]]:
    with unit_of_work() as uow:
        rows = uow.clients.find(status=ClientStatus.LEAD)
        if unassigned:
            rows = [c for c in rows if not c.agent_id]
        return [c.to_dict() for c in rows]


@router.post("", status_code=201)
def create_lead(payload: LeadCreate, _current_user: LeadManager) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return leads.create_lead(uow, changes(payload)).to_dict()


@router.post("/from-profile", status_code=201)
def create_from_profile(payload: ProfileLeadIn) -> Dict[str, Any]:
    """Public lead form on an agent's profile page; no login required."""
    data = changes(payload)
    agent_id = data.pop("agent_id")
    with unit_of_work() as uow:
        agent = uow.agents.get(agent_id)
        if agent.status != AgentStatus.ACTIVE.value:
            raise NotFound("Agent not found.")
        return leads.create_from_profile(uow, data, agent_id).to_dict()


@router.put("/{client_id}")
def update_lead(client_id: int, payload: ClientUpdate, _current_user: LeadManager) -> Dict[str, Any]:
    with unit_of_work() as uow:
        # status changes go through update_client so Lead -> Active converts
        return leads.update_client(uow, client_id, changes(payload)).to_dict()


@router.post("/{client_id}/convert")
def convert_lead(client_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        leads.check_client_access(current_user, uow.clients.get(client_id))
        return leads.convert_to_active(uow, client_id).to_dict()


@router.delete("/{client_id}")
def delete_lead(client_id: int, _current_user: LeadManager) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return {"success": leads.delete_lead(uow, client_id)}
