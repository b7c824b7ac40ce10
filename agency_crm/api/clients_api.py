# agency_crm/api/clients_api.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Annotated
from fastapi import APIRouter, Depends

from agency_crm.common.enums import ClientStatus, UserRole
from agency_crm.schemas import ClientCreate, ClientUpdate, changes
from agency_crm.services import leads
from agency_crm.services.roles import require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/clients", tags=["Clients"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]


@router.get("")
def list_clients(current_user: CurrentUser, status: Optional[ClientStatus] = None) -> List[Dict[str, Any]]:
    filters: Dict[str, Any] = {}
    if status:
        filters["status"] = status
    if current_user["role"] == UserRole.AGENT.value:
        filters["agent_id"] = current_user["id"]
    with unit_of_work() as uow:
        return [c.to_dict() for c in uow.clients.find(**filters)]


@router.get("/{client_id}")
def get_client(client_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        client = uow.clients.get(client_id)
        leads.check_client_access(current_user, client)
        return client.to_dict()


@router.post("", status_code=201)
def create_client(payload: ClientCreate, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return leads.create_client(uow, changes(payload), actor=current_user).to_dict()


@router.put("/{client_id}")
def update_client(client_id: int, payload: ClientUpdate, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return leads.update_client(uow, client_id, changes(payload), actor=current_user).to_dict()


@router.delete("/{client_id}")
def delete_client(client_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return {"success": leads.delete_lead(uow, client_id, actor=current_user)}
