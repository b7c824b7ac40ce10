# agency_crm/api/commissions_api.py
from __future__ import annotations

from typing import Any, Dict, Annotated
from fastapi import APIRouter, Depends

from agency_crm.common.enums import UserRole
from agency_crm.services import commissions
from agency_crm.services.roles import require_admin, require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/commissions", tags=["Commissions"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]
Admin = Annotated[Dict[str, Any], Depends(require_admin)]


@router.get("")
def my_commissions(current_user: CurrentUser) -> Dict[str, Any]:
    """Admins get the agency report; agents and lead managers their own figures."""
    with unit_of_work() as uow:
        if current_user["role"] == UserRole.ADMIN.value:
            return commissions.agency_report(uow)
        return commissions.agent_commissions(uow, current_user["id"])


@router.get("/report")
def agency_report(_current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return commissions.agency_report(uow)
