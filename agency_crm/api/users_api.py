# agency_crm/api/users_api.py
from __future__ import annotations

from typing import Any, Dict, List, Annotated
from fastapi import APIRouter, Depends

from agency_crm.schemas import ProfileUpdate, changes
from agency_crm.services import users
from agency_crm.services.roles import require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/users", tags=["Users"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]


@router.get("")
def list_users(_current_user: CurrentUser) -> List[Dict[str, Any]]:
    with unit_of_work() as uow:
        return [u.to_public() for u in uow.users.find()]


@router.get("/me")
def get_my_profile(current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return users.me(uow, current_user["id"])


@router.put("/me")
def update_my_profile(payload: ProfileUpdate, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return users.update_my_profile(uow, current_user["id"], changes(payload))
