# agency_crm/api/data_api.py
from __future__ import annotations

from typing import Any, Dict, Annotated
from fastapi import APIRouter, Depends

from agency_crm.services.data import load_all_data
from agency_crm.services.roles import require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/data", tags=["Data"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]


@router.get("")
def get_all_data(current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return load_all_data(uow, current_user)
