# agency_crm/api/notifications_api.py
from __future__ import annotations

from typing import Any, Dict, List, Annotated
from fastapi import APIRouter, Depends

from agency_crm.services import notifications
from agency_crm.services.roles import require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]


@router.get("")
def list_notifications(current_user: CurrentUser) -> List[Dict[str, Any]]:
    with unit_of_work() as uow:
        return notifications.list_for_user(uow, current_user["id"])


@router.put("/read-all")
def mark_all_read(current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return {"success": True, "count": notifications.mark_all_read(uow, current_user)}


@router.put("/{notification_id}")
def mark_read(notification_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return notifications.mark_read(uow, current_user, notification_id)
