# agency_crm/api/messages_api.py
from __future__ import annotations

from typing import Any, Dict, List, Annotated
from fastapi import APIRouter, Depends

from agency_crm.schemas import BroadcastIn, MarkReadIn, MessageEdit, MessageIn
from agency_crm.services import messaging
from agency_crm.services.roles import require_admin, require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/messages", tags=["Messages"])

# ----- Annotated aliases -----
CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]
Admin = Annotated[Dict[str, Any], Depends(require_admin)]


@router.get("")
def list_messages(current_user: CurrentUser, include_trashed: bool = False) -> List[Dict[str, Any]]:
    with unit_of_work() as uow:
        return messaging.list_for_user(uow, current_user, include_trashed=include_trashed)


@router.post("", status_code=201)
def send_message(payload: MessageIn, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return messaging.send(uow, current_user, payload.receiver_id, payload.text).to_dict()


# Static paths first so they are not captured by /{message_id}.
@router.post("/broadcast")
def broadcast(payload: BroadcastIn, current_user: Admin) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return {"success": True, "count": messaging.broadcast(uow, current_user, payload.text)}


@router.put("/mark-as-read")
def mark_conversation_as_read(payload: MarkReadIn, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return {"success": True, "count": messaging.mark_conversation_as_read(uow, current_user, payload.sender_id)}


@router.put("/{message_id}")
def edit_message(message_id: int, payload: MessageEdit, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return messaging.edit(uow, current_user, message_id, payload.text).to_dict()


@router.put("/{message_id}/trash")
def trash_message(message_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return messaging.trash(uow, current_user, message_id)


@router.put("/{message_id}/restore")
def restore_message(message_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return messaging.restore(uow, current_user, message_id).to_dict()


@router.delete("/{message_id}")
def delete_message(message_id: int, current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return messaging.delete_permanently(uow, current_user, message_id)
