# agency_crm/services/messaging.py
"""
Internal messaging.

A message is ``active`` until trashed. Trashing by the sender shortly after
sending removes it outright; any other permitted trash is a soft delete that
records who trashed it and when, and can be undone by that user or an admin.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from agency_crm.common.date_rules import age_seconds, utcnow
from agency_crm.common.enums import (
    AGENT_ROLES,
    AgentStatus,
    MessageSource,
    MessageStatus,
    NotificationType,
    UserRole,
)
from agency_crm.models import Message
from agency_crm.services import config
from agency_crm.services.errors import BadRequest, Forbidden
from agency_crm.services.notifications import notify
from agency_crm.store.repository import UnitOfWork

logger = logging.getLogger(__name__)


def _is_admin(actor: Dict[str, Any]) -> bool:
    return actor.get("role") == UserRole.ADMIN.value


def _clean_text(text: Optional[str]) -> str:
    value = (text or "").strip()
    if not value:
        raise BadRequest("Message text is required.")
    return value


def _create(uow: UnitOfWork, sender_id: int, receiver_id: int, text: str) -> Message:
    return uow.messages.create({
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "text": text,
        "timestamp": utcnow(),
        "status": MessageStatus.ACTIVE,
        "source": MessageSource.INTERNAL,
        "is_read": False,
        "edited": False,
    })


def send(uow: UnitOfWork, actor: Dict[str, Any], receiver_id: int, text: str) -> Message:
    body = _clean_text(text)
    uow.users.get(receiver_id)
    message = _create(uow, actor["id"], receiver_id, body)
    notify(
        uow,
        receiver_id,
        f"You have a new message from {actor.get('name') or 'a colleague'}.",
        link=f"messages/{actor['id']}",
        type_=NotificationType.NEW_MESSAGE,
    )
    return message


def edit(uow: UnitOfWork, actor: Dict[str, Any], message_id: int, text: str) -> Message:
    message = uow.messages.get(message_id)
    if message.sender_id != actor["id"]:
        raise Forbidden("You can only edit your own messages.")
    if age_seconds(message.timestamp) > config.MESSAGE_EDIT_WINDOW_SEC:
        raise Forbidden("Edit time window has expired.")
    return uow.messages.update(message, {"text": _clean_text(text), "edited": True})


def trash(uow: UnitOfWork, actor: Dict[str, Any], message_id: int) -> Dict[str, Any]:
    """Returns ``{"deleted": True}`` for a hard delete, else the trashed message."""
    message = uow.messages.get(message_id)
    is_sender = message.sender_id == actor["id"]
    is_receiver = message.receiver_id == actor["id"]
    if not (is_sender or is_receiver or _is_admin(actor)):
        raise Forbidden("You are not authorized to delete this message.")

    if is_sender and age_seconds(message.timestamp) < config.MESSAGE_HARD_DELETE_HOURS * 3600:
        uow.messages.delete(message)
        logger.info("message %s deleted by its sender", message_id)
        return {"id": message_id, "deleted": True}

    uow.messages.update(message, {
        "status": MessageStatus.TRASHED,
        "deleted_timestamp": utcnow(),
        "deleted_by": actor["id"],
    })
    return message.to_dict()


def restore(uow: UnitOfWork, actor: Dict[str, Any], message_id: int) -> Message:
    message = uow.messages.get(message_id)
    if message.deleted_by != actor["id"] and not _is_admin(actor):
        raise Forbidden("You are not authorized to restore this message.")
    message.status = MessageStatus.ACTIVE.value
    message.deleted_timestamp = None
    message.deleted_by = None
    uow.session.flush()
    return message


def delete_permanently(uow: UnitOfWork, actor: Dict[str, Any], message_id: int) -> Dict[str, Any]:
    if not _is_admin(actor):
        raise Forbidden("Only administrators can permanently delete messages.")
    uow.messages.get(message_id)
    return {"success": uow.messages.delete(message_id)}


def broadcast(uow: UnitOfWork, actor: Dict[str, Any], text: str) -> int:
    """Send ``text`` to every Active agent and lead manager except the sender."""
    if not _is_admin(actor):
        raise Forbidden("Only administrators can send broadcasts.")
    body = _clean_text(text)
    sent = 0
    for agent in uow.agents.find(status=AgentStatus.ACTIVE):
        if agent.id == actor["id"]:
            continue
        user = uow.users.find_by_id(agent.id)
        if user is None or user.role not in AGENT_ROLES:
            continue
        _create(uow, actor["id"], agent.id, body)
        notify(
            uow,
            agent.id,
            f"New announcement from {actor.get('name') or 'the administrator'}.",
            link=f"messages/{actor['id']}",
            type_=NotificationType.BROADCAST,
        )
        sent += 1
    logger.info("broadcast from %s delivered to %s recipient(s)", actor["id"], sent)
    return sent


def mark_conversation_as_read(uow: UnitOfWork, actor: Dict[str, Any], sender_id: int) -> int:
    count = 0
    for message in uow.messages.find(sender_id=sender_id, receiver_id=actor["id"], is_read=False):
        message.is_read = True
        count += 1
    uow.session.flush()
    return count


def list_for_user(uow: UnitOfWork, actor: Dict[str, Any], include_trashed: bool = False) -> List[Dict[str, Any]]:
    """Messages the caller sent or received (every message for admins), oldest first."""
    rows = uow.messages.find()
    if not _is_admin(actor):
        rows = [m for m in rows if actor["id"] in (m.sender_id, m.receiver_id)]
    if not include_trashed:
        rows = [m for m in rows if m.status == MessageStatus.ACTIVE.value]
    rows.sort(key=lambda m: (m.timestamp is None, m.timestamp, m.id))
    return [m.to_dict() for m in rows]
