# agency_crm/services/notifications.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from agency_crm.common.date_rules import utcnow
from agency_crm.common.enums import NotificationType
from agency_crm.models import Notification
from agency_crm.services.errors import Forbidden
from agency_crm.store.repository import UnitOfWork

logger = logging.getLogger(__name__)


def notify(
    uow: UnitOfWork,
    user_id: int,
    message: str,
    link: str = "",
    type_: NotificationType = NotificationType.GENERAL,
    policy_id: Optional[int] = None,
) -> Notification:
    """Create one unread notification for ``user_id``. ``link`` is '<view>/<id>' or a bare view."""
    note = uow.notifications.create({
        "user_id": user_id,
        "type": type_,
        "message": message,
        "link": link,
        "is_read": False,
        "timestamp": utcnow(),
        "policy_id": policy_id,
    })
    logger.debug("notification %s -> user %s (%s)", note.id, user_id, note.type)
    return note


def list_for_user(uow: UnitOfWork, user_id: int) -> List[Dict[str, Any]]:
    rows = uow.notifications.find(user_id=user_id)
    rows.sort(key=lambda n: (n.timestamp is None, n.timestamp), reverse=True)
    return [n.to_dict() for n in rows]


def mark_read(uow: UnitOfWork, actor: Dict[str, Any], notification_id: int) -> Dict[str, Any]:
    note = uow.notifications.get(notification_id)
    if note.user_id != actor["id"]:
        raise Forbidden("You can only update your own notifications.")
    uow.notifications.update(note, {"is_read": True})
    return note.to_dict()


def mark_all_read(uow: UnitOfWork, actor: Dict[str, Any]) -> int:
    count = 0
    for note in uow.notifications.find(user_id=actor["id"], is_read=False):
        note.is_read = True
        count += 1
    uow.session.flush()
    return count
