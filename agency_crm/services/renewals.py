# agency_crm/services/renewals.py
from __future__ import annotations

import logging
from typing import List, Optional

from agency_crm.common.date_rules import is_within_window, today
from agency_crm.common.enums import NotificationType, PolicyStatus
from agency_crm.models import Notification
from agency_crm.services import config
from agency_crm.services.notifications import notify
from agency_crm.store.repository import UnitOfWork

logger = logging.getLogger(__name__)


def renewal_message(policy_number: str, first_name: str, last_name: str, end_date: str) -> str:
    return f"Policy #{policy_number} for {first_name} {last_name} is expiring on {end_date}."


def scan_expiring_policies(uow: UnitOfWork, window_days: Optional[int] = None) -> List[Notification]:
    """
    Notify the owning agent of every Active policy ending within the window.

    Idempotent: a policy already notified to its agent (same user, type and
    policy id) is skipped, so repeated data loads never duplicate reminders.
    Policies whose client is unassigned or missing are ignored.
    """
    days = config.RENEWAL_WINDOW_DAYS if window_days is None else int(window_days)
    start = today()
    created: List[Notification] = []
    for policy in uow.policies.find(status=PolicyStatus.ACTIVE):
        if not is_within_window(policy.end_date, start, days):
            continue
        client = uow.clients.find_by_id(policy.client_id)
        if client is None or not client.agent_id:
            continue
        if uow.notifications.exists_for(client.agent_id, NotificationType.POLICY_RENEWAL.value, policy.id):
            continue
        created.append(notify(
            uow,
            client.agent_id,
            renewal_message(policy.policy_number, client.first_name, client.last_name, policy.end_date.isoformat()),
            link=f"client/{client.id}",
            type_=NotificationType.POLICY_RENEWAL,
            policy_id=policy.id,
        ))
    if created:
        logger.info("renewal scan created %s notification(s)", len(created))
    return created
