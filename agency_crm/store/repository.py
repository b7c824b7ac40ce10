# agency_crm/store/repository.py
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Type

from sqlalchemy import Date, DateTime, func, select
from sqlalchemy.orm import Session

from agency_crm.common.date_rules import as_date
from agency_crm.models import (
    Agent,
    CalendarNote,
    Client,
    IdSequence,
    Interaction,
    License,
    Message,
    Notification,
    Policy,
    Task,
    Testimonial,
    User,
)
from agency_crm.services.errors import NotFound
from agency_crm.store.db import new_session

logger = logging.getLogger(__name__)

GLOBAL_SEQUENCE = "global"

# Serialises units of work so read-modify-write on counters cannot interleave.
_WRITE_LOCK = threading.RLock()


def _coerce(model: Type[Any], data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only real columns and convert ISO strings / enums to column types."""
    cols = model.__table__.columns
    out: Dict[str, Any] = {}
    for key, val in data.items():
        if key not in cols or key == "id":
            continue
        if isinstance(val, Enum):
            val = val.value
        col_type = cols[key].type
        if isinstance(col_type, DateTime) and isinstance(val, str):
            val = datetime.fromisoformat(val.replace("Z", "+00:00")).replace(tzinfo=None)
        elif isinstance(col_type, Date) and not isinstance(val, date):
            val = as_date(val)
        elif isinstance(col_type, Date) and isinstance(val, datetime):
            val = val.date()
        out[key] = val
    return out


class Repository:
    """find / find_by_id / get / create / update / delete for one table."""

    model: Type[Any] = None  # type: ignore[assignment]
    label = "Record"

    def __init__(self, uow: "UnitOfWork", model: Optional[Type[Any]] = None, label: Optional[str] = None):
        self.uow = uow
        self.session: Session = uow.session
        if model is not None:
            self.model = model
        if label is not None:
            self.label = label

    # ── reads ──
    def find(self, **filters: Any) -> List[Any]:
        stmt = select(self.model)
        for key, val in filters.items():
            if isinstance(val, Enum):
                val = val.value
            stmt = stmt.where(getattr(self.model, key) == val)
        return list(self.session.scalars(stmt.order_by(self.model.id)))

    def find_by_id(self, record_id: int) -> Optional[Any]:
        return self.session.get(self.model, record_id)

    def get(self, record_id: int) -> Any:
        obj = self.find_by_id(record_id)
        if obj is None:
            raise NotFound(f"{self.label} not found.")
        return obj

    # ── writes ──
    def create(self, data: Dict[str, Any], record_id: Optional[int] = None) -> Any:
        values = _coerce(self.model, data)
        obj = self.model(id=record_id if record_id is not None else self.uow.next_id(), **values)
        self.session.add(obj)
        self.session.flush()
        return obj

    def update(self, record: Any, data: Dict[str, Any]) -> Any:
        obj = record if isinstance(record, self.model) else self.get(record)
        for key, val in _coerce(self.model, data).items():
            setattr(obj, key, val)
        self.session.flush()
        return obj

    def delete(self, record: Any) -> bool:
        obj = record if isinstance(record, self.model) else self.find_by_id(record)
        if obj is None:
            return False
        self.session.delete(obj)
        self.session.flush()
        return True


class UserRepository(Repository):
    model = User
    label = "User"

    def find_by_email(self, email: str) -> Optional[User]:
        key = (email or "").strip().lower()
        if not key:
            return None
        stmt = select(User).where(func.lower(User.email) == key)
        return self.session.scalars(stmt).first()


class AgentRepository(Repository):
    model = Agent
    label = "Agent"

    def create(self, data: Dict[str, Any], record_id: Optional[int] = None) -> Agent:
        agent = super().create(data, record_id=record_id)
        agent.refresh_conversion_rate()
        self.session.flush()
        return agent

    def update(self, record: Any, data: Dict[str, Any]) -> Agent:
        agent = super().update(record, data)
        # every write recomputes, so the derived rate never drifts from the counters
        agent.refresh_conversion_rate()
        self.session.flush()
        return agent

    def find_by_slug(self, slug: str) -> Optional[Agent]:
        return self.session.scalars(select(Agent).where(Agent.slug == slug)).first()

    def unassign_clients(self, agent_id: int) -> int:
        clients = self.uow.clients.find(agent_id=agent_id)
        for client in clients:
            client.agent_id = None
        self.session.flush()
        return len(clients)


class ClientRepository(Repository):
    model = Client
    label = "Client"


class PolicyRepository(Repository):
    model = Policy
    label = "Policy"


class MessageRepository(Repository):
    model = Message
    label = "Message"


class NotificationRepository(Repository):
    model = Notification
    label = "Notification"

    def exists_for(self, user_id: int, type_: str, policy_id: int) -> bool:
        stmt = select(Notification.id).where(
            Notification.user_id == user_id,
            Notification.type == type_,
            Notification.policy_id == policy_id,
        )
        return self.session.scalars(stmt).first() is not None


# Secondary entities reachable through the generic resource-keyed CRUD.
RESOURCES: Dict[str, tuple] = {
    "policies": (Policy, "Policy"),
    "interactions": (Interaction, "Interaction"),
    "tasks": (Task, "Task"),
    "licenses": (License, "License"),
    "calendar_notes": (CalendarNote, "Calendar note"),
    "testimonials": (Testimonial, "Testimonial"),
    "notifications": (Notification, "Notification"),
    "messages": (Message, "Message"),
}

ALL_TABLES = (User, Agent, Client, Policy, Interaction, Task, Message, License, Notification, CalendarNote, Testimonial)


class UnitOfWork:
    """One session/transaction plus the repositories bound to it."""

    def __init__(self, session: Session):
        self.session = session
        self.users = UserRepository(self)
        self.agents = AgentRepository(self)
        self.clients = ClientRepository(self)
        self.policies = PolicyRepository(self)
        self.messages = MessageRepository(self)
        self.notifications = NotificationRepository(self)

    def resource(self, name: str) -> Repository:
        try:
            model, label = RESOURCES[name]
        except KeyError:
            raise NotFound(f"Unknown resource '{name}'.") from None
        if name == "policies":
            return self.policies
        if name == "messages":
            return self.messages
        if name == "notifications":
            return self.notifications
        return Repository(self, model=model, label=label)

    def next_id(self) -> int:
        """Next value of the global id counter shared by every table."""
        stmt = select(IdSequence).where(IdSequence.name == GLOBAL_SEQUENCE).with_for_update()
        seq = self.session.scalars(stmt).first()
        if seq is None:
            seq = IdSequence(name=GLOBAL_SEQUENCE, last_value=self.max_existing_id())
            self.session.add(seq)
        seq.last_value = int(seq.last_value or 0) + 1
        self.session.flush()
        return seq.last_value

    def max_existing_id(self) -> int:
        top = 0
        for model in ALL_TABLES:
            val = self.session.scalar(select(func.max(model.id)))
            top = max(top, int(val or 0))
        return top

    def sync_id_sequence(self) -> int:
        """Move the counter past every id already stored (after seeding explicit ids)."""
        top = self.max_existing_id()
        seq = self.session.get(IdSequence, GLOBAL_SEQUENCE)
        if seq is None:
            seq = IdSequence(name=GLOBAL_SEQUENCE, last_value=top)
            self.session.add(seq)
        else:
            seq.last_value = max(int(seq.last_value or 0), top)
        self.session.flush()
        return seq.last_value


@contextmanager
def unit_of_work() -> Iterator[UnitOfWork]:
    """
    Atomic unit of work: commit on success, roll back on any exception.

    Use like:
        with unit_of_work() as uow:
            lead = uow.clients.get(lead_id)
    """
    with _WRITE_LOCK:
        session = new_session()
        try:
            yield UnitOfWork(session)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
