# agency_crm/store/seed.py
"""
Demo data for a fresh database.

Every seeded user except the administrator logs in with ``DEMO_PASSWORD``.
Dates are relative to today so the renewal notifier and the "new clients in
the last 7 days" metric have something to show.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict, List

from sqlalchemy import select

from agency_crm.common.date_rules import today, utcnow
from agency_crm.common.enums import AgentStatus, ClientStatus, PolicyStatus, UserRole
from agency_crm.models import User
from agency_crm.services import config
from agency_crm.services.auth_service import hash_password
from agency_crm.store.repository import UnitOfWork, unit_of_work

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


@lru_cache(maxsize=4)
def _hash(plaintext: str) -> str:
    # Argon2 is slow on purpose; seeding reuses one hash per distinct password.
    return hash_password(plaintext)


def _users() -> List[Dict[str, Any]]:
    demo = _hash(DEMO_PASSWORD)
    return [
        {"id": 1, "name": "Adama Lee", "email": config.ADMIN_EMAIL, "password_hash": _hash(config.ADMIN_PASSWORD),
         "role": UserRole.ADMIN, "title": "System Administrator", "is_verified": True},
        {"id": 2, "name": "Gaius Baltar", "email": "subadmin@newhollandfinancial.com", "password_hash": demo,
         "role": UserRole.SUB_ADMIN, "title": "Lead Manager", "is_verified": True},
        {"id": 3, "name": "Kara Thrace", "email": "kara.t@newhollandfinancial.com", "password_hash": demo,
         "role": UserRole.AGENT, "title": "Senior Agent", "is_verified": True},
        {"id": 4, "name": "Alex Ray", "email": "alex.r@newhollandfinancial.com", "password_hash": demo,
         "role": UserRole.AGENT, "title": "Insurance Agent", "is_verified": True},
        {"id": 6, "name": "Laura Roslin", "email": "laura.r@newhollandfinancial.com", "password_hash": demo,
         "role": UserRole.AGENT, "title": "Agent Applicant", "is_verified": True},
        {"id": 7, "name": "William Adama", "email": "william.a@newhollandfinancial.com", "password_hash": demo,
         "role": UserRole.AGENT, "title": "Senior Agent", "is_verified": True},
    ]


def _agents() -> List[Dict[str, Any]]:
    joined = today() - timedelta(days=90)
    return [
        {"id": 2, "name": "Gaius Baltar", "slug": "gaius-baltar", "email": "subadmin@newhollandfinancial.com",
         "leads": 0, "client_count": 0, "commission_rate": 0.70, "status": AgentStatus.ACTIVE, "join_date": joined},
        {"id": 3, "name": "Kara Thrace", "slug": "kara-thrace", "email": "kara.t@newhollandfinancial.com",
         "leads": 25, "client_count": 20, "commission_rate": 0.80, "location": "Dallas, TX",
         "phone": "(214) 555-1234", "languages": ["English", "Spanish"],
         "bio": "Helping families secure their future is my passion.",
         "calendar_link": "https://calendly.com/newholland-kara", "status": AgentStatus.ACTIVE,
         "join_date": joined, "socials": {"linkedin": "https://linkedin.com/in/karathrace"}},
        {"id": 4, "name": "Alex Ray", "slug": "alex-ray", "email": "alex.r@newhollandfinancial.com",
         "leads": 30, "client_count": 22, "commission_rate": 0.75, "location": "Austin, TX",
         "phone": "(512) 555-5678", "languages": ["English"], "status": AgentStatus.ACTIVE, "join_date": joined},
        {"id": 6, "name": "Laura Roslin", "slug": "laura-roslin", "email": "laura.r@newhollandfinancial.com",
         "leads": 0, "client_count": 0, "commission_rate": 0.75, "status": AgentStatus.PENDING, "join_date": None},
        {"id": 7, "name": "William Adama", "slug": "william-adama", "email": "william.a@newhollandfinancial.com",
         "leads": 40, "client_count": 34, "commission_rate": 0.82, "location": "San Antonio, TX",
         "languages": ["English"], "status": AgentStatus.ACTIVE, "join_date": joined},
    ]


def _clients() -> List[Dict[str, Any]]:
    d = today()
    return [
        {"id": 10, "first_name": "John", "last_name": "Doe", "email": "john.doe@example.com", "phone": "555-0101",
         "address": "123 Maple St", "city": "Springfield", "state": "IL",
         "status": ClientStatus.ACTIVE, "join_date": d - timedelta(days=60), "agent_id": 3},
        {"id": 11, "first_name": "Alice", "last_name": "Johnson", "email": "alice.j@example.com", "phone": "555-0103",
         "address": "789 Pine Ln", "city": "Gotham", "state": "NJ", "status": ClientStatus.LEAD, "join_date": d - timedelta(days=3)},
        {"id": 12, "first_name": "Charlie", "last_name": "Davis", "email": "charlie.d@example.com", "phone": "555-0105",
         "address": "212 Cedar Blvd", "city": "Central City", "state": "MO",
         "status": ClientStatus.ACTIVE, "join_date": d - timedelta(days=2), "agent_id": 4},
        {"id": 13, "first_name": "Diana", "last_name": "Prince", "email": "diana.p@example.com", "phone": "555-0106",
         "address": "1 Paradise Island", "city": "Themyscira", "state": "DC", "status": ClientStatus.LEAD, "join_date": d},
    ]


def _policies() -> List[Dict[str, Any]]:
    d = today()
    return [
        {"id": 20, "client_id": 10, "policy_number": "AUT-12345", "type": "Auto Insurance", "annual_premium": 1200.0,
         "monthly_premium": 100.0, "start_date": d - timedelta(days=340), "end_date": d + timedelta(days=25),
         "status": PolicyStatus.ACTIVE, "carrier": "Geico"},
        {"id": 21, "client_id": 10, "policy_number": "HOM-67890", "type": "Home Insurance", "annual_premium": 800.0,
         "monthly_premium": 66.67, "start_date": d - timedelta(days=100), "end_date": d + timedelta(days=265),
         "status": PolicyStatus.ACTIVE, "carrier": "Foremost Insurance Co"},
        {"id": 22, "client_id": 12, "policy_number": "HOM-PQRST", "type": "Home Insurance", "annual_premium": 950.0,
         "monthly_premium": 79.17, "start_date": d - timedelta(days=30), "end_date": d + timedelta(days=335),
         "status": PolicyStatus.ACTIVE, "carrier": "National Life Group"},
    ]


def _misc(uow: UnitOfWork) -> None:
    d = today()
    now = utcnow()
    uow.resource("interactions").create({"client_id": 10, "type": "Call", "date": d - timedelta(days=1),
                                         "summary": "Discussed renewal options for auto policy."}, record_id=30)
    uow.resource("tasks").create({"title": "Prepare renewal documents for John Doe", "due_date": d + timedelta(days=2),
                                  "completed": False, "client_id": 10, "agent_id": 3}, record_id=31)
    uow.resource("tasks").create({"title": "Review quarterly performance report", "due_date": d + timedelta(days=6),
                                  "completed": False}, record_id=32)
    uow.resource("licenses").create({"agent_id": 3, "type": "Home State License", "state": "TX",
                                     "license_number": "TX-L123456", "expiration_date": d + timedelta(days=300),
                                     "file_name": "kara-thrace-tx-license.pdf"}, record_id=33)
    uow.resource("calendar_notes").create({"user_id": 2, "date": d, "text": "Review new lead assignments for the week.",
                                           "color": "Yellow"}, record_id=34)
    uow.resource("testimonials").create({"agent_id": 3, "author": "Maria G.", "status": "Approved",
                                         "quote": "Kara helped me find affordable coverage for my family.",
                                         "submission_date": d - timedelta(days=5)}, record_id=35)
    uow.messages.create({"sender_id": 1, "receiver_id": 3, "text": "Hey Kara, how are the new leads looking?",
                         "timestamp": now - timedelta(days=2), "status": "active", "source": "internal",
                         "is_read": True}, record_id=40)
    uow.messages.create({"sender_id": 3, "receiver_id": 1, "text": "Looking good! Alice Johnson seems very promising.",
                         "timestamp": now - timedelta(days=2, minutes=-5), "status": "active", "source": "internal",
                         "is_read": True}, record_id=41)


def seed_demo_data() -> bool:
    """Load demo rows when the users table is empty. Returns True if anything was written."""
    with unit_of_work() as uow:
        if uow.session.scalars(select(User.id)).first() is not None:
            return False
        for row in _users():
            uow.users.create(row, record_id=row["id"])
        for row in _agents():
            uow.agents.create(row, record_id=row["id"])
        for row in _clients():
            uow.clients.create(row, record_id=row["id"])
        for row in _policies():
            uow.policies.create(row, record_id=row["id"])
        _misc(uow)
        top = uow.sync_id_sequence()
    logger.info("seeded demo data (id sequence at %s)", top)
    return True
