# agency_crm/services/users.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from agency_crm.common.enums import AGENT_ROLES, AgentStatus, UserRole
from agency_crm.models import User
from agency_crm.services import config
from agency_crm.services.auth_service import (
    create_access_token,
    hash_password,
    new_verification_code,
    verify_and_upgrade_password,
)
from agency_crm.services.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from agency_crm.services.security import (
    check_login_rate_limit,
    register_login_failure,
    reset_login_attempts,
)
from agency_crm.store.repository import UnitOfWork

logger = logging.getLogger(__name__)

APPLICANT_TITLES = {
    UserRole.AGENT.value: "Agent Applicant",
    UserRole.SUB_ADMIN.value: "Sub-Admin Applicant",
}
PROFILE_FIELDS = ("name", "avatar", "title", "email")


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", (name or "").strip().lower())


def _role_value(role: Any) -> str:
    return role.value if isinstance(role, UserRole) else str(role or "")


def register(uow: UnitOfWork, name: str, email: str, password: str, role: Any = UserRole.AGENT) -> Dict[str, Any]:
    """Create an unverified applicant login plus its Pending agent record."""
    role_value = _role_value(role)
    if role_value not in AGENT_ROLES:
        raise BadRequest("Applicants must register as Agent or Sub-Admin.")
    if not (name or "").strip() or not (email or "").strip() or not password:
        raise BadRequest("name, email and password are required.")
    if uow.users.find_by_email(email) is not None:
        raise Conflict("An account with this email already exists.")

    user = uow.users.create({
        "name": name.strip(),
        "email": email.strip(),
        "password_hash": hash_password(password),
        "role": role_value,
        "title": APPLICANT_TITLES[role_value],
        "avatar": "",
        "is_verified": False,
        "verification_code": new_verification_code(),
    })
    uow.agents.create({
        "name": user.name,
        "email": user.email,
        "slug": f"{slugify(user.name)}-{user.id}",
        "status": AgentStatus.PENDING,
        "leads": 0,
        "client_count": 0,
        "commission_rate": config.DEFAULT_COMMISSION_RATE,
        "languages": [],
        "socials": {},
        "avatar": user.avatar,
    }, record_id=user.id)
    logger.info("registered applicant %s (%s)", user.id, role_value)
    # The verification code is returned because there is no mail delivery.
    return {"user": user.to_public(), "verification_code": user.verification_code}


def verify_email(uow: UnitOfWork, user_id: int, code: str) -> Dict[str, Any]:
    user = uow.users.find_by_id(user_id)
    if user is None or not user.verification_code or user.verification_code != (code or "").strip().upper():
        raise BadRequest("Invalid verification code.")
    uow.users.update(user, {"is_verified": True, "verification_code": None})
    return {"success": True}


def login(uow: UnitOfWork, email: str, password: str) -> Dict[str, Any]:
    user_key = f"email:{(email or '').strip().lower()}"
    check_login_rate_limit(user_key)

    user = uow.users.find_by_email(email)
    ok, new_hash = verify_and_upgrade_password(password or "", user.password_hash if user else None)
    if user is None or not ok:
        register_login_failure(user_key)
        raise Unauthorized("Invalid email or password.")
    if new_hash:
        user.password_hash = new_hash

    if user.role != UserRole.ADMIN.value:
        if not user.is_verified:
            raise Forbidden(
                "Please verify your email before logging in.",
                extra={"requires_verification": True, "user": user.to_public()},
            )
        agent = uow.agents.find_by_id(user.id)
        if agent is not None and agent.status != AgentStatus.ACTIVE.value:
            raise Forbidden(
                "Your application is awaiting approval." if agent.status == AgentStatus.PENDING.value
                else "Your account is inactive.",
                extra={"agent_status": agent.status},
            )

    reset_login_attempts(user_key)
    token = create_access_token(user.id, user.role)
    logger.info("user %s logged in", user.id)
    return {"token": token, "user": user.to_public()}


def me(uow: UnitOfWork, user_id: int) -> Dict[str, Any]:
    user = uow.users.get(user_id)
    agent = uow.agents.find_by_id(user_id)
    return {**user.to_public(), "agent_status": agent.status if agent is not None else None}


def update_my_profile(uow: UnitOfWork, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    user = uow.users.get(user_id)
    values = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
    if "email" in values:
        other = uow.users.find_by_email(values["email"])
        if other is not None and other.id != user_id:
            raise Conflict("An account with this email already exists.")
    uow.users.update(user, values)
    if user.role in AGENT_ROLES:
        agent = uow.agents.find_by_id(user_id)
        if agent is not None:
            uow.agents.update(agent, {"name": user.name, "avatar": user.avatar, "email": user.email})
    return user.to_public()


def set_password(uow: UnitOfWork, email: str, password: str, verify: bool = False) -> User:
    user = uow.users.find_by_email(email)
    if user is None:
        raise NotFound(f"No user with email {email}.")
    values: Dict[str, Optional[Any]] = {"password_hash": hash_password(password)}
    if verify:
        values.update(is_verified=True, verification_code=None)
    return uow.users.update(user, values)
