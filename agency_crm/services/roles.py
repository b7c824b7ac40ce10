# agency_crm/services/roles.py
from __future__ import annotations
from typing import Any, Callable, Dict, Set

from fastapi import Request

from agency_crm.common.enums import UserRole
from agency_crm.services.auth_service import decode_token, token_from_header
from agency_crm.services.errors import Forbidden, Unauthorized
from agency_crm.store.repository import unit_of_work


def _current_user(request: Request) -> Dict[str, Any]:
    token = token_from_header(request.headers.get("Authorization"))
    if not token:
        raise Unauthorized("No token provided")
    claims = decode_token(token)
    if not claims:
        raise Unauthorized("Invalid token")
    with unit_of_work() as uow:
        user = uow.users.find_by_id(claims["user_id"])
        if user is None:
            raise Unauthorized("User not found")
        # role comes from the stored user, so approvals take effect without a new token
        return {"id": user.id, "role": user.role, "name": user.name, "email": user.email}


def require_role(*allowed: str) -> Callable[[Request], Dict[str, Any]]:
    """
    Dependency factory for role-based access control.

    Use like:
        Depends(require_role())                      # any signed-in user
        Depends(require_role("Admin"))
        Depends(require_role("Admin", "Sub-Admin"))
    """
    allowed_set: Set[str] = {r.value if isinstance(r, UserRole) else r for r in allowed}

    def _dep(request: Request) -> Dict[str, Any]:
        user = _current_user(request)
        if allowed_set and user["role"] not in allowed_set:
            raise Forbidden("Insufficient role")
        return user

    return _dep


# Convenience dependencies
require_user = require_role()
require_admin = require_role(UserRole.ADMIN)
require_lead_manager = require_role(UserRole.ADMIN, UserRole.SUB_ADMIN)
