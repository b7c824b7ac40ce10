# agency_crm/api/auth_api.py
from __future__ import annotations

from typing import Any, Dict, Annotated
from fastapi import APIRouter, Depends

from agency_crm.schemas import LoginIn, RegisterIn, VerifyIn
from agency_crm.services import users
from agency_crm.services.roles import require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api/auth", tags=["Auth"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]


# --------------------------------------------------------------------
# Public: login / register / verify
# --------------------------------------------------------------------
@router.post("/login")
def login(payload: LoginIn) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return users.login(uow, payload.email, payload.password)


@router.post("/register", status_code=201)
def register(payload: RegisterIn) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return users.register(uow, payload.name, payload.email, payload.password, payload.role)


@router.post("/verify")
def verify(payload: VerifyIn) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return users.verify_email(uow, payload.user_id, payload.code)


# --------------------------------------------------------------------
# Current session
# --------------------------------------------------------------------
@router.get("/me")
def me(current_user: CurrentUser) -> Dict[str, Any]:
    with unit_of_work() as uow:
        return users.me(uow, current_user["id"])
