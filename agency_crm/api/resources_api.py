# agency_crm/api/resources_api.py
"""
CRUD routes for the secondary tables, registered once per resource at import
time: GET/POST /api/<resource>, GET/PUT/DELETE /api/<resource>/{record_id}.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Annotated
from fastapi import APIRouter, Body, Depends

from agency_crm.services import resources
from agency_crm.services.roles import require_user
from agency_crm.store.repository import unit_of_work

router = APIRouter(prefix="/api", tags=["Resources"])

CurrentUser = Annotated[Dict[str, Any], Depends(require_user)]
Payload = Annotated[Dict[str, Any], Body()]


def _list(name: str) -> Callable[..., List[Dict[str, Any]]]:
    def handler(current_user: CurrentUser) -> List[Dict[str, Any]]:
        with unit_of_work() as uow:
            return resources.list_rows(uow, current_user, name)
    return handler


def _get(name: str) -> Callable[..., Dict[str, Any]]:
    def handler(record_id: int, current_user: CurrentUser) -> Dict[str, Any]:
        with unit_of_work() as uow:
            return resources.get_row(uow, current_user, name, record_id).to_dict()
    return handler


def _create(name: str) -> Callable[..., Dict[str, Any]]:
    def handler(payload: Payload, current_user: CurrentUser) -> Dict[str, Any]:
        with unit_of_work() as uow:
            return resources.create_row(uow, current_user, name, payload).to_dict()
    return handler


def _update(name: str) -> Callable[..., Dict[str, Any]]:
    def handler(record_id: int, payload: Payload, current_user: CurrentUser) -> Dict[str, Any]:
        with unit_of_work() as uow:
            return resources.update_row(uow, current_user, name, record_id, payload).to_dict()
    return handler


def _delete(name: str) -> Callable[..., Dict[str, Any]]:
    def handler(record_id: int, current_user: CurrentUser) -> Dict[str, Any]:
        with unit_of_work() as uow:
            return {"success": resources.delete_row(uow, current_user, name, record_id)}
    return handler


for _name in resources.MANAGED_RESOURCES:
    _path = f"/{_name}"
    router.add_api_route(_path, _list(_name), methods=["GET"], name=f"list_{_name}")
    router.add_api_route(_path, _create(_name), methods=["POST"], status_code=201, name=f"create_{_name}")
    router.add_api_route(_path + "/{record_id}", _get(_name), methods=["GET"], name=f"get_{_name}")
    router.add_api_route(_path + "/{record_id}", _update(_name), methods=["PUT"], name=f"update_{_name}")
    router.add_api_route(_path + "/{record_id}", _delete(_name), methods=["DELETE"], name=f"delete_{_name}")
