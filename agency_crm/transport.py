# agency_crm/transport.py
"""
In-process request shim.

    data = await handle_request("GET", "/api/data", headers={"Authorization": f"Bearer {token}"})

Drives the FastAPI app through httpx's ASGI transport (no socket), returning
the decoded JSON body on 2xx and raising ``ApiError`` otherwise.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

import httpx

from agency_crm.store.db import init_db

logger = logging.getLogger(__name__)

BASE_URL = "http://agency-crm.local"

_ready = False
_ready_lock = threading.Lock()


class ApiError(Exception):
    """Non-2xx response: ``status`` plus the server's ``message`` and full payload."""

    def __init__(self, status: int, message: str, payload: Optional[Dict[str, Any]] = None):
        self.status = status
        self.message = message
        self.payload = payload or {}
        super().__init__(f"{status}: {message}")


def _ensure_ready() -> None:
    # ASGITransport does not run startup handlers; create schema/seed once here.
    global _ready
    with _ready_lock:
        if not _ready:
            init_db()
            _ready = True


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        msg = payload.get("message") or payload.get("detail")
        if isinstance(msg, str):
            return msg
        if msg is not None:
            return str(msg)
    return fallback


async def handle_request(
    method: str,
    path: str,
    body: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    from agency_crm.main import app

    _ensure_ready()
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        resp = await client.request(method.upper(), path, json=body, headers=headers or {})

    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if resp.is_success:
        return payload
    logger.debug("%s %s -> %s", method, path, resp.status_code)
    raise ApiError(resp.status_code, _error_message(payload, resp.reason_phrase), payload if isinstance(payload, dict) else None)


class ApiClient:
    """Keeps the bearer token from login and attaches it to every call."""

    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.user: Optional[Dict[str, Any]] = None

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        return await handle_request(method, path, body=body, headers=self._headers())

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        result = await handle_request("POST", "/api/auth/login", body={"email": email, "password": password})
        self.token = result["token"]
        self.user = result["user"]
        return result

    def logout(self) -> None:
        self.token = None
        self.user = None

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, body: Optional[Any] = None) -> Any:
        return await self.request("POST", path, body)

    async def put(self, path: str, body: Optional[Any] = None) -> Any:
        return await self.request("PUT", path, body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
