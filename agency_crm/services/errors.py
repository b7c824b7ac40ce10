"""
Error taxonomy for the CRM domain handlers.

Handlers raise these; the HTTP layer renders them as

    {"error": "NotFound", "message": "...", "status_code": 404, "detail": "..."}

and the in-process transport re-raises them as ``ApiError``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class CRMError(Exception):
    """Base class for status-coded domain errors."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "detail": self.message,
            "status_code": self.status_code,
            **self.extra,
        }


class BadRequest(CRMError):
    status_code = 400


class Unauthorized(CRMError):
    status_code = 401


class Forbidden(CRMError):
    status_code = 403


class NotFound(CRMError):
    status_code = 404


class Conflict(CRMError):
    status_code = 409


class TooManyRequests(CRMError):
    status_code = 429
