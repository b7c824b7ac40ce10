# agency_crm/services/auth_service.py
from __future__ import annotations
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timedelta, timezone
import secrets
import string

import jwt  # PyJWT
from passlib.hash import argon2

from agency_crm.services.config import JWT_SECRET, ACCESS_TOKEN_TTL_MIN, TOKEN_ISSUER

ALG = "HS256"
BEARER_PREFIX = "bearer "

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

# ───────────────────────────────────────────────────────────────────────────────
# Password hashing (Argon2)
# ───────────────────────────────────────────────────────────────────────────────
def hash_password(plaintext: str) -> str:
    return argon2.hash(plaintext)

def verify_password(plaintext: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return argon2.verify(plaintext, hashed)
    except (ValueError, TypeError):
        return False

def verify_and_upgrade_password(plaintext: str, hashed: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Verify and optionally upgrade hash params. Returns (ok, new_hash_or_None).
    """
    if not verify_password(plaintext, hashed):
        return False, None
    if argon2.identify(hashed) and argon2.needs_update(hashed):
        return True, argon2.hash(plaintext)
    return True, None

def new_verification_code(length: int = 6) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))

# ───────────────────────────────────────────────────────────────────────────────
# JWT helpers
# ───────────────────────────────────────────────────────────────────────────────
def _encode(payload: Dict[str, Any], expires_in: timedelta) -> str:
    now = _utcnow()
    to_encode = {
        "iss": TOKEN_ISSUER,
        **payload,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(to_encode, JWT_SECRET, algorithm=ALG)

def _decode(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[ALG], options={"require": ["exp", "iat"]})
    except jwt.PyJWTError:
        return None

def create_access_token(user_id: int, role: str, ttl_minutes: Optional[int] = None) -> str:
    minutes = ACCESS_TOKEN_TTL_MIN if ttl_minutes is None else int(ttl_minutes)
    # PyJWT requires "sub" to be a string
    return _encode({"typ": "access", "sub": str(user_id), "role": role}, timedelta(minutes=minutes))

def decode_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode an access token; None when missing, expired, forged or of the wrong type."""
    if not token:
        return None
    claims = _decode(token)
    if not claims or claims.get("typ") != "access":
        return None
    try:
        claims["user_id"] = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None
    return claims

def token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Extract <token> from 'Authorization: Bearer <token>'."""
    if not authorization:
        return None
    value = authorization.strip()
    if value.lower().startswith(BEARER_PREFIX):
        return value[len(BEARER_PREFIX):].strip() or None
    return None
