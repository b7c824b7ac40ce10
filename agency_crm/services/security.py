from __future__ import annotations
import time
from typing import Dict, List

from agency_crm.services import config
from agency_crm.services.errors import TooManyRequests

# ========================== LOGIN RATE LIMIT ==================================
# Sliding window per user key (normalised email)
_login_user: Dict[str, List[float]] = {}

def _prune(store: Dict[str, List[float]], key: str, now: float, window: int) -> None:
    store[key] = [t for t in store.get(key, []) if t >= now - window]

def check_login_rate_limit(user_key: str) -> None:
    """
    Called before a login attempt; throttles repeated failures for one account.
    """
    if config.RATE_LIMIT_DISABLED:
        return
    now = time.time()
    _prune(_login_user, user_key, now, config.RL_LOGIN_WINDOW_SEC)
    if len(_login_user.get(user_key, [])) >= config.RL_LOGIN_USER_MAX:
        raise TooManyRequests("Too many login attempts for this user")

def register_login_failure(user_key: str) -> None:
    if config.RATE_LIMIT_DISABLED:
        return
    now = time.time()
    _prune(_login_user, user_key, now, config.RL_LOGIN_WINDOW_SEC)
    _login_user.setdefault(user_key, []).append(now)

def reset_login_attempts(user_key: str) -> None:
    _login_user.pop(user_key, None)

def clear_rate_limits() -> None:
    _login_user.clear()
