# agency_crm/services/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

# Load .env if present (local/dev). Hosted environments already carry their envs.
load_dotenv()

def env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None: return default
    try:
        return bool(int(v))
    except ValueError:
        return str(v).strip().lower() in ("true", "yes", "y", "on")

def env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None: return default
    try:
        return int(v)
    except ValueError:
        return default

def env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None: return default
    try:
        return float(v)
    except ValueError:
        return default

def env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v is not None else default

# Environment
ENV = env_str("ENV", "local")                 # local | dev | prod
LOG_LEVEL = env_str("LOG_LEVEL", "INFO").upper()

# Database (see agency_crm/store/db.py for URL precedence)
DATABASE_URL = env_str("DATABASE_URL", "")
DB_ECHO = env_bool("DB_ECHO", False)
SEED_DEMO_DATA = env_bool("SEED_DEMO_DATA", True)

# JWT
JWT_SECRET = env_str("JWT_SECRET", "dev-secret-please-change")
ACCESS_TOKEN_TTL_MIN = env_int("ACCESS_TOKEN_TTL_MIN", 10080)  # 7 days
TOKEN_ISSUER = env_str("TOKEN_ISSUER", "agency-crm.local")

# Transport
SIMULATED_LATENCY_MS = env_int("SIMULATED_LATENCY_MS", 0)
CORS_ORIGINS = [o.strip() for o in env_str("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",") if o.strip()]

# Business rules
RENEWAL_WINDOW_DAYS = env_int("RENEWAL_WINDOW_DAYS", 30)
MESSAGE_EDIT_WINDOW_SEC = env_int("MESSAGE_EDIT_WINDOW_SEC", 120)
MESSAGE_HARD_DELETE_HOURS = env_int("MESSAGE_HARD_DELETE_HOURS", 24)
DEFAULT_COMMISSION_RATE = env_float("DEFAULT_COMMISSION_RATE", 0.75)
# Simulation only: password given to agents whose login is recreated on reactivation.
DEFAULT_AGENT_PASSWORD = env_str("DEFAULT_AGENT_PASSWORD", "password123")
# When on, reassigning a lead moves the counter and re-conversion is a no-op.
STRICT_LEAD_TRANSITIONS = env_bool("STRICT_LEAD_TRANSITIONS", False)

# Seeded administrator
ADMIN_EMAIL = env_str("ADMIN_EMAIL", "support@newhollandfinancial.com")
ADMIN_PASSWORD = env_str("ADMIN_PASSWORD", "Support@2025")

# Login rate limits (window & caps)
RL_LOGIN_USER_MAX = env_int("RL_LOGIN_USER_MAX", 10) # per window
RL_LOGIN_WINDOW_SEC = env_int("RL_LOGIN_WINDOW_SEC", 15 * 60)
RATE_LIMIT_DISABLED = env_bool("RATE_LIMIT_DISABLED", False)
