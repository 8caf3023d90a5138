"""Settings shared by every environment, read from the process environment.

``python-dotenv`` loads ``.env`` before this module is imported, so values
there behave like real environment variables.
"""

import os


def _bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.getenv("SECRET_KEY", "change-me")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrm_db"),
}

JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "24"))

# IANA zone name; attendance rules are evaluated in this zone.
COMPANY_TIMEZONE = os.getenv("COMPANY_TIMEZONE", "Asia/Kolkata")
DEFAULT_GRACE_MINUTES = int(os.getenv("DEFAULT_GRACE_MINUTES", "15"))
FINALIZATION_GRACE_MINUTES = int(os.getenv("FINALIZATION_GRACE_MINUTES", "15"))
FINALIZATION_INTERVAL_MINUTES = int(os.getenv("FINALIZATION_INTERVAL_MINUTES", "15"))
ENABLE_SCHEDULER = _bool("ENABLE_SCHEDULER", "1")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

IP_LOOKUP_ENABLED = _bool("IP_LOOKUP_ENABLED", "1")
IP_LOOKUP_URL = os.getenv("IP_LOOKUP_URL", "http://ip-api.com/json")
IP_LOOKUP_TTL_SECONDS = int(os.getenv("IP_LOOKUP_TTL_SECONDS", "3600"))
IP_LOOKUP_CACHE_SIZE = int(os.getenv("IP_LOOKUP_CACHE_SIZE", "1024"))

LEAVE_EXCLUDE_WEEKENDS = _bool("LEAVE_EXCLUDE_WEEKENDS", "1")
LEAVE_EXCLUDE_HOLIDAYS = _bool("LEAVE_EXCLUDE_HOLIDAYS", "1")

PF_RATE = os.getenv("PF_RATE", "0.12")
TAX_RATE = os.getenv("TAX_RATE", "0.10")
TAX_THRESHOLD = os.getenv("TAX_THRESHOLD", "50000")

SSE_POLL_SECONDS = float(os.getenv("SSE_POLL_SECONDS", "5"))
SSE_MAX_SECONDS = float(os.getenv("SSE_MAX_SECONDS", "300"))

DEBUG = False
TESTING = False

AUTO_INIT_DB = _bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _bool("AUTO_SEED_DB", "0")
