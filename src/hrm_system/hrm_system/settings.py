from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from types import ModuleType
from typing import Any


@dataclass(frozen=True)
class Settings:
    """Typed view over a ``config.*`` settings module.

    Every field has a default so tests can build one directly.
    """

    SECRET_KEY: str = "change-me"
    DB_CONFIG: dict = field(default_factory=dict)
    JWT_SECRET: str = "change-me"
    JWT_EXPIRES_HOURS: int = 24
    COMPANY_TIMEZONE: str = "UTC"
    DEFAULT_GRACE_MINUTES: int = 15
    FINALIZATION_GRACE_MINUTES: int = 15
    FINALIZATION_INTERVAL_MINUTES: int = 15
    ENABLE_SCHEDULER: bool = False
    CORS_ORIGINS: tuple = ()
    LOG_LEVEL: str = "INFO"
    IP_LOOKUP_ENABLED: bool = False
    IP_LOOKUP_URL: str = "http://ip-api.com/json"
    IP_LOOKUP_TTL_SECONDS: int = 3600
    IP_LOOKUP_CACHE_SIZE: int = 1024
    LEAVE_EXCLUDE_WEEKENDS: bool = True
    LEAVE_EXCLUDE_HOLIDAYS: bool = True
    PF_RATE: Decimal = Decimal("0.12")
    TAX_RATE: Decimal = Decimal("0.10")
    TAX_THRESHOLD: Decimal = Decimal("50000")
    SSE_POLL_SECONDS: float = 5.0
    SSE_MAX_SECONDS: float = 300.0
    DEBUG: bool = False
    TESTING: bool = False
    AUTO_INIT_DB: bool = False
    AUTO_SEED_DB: bool = False

    @classmethod
    def from_module(cls, module: ModuleType) -> "Settings":
        values: dict[str, Any] = {}
        for f in fields(cls):
            if not hasattr(module, f.name):
                continue
            value = getattr(module, f.name)
            if f.name in ("PF_RATE", "TAX_RATE", "TAX_THRESHOLD"):
                value = Decimal(str(value))
            elif f.name == "CORS_ORIGINS":
                value = tuple(value or ())
            values[f.name] = value
        return cls(**values)
