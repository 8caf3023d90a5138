from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ..core.exceptions import AuthenticationError
from ..core.permissions import Role, normalize_role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, decoded from a bearer token."""

    employee_id: int
    role: Role
    name: str


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        expires_hours: int = 24,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(hours=int(expires_hours))
        self._clock = clock

    def issue(self, *, employee_id: int, role: Role, name: str) -> IssuedToken:
        now = self._clock()
        expires_at = now + self._ttl
        payload = {
            "sub": str(employee_id),
            "role": role.value,
            "name": name,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        return IssuedToken(token=token, expires_at=expires_at.replace(tzinfo=None))

    def decode(self, token: Optional[str]) -> Principal:
        if not token:
            raise AuthenticationError("Missing bearer token")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"]},
                leeway=0,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", e)
            raise AuthenticationError("Invalid token")

        role = normalize_role(payload.get("role"))
        if role is None:
            raise AuthenticationError("Invalid token")
        try:
            employee_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token")
        return Principal(employee_id=employee_id, role=role, name=str(payload.get("name") or ""))


def decode_unverified(token: str) -> dict:
    """Inspect a token without checking its signature (diagnostics only)."""

    return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
