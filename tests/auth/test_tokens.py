from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.hrm_system.hrm_system.auth.tokens import ALGORITHM, TokenService, decode_unverified
from src.hrm_system.hrm_system.core.exceptions import AuthenticationError
from src.hrm_system.hrm_system.core.permissions import Role


def test_issued_token_decodes_to_principal():
    svc = TokenService("secret", expires_hours=2)
    issued = svc.issue(employee_id=4, role=Role.HR_MANAGER, name="Mina")

    principal = svc.decode(issued.token)

    assert (principal.employee_id, principal.role, principal.name) == (4, Role.HR_MANAGER, "Mina")
    assert decode_unverified(issued.token)["role"] == "HR_Manager"


def test_expired_token_rejected():
    past = datetime.now(timezone.utc) - timedelta(hours=3)
    issued = TokenService("secret", expires_hours=1, clock=lambda: past).issue(employee_id=1, role=Role.EMPLOYEE, name="A")

    with pytest.raises(AuthenticationError, match="expired"):
        TokenService("secret").decode(issued.token)


def test_token_signed_with_other_secret_rejected():
    issued = TokenService("other").issue(employee_id=1, role=Role.EMPLOYEE, name="A")

    with pytest.raises(AuthenticationError, match="Invalid token"):
        TokenService("secret").decode(issued.token)


def test_legacy_role_spelling_is_normalized():
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"sub": "9", "role": "HR_ADMIN", "exp": exp}, "secret", algorithm=ALGORITHM)

    assert TokenService("secret").decode(token).role == Role.HR_ADMIN


def test_unknown_role_or_missing_token_rejected():
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"sub": "9", "role": "janitor", "exp": exp}, "secret", algorithm=ALGORITHM)

    with pytest.raises(AuthenticationError):
        TokenService("secret").decode(token)
    with pytest.raises(AuthenticationError, match="Missing"):
        TokenService("secret").decode(None)


def test_empty_secret_is_a_configuration_error():
    with pytest.raises(ValueError):
        TokenService("")
