"""Request guards for bearer-token authentication.

Controllers stack these decorators; the decoded Principal is stored on
``flask.g.principal`` for the view.
"""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import current_app, g, request

from ..core.exceptions import AuthenticationError, AuthorizationError
from ..core.permissions import Permission, has_permission
from .tokens import Principal, TokenService


def _token_service() -> TokenService:
    return current_app.extensions["hrm"].token_service


def _bearer_token(*, allow_query: bool) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    if allow_query:
        # EventSource cannot send headers.
        return request.args.get("token") or None
    return None


def current_principal() -> Principal:
    principal = getattr(g, "principal", None)
    if principal is None:
        raise AuthenticationError("Not authenticated")
    return principal


def jwt_required(view=None, *, allow_query_token: bool = False):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _bearer_token(allow_query=allow_query_token)
            g.principal = _token_service().decode(token)
            return fn(*args, **kwargs)

        return wrapper

    if view is not None:
        return decorator(view)
    return decorator


def permission_required(permission: Permission):
    def decorator(fn):
        @wraps(fn)
        @jwt_required
        def wrapper(*args, **kwargs):
            if not has_permission(current_principal().role, permission):
                raise AuthorizationError("You do not have access to this resource")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
