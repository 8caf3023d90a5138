"""JSON envelope, error mapping and serialization shared by all controllers.

Every response body has the shape ``{"success", "message", "data"}``.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


class ApiJSONProvider(DefaultJSONProvider):
    """ISO dates, UTC instants with a ``Z`` suffix, Decimals as numbers."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, datetime):
            if o.tzinfo is None:
                return o.isoformat(timespec="seconds") + "Z"
            return o.isoformat(timespec="seconds")
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, time):
            return o.strftime("%H:%M")
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, Enum):
            return o.value
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return DefaultJSONProvider.default(o)


def send_response(data: Any = None, message: str = "", *, success: bool = True, status: int = 200):
    return jsonify({"success": success, "message": message, "data": data}), status


def get_json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.remote_addr


def register_error_handlers(app: Flask) -> None:
    app.json = ApiJSONProvider(app)

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.status_code >= 401:
            logger.info("%s %s -> %s: %s", request.method, request.path, e.status_code, e)
        return send_response(None, str(e), success=False, status=e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return send_response(None, e.description or e.name, success=False, status=e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = f"Internal server error: {e}" if app.config.get("DEBUG") else "Internal server error"
        return send_response(None, message, success=False, status=500)
