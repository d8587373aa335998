from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request, session

from ..core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .datetime_utils import parse_iso_date
from .log import get_logger

log = get_logger(__name__)

# Most specific first: AccountLockedError is an AuthenticationError.
_STATUS_BY_ERROR = (
    (AccountLockedError, 423),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (StorageError, 500),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def error_response(error: DomainError):
    return jsonify({"success": False, "error": str(error), "code": error.code}), status_for(error)


def server_error(message: str = "Error interno del servidor"):
    return jsonify({"success": False, "error": message, "code": "INTERNAL_ERROR"}), 500


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("admin"):
            return (
                jsonify({"success": False, "error": "Token de autorización requerido", "code": "MISSING_TOKEN"}),
                401,
            )
        return view(*args, **kwargs)

    return wrapper


def handle_errors(view):
    """Turn domain errors into JSON responses; log anything unexpected."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            if isinstance(e, StorageError):
                log.error("%s %s: %s", request.method, request.path, e)
            return error_response(e)
        except Exception:
            log.exception("Error no controlado en %s %s", request.method, request.path)
            return server_error()

    return wrapper


def request_data() -> Mapping[str, Any]:
    """JSON object body of the request, or its form fields when it has no JSON."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form
    if not isinstance(data, Mapping):
        raise ValidationError("El cuerpo de la solicitud debe ser un objeto JSON", code="INVALID_BODY")
    return data


def parse_date_arg(value: Optional[str], field_name: str = "fecha") -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Formato de {field_name} inválido (YYYY-MM-DD)", code="INVALID_DATE")
