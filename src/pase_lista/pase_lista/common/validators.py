from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_MATRICULA_RE = re.compile(r"^[A-Za-z0-9]+$")
_MATRICULA_STRIP_RE = re.compile(r"[\s\-]")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} es requerido")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} debe tener al menos {min_len} caracteres")
    return value


def normalize_matricula(value) -> str:
    """Upper-case a student id and drop spaces and hyphens."""
    if value is None or value == "":
        return ""
    return _MATRICULA_STRIP_RE.sub("", str(value).strip().upper())


def is_valid_matricula(value: str) -> bool:
    return bool(value) and _MATRICULA_RE.match(value) is not None
