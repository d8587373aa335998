from __future__ import annotations

from datetime import date, datetime

_MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 timestamp as stored in CSV files (``Z`` suffix allowed)."""
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


def format_long_date(value: date) -> str:
    """``15 de marzo de 2025``."""
    return f"{value.day} de {_MONTHS_ES[value.month - 1]} de {value.year}"
