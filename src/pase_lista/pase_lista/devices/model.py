from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_timestamp


@dataclass(frozen=True)
class Device:
    """Dispositivo (huella del navegador) usado para registrar asistencia."""

    device_fingerprint: str
    matricula: str
    first_registration: datetime
    last_used: datetime
    user_agent: str = ""

    @classmethod
    def from_csv_row(cls, row: Mapping[str, Any]) -> Optional["Device"]:
        fingerprint = (row.get("device_fingerprint") or "").strip()
        first = parse_timestamp(row.get("first_registration"))
        last = parse_timestamp(row.get("last_used")) or first
        if not fingerprint or first is None:
            return None
        return cls(
            device_fingerprint=fingerprint,
            matricula=(row.get("matricula") or "").strip().upper(),
            first_registration=first,
            last_used=last,
            user_agent=row.get("user_agent") or "",
        )

    def to_csv_row(self) -> dict[str, str]:
        return {
            "device_fingerprint": self.device_fingerprint,
            "matricula": self.matricula,
            "first_registration": self.first_registration.isoformat(),
            "last_used": self.last_used.isoformat(),
            "user_agent": self.user_agent,
        }

    def to_json(self) -> dict[str, Any]:
        return self.to_csv_row()
