from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_long_date, format_time, parse_timestamp
from ..common.validators import normalize_matricula
from ..core.enums import AttendanceStatus
from ..students.model import normalize_group


@dataclass(frozen=True)
class AttendanceRecord:
    """Registro de asistencia de un estudiante en un día."""

    matricula: str
    nombre: str
    grupo: str
    timestamp: datetime
    attendance_date: date
    status: AttendanceStatus = AttendanceStatus.REGISTERED

    @classmethod
    def create(
        cls,
        *,
        matricula,
        nombre: str,
        grupo: str,
        timestamp: datetime,
        status: AttendanceStatus = AttendanceStatus.REGISTERED,
        attendance_date: Optional[date] = None,
    ) -> "AttendanceRecord":
        return cls(
            matricula=normalize_matricula(matricula),
            nombre=(nombre or "").strip(),
            grupo=normalize_group(grupo),
            timestamp=timestamp,
            attendance_date=attendance_date or timestamp.date(),
            status=status,
        )

    @classmethod
    def from_csv_row(cls, row: Mapping[str, Any]) -> Optional["AttendanceRecord"]:
        """Build a record from a stored CSV row; None when the row is unusable."""
        matricula = row.get("matricula")
        if not matricula:
            key = next((k for k in row if isinstance(k, str) and "matricula" in k.lower()), None)
            matricula = row.get(key) if key else ""
        timestamp = parse_timestamp(row.get("timestamp"))
        if not normalize_matricula(matricula) or timestamp is None:
            return None
        try:
            status = AttendanceStatus(row.get("status") or AttendanceStatus.REGISTERED.value)
        except ValueError:
            return None
        return cls.create(
            matricula=matricula,
            nombre=row.get("nombre") or "",
            grupo=row.get("grupo") or "",
            timestamp=timestamp,
            status=status,
        )

    @property
    def formatted_time(self) -> str:
        return format_time(self.timestamp)

    @property
    def formatted_date(self) -> str:
        return format_long_date(self.attendance_date)

    def to_csv_row(self) -> dict[str, str]:
        return {
            "matricula": self.matricula,
            "nombre": self.nombre,
            "grupo": self.grupo,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
        }

    def to_json(self) -> dict[str, Any]:
        return {
            "matricula": self.matricula,
            "nombre": self.nombre,
            "grupo": self.grupo,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "date": self.attendance_date.isoformat(),
            "formatted_time": self.formatted_time,
            "formatted_date": self.formatted_date,
        }
