from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import format_long_date
from ..common.log import get_logger
from ..common.validators import normalize_matricula
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_REPORT_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..devices.service import DeviceService
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    record: AttendanceRecord
    student: Student

    @property
    def message(self) -> str:
        return (
            "¡Asistencia registrada exitosamente! "
            f"Grado y Nombre: {self.student.nombre}. Grupo: {self.student.grupo}"
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "attendance": self.record.to_json(),
            "student": self.student.to_json(),
        }


_COUNTS_AS_PRESENT = (AttendanceStatus.REGISTERED, AttendanceStatus.PRESENT)


def _rate(present: int, total: int) -> float:
    return round(present / total * 100, 1) if total > 0 else 0.0


def average_time(records) -> Optional[str]:
    """Mean time of day of *records* as ``HH:MM``, halves rounded up."""
    minutes = [a.timestamp.hour * 60 + a.timestamp.minute for a in records]
    if not minutes:
        return None
    avg = (sum(minutes) * 2 + len(minutes)) // (2 * len(minutes))
    return f"{avg // 60:02d}:{avg % 60:02d}"


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("La fecha inicial debe ser anterior a la final", code="INVALID_DATE_RANGE")
    if (end - start).days + 1 > MAX_REPORT_DAYS:
        raise ValidationError(
            f"El rango de fechas no puede exceder {MAX_REPORT_DAYS} días", code="INVALID_DATE_RANGE"
        )


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        devices: Optional[DeviceService] = None,
    ):
        self._attendance = attendance
        self._students = students
        self._devices = devices

    def register(
        self,
        matricula,
        *,
        device_fingerprint: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        clean = normalize_matricula(matricula)
        if not clean:
            raise ValidationError("Matrícula es requerida", code="MISSING_MATRICULA")

        now = now or datetime.now()
        today = now.date()

        student = self._students.get_by_matricula(clean)
        if not student:
            raise NotFoundError(
                "Matrícula no encontrada en la lista. Contacte al administrador.",
                code="STUDENT_NOT_REGISTERED",
            )

        existing = self._attendance.get_for_student_and_date(clean, today)
        if existing:
            raise ConflictError(
                f"Ya se registró su asistencia hoy a las {existing.formatted_time}",
                code="ALREADY_REGISTERED_TODAY",
            )

        record = AttendanceRecord.create(
            matricula=student.matricula,
            nombre=student.nombre,
            grupo=student.grupo,
            timestamp=now,
            status=AttendanceStatus.REGISTERED,
        )
        try:
            self._attendance.create(record)
        except ConflictError as e:
            raise ConflictError("Ya se registró su asistencia hoy", code="ALREADY_REGISTERED_TODAY") from e

        if self._devices:
            self._devices.register_usage(
                matricula=student.matricula,
                device_fingerprint=device_fingerprint,
                user_agent=user_agent,
                now=now,
            )

        log.info("Asistencia registrada: %s (%s)", student.nombre, student.matricula)
        return RegistrationResult(record=record, student=student)

    def find_today(self, matricula, *, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        clean = normalize_matricula(matricula)
        if not clean:
            return None
        return self._attendance.get_for_student_and_date(clean, today or date.today())

    def list_by_date(self, day: Optional[date] = None) -> list[AttendanceRecord]:
        return list(self._attendance.list_by_date(day or date.today()))

    def student_history(self, matricula, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRecord]:
        clean = normalize_matricula(matricula)
        if not clean:
            raise ValidationError("Matrícula es requerida", code="MISSING_MATRICULA")
        return list(self._attendance.list_for_student(clean, limit=limit))

    def history_summary(self, matricula, *, limit: int = DEFAULT_HISTORY_LIMIT) -> dict[str, Any]:
        records = self.student_history(matricula, limit=limit)
        return {
            "matricula": normalize_matricula(matricula),
            "attendances": [a.to_json() for a in records],
            "summary": {
                "total_records": len(records),
                "last_attendance": records[0].to_json() if records else None,
                "average_attendance_time": average_time(records),
            },
        }

    def stats(self, day: Optional[date] = None) -> dict[str, Any]:
        day = day or date.today()
        students = list(self._students.list_all())
        records = list(self._attendance.list_by_date(day))
        present = [a for a in records if a.status in _COUNTS_AS_PRESENT]
        present_ids = {a.matricula for a in present}
        absent = [s for s in students if s.matricula not in present_ids]

        return {
            "date": day.isoformat(),
            "total_students": len(students),
            "present": len(present),
            "absent": len(absent),
            "attendance_rate": _rate(len(present), len(students)),
            "by_group": self._stats_by_group(students, present),
            "by_status": self._count_by_status(records),
        }

    @staticmethod
    def _count_by_status(records: list[AttendanceRecord]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for a in records:
            counts[a.status.value] = counts.get(a.status.value, 0) + 1
        return counts

    @staticmethod
    def _stats_by_group(students: list[Student], present: list[AttendanceRecord]) -> dict[str, dict]:
        groups: dict[str, dict] = {}
        for s in students:
            g = groups.setdefault(s.grupo, {"total": 0, "present": 0, "absent": 0, "attendance_rate": 0.0})
            g["total"] += 1

        for a in present:
            if a.grupo in groups:
                groups[a.grupo]["present"] += 1

        for g in groups.values():
            g["absent"] = g["total"] - g["present"]
            g["attendance_rate"] = _rate(g["present"], g["total"])
        return groups

    def detailed_list(self, day: Optional[date] = None) -> dict[str, Any]:
        day = day or date.today()
        students = list(self._students.list_all())
        records = list(self._attendance.list_by_date(day))

        present = [
            {
                "matricula": a.matricula,
                "nombre": a.nombre,
                "grupo": a.grupo,
                "timestamp": a.timestamp.isoformat(),
                "status": "Presente",
                "formatted_time": a.formatted_time,
            }
            for a in records
            if a.status in _COUNTS_AS_PRESENT
        ]
        seen = {a.matricula for a in records}
        absent = [
            {
                "matricula": s.matricula,
                "nombre": s.nombre,
                "grupo": s.grupo,
                "timestamp": None,
                "status": "Ausente",
                "formatted_time": "-",
            }
            for s in students
            if s.matricula not in seen
        ]

        present.sort(key=lambda x: x["nombre"])
        absent.sort(key=lambda x: x["nombre"])
        return {
            "date": day.isoformat(),
            "formatted_date": format_long_date(day),
            "present": present,
            "absent": absent,
            "summary": {
                "total_students": len(students),
                "present": len(present),
                "absent": len(absent),
                "attendance_rate": _rate(len(present), len(students)),
            },
        }

    def report(self, start: date, end: date) -> dict[str, Any]:
        _check_range(start, end)

        students = list(self._students.list_all())
        records = [a for a in self._attendance.list_between(start, end) if a.status in _COUNTS_AS_PRESENT]

        present_by_day: dict[date, set[str]] = {}
        for a in records:
            present_by_day.setdefault(a.attendance_date, set()).add(a.matricula)

        per_student = {
            s.matricula: {"student": s.to_json(), "days_present": 0, "days_absent": 0, "attendance_dates": []}
            for s in students
        }

        daily: dict[str, dict] = {}
        day = start
        while day <= end:
            present_ids = present_by_day.get(day, set())
            present_count = sum(1 for s in students if s.matricula in present_ids)
            daily[day.isoformat()] = {
                "date": day.isoformat(),
                "present": present_count,
                "absent": len(students) - present_count,
                "attendance_rate": _rate(present_count, len(students)),
            }
            for s in students:
                entry = per_student[s.matricula]
                if s.matricula in present_ids:
                    entry["days_present"] += 1
                    entry["attendance_dates"].append(day.isoformat())
                else:
                    entry["days_absent"] += 1
            day += timedelta(days=1)

        total_days = len(daily)
        for entry in per_student.values():
            entry["attendance_rate"] = _rate(entry["days_present"], total_days)

        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "total_days": total_days,
            "total_students": len(students),
            "total_records": len(records),
            "summary": {
                "total_students": len(students),
                "avg_daily_attendance": round(sum(d["present"] for d in daily.values()) / total_days, 1),
                "avg_attendance_rate": round(sum(d["attendance_rate"] for d in daily.values()) / total_days, 1),
            },
            "daily": daily,
            "students": sorted(per_student.values(), key=lambda e: e["attendance_rate"], reverse=True),
        }

    def export_rows(self, start: date, end: date) -> list[dict[str, str]]:
        _check_range(start, end)
        rows = []
        for a in self._attendance.list_between(start, end):
            row = a.to_csv_row()
            row["date"] = a.attendance_date.isoformat()
            rows.append(row)
        return rows

    def clear(self) -> int:
        count = self._attendance.clear()
        log.info("Registros de asistencia limpiados (%d)", count)
        return count

    def validate_integrity(self) -> dict[str, Any]:
        records = list(self._attendance.list_all())
        known = {s.matricula for s in self._students.list_all()}

        seen: set[tuple[str, date]] = set()
        duplicates: list[dict] = []
        orphans: list[dict] = []
        for a in records:
            key = (a.matricula, a.attendance_date)
            if key in seen:
                duplicates.append({"matricula": a.matricula, "date": a.attendance_date.isoformat()})
            seen.add(key)
            if a.matricula not in known:
                orphans.append({"matricula": a.matricula, "date": a.attendance_date.isoformat()})

        return {
            "total": len(records),
            "valid": not duplicates and not orphans,
            "duplicates": duplicates,
            "unknown_students": orphans,
        }
