from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.validators import normalize_matricula
from ..core.constants import ATTENDANCE_FILE, ATTENDANCE_HEADERS
from ..core.exceptions import ConflictError
from ..csvio.store import CsvStore
from .model import AttendanceRecord
from .repository import AttendanceRepository


class CsvAttendanceRepository(AttendanceRepository):
    def __init__(self, store: CsvStore, *, filename: str = ATTENDANCE_FILE):
        self._store = store
        self._path = store.path_for(filename)

    def list_all(self) -> Sequence[AttendanceRecord]:
        records = []
        for row in self._store.read_rows(self._path):
            record = AttendanceRecord.from_csv_row(row)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        rows = [r for r in self.list_all() if r.attendance_date == attendance_date]
        rows.sort(key=lambda r: r.timestamp)
        return rows

    def list_between(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        rows = [r for r in self.list_all() if start_date <= r.attendance_date <= end_date]
        rows.sort(key=lambda r: (r.attendance_date, r.timestamp))
        return rows

    def list_for_student(self, matricula: str, *, limit: int) -> Sequence[AttendanceRecord]:
        target = normalize_matricula(matricula)
        return [r for r in self.list_all() if r.matricula == target][: int(limit)]

    def get_for_student_and_date(self, matricula: str, attendance_date: date) -> Optional[AttendanceRecord]:
        target = normalize_matricula(matricula)
        return next(
            (r for r in self.list_all() if r.matricula == target and r.attendance_date == attendance_date),
            None,
        )

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._store.locked(self._path):
            if self.get_for_student_and_date(record.matricula, record.attendance_date):
                raise ConflictError("Ya se registró su asistencia hoy", code="ALREADY_REGISTERED_TODAY")
            self._store.append_row(self._path, record.to_csv_row(), ATTENDANCE_HEADERS)
        return record

    def clear(self) -> int:
        count = len(self._store.read_rows(self._path))
        self._store.write_empty(self._path, ATTENDANCE_HEADERS)
        return count
