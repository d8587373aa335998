from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, matricula: str, *, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(self, matricula: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist *record*; raises ConflictError if the student already registered that day."""

        raise NotImplementedError

    def clear(self) -> int:
        raise NotImplementedError
