from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.validators import normalize_matricula
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "matricula, nombre, grupo, attendance_date, recorded_at, status"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        matricula=r["matricula"],
        nombre=r["nombre"],
        grupo=r["grupo"],
        timestamp=r["recorded_at"],
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendances ORDER BY recorded_at DESC")
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE attendance_date=%s
                ORDER BY recorded_at ASC
                """,
                (attendance_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_between(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date ASC, recorded_at ASC
                """,
                (start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, matricula: str, *, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE matricula=%s
                ORDER BY recorded_at DESC
                LIMIT %s
                """,
                (normalize_matricula(matricula), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_student_and_date(self, matricula: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE matricula=%s AND attendance_date=%s
                """,
                (normalize_matricula(matricula), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        now = datetime.now()
        # Unique (matricula, attendance_date) turns a race into ConflictError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(matricula, nombre, grupo, attendance_date, recorded_at, status, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.matricula,
                    record.nombre,
                    record.grupo,
                    record.attendance_date,
                    record.timestamp,
                    record.status.value,
                    now,
                    now,
                ),
            )
        return record

    def clear(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances")
            return int(cur.rowcount or 0)
