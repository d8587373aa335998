from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.validators import normalize_matricula
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository


def _to_student(row: dict) -> Student:
    return Student.create(
        matricula=row["matricula"],
        nombre=row["nombre"],
        grupo=row["grupo"],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT matricula, nombre, grupo, created_at, updated_at
                FROM students
                ORDER BY nombre
                """
            )
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_matricula(self, matricula: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT matricula, nombre, grupo, created_at, updated_at
                FROM students
                WHERE matricula=%s
                """,
                (normalize_matricula(matricula),),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None

    def replace_all(self, students: Sequence[Student]) -> int:
        now = datetime.now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students")
            if students:
                cur.executemany(
                    """
                    INSERT INTO students(matricula, nombre, grupo, created_at, updated_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    [(s.matricula, s.nombre, s.grupo, s.created_at or now, now) for s in students],
                )
        return len(students)

    def clear(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students")
            return int(cur.rowcount or 0)
