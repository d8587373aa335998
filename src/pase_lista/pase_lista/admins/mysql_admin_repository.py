from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Admin, normalize_username
from .repository import AdminRepository


def _to_admin(row: dict) -> Admin:
    return Admin(
        username=row["username"],
        password_hash=row["password_hash"],
        last_login=row.get("last_login"),
        login_attempts=int(row.get("login_attempts") or 0),
        lock_until=row.get("lock_until"),
    )


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT username, password_hash, last_login, login_attempts, lock_until FROM admins")
            return [_to_admin(r) for r in fetchall(cur)]

    def get_by_username(self, username: str) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT username, password_hash, last_login, login_attempts, lock_until
                FROM admins
                WHERE username=%s
                """,
                (normalize_username(username),),
            )
            row = fetchone(cur)
            return _to_admin(row) if row else None

    def save(self, admin: Admin) -> Admin:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admins(username, password_hash, last_login, login_attempts, lock_until)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    password_hash=VALUES(password_hash),
                    last_login=VALUES(last_login),
                    login_attempts=VALUES(login_attempts),
                    lock_until=VALUES(lock_until)
                """,
                (admin.username, admin.password_hash, admin.last_login, admin.login_attempts, admin.lock_until),
            )
        return admin
