from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_timestamp


def normalize_username(value) -> str:
    if not value:
        return ""
    return str(value).strip().lower()


@dataclass(frozen=True)
class Admin:
    """Cuenta de administrador.

    Nota: datos planos sin acceso a almacenamiento; los contadores de bloqueo
    viven aquí para que ambos backends los guarden igual.
    """

    username: str
    password_hash: str
    last_login: Optional[datetime] = None
    login_attempts: int = 0
    lock_until: Optional[datetime] = None

    def is_locked(self, now: datetime) -> bool:
        return self.lock_until is not None and now < self.lock_until

    def lock_time_remaining(self, now: datetime) -> timedelta:
        if not self.is_locked(now):
            return timedelta(0)
        return self.lock_until - now

    @classmethod
    def from_csv_row(cls, row: Mapping[str, Any]) -> Optional["Admin"]:
        username = normalize_username(row.get("username"))
        if not username:
            return None
        try:
            attempts = int(row.get("login_attempts") or 0)
        except ValueError:
            attempts = 0
        return cls(
            username=username,
            password_hash=row.get("password") or "",
            last_login=parse_timestamp(row.get("last_login")),
            login_attempts=attempts,
            lock_until=parse_timestamp(row.get("lock_until")),
        )

    def to_csv_row(self) -> dict[str, str]:
        return {
            "username": self.username,
            "password": self.password_hash,
            "last_login": self.last_login.isoformat() if self.last_login else "",
            "login_attempts": str(self.login_attempts),
            "lock_until": self.lock_until.isoformat() if self.lock_until else "",
        }
