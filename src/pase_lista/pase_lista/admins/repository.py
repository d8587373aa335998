from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Admin


class AdminRepository(Protocol):
    def list_all(self) -> Sequence[Admin]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Admin]:
        raise NotImplementedError

    def save(self, admin: Admin) -> Admin:
        """Insert or update the admin with the same username."""

        raise NotImplementedError
