from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import ADMIN_HEADERS, ADMINS_FILE
from ..csvio.store import CsvStore
from .model import Admin, normalize_username
from .repository import AdminRepository


class CsvAdminRepository(AdminRepository):
    def __init__(self, store: CsvStore, *, filename: str = ADMINS_FILE):
        self._store = store
        self._path = store.path_for(filename)

    def list_all(self) -> Sequence[Admin]:
        admins = []
        for row in self._store.read_rows(self._path):
            admin = Admin.from_csv_row(row)
            if admin is not None:
                admins.append(admin)
        return admins

    def get_by_username(self, username: str) -> Optional[Admin]:
        target = normalize_username(username)
        return next((a for a in self.list_all() if a.username == target), None)

    def save(self, admin: Admin) -> Admin:
        with self._store.locked(self._path):
            admins = [a for a in self.list_all() if a.username != admin.username]
            admins.append(admin)
            self._store.write_rows(self._path, [a.to_csv_row() for a in admins], ADMIN_HEADERS)
        return admin
