from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Device
from .repository import DeviceRepository


def _to_device(r: dict) -> Device:
    return Device(
        device_fingerprint=r["device_fingerprint"],
        matricula=r.get("matricula") or "",
        first_registration=r["first_registration"],
        last_used=r["last_used"],
        user_agent=r.get("user_agent") or "",
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT device_fingerprint, matricula, first_registration, last_used, user_agent
                FROM devices
                ORDER BY last_used DESC
                """
            )
            return [_to_device(r) for r in fetchall(cur)]

    def get(self, device_fingerprint: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT device_fingerprint, matricula, first_registration, last_used, user_agent
                FROM devices
                WHERE device_fingerprint=%s
                """,
                (device_fingerprint,),
            )
            r = fetchone(cur)
            return _to_device(r) if r else None

    def save(self, device: Device) -> Device:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO devices(device_fingerprint, matricula, first_registration, last_used, user_agent)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    matricula=VALUES(matricula),
                    last_used=VALUES(last_used),
                    user_agent=VALUES(user_agent)
                """,
                (
                    device.device_fingerprint,
                    device.matricula,
                    device.first_registration,
                    device.last_used,
                    device.user_agent,
                ),
            )
        return device

    def clear(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM devices")
            return int(cur.rowcount or 0)
