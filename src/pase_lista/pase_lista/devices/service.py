from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..common.log import get_logger
from .model import Device
from .repository import DeviceRepository

log = get_logger(__name__)


class DeviceService:
    """Use case: remember which browser fingerprints registered attendance."""

    def __init__(self, devices: DeviceRepository):
        self._devices = devices

    def register_usage(
        self,
        *,
        matricula: Optional[str],
        device_fingerprint: Optional[str],
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Device]:
        fingerprint = (device_fingerprint or "").strip()
        if not fingerprint:
            return None

        now = now or datetime.now()
        matricula = (matricula or "").strip().upper()
        user_agent = (user_agent or "").strip()

        existing = self._devices.get(fingerprint)
        if existing:
            device = replace(
                existing,
                matricula=matricula or existing.matricula,
                user_agent=user_agent or existing.user_agent,
                last_used=now,
            )
        else:
            device = Device(
                device_fingerprint=fingerprint,
                matricula=matricula,
                first_registration=now,
                last_used=now,
                user_agent=user_agent,
            )

        self._devices.save(device)
        log.debug("Dispositivo %s usado por %s", fingerprint, matricula or "-")
        return device

    def list_devices(self) -> list[Device]:
        return list(self._devices.list_all())

    def clear(self) -> int:
        return self._devices.clear()
