from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Device


class DeviceRepository(Protocol):
    def list_all(self) -> Sequence[Device]:
        raise NotImplementedError

    def get(self, device_fingerprint: str) -> Optional[Device]:
        raise NotImplementedError

    def save(self, device: Device) -> Device:
        """Insert or replace the device with the same fingerprint."""

        raise NotImplementedError

    def clear(self) -> int:
        raise NotImplementedError
