from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import DEVICE_HEADERS, DEVICES_FILE
from ..csvio.store import CsvStore
from .model import Device
from .repository import DeviceRepository


class CsvDeviceRepository(DeviceRepository):
    def __init__(self, store: CsvStore, *, filename: str = DEVICES_FILE):
        self._store = store
        self._path = store.path_for(filename)

    def _load(self) -> list[Device]:
        devices = []
        for row in self._store.read_rows(self._path):
            device = Device.from_csv_row(row)
            if device is not None:
                devices.append(device)
        return devices

    def list_all(self) -> Sequence[Device]:
        return sorted(self._load(), key=lambda d: d.last_used, reverse=True)

    def get(self, device_fingerprint: str) -> Optional[Device]:
        return next((d for d in self._load() if d.device_fingerprint == device_fingerprint), None)

    def save(self, device: Device) -> Device:
        with self._store.locked(self._path):
            devices = [d for d in self._load() if d.device_fingerprint != device.device_fingerprint]
            devices.append(device)
            self._store.write_rows(self._path, [d.to_csv_row() for d in devices], DEVICE_HEADERS)
        return device

    def clear(self) -> int:
        count = len(self._load())
        self._store.write_empty(self._path, DEVICE_HEADERS)
        return count
