from __future__ import annotations

from datetime import timedelta

from src.pase_lista.pase_lista.csvio.store import CsvStore
from src.pase_lista.pase_lista.devices.csv_device_repository import CsvDeviceRepository
from src.pase_lista.pase_lista.devices.service import DeviceService


def test_register_usage_creates_and_updates(tmp_path, fixed_now):
    svc = DeviceService(CsvDeviceRepository(CsvStore(tmp_path)))

    first = svc.register_usage(matricula="a1", device_fingerprint="fp-1", user_agent="Firefox", now=fixed_now)
    assert first.matricula == "A1"
    assert first.first_registration == fixed_now

    later = fixed_now + timedelta(hours=1)
    second = svc.register_usage(matricula="", device_fingerprint="fp-1", user_agent="", now=later)
    assert second.matricula == "A1"
    assert second.user_agent == "Firefox"
    assert second.first_registration == fixed_now
    assert second.last_used == later

    devices = svc.list_devices()
    assert len(devices) == 1
    assert devices[0].last_used == later


def test_blank_fingerprint_is_ignored(tmp_path):
    svc = DeviceService(CsvDeviceRepository(CsvStore(tmp_path)))
    assert svc.register_usage(matricula="A1", device_fingerprint="  ") is None
    assert svc.list_devices() == []


def test_clear(tmp_path, fixed_now):
    svc = DeviceService(CsvDeviceRepository(CsvStore(tmp_path)))
    svc.register_usage(matricula="A1", device_fingerprint="fp-1", now=fixed_now)
    svc.register_usage(matricula="A2", device_fingerprint="fp-2", now=fixed_now)
    assert svc.clear() == 2
    assert svc.list_devices() == []
