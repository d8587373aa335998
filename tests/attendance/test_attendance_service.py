from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.pase_lista.pase_lista.attendance.model import AttendanceRecord
from src.pase_lista.pase_lista.attendance.service import AttendanceService, average_time
from src.pase_lista.pase_lista.core.enums import AttendanceStatus
from src.pase_lista.pase_lista.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.pase_lista.pase_lista.devices.service import DeviceService
from src.pase_lista.pase_lista.students.model import Student


class InMemoryStudents:
    def __init__(self, students):
        self._by_id = {s.matricula: s for s in students}

    def list_all(self):
        return list(self._by_id.values())

    def get_by_matricula(self, matricula: str) -> Optional[Student]:
        return self._by_id.get(matricula)


class InMemoryAttendance:
    def __init__(self):
        self.records: list[AttendanceRecord] = []

    def list_all(self):
        return list(self.records)

    def list_by_date(self, attendance_date: date):
        return [r for r in self.records if r.attendance_date == attendance_date]

    def list_between(self, start_date: date, end_date: date):
        return [r for r in self.records if start_date <= r.attendance_date <= end_date]

    def list_for_student(self, matricula: str, *, limit: int):
        rows = [r for r in self.records if r.matricula == matricula]
        return sorted(rows, key=lambda r: r.timestamp, reverse=True)[:limit]

    def get_for_student_and_date(self, matricula: str, attendance_date: date):
        return next(
            (r for r in self.records if r.matricula == matricula and r.attendance_date == attendance_date),
            None,
        )

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        self.records.append(record)
        return record

    def clear(self) -> int:
        count = len(self.records)
        self.records = []
        return count


class InMemoryDevices:
    def __init__(self):
        self.by_fp = {}

    def get(self, device_fingerprint):
        return self.by_fp.get(device_fingerprint)

    def save(self, device):
        self.by_fp[device.device_fingerprint] = device
        return device

    def list_all(self):
        return list(self.by_fp.values())

    def clear(self):
        count = len(self.by_fp)
        self.by_fp = {}
        return count


@pytest.fixture
def roster():
    return [
        Student.create(matricula="A1", nombre="Ana", grupo="G1"),
        Student.create(matricula="A2", nombre="José", grupo="G1"),
        Student.create(matricula="B1", nombre="Luis", grupo="G2"),
    ]


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def devices_repo():
    return InMemoryDevices()


@pytest.fixture
def svc(roster, attendance_repo, devices_repo):
    return AttendanceService(attendance_repo, InMemoryStudents(roster), DeviceService(devices_repo))


def test_register_records_attendance_and_device(svc, attendance_repo, devices_repo, fixed_now):
    result = svc.register(" a-1 ", device_fingerprint="fp-1", user_agent="Firefox", now=fixed_now)

    assert result.record.matricula == "A1"
    assert result.record.status == AttendanceStatus.REGISTERED
    assert result.record.attendance_date == fixed_now.date()
    assert "Ana" in result.message and "G1" in result.message
    assert len(attendance_repo.records) == 1
    assert devices_repo.by_fp["fp-1"].matricula == "A1"


def test_register_twice_same_day_conflicts(svc, fixed_now):
    svc.register("A1", now=fixed_now)
    with pytest.raises(ConflictError) as exc:
        svc.register("A1", now=fixed_now + timedelta(hours=2))
    assert exc.value.code == "ALREADY_REGISTERED_TODAY"
    assert "08:05" in str(exc.value)


def test_register_next_day_is_allowed(svc, attendance_repo, fixed_now):
    svc.register("A1", now=fixed_now)
    svc.register("A1", now=fixed_now + timedelta(days=1))
    assert len(attendance_repo.records) == 2


def test_register_unknown_student(svc, fixed_now):
    with pytest.raises(NotFoundError) as exc:
        svc.register("ZZ9", now=fixed_now)
    assert exc.value.code == "STUDENT_NOT_REGISTERED"


def test_register_requires_matricula(svc):
    with pytest.raises(ValidationError) as exc:
        svc.register("   ")
    assert exc.value.code == "MISSING_MATRICULA"


def test_register_without_fingerprint_skips_device(svc, devices_repo, fixed_now):
    svc.register("A1", now=fixed_now)
    assert devices_repo.by_fp == {}


def test_stats_by_group(svc, fixed_now):
    svc.register("A1", now=fixed_now)
    svc.register("B1", now=fixed_now)

    stats = svc.stats(fixed_now.date())
    assert stats["total_students"] == 3
    assert stats["present"] == 2
    assert stats["absent"] == 1
    assert stats["attendance_rate"] == 66.7
    assert stats["by_group"]["G1"] == {"total": 2, "present": 1, "absent": 1, "attendance_rate": 50.0}
    assert stats["by_group"]["G2"]["attendance_rate"] == 100.0
    assert stats["by_status"] == {"registered": 2}


def test_stats_empty_roster_rate_is_zero(attendance_repo):
    svc = AttendanceService(attendance_repo, InMemoryStudents([]))
    assert svc.stats(date(2025, 3, 15))["attendance_rate"] == 0.0


def test_detailed_list_splits_present_and_absent(svc, fixed_now):
    svc.register("A2", now=fixed_now)

    detail = svc.detailed_list(fixed_now.date())
    assert [p["nombre"] for p in detail["present"]] == ["José"]
    assert [a["nombre"] for a in detail["absent"]] == ["Ana", "Luis"]
    assert detail["present"][0]["formatted_time"] == "08:05"
    assert detail["formatted_date"] == "15 de marzo de 2025"
    assert detail["summary"]["attendance_rate"] == 33.3


def test_report_counts_days(svc, fixed_now):
    start = fixed_now.date()
    svc.register("A1", now=fixed_now)
    svc.register("A1", now=fixed_now + timedelta(days=1))
    svc.register("B1", now=fixed_now + timedelta(days=1))

    report = svc.report(start, start + timedelta(days=2))
    assert report["total_days"] == 3
    assert report["total_records"] == 3
    assert report["daily"][start.isoformat()]["present"] == 1

    a1 = next(s for s in report["students"] if s["student"]["matricula"] == "A1")
    assert a1["days_present"] == 2
    assert a1["days_absent"] == 1


def test_report_rejects_inverted_range(svc):
    with pytest.raises(ValidationError) as exc:
        svc.report(date(2025, 3, 16), date(2025, 3, 15))
    assert exc.value.code == "INVALID_DATE_RANGE"


def test_report_summary_and_student_ranking(svc, fixed_now):
    start = fixed_now.date()
    svc.register("A1", now=fixed_now)
    svc.register("A1", now=fixed_now + timedelta(days=1))
    svc.register("B1", now=fixed_now + timedelta(days=1))

    report = svc.report(start, start + timedelta(days=2))
    assert report["summary"] == {"total_students": 3, "avg_daily_attendance": 1.0, "avg_attendance_rate": 33.3}
    assert report["daily"][start.isoformat()]["date"] == start.isoformat()
    assert [s["student"]["matricula"] for s in report["students"]] == ["A1", "B1", "A2"]
    assert [s["attendance_rate"] for s in report["students"]] == [66.7, 33.3, 0.0]


def test_report_accepts_a_full_leap_year(svc):
    start = date(2024, 1, 1)
    end = date(2024, 12, 31)
    assert svc.report(start, end)["total_days"] == 366
    assert svc.export_rows(start, end) == []


@pytest.mark.parametrize("end", [date(2025, 1, 1), date(9999, 12, 31)])
def test_report_and_export_cap_the_range(svc, end):
    start = date(2024, 1, 1)
    with pytest.raises(ValidationError) as exc:
        svc.report(start, end)
    assert exc.value.code == "INVALID_DATE_RANGE"
    with pytest.raises(ValidationError):
        svc.export_rows(start, end)


def test_history_summary(svc, fixed_now):
    svc.register("A1", now=fixed_now)
    svc.register("A1", now=fixed_now + timedelta(days=1, minutes=5))

    history = svc.history_summary("a-1")
    assert history["matricula"] == "A1"
    assert len(history["attendances"]) == 2
    assert history["summary"]["total_records"] == 2
    assert history["summary"]["last_attendance"]["date"] == "2025-03-16"
    # 08:05 and 08:10 average to 08:07.5, rounded up
    assert history["summary"]["average_attendance_time"] == "08:08"


def test_history_summary_without_records(svc):
    history = svc.history_summary("B1")
    assert history == {
        "matricula": "B1",
        "attendances": [],
        "summary": {"total_records": 0, "last_attendance": None, "average_attendance_time": None},
    }


def test_average_time(fixed_now):
    records = [
        AttendanceRecord.create(matricula="A1", nombre="Ana", grupo="G1", timestamp=fixed_now.replace(hour=h, minute=m))
        for h, m in [(7, 50), (8, 20)]
    ]
    assert average_time(records) == "08:05"
    assert average_time([]) is None


def test_history_export_and_find_today(svc, fixed_now):
    svc.register("A1", now=fixed_now)

    assert svc.find_today("a1", today=fixed_now.date()) is not None
    assert svc.find_today("A2", today=fixed_now.date()) is None
    assert len(svc.student_history("A1")) == 1

    rows = svc.export_rows(fixed_now.date(), fixed_now.date())
    assert rows[0]["date"] == "2025-03-15"
    assert rows[0]["status"] == "registered"


def test_validate_integrity_flags_unknown_students(svc, attendance_repo, fixed_now):
    attendance_repo.create(
        AttendanceRecord.create(matricula="GHOST", nombre="X", grupo="G9", timestamp=fixed_now)
    )
    report = svc.validate_integrity()
    assert report["valid"] is False
    assert report["unknown_students"] == [{"matricula": "GHOST", "date": "2025-03-15"}]


def test_record_from_csv_row():
    row = {"matricula": "a1", "nombre": "Ana", "grupo": "g1", "timestamp": "2025-03-15T08:05:00Z", "status": ""}
    rec = AttendanceRecord.from_csv_row(row)
    assert rec.matricula == "A1"
    assert rec.status == AttendanceStatus.REGISTERED
    assert rec.formatted_time == "08:05"

    assert AttendanceRecord.from_csv_row({"matricula": "A1", "timestamp": "bad"}) is None
    assert AttendanceRecord.from_csv_row({"matricula": "A1", "timestamp": "2025-03-15T08:05:00", "status": "x"}) is None
