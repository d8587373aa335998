from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .admins.csv_admin_repository import CsvAdminRepository
from .admins.mysql_admin_repository import MySQLAdminRepository
from .admins.repository import AdminRepository
from .admins.service import AuthService
from .attendance.csv_attendance_repository import CsvAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_LOCKOUT_MINUTES, DEFAULT_MAX_LOGIN_ATTEMPTS
from .core.enums import StorageBackend
from .core.exceptions import ValidationError
from .csvio.store import CsvStore
from .database.connection import DBConfig, DatabaseConnection
from .devices.csv_device_repository import CsvDeviceRepository
from .devices.mysql_device_repository import MySQLDeviceRepository
from .devices.repository import DeviceRepository
from .devices.service import DeviceService
from .students.csv_student_repository import CsvStudentRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    backend: StorageBackend

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    devices_repo: DeviceRepository
    admins_repo: AdminRepository

    student_service: StudentService
    attendance_service: AttendanceService
    device_service: DeviceService
    auth_service: AuthService

    csv_store: Optional[CsvStore] = None
    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    backend: str | StorageBackend = StorageBackend.CSV,
    data_dir: str | Path = "data",
    db_config: Optional[Mapping[str, Any]] = None,
    max_login_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS,
    lockout_minutes: int = DEFAULT_LOCKOUT_MINUTES,
) -> Container:
    try:
        backend = StorageBackend(str(getattr(backend, "value", backend)).lower())
    except ValueError:
        raise ValidationError(f"Backend de almacenamiento no soportado: {backend}")

    store: Optional[CsvStore] = None
    conn: Optional[DatabaseConnection] = None

    if backend == StorageBackend.MYSQL:
        if not db_config:
            raise ValidationError("DB_CONFIG es requerido para el backend mysql")
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
        students_repo = MySQLStudentRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
        devices_repo = MySQLDeviceRepository(conn)
        admins_repo = MySQLAdminRepository(conn)
    else:
        store = CsvStore(data_dir)
        store.ensure_directory(store.data_dir)
        students_repo = CsvStudentRepository(store)
        attendance_repo = CsvAttendanceRepository(store)
        devices_repo = CsvDeviceRepository(store)
        admins_repo = CsvAdminRepository(store)

    device_service = DeviceService(devices_repo)
    student_service = StudentService(students_repo)
    attendance_service = AttendanceService(attendance_repo, students_repo, device_service)
    auth_service = AuthService(admins_repo, max_attempts=max_login_attempts, lockout_minutes=lockout_minutes)

    return Container(
        backend=backend,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        devices_repo=devices_repo,
        admins_repo=admins_repo,
        student_service=student_service,
        attendance_service=attendance_service,
        device_service=device_service,
        auth_service=auth_service,
        csv_store=store,
        conn=conn,
    )
