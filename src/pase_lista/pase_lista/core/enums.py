from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Estado de un registro de asistencia tal como se guarda en CSV/BD."""

    REGISTERED = "registered"
    PRESENT = "present"
    ABSENT = "absent"


class StorageBackend(str, Enum):
    """Dónde se persisten estudiantes, asistencias, dispositivos y admins."""

    CSV = "csv"
    MYSQL = "mysql"
