from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.log import get_logger
from ..common.validators import normalize_matricula
from ..core.exceptions import ValidationError
from ..csvio.store import parse_csv_bytes
from .model import Student, normalize_group, student_stats
from .repository import StudentRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class UploadResult:
    accepted: int
    rejected: int
    duplicates: int
    errors: list[dict] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            "duplicates": self.duplicates,
            "errors": list(self.errors),
        }


class StudentService:
    """Use case: manage the roster of students allowed to register."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def list_students(self) -> list[Student]:
        return sorted(self._students.list_all(), key=lambda s: s.nombre)

    def find_by_matricula(self, matricula) -> Optional[Student]:
        clean = normalize_matricula(matricula)
        if not clean:
            return None
        return self._students.get_by_matricula(clean)

    def replace_all(self, rows: Iterable[Mapping[str, Any] | Student]) -> UploadResult:
        """Store a new roster, keeping only valid rows.

        Later rows with an already-seen matrícula are counted as duplicates
        and dropped; the first occurrence wins.
        """
        accepted: dict[str, Student] = {}
        errors: list[dict] = []
        duplicates = 0

        for idx, row in enumerate(rows, start=1):
            student = row if isinstance(row, Student) else Student.from_csv_row(row)
            problems = student.validate()
            if problems:
                errors.append({"row": idx, "matricula": student.matricula, "errors": problems})
                continue
            if student.matricula in accepted:
                duplicates += 1
                continue
            accepted[student.matricula] = student

        if not accepted:
            raise ValidationError("La lista no contiene estudiantes válidos", code="EMPTY_STUDENT_LIST")

        self._students.replace_all(list(accepted.values()))
        log.info(
            "Lista de estudiantes actualizada: %d aceptados, %d rechazados, %d duplicados",
            len(accepted), len(errors), duplicates,
        )
        return UploadResult(accepted=len(accepted), rejected=len(errors), duplicates=duplicates, errors=errors)

    def import_csv_bytes(self, data: bytes) -> UploadResult:
        """Load an uploaded roster file of unknown encoding."""
        if not data:
            raise ValidationError("El archivo está vacío", code="EMPTY_FILE")
        return self.replace_all(parse_csv_bytes(data))

    def search(self, query: Optional[str] = None, *, grupo: Optional[str] = None) -> list[Student]:
        students = self.list_students()
        if grupo:
            target = normalize_group(grupo)
            students = [s for s in students if s.grupo == target]
        if query and query.strip():
            q = query.strip().lower()
            q_mat = normalize_matricula(query)
            students = [s for s in students if q in s.nombre.lower() or (q_mat and q_mat in s.matricula)]
        return students

    def stats(self) -> dict[str, Any]:
        return student_stats(self._students.list_all())

    def clear(self) -> int:
        count = self._students.clear()
        log.info("Lista de estudiantes limpiada (%d registros)", count)
        return count

    def validate_integrity(self) -> dict[str, Any]:
        students: Sequence[Student] = self._students.list_all()
        seen: set[str] = set()
        duplicates: list[str] = []
        invalid: list[dict] = []

        for s in students:
            problems = s.validate()
            if problems:
                invalid.append({"matricula": s.matricula, "errors": problems})
            if s.matricula in seen:
                duplicates.append(s.matricula)
            seen.add(s.matricula)

        return {
            "total": len(students),
            "valid": not invalid and not duplicates,
            "invalid": invalid,
            "duplicates": duplicates,
        }
