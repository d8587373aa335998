from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import normalize_matricula
from ..core.constants import STUDENT_HEADERS, STUDENTS_FILE
from ..csvio.store import CsvStore
from .model import Student, students_from_rows
from .repository import StudentRepository


class CsvStudentRepository(StudentRepository):
    def __init__(self, store: CsvStore, *, filename: str = STUDENTS_FILE):
        self._store = store
        self._path = store.path_for(filename)

    def list_all(self) -> Sequence[Student]:
        return students_from_rows(self._store.read_rows(self._path))

    def get_by_matricula(self, matricula: str) -> Optional[Student]:
        target = normalize_matricula(matricula)
        return next((s for s in self.list_all() if s.matricula == target), None)

    def replace_all(self, students: Sequence[Student]) -> int:
        self._store.write_rows(self._path, [s.to_csv_row() for s in students], STUDENT_HEADERS)
        return len(students)

    def clear(self) -> int:
        count = len(self.list_all())
        self._store.write_empty(self._path, STUDENT_HEADERS)
        return count
