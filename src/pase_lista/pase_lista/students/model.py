from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.encoding import repair_text
from ..common.validators import is_valid_matricula, normalize_matricula


def normalize_name(value) -> str:
    if not value:
        return ""
    return repair_text(str(value)).strip()


def normalize_group(value) -> str:
    if not value:
        return ""
    return repair_text(str(value)).strip().upper()


@dataclass(frozen=True)
class Student:
    """Estudiante / personal registrado en la lista.

    Construir con :meth:`create` para que la matrícula, el nombre y el grupo
    queden normalizados (incluida la reparación de texto mal codificado).
    """

    matricula: str
    nombre: str
    grupo: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        matricula,
        nombre,
        grupo,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> "Student":
        return cls(
            matricula=normalize_matricula(matricula),
            nombre=normalize_name(nombre),
            grupo=normalize_group(grupo),
            created_at=created_at,
            updated_at=updated_at,
        )

    @classmethod
    def from_csv_row(cls, row: Mapping[str, Any]) -> "Student":
        matricula = row.get("matricula")
        if not matricula:
            # Headers may still carry a BOM or decoration around the name.
            key = next((k for k in row if isinstance(k, str) and "matricula" in k.lower()), None)
            matricula = row.get(key) if key else ""
        return cls.create(matricula=matricula or "", nombre=row.get("nombre") or "", grupo=row.get("grupo") or "")

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.matricula:
            errors.append("Matrícula es requerida")
        if not self.nombre:
            errors.append("Nombre es requerido")
        if not self.grupo:
            errors.append("Grupo es requerido")
        if self.matricula and not is_valid_matricula(self.matricula):
            errors.append("Formato de matrícula inválido")
        return errors

    def is_valid(self) -> bool:
        return not self.validate()

    def to_csv_row(self) -> dict[str, str]:
        return {"matricula": self.matricula, "nombre": self.nombre, "grupo": self.grupo}

    def to_json(self) -> dict[str, Any]:
        return {
            "matricula": self.matricula,
            "nombre": self.nombre,
            "grupo": self.grupo,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def students_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[Student]:
    """Build students from CSV rows, dropping invalid ones."""
    out = []
    for row in rows:
        student = Student.from_csv_row(row)
        if student.is_valid():
            out.append(student)
    return out


def find_by_matricula(students: Sequence[Student], matricula) -> Optional[Student]:
    target = normalize_matricula(matricula)
    return next((s for s in students if s.matricula == target), None)


def find_by_group(students: Sequence[Student], grupo) -> list[Student]:
    target = normalize_group(grupo)
    return [s for s in students if s.grupo == target]


def student_stats(students: Sequence[Student]) -> dict[str, Any]:
    groups: dict[str, int] = {}
    for s in students:
        groups[s.grupo] = groups.get(s.grupo, 0) + 1
    return {"total": len(students), "groups": groups, "group_count": len(groups)}
