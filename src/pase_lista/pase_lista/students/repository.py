from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Interfaz de persistencia para la lista de estudiantes.

    Nota: la capa de servicio depende de esta interfaz, no del almacenamiento
    concreto (CSV o MySQL).
    """

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_matricula(self, matricula: str) -> Optional[Student]:
        raise NotImplementedError

    def replace_all(self, students: Sequence[Student]) -> int:
        """Swap the whole roster for *students*; returns how many were stored."""

        raise NotImplementedError

    def clear(self) -> int:
        raise NotImplementedError
