from __future__ import annotations

from src.pase_lista.pase_lista.students.model import (
    Student,
    find_by_group,
    find_by_matricula,
    student_stats,
    students_from_rows,
)


def test_create_normalizes_fields():
    s = Student.create(matricula=" abc-123 ", nombre="  MarÃ­a-JosÃ©  ", grupo="informaciÃ³n")

    assert s.matricula == "ABC123"
    assert s.nombre == "María-José"
    assert s.grupo == "INFORMACIÓN"
    assert s.is_valid()


def test_validate_reports_missing_fields():
    s = Student.create(matricula="", nombre="", grupo="")
    assert s.validate() == ["Matrícula es requerida", "Nombre es requerido", "Grupo es requerido"]


def test_validate_rejects_bad_matricula():
    s = Student.create(matricula="A.01", nombre="Ana", grupo="G1")
    assert "Formato de matrícula inválido" in s.validate()


def test_from_csv_row_finds_decorated_matricula_header():
    s = Student.from_csv_row({"Matricula ": "a1", "nombre": "Ana", "grupo": "g1"})
    assert s.matricula == "A1"
    assert s.grupo == "G1"


def test_students_from_rows_drops_invalid():
    rows = [
        {"matricula": "A1", "nombre": "Ana", "grupo": "G1"},
        {"matricula": "", "nombre": "Sin", "grupo": "G1"},
        {"matricula": "A2", "nombre": "José", "grupo": "G2"},
    ]
    assert [s.matricula for s in students_from_rows(rows)] == ["A1", "A2"]


def test_lookup_helpers_and_stats():
    students = [
        Student.create(matricula="A1", nombre="Ana", grupo="G1"),
        Student.create(matricula="A2", nombre="Luis", grupo="G1"),
        Student.create(matricula="B1", nombre="Eva", grupo="G2"),
    ]

    assert find_by_matricula(students, "a-1").nombre == "Ana"
    assert find_by_matricula(students, "zz") is None
    assert [s.matricula for s in find_by_group(students, "g1")] == ["A1", "A2"]
    assert student_stats(students) == {"total": 3, "groups": {"G1": 2, "G2": 1}, "group_count": 2}


def test_to_json_and_csv_row():
    s = Student.create(matricula="A1", nombre="Ana", grupo="G1")
    assert s.to_csv_row() == {"matricula": "A1", "nombre": "Ana", "grupo": "G1"}
    assert s.to_json()["created_at"] is None
