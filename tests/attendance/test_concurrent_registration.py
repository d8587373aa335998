from __future__ import annotations

import threading

import pytest

from src.pase_lista.pase_lista.container import build_container
from src.pase_lista.pase_lista.core.exceptions import ConflictError


@pytest.fixture
def container(tmp_path):
    c = build_container(backend="csv", data_dir=tmp_path)
    c.student_service.replace_all(
        [{"matricula": f"M{i:03d}", "nombre": f"Alumno {i}", "grupo": "G1"} for i in range(40)]
    )
    return c


def _run_together(targets):
    barrier = threading.Barrier(len(targets))
    errors = []

    def run(fn):
        barrier.wait()
        try:
            fn()
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=run, args=(fn,)) for fn in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


def test_parallel_registrations_are_all_stored(container, fixed_now):
    svc = container.attendance_service
    errors = _run_together(
        [lambda i=i: svc.register(f"M{i:03d}", device_fingerprint=f"fp-{i}", now=fixed_now) for i in range(40)]
    )

    assert errors == []
    records = svc.list_by_date(fixed_now.date())
    assert sorted(r.matricula for r in records) == [f"M{i:03d}" for i in range(40)]
    assert len(container.device_service.list_devices()) == 40


def test_parallel_registrations_of_one_student_store_a_single_record(container, fixed_now):
    svc = container.attendance_service
    errors = _run_together([lambda: svc.register("M007", now=fixed_now) for _ in range(10)])

    assert len(errors) == 9
    assert all(isinstance(e, ConflictError) for e in errors)
    assert {e.code for e in errors} == {"ALREADY_REGISTERED_TODAY"}
    assert len(svc.list_by_date(fixed_now.date())) == 1
