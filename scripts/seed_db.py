"""Create the default admin account and, optionally, load a roster CSV.

Usage: python scripts/seed_db.py [students.csv]
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.pase_lista.pase_lista.container import build_container


def main(argv: list[str]) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        backend=settings.STORAGE_BACKEND,
        data_dir=settings.DATA_DIR,
        db_config=dict(settings.DB_CONFIG),
    )

    username = getattr(settings, "DEFAULT_ADMIN_USERNAME", None)
    password = getattr(settings, "DEFAULT_ADMIN_PASSWORD", None)
    if not username or not password:
        raise SystemExit("Defina ADMIN_USERNAME y ADMIN_PASSWORD para crear el administrador.")

    created = container.auth_service.ensure_default_admin(username, password)
    print(f"OK: admin '{username}' {'creado' if created else 'ya existía'} ({container.backend.value})")

    if argv:
        result = container.student_service.import_csv_bytes(Path(argv[0]).read_bytes())
        print(f"OK: {result.accepted} estudiantes cargados, {result.rejected} rechazados, {result.duplicates} duplicados")


if __name__ == "__main__":
    main(sys.argv[1:])
