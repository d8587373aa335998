"""Backup data.

Note: con el backend mysql se usa `mysqldump` (si la máquina lo tiene);
con el backend csv se copia cada archivo a `<archivo>.backup.<timestamp>`.
"""

from __future__ import annotations

import importlib
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.pase_lista.pase_lista.core.constants import ADMINS_FILE, ATTENDANCE_FILE, DEVICES_FILE, STUDENTS_FILE
from src.pase_lista.pase_lista.csvio.store import CsvStore


def backup_mysql(db: dict) -> None:
    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"{db['database']}_{ts}.sql"

    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        db["database"],
    ]

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
        print(f"OK: Backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("No se encontró `mysqldump`. Instale las herramientas cliente de MySQL.")


def backup_csv(data_dir: str) -> None:
    store = CsvStore(data_dir)
    for name in (STUDENTS_FILE, ATTENDANCE_FILE, DEVICES_FILE, ADMINS_FILE):
        path = store.path_for(name)
        if path.exists():
            print(f"OK: Backup created: {store.backup(path)}")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    if str(settings.STORAGE_BACKEND).lower() == "mysql":
        backup_mysql(settings.DB_CONFIG)
    else:
        backup_csv(settings.DATA_DIR)


if __name__ == "__main__":
    main()
