"""Create the MySQL database and tables for the mysql backend.

Usage: APP_ENV=production python scripts/init_db.py
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.pase_lista.pase_lista.core.exceptions import StorageError
from src.pase_lista.pase_lista.database.bootstrap import apply_schema, missing_tables


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db = dict(settings.DB_CONFIG)
    target = f"{db.get('user')}@{db.get('host')}:{db.get('port', 3306)}/{db.get('database')}"

    try:
        count = apply_schema(db, schema_path=REPO_ROOT / "database" / "schema.sql")
        missing = missing_tables(db)
    except StorageError as e:
        raise SystemExit(f"ERROR: {e}")

    if missing:
        raise SystemExit(f"ERROR: {target} sin tablas: {', '.join(missing)}")
    print(f"OK: schema.sql aplicado en {target} ({count} sentencias)")


if __name__ == "__main__":
    main()
