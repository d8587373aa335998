from __future__ import annotations

import importlib
from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .admins.controller import register as register_auth
from .attendance.controller import register as register_attendance
from .common.log import configure_logging, get_logger
from .container import build_container
from .core.constants import DEFAULT_LOCKOUT_MINUTES, DEFAULT_MAX_LOGIN_ATTEMPTS, DEFAULT_SESSION_DAYS
from .core.enums import StorageBackend
from .database.bootstrap import apply_schema, missing_tables
from .devices.controller import register as register_devices
from .students.controller import register as register_students

log = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _load_settings(overrides: Optional[Mapping[str, Any]]) -> tuple[str, SimpleNamespace]:
    settings_module = get_settings_module()
    module = importlib.import_module(settings_module)
    values = {k: getattr(module, k) for k in dir(module) if k.isupper()}
    values.update(overrides or {})
    return settings_module, SimpleNamespace(**values)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module, settings = _load_settings(overrides)
    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = settings.SECRET_KEY
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    backend = StorageBackend(str(getattr(settings, "STORAGE_BACKEND", "csv")).lower())
    db_config = dict(getattr(settings, "DB_CONFIG", {}))
    data_dir = getattr(settings, "DATA_DIR", "data")

    log.info("settings=%s storage=%s", settings_module, backend.value)
    if backend == StorageBackend.MYSQL:
        log.info(
            "db=%s@%s:%s/%s",
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
        missing = missing_tables(db_config)
        if missing:
            log.warning("Tablas faltantes en la base de datos: %s (ejecute scripts/init_db.py)", ", ".join(missing))
    else:
        log.info("data_dir=%s", data_dir)

    container = build_container(
        backend=backend,
        data_dir=data_dir,
        db_config=db_config,
        max_login_attempts=int(getattr(settings, "MAX_LOGIN_ATTEMPTS", DEFAULT_MAX_LOGIN_ATTEMPTS)),
        lockout_minutes=int(getattr(settings, "LOCKOUT_MINUTES", DEFAULT_LOCKOUT_MINUTES)),
    )

    admin_user = getattr(settings, "DEFAULT_ADMIN_USERNAME", None)
    admin_password = getattr(settings, "DEFAULT_ADMIN_PASSWORD", None)
    if bool(getattr(settings, "AUTO_SEED_DB", False)) and admin_user and admin_password:
        container.auth_service.ensure_default_admin(admin_user, admin_password)

    app.extensions["pase_lista"] = container

    register_auth(app, container)
    register_attendance(app, container)
    register_students(app, container)
    register_devices(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "storage": container.backend.value})

    return app
