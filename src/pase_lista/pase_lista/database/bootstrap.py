"""Create the MySQL database and tables from ``database/schema.sql``."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterator, Mapping

import mysql.connector

from ..common.log import get_logger
from ..core.exceptions import StorageError
from .connection import DBConfig

log = get_logger(__name__)

EXPECTED_TABLES = ("students", "attendances", "devices", "admins")

_COMMENT_LINE_RE = re.compile(r"^\s*--.*$", re.MULTILINE)
# The configured database name wins over whatever the script hardcodes.
_DB_SCOPED_RE = re.compile(r"^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;", re.IGNORECASE | re.MULTILINE)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a schema script on top-level semicolons.

    Comment lines and ``CREATE DATABASE``/``USE`` statements are dropped.
    Semicolons inside quoted literals or backticks do not split.
    """
    sql = _DB_SCOPED_RE.sub("", _COMMENT_LINE_RE.sub("", sql))
    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "charset": "utf8mb4",
    }
    if with_database:
        kwargs["database"] = target.database
    try:
        return mysql.connector.connect(**kwargs)
    except mysql.connector.Error as e:
        raise StorageError(f"No se pudo conectar a MySQL: {e}", code="DATABASE_CONNECTION_ERROR") from e


def _run(target: DBConfig, statements: list[str], *, with_database: bool = True) -> None:
    conn = _connect(target, with_database=with_database)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    except mysql.connector.Error as e:
        raise StorageError(f"Error aplicando el esquema: {e}", code="DATABASE_ERROR") from e
    finally:
        conn.close()


def ensure_database_exists(db_config: Mapping[str, Any]) -> None:
    target = DBConfig.from_mapping(db_config)
    _run(
        target,
        [f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"],
        with_database=False,
    )


def apply_schema(db_config: Mapping[str, Any], *, schema_path: str | Path) -> int:
    """Run every statement of the schema file; returns how many ran."""
    target = DBConfig.from_mapping(db_config)
    ensure_database_exists(db_config)

    statements = list(iter_sql_statements(Path(schema_path).read_text(encoding="utf-8")))
    _run(target, statements)
    log.info("Esquema aplicado en %s (%d sentencias)", target.database, len(statements))
    return len(statements)


def list_tables(db_config: Mapping[str, Any]) -> list[str]:
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def missing_tables(db_config: Mapping[str, Any]) -> list[str]:
    present = set(list_tables(db_config))
    return [t for t in EXPECTED_TABLES if t not in present]
