from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import ConflictError, StorageError
from .connection import DatabaseConnection

# ER_DUP_ENTRY
_DUPLICATE_KEY_ERRNO = 1062


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise StorageError(f"No se pudo conectar a la base de datos: {e}", code="DATABASE_CONNECTION_ERROR") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if getattr(e, "errno", None) == _DUPLICATE_KEY_ERRNO:
            raise ConflictError("Registro duplicado", code="DUPLICATE_ENTRY") from e
        raise StorageError(f"Error de integridad: {e}", code="DATABASE_ERROR") from e
    except mysql.connector.Error as e:
        conn.rollback()
        raise StorageError(f"Error de base de datos: {e}", code="DATABASE_ERROR") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
