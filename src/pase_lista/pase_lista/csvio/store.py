from __future__ import annotations

import csv
import io
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Sequence

from ..common.encoding import repair_buffer, repair_text, strip_bom
from ..common.log import get_logger
from ..core.exceptions import StorageError, ValidationError

log = get_logger(__name__)


def _clean_header(header) -> str:
    if not isinstance(header, str):
        return header
    return repair_text(strip_bom(header).strip())


def _clean_value(value):
    if isinstance(value, str):
        return repair_text(value.strip())
    return value


def parse_csv_text(text: str) -> list[dict[str, Any]]:
    """Parse decoded CSV text into cleaned rows.

    Headers lose a leading BOM and surrounding spaces; headers and string
    cells are passed through ``repair_text`` again since trimming can expose
    residual mojibake the bulk decode left behind. Blank rows are dropped.
    """
    reader = csv.reader(io.StringIO(text))
    try:
        header_row = next(reader)
    except StopIteration:
        return []

    headers = [_clean_header(h) for h in header_row]
    rows: list[dict[str, Any]] = []
    for raw in reader:
        if not raw:
            continue
        row = {}
        for idx, header in enumerate(headers):
            row[header] = _clean_value(raw[idx]) if idx < len(raw) else ""
        if any(v is not None and str(v).strip() != "" for v in row.values()):
            rows.append(row)
    return rows


def parse_csv_bytes(data: bytes) -> list[dict[str, Any]]:
    return parse_csv_text(repair_buffer(data))


class CsvStore:
    """File-backed row storage used by the CSV repositories.

    Every read goes through ``repair_buffer`` so files saved by spreadsheets
    in a legacy code page load as clean UTF-8 text. Writes are always UTF-8
    and land atomically: a temp file in the same directory is moved over the
    target, so readers see either the old or the new contents.

    Read-modify-write operations hold a per-file lock shared by every store
    in the process; repositories that check before writing take the same
    lock through :meth:`locked`.
    """

    _locks: dict[Path, threading.RLock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, data_dir: str | Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, filename: str) -> Path:
        return self._data_dir / filename

    def ensure_directory(self, dir_path: str | Path) -> None:
        try:
            Path(dir_path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Error creando directorio: {e}", code="DIRECTORY_ERROR") from e

    @contextmanager
    def locked(self, path: str | Path) -> Iterator[None]:
        """Hold the process-wide lock of *path*; reentrant for the same thread."""
        key = Path(path).resolve()
        with CsvStore._locks_guard:
            lock = CsvStore._locks.setdefault(key, threading.RLock())
        with lock:
            yield

    def read_rows(self, path: str | Path) -> list[dict[str, Any]]:
        path = Path(path)
        if not path.exists():
            log.warning("Archivo no encontrado: %s, retornando lista vacía", path)
            return []

        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageError(f"Error leyendo CSV: {e}", code="CSV_READ_ERROR") from e

        try:
            rows = parse_csv_text(repair_buffer(data))
        except csv.Error as e:
            raise StorageError(f"Error leyendo CSV: {e}", code="CSV_READ_ERROR") from e

        log.debug("Leídos %d registros válidos de %s", len(rows), path)
        return rows

    def write_rows(self, path: str | Path, rows: Sequence[Mapping[str, Any]], headers: Sequence[str]) -> bool:
        if not path or not headers:
            raise ValidationError("Ruta de archivo y headers son requeridos", code="INVALID_PARAMETERS")
        if not isinstance(rows, (list, tuple)):
            raise ValidationError("Los datos deben ser una lista", code="INVALID_DATA_TYPE")
        if not isinstance(headers, (list, tuple)):
            raise ValidationError("Los headers deben ser una lista", code="INVALID_HEADERS_TYPE")

        path = Path(path)
        self.ensure_directory(path.parent)

        with self.locked(path):
            tmp_name = None
            try:
                with tempfile.NamedTemporaryFile(
                    "w",
                    encoding="utf-8",
                    newline="",
                    dir=path.parent,
                    prefix=f".{path.name}.",
                    suffix=".tmp",
                    delete=False,
                ) as f:
                    tmp_name = f.name
                    writer = csv.DictWriter(f, fieldnames=list(headers), extrasaction="ignore", restval="")
                    writer.writeheader()
                    for row in rows:
                        writer.writerow({k: "" if v is None else v for k, v in row.items()})
                os.replace(tmp_name, path)
            except OSError as e:
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StorageError(f"Error escribiendo CSV: {e}", code="CSV_WRITE_ERROR") from e

        log.debug("Escritos %d registros en %s", len(rows), path)
        return True

    def write_empty(self, path: str | Path, headers: Sequence[str]) -> bool:
        return self.write_rows(path, [], headers)

    def append_row(self, path: str | Path, row: Mapping[str, Any], headers: Sequence[str]) -> int:
        with self.locked(path):
            rows = self.read_rows(path)
            rows.append(dict(row))
            self.write_rows(path, rows, headers)
        return len(rows)

    def find_rows(self, path: str | Path, criteria: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        rows = self.read_rows(path)
        if not criteria:
            return rows

        def matches(row: Mapping[str, Any]) -> bool:
            for key, expected in criteria.items():
                actual = row.get(key)
                if not actual:
                    return False
                if isinstance(expected, str) and isinstance(actual, str):
                    if expected.lower() not in actual.lower():
                        return False
                elif actual != expected:
                    return False
            return True

        return [r for r in rows if matches(r)]

    def update_rows(
        self,
        path: str | Path,
        criteria: Mapping[str, Any],
        changes: Mapping[str, Any],
        headers: Sequence[str],
    ) -> bool:
        with self.locked(path):
            rows = self.read_rows(path)
            updated = False
            out = []
            for row in rows:
                if all(row.get(k) == v for k, v in criteria.items()):
                    row = {**row, **changes}
                    updated = True
                out.append(row)

            if updated:
                self.write_rows(path, out, headers)
                log.info("Registro actualizado en %s", path)
        return updated

    def delete_rows(self, path: str | Path, criteria: Mapping[str, Any], headers: Sequence[str]) -> int:
        with self.locked(path):
            rows = self.read_rows(path)
            kept = [r for r in rows if not all(r.get(k) == v for k, v in criteria.items())]
            deleted = len(rows) - len(kept)
            if deleted:
                self.write_rows(path, kept, headers)
                log.info("%d registros eliminados de %s", deleted, path)
        return deleted

    def stats(self, path: str | Path) -> dict[str, Any]:
        path = Path(path)
        try:
            st = path.stat()
        except OSError as e:
            raise StorageError(f"Error obteniendo estadísticas: {e}", code="CSV_STATS_ERROR") from e
        return {
            "record_count": len(self.read_rows(path)),
            "file_size": st.st_size,
            "last_modified": datetime.fromtimestamp(st.st_mtime).isoformat(),
        }

    def backup(self, path: str | Path, *, now: Optional[datetime] = None) -> Path:
        path = Path(path)
        ts = (now or datetime.now()).strftime("%Y%m%d_%H%M%S_%f")
        backup_path = path.with_name(f"{path.name}.backup.{ts}")
        try:
            shutil.copy2(path, backup_path)
        except OSError as e:
            raise StorageError(f"Error creando backup: {e}", code="CSV_BACKUP_ERROR") from e
        log.info("Backup creado: %s", backup_path)
        return backup_path
