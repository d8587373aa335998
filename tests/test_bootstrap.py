from __future__ import annotations

from pathlib import Path

from config import get_settings_module
from src.pase_lista.pase_lista.database.bootstrap import EXPECTED_TABLES, iter_sql_statements
from src.pase_lista.pase_lista.main import SCHEMA_PATH


def test_iter_sql_statements_drops_database_scoped_lines_and_comments():
    sql = "-- header\nCREATE DATABASE x;\nUSE x;\nCREATE TABLE a (c VARCHAR(3) DEFAULT ';');\nSELECT 1"
    assert list(iter_sql_statements(sql)) == ["CREATE TABLE a (c VARCHAR(3) DEFAULT ';')", "SELECT 1"]


def test_schema_file_creates_expected_tables():
    statements = list(iter_sql_statements(Path(SCHEMA_PATH).read_text(encoding="utf-8")))
    created = [s.split()[5] for s in statements if s.upper().startswith("CREATE TABLE IF NOT EXISTS")]
    assert tuple(created) == EXPECTED_TABLES


def test_settings_module_from_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    assert get_settings_module() == "config.production"
    monkeypatch.setenv("APP_ENV", "Testing")
    assert get_settings_module() == "config.testing"
    monkeypatch.setenv("APP_ENV", "whatever")
    assert get_settings_module() == "config.development"
