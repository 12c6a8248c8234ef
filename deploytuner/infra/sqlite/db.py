"""SQLite connection helpers."""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Optional

DB_PATH_ENV = "DEPLOYTUNER_DB"
DEFAULT_DB_PATH = "deploytuner_audit.db"


def resolve_db_path(db_path: Optional[str] = None) -> str:
    return db_path or os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH


def get_connection(db_path: str) -> sqlite3.Connection:
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def get_readonly_connection(db_path: str) -> sqlite3.Connection:
    if not Path(db_path).exists():
        raise FileNotFoundError(f"Audit database not found: {db_path}")
    conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn
