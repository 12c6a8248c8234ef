"""Schema migrations for the decision audit database.

Responsibilities:
  - Apply migrations/*.sql in filename order, each at most once per database.
  - Keep a schema_migrations ledger of applied files.
Must not:
  - Embed business logic; migrations only.
"""

from __future__ import annotations

import datetime
import sqlite3
from pathlib import Path

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

_LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    name TEXT PRIMARY KEY,
    applied_at TEXT NOT NULL
);
"""


def applied_migrations(conn: sqlite3.Connection) -> list[str]:
    conn.executescript(_LEDGER_DDL)
    rows = conn.execute("SELECT name FROM schema_migrations ORDER BY name").fetchall()
    return [row[0] for row in rows]


def apply_migrations(conn: sqlite3.Connection, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending migrations and return the names applied by this call."""
    done = set(applied_migrations(conn))
    applied: list[str] = []
    for migration in sorted(migrations_dir.glob("*.sql")):
        if migration.name in done:
            continue
        conn.executescript(migration.read_text(encoding="utf-8"))
        conn.execute(
            "INSERT INTO schema_migrations (name, applied_at) VALUES (?, ?)",
            (migration.name, datetime.datetime.now(datetime.timezone.utc).isoformat()),
        )
        conn.commit()
        applied.append(migration.name)
    return applied
