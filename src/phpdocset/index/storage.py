"""SQLite search index in the layout Dash reads (``docSet.dsidx``)."""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from phpdocset.models import EntryType, IndexEntry
from phpdocset.utils.text import escape_sql_string

LOGGER = logging.getLogger(__name__)

SCHEMA = (
    "CREATE TABLE IF NOT EXISTS searchIndex(id INTEGER PRIMARY KEY, name TEXT, type TEXT, path TEXT)",
    "CREATE UNIQUE INDEX IF NOT EXISTS anchor ON searchIndex (name, type, path)",
)

INSERT_SQL = "INSERT OR IGNORE INTO searchIndex(name, type, path) VALUES (?, ?, ?)"


class IndexLoadError(RuntimeError):
    """The search index could not be written."""


class SearchIndexStore:
    """Persistence layer for ``(name, type, path)`` entries."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            for statement in SCHEMA:
                conn.execute(statement)

    def insert_entries(self, entries: Iterable[IndexEntry]) -> int:
        """Insert entries, ignoring duplicates; returns the number kept.

        This should be called within a transaction.
        """
        before = self._conn.total_changes
        self._conn.executemany(INSERT_SQL, (entry.as_row() for entry in entries))
        return self._conn.total_changes - before

    def load(self, entries: Iterable[IndexEntry]) -> int:
        with self.transaction():
            return self.insert_entries(entries)

    def count_by_type(self) -> Dict[str, int]:
        rows = self._conn.execute(
            "SELECT type, COUNT(*) AS total FROM searchIndex GROUP BY type ORDER BY type"
        ).fetchall()
        return {row["type"]: row["total"] for row in rows}

    def entries(self) -> List[IndexEntry]:
        rows = self._conn.execute("SELECT name, type, path FROM searchIndex ORDER BY id").fetchall()
        return [IndexEntry(row["name"], EntryType(row["type"]), row["path"]) for row in rows]

    def search(self, query: str, *, limit: int = 20) -> List[IndexEntry]:
        """Entries whose name contains ``query``, case-insensitively."""
        pattern = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = self._conn.execute(
            """
            SELECT name, type, path FROM searchIndex
            WHERE name LIKE ? ESCAPE '\\'
            ORDER BY length(name), name COLLATE NOCASE, type
            LIMIT ?
            """,
            (f"%{pattern}%", limit),
        ).fetchall()
        return [IndexEntry(row["name"], EntryType(row["type"]), row["path"]) for row in rows]


def write_index(db_path: Path, entries: Iterable[IndexEntry]) -> int:
    """Build a fresh index at ``db_path`` and return the number of entries.

    The index is written to a temporary file next to ``db_path`` and moved in
    place only once every entry is committed, so a failed load never leaves a
    partial index behind.
    """
    db_path = Path(db_path)
    staging = db_path.with_name(db_path.name + ".tmp")
    staging.unlink(missing_ok=True)

    store = None
    try:
        store = SearchIndexStore(staging)
        inserted = store.load(entries)
        store.close()
        store = None
        os.replace(staging, db_path)
    except (sqlite3.Error, OSError) as exc:
        if store is not None:
            store.close()
        staging.unlink(missing_ok=True)
        raise IndexLoadError(f"Failed to write search index {db_path}: {exc}") from exc

    LOGGER.info("Wrote %d entries to %s", inserted, db_path)
    return inserted


def render_load_script(entries: Iterable[IndexEntry]) -> str:
    """Render the entries as a script for the ``sqlite3`` shell."""
    lines = ["BEGIN TRANSACTION;"]
    lines.extend(f"{statement};" for statement in SCHEMA)
    for entry in entries:
        name, type_, path = (escape_sql_string(value) for value in entry.as_row())
        lines.append(
            f"INSERT OR IGNORE INTO searchIndex(name, type, path) VALUES ('{name}', '{type_}', '{path}');"
        )
    lines.append("COMMIT;")
    return "\n".join(lines) + "\n"
