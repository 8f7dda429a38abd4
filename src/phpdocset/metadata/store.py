"""Read-only access to the renderer's metadata table."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from phpdocset.metadata.filters import Filter
from phpdocset.models import MetadataRow

LOGGER = logging.getLogger(__name__)

METADATA_TABLE = "ids"
METADATA_COLUMNS = ("id", "docbook_id", "parent_id", "element", "chunk", "filename", "sdesc", "ldesc")


class MetadataQueryError(RuntimeError):
    """A metadata query could not be executed."""


class MetadataStore:
    """Read-only view over the ``ids`` table written by the renderer."""

    def __init__(self, connection: sqlite3.Connection, *, source: str = ":memory:") -> None:
        self._conn = connection
        self._conn.row_factory = sqlite3.Row
        self.source = source

    @classmethod
    def open(cls, db_path: Path) -> "MetadataStore":
        db_path = Path(db_path)
        if not db_path.is_file():
            raise FileNotFoundError(f"Metadata database not found: {db_path}")
        conn = sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)
        return cls(conn, source=str(db_path))

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "MetadataStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def select(self, where: Filter) -> List[MetadataRow]:
        """Return the rows matching ``where`` in table order."""
        try:
            clause, params = where.to_sql()
        except ValueError as exc:
            raise MetadataQueryError(f"Malformed metadata filter: {exc}") from exc

        columns = ", ".join(METADATA_COLUMNS)
        sql = f"SELECT {columns} FROM {METADATA_TABLE} WHERE {clause} ORDER BY id"
        LOGGER.debug("Metadata query: %s %s", sql, params)
        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise MetadataQueryError(f"Metadata query failed on {self.source}: {exc}") from exc
        return [MetadataRow.from_sqlite(row) for row in rows]

    def page_row(self, filename: str) -> Optional[MetadataRow]:
        """Return the row of the standalone page rendered to ``filename``."""
        columns = ", ".join(METADATA_COLUMNS)
        try:
            row = self._conn.execute(
                f"""
                SELECT {columns} FROM {METADATA_TABLE}
                WHERE filename = ? AND chunk = 1
                ORDER BY docbook_id = filename DESC, id
                LIMIT 1
                """,
                (filename,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise MetadataQueryError(f"Metadata query failed on {self.source}: {exc}") from exc
        return MetadataRow.from_sqlite(row) if row is not None else None
