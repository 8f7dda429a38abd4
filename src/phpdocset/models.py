"""Core data models for the docset search index."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from enum import Enum


class EntryType(str, Enum):
    """Entry types understood by Dash, limited to the ones this docset emits."""

    INTERFACE = "Interface"
    ENUM = "Enum"
    CLASS = "Class"
    EXCEPTION = "Exception"
    METHOD = "Method"
    FUNCTION = "Function"
    KEYWORD = "Keyword"
    VARIABLE = "Variable"
    TYPE = "Type"
    OPERATOR = "Operator"
    EXTENSION = "Extension"
    GUIDE = "Guide"
    CONSTANT = "Constant"
    SETTING = "Setting"
    PROPERTY = "Property"


@dataclass(frozen=True, slots=True)
class MetadataRow:
    """One row of the renderer's ``ids`` table."""

    id: int
    docbook_id: str
    parent_id: str | None
    element: str
    chunk: bool
    filename: str
    sdesc: str
    ldesc: str

    @classmethod
    def from_sqlite(cls, row: sqlite3.Row) -> "MetadataRow":
        return cls(
            id=row["id"],
            docbook_id=row["docbook_id"] or "",
            parent_id=row["parent_id"],
            element=row["element"] or "",
            chunk=bool(row["chunk"]),
            filename=row["filename"] or "",
            sdesc=row["sdesc"] or "",
            ldesc=row["ldesc"] or "",
        )

    @property
    def display_name(self) -> str:
        """Short description when it has text, otherwise the long one."""
        return self.sdesc.strip() or self.ldesc.strip()

    @property
    def page(self) -> str:
        return f"{self.filename}.html"

    @property
    def anchor_path(self) -> str:
        return f"{self.page}#{self.docbook_id}"


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """A ``(name, type, path)`` triple of the search index."""

    name: str
    type: EntryType
    path: str

    def as_row(self) -> tuple[str, str, str]:
        return (self.name, self.type.value, self.path)


@dataclass(frozen=True, slots=True)
class DroppedCandidate:
    """A candidate that could not become an index entry."""

    type: EntryType
    identifier: str
    document: str
    reason: str
