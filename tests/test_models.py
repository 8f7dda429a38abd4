"""Tests for data models."""

from __future__ import annotations

import sqlite3
from dataclasses import FrozenInstanceError

import pytest

from phpdocset.models import DroppedCandidate, EntryType, IndexEntry, MetadataRow


def _row(**overrides) -> MetadataRow:
    values = dict(
        id=1,
        docbook_id="function.strlen",
        parent_id="ref.strings",
        element="refentry",
        chunk=True,
        filename="function.strlen",
        sdesc="strlen",
        ldesc="Get string length",
    )
    values.update(overrides)
    return MetadataRow(**values)


class TestEntryType:
    """The fixed set of entry types."""

    def test_fifteen_types(self) -> None:
        assert len(EntryType) == 15

    def test_values_are_dash_names(self) -> None:
        assert EntryType("Function") is EntryType.FUNCTION
        assert EntryType.PROPERTY.value == "Property"

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            EntryType("Macro")


class TestMetadataRow:
    """Metadata row helpers."""

    def test_display_name_prefers_short_description(self) -> None:
        assert _row().display_name == "strlen"

    def test_display_name_falls_back_to_long_description(self) -> None:
        assert _row(sdesc="").display_name == "Get string length"

    def test_display_name_trimmed(self) -> None:
        assert _row(sdesc="  strlen \n").display_name == "strlen"

    def test_blank_short_description_falls_back(self) -> None:
        assert _row(sdesc="   ", ldesc=" Get string length ").display_name == "Get string length"

    def test_both_descriptions_blank(self) -> None:
        assert _row(sdesc=" ", ldesc="\t").display_name == ""

    def test_paths(self) -> None:
        row = _row(docbook_id="ini.memory-limit", filename="ini.core")
        assert row.page == "ini.core.html"
        assert row.anchor_path == "ini.core.html#ini.memory-limit"

    def test_from_sqlite_normalizes_nulls(self) -> None:
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        row = conn.execute(
            "SELECT 7 AS id, 'index' AS docbook_id, NULL AS parent_id, 'set' AS element, "
            "1 AS chunk, 'index' AS filename, NULL AS sdesc, NULL AS ldesc"
        ).fetchone()
        conn.close()

        parsed = MetadataRow.from_sqlite(row)

        assert parsed.parent_id is None
        assert parsed.chunk is True
        assert parsed.sdesc == ""
        assert parsed.ldesc == ""

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            _row().sdesc = "other"  # type: ignore[misc]


class TestIndexEntry:
    """Index entry helpers."""

    def test_as_row(self) -> None:
        entry = IndexEntry("E_ALL", EntryType.CONSTANT, "errorfunc.constants.html#e-all")
        assert entry.as_row() == ("E_ALL", "Constant", "errorfunc.constants.html#e-all")

    def test_hashable_for_dedup(self) -> None:
        a = IndexEntry("strlen", EntryType.FUNCTION, "function.strlen.html")
        b = IndexEntry("strlen", EntryType.FUNCTION, "function.strlen.html")
        assert len({a, b}) == 1


class TestDroppedCandidate:
    def test_fields(self) -> None:
        dropped = DroppedCandidate(EntryType.SETTING, "ini.x", "ini.core.html", "name not found")
        assert dropped.identifier == "ini.x"
        assert dropped.reason == "name not found"
