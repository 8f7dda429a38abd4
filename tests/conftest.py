"""Shared test fixtures: a tiny rendered manual for one language."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Tuple

import pytest

from phpdocset.metadata.store import MetadataStore

# id, docbook_id, parent_id, element, chunk, filename, sdesc, ldesc
Row = Tuple[int, str, str | None, str, int, str, str, str]

METADATA_ROWS: list[Row] = [
    (1, "index", None, "set", 1, "index", "PHP Manual", ""),
    (2, "function.strlen", "ref.strings", "refentry", 1, "function.strlen", "strlen", "Get string length"),
    (3, "datetime.format", "class.datetime", "refentry", 1, "datetime.format", "DateTime::format", "Returns date formatted"),
    (4, "class.datetime", "book.datetime", "classref", 1, "class.datetime", "DateTime", "The DateTime class"),
    (5, "class.countable", "reserved.interfaces", "classref", 1, "class.countable", "Countable", "The Countable interface"),
    (6, "enum.random-intervalboundary", "book.random", "classref", 1, "enum.random-intervalboundary",
     "Random\\IntervalBoundary", "The Random\\IntervalBoundary Enum"),
    (7, "class.valueerror", "reserved.exceptions", "exceptionref", 1, "class.valueerror", "ValueError", "The ValueError class"),
    (8, "control-structures.foreach", "language.control-structures", "sect1", 1, "control-structures.foreach", "foreach", ""),
    (9, "function.include", "language.control-structures", "sect1", 1, "function.include", "include", ""),
    (10, "reserved.variables.get", "reserved.variables", "refentry", 1, "reserved.variables.get", "$_GET", "HTTP GET variables"),
    (11, "language.types.integer", "language.types", "sect1", 1, "language.types.integer", "Integers", ""),
    (12, "language.operators.arithmetic", "language.operators", "sect1", 1, "language.operators.arithmetic",
     "Arithmetic Operators", ""),
    (13, "refs.basic.text", "funcref", "set", 1, "refs.basic.text", "Text Processing", ""),
    (14, "book.strings", "refs.basic.text", "book", 1, "book.strings", "Strings", ""),
    (15, "control-structures.alternative-syntax", "language.control-structures", "sect1", 1,
     "control-structures.alternative-syntax", "Alternative syntax for control structures", ""),
    (16, "reserved.keywords", "reserved", "appendix", 1, "reserved.keywords", "List of Keywords", ""),
    (17, "language.variables", "langref", "chapter", 1, "language.variables", "", "Variables"),
    (18, "errorfunc.constants.errorlevels.e-all", "errorfunc.constants", "varlistentry", 0, "errorfunc.constants", "", ""),
    (19, "ini.max-execution-time", "info.configuration", "varlistentry", 0, "info.configuration", "", ""),
    (20, "ini.memory-limit", "ini.core", "row", 0, "ini.core", "", ""),
    (21, "datetime.props.format", "class.datetime", "varlistentry", 0, "class.datetime", "", ""),
    (22, "datetime.props.empty", "class.datetime", "varlistentry", 0, "class.datetime", "", ""),
    (23, "constant.php-version", "reserved.constants", "varlistentry", 0, "reserved.constants.core", "", ""),
]

PAGE_TEMPLATE = "<!DOCTYPE html><html><head><title>{title}</title></head><body>{body}</body></html>"

PAGE_BODIES: Dict[str, str] = {
    "errorfunc.constants.html": (
        '<dl><dt id="errorfunc.constants.errorlevels.e-all">'
        '<strong><code>E_ALL</code></strong> (<span class="type">int</span>)</dt>'
        "<dd>All errors, warnings and notices.</dd></dl>"
    ),
    "info.configuration.html": (
        '<dl><dt id="ini.max-execution-time">'
        '<code class="parameter">max_execution_time</code> <span class="type">int</span></dt>'
        "<dd>Maximum time in seconds a script is allowed to run.</dd></dl>"
    ),
    "ini.core.html": (
        '<table><tr id="ini.memory-limit">'
        '<td><a href="ini.core.html#ini.memory-limit" class="link">memory_limit</a></td>'
        "<td>&quot;128M&quot;</td></tr></table>"
    ),
    "class.datetime.html": (
        "<h1>The DateTime class</h1>"
        '<dl><dt id="datetime.props.format"><var class="varname">format</var></dt>'
        '<dt id="datetime.props.empty"><var class="varname"></var></dt></dl>'
    ),
}


def write_metadata(path: Path, rows: Iterable[Row]) -> Path:
    """Create an ``ids`` table the way the renderer lays it out."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            """
            CREATE TABLE ids (
                id INTEGER PRIMARY KEY,
                docbook_id TEXT,
                parent_id TEXT,
                element TEXT,
                chunk INTEGER,
                filename TEXT,
                sdesc TEXT,
                ldesc TEXT
            )
            """
        )
        conn.executemany("INSERT INTO ids VALUES (?, ?, ?, ?, ?, ?, ?, ?)", list(rows))
        conn.commit()
    finally:
        conn.close()
    return path


def write_pages(root: Path, rows: Iterable[Row], bodies: Dict[str, str]) -> Path:
    """Write one page per chunk row plus the pages holding anchors."""
    root.mkdir(parents=True, exist_ok=True)
    for row in rows:
        page = f"{row[5]}.html"
        if row[4] and not (root / page).exists():
            (root / page).write_text(
                PAGE_TEMPLATE.format(title=row[6] or row[7], body=f"<h1>{row[6] or row[7]}</h1>"),
                encoding="utf-8",
            )
    for page, body in bodies.items():
        (root / page).write_text(PAGE_TEMPLATE.format(title=page, body=body), encoding="utf-8")
    return root


@dataclass
class Manual:
    """Renderer output for one language inside ``source``."""

    source: Path
    lang: str

    @property
    def metadata_path(self) -> Path:
        return self.source / self.lang / "index.sqlite"

    @property
    def documents_dir(self) -> Path:
        return self.source / self.lang / "res"


@pytest.fixture
def make_manual(tmp_path: Path) -> Callable[..., Manual]:
    def factory(
        lang: str = "en",
        rows: Iterable[Row] = METADATA_ROWS,
        bodies: Dict[str, str] = PAGE_BODIES,
    ) -> Manual:
        rows = list(rows)
        manual = Manual(source=tmp_path / "build", lang=lang)
        write_metadata(manual.metadata_path, rows)
        write_pages(manual.documents_dir, rows, bodies)
        return manual

    return factory


@pytest.fixture
def manual(make_manual: Callable[..., Manual]) -> Manual:
    return make_manual()


@pytest.fixture
def metadata_store(manual: Manual):
    store = MetadataStore.open(manual.metadata_path)
    yield store
    store.close()
