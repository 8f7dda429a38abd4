"""Classification of metadata rows into index entries.

Each rule pairs an entry type with a metadata filter. Rules are independent:
a row may match several of them and then yields one entry per matching rule.
Names come from the row's descriptions and paths always point at the page
itself, so no HTML is read here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from phpdocset.index.diagnostics import DropObserver, ignore_drop
from phpdocset.index.documents import DocumentStore
from phpdocset.metadata.filters import Filter, col
from phpdocset.metadata.store import MetadataStore
from phpdocset.models import DroppedCandidate, EntryType, IndexEntry

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Rule:
    type: EntryType
    where: Filter
    label: str


_element = col("element")
_filename = col("filename")
_parent = col("parent_id")
_chunk = col("chunk")
_sdesc = col("sdesc")
_ldesc = col("ldesc")

_page = _chunk.eq(1)

CLASSIFICATION_RULES: tuple[Rule, ...] = (
    # Interface pages outside reserved.interfaces are only recognisable by the
    # title PhD stores in ldesc ("The Countable interface"); LIKE is
    # case-insensitive, so a class titled with "interface" also lands here.
    Rule(
        EntryType.INTERFACE,
        _element.eq("classref") & (_parent.like("%.interfaces") | _ldesc.contains("interface")),
        "interface reference pages",
    ),
    Rule(
        EntryType.ENUM,
        _element.eq("classref") & _filename.startswith("enum."),
        "enumeration reference pages",
    ),
    Rule(
        EntryType.CLASS,
        _element.eq("classref")
        & _filename.startswith("class.")
        & _parent.not_like("%.interfaces")
        & _ldesc.not_contains("interface"),
        "class reference pages",
    ),
    Rule(
        EntryType.EXCEPTION,
        _element.eq("exceptionref"),
        "exception reference pages",
    ),
    Rule(
        EntryType.METHOD,
        _element.eq("refentry") & _sdesc.contains("::"),
        "reference entries named Class::method",
    ),
    Rule(
        EntryType.FUNCTION,
        _element.eq("refentry") & _sdesc.not_contains("::") & _filename.startswith("function."),
        "function reference entries",
    ),
    Rule(
        EntryType.KEYWORD,
        _page & _filename.startswith("control-structures."),
        "control structure pages",
    ),
    Rule(
        EntryType.KEYWORD,
        _page
        & _parent.eq("language.control-structures")
        & _filename.not_like("control-structures.%"),
        "other pages filed under control structures",
    ),
    Rule(
        EntryType.VARIABLE,
        _element.eq("refentry") & _filename.startswith("reserved.variables."),
        "predefined variables",
    ),
    Rule(
        EntryType.TYPE,
        _page & _parent.eq("language.types"),
        "type pages",
    ),
    Rule(
        EntryType.OPERATOR,
        _page & _parent.eq("language.operators"),
        "operator pages",
    ),
    Rule(
        EntryType.EXTENSION,
        _page & _element.eq("set") & _filename.ne("index"),
        "extension categories",
    ),
    Rule(
        EntryType.EXTENSION,
        _page & _element.eq("book") & _filename.startswith("book."),
        "extension books",
    ),
    Rule(
        EntryType.GUIDE,
        _filename.eq("control-structures.alternative-syntax"),
        "alternative syntax page",
    ),
    Rule(
        EntryType.GUIDE,
        _page
        & _filename.startswith("reserved.")
        & _element.notin(("refentry", "classref", "exceptionref")),
        "reserved words pages",
    ),
    Rule(
        EntryType.GUIDE,
        _page
        & _filename.startswith("language.")
        & _parent.notin(("language.types", "language.operators")),
        "language reference pages",
    ),
)


def classify(
    store: MetadataStore,
    documents: Optional[DocumentStore] = None,
    *,
    rules: Sequence[Rule] = CLASSIFICATION_RULES,
    on_drop: DropObserver = ignore_drop,
) -> Iterator[IndexEntry]:
    """Yield one entry per (rule, matching row) pair, rules in order.

    Rows without any description and rows whose page is missing from
    ``documents`` are reported to ``on_drop`` instead.
    """
    for rule in rules:
        rows = store.select(rule.where)
        LOGGER.debug("Rule %s (%s) matched %d rows", rule.type.value, rule.label, len(rows))
        for row in rows:
            name = row.display_name
            if not name:
                on_drop(DroppedCandidate(rule.type, row.docbook_id, row.page, "no description"))
                continue
            if documents is not None and not documents.exists(row.page):
                on_drop(DroppedCandidate(rule.type, row.docbook_id, row.page, "document missing"))
                continue
            yield IndexEntry(name=name, type=rule.type, path=row.page)
