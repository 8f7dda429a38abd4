"""Entries for symbols that live on an anchor inside another page.

Constants, configuration settings and class properties have no page of their
own and their metadata rows carry no usable name. The anchor rows are
selected from the metadata, then the rendered page is inspected with a small
chain of lookups to recover the name shown to the reader.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

from phpdocset.index.diagnostics import DropObserver, ignore_drop
from phpdocset.index.documents import (
    DocumentStore,
    Lookup,
    anchor_code_text,
    anchor_link_text,
    anchor_varname_text,
    first_match,
)
from phpdocset.metadata.filters import Filter, col
from phpdocset.metadata.store import MetadataStore
from phpdocset.models import DroppedCandidate, EntryType, IndexEntry, MetadataRow

LOGGER = logging.getLogger(__name__)

SCOPE_SEPARATOR = "::"

# (store, row, resolved name) -> final name, or None to drop the candidate
Qualifier = Callable[[MetadataStore, MetadataRow, str], Optional[str]]


@dataclass(frozen=True, slots=True)
class AnchorSpec:
    type: EntryType
    where: Filter
    lookups: tuple[Lookup, ...]
    qualify: Optional[Qualifier] = None


class ClassNames:
    """Caches the class name shown on each ``class.*`` page."""

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}

    def __call__(self, store: MetadataStore, row: MetadataRow, name: str) -> Optional[str]:
        if row.filename not in self._names:
            page = store.page_row(row.filename)
            self._names[row.filename] = page.sdesc.strip() if page is not None else ""
        class_name = self._names[row.filename]
        if not class_name:
            return None
        return f"{class_name}{SCOPE_SEPARATOR}{name}"


_docbook_id = col("docbook_id")
_inline = col("chunk").eq(0)

CONSTANTS = AnchorSpec(
    EntryType.CONSTANT,
    _inline
    & (
        _docbook_id.startswith("constant.")
        | _docbook_id.contains(".constant.")
        | _docbook_id.contains("constants.")
    ),
    (anchor_code_text,),
)

SETTINGS = AnchorSpec(
    EntryType.SETTING,
    _inline & _docbook_id.startswith("ini."),
    (anchor_link_text, anchor_code_text),
)


def properties_spec() -> AnchorSpec:
    """Property spec with a fresh class-name cache."""
    return AnchorSpec(
        EntryType.PROPERTY,
        _inline & _docbook_id.contains(".props.") & col("filename").startswith("class."),
        (anchor_varname_text,),
        qualify=ClassNames(),
    )


def anchor_specs() -> tuple[AnchorSpec, ...]:
    return (CONSTANTS, SETTINGS, properties_spec())


def resolve_anchors(
    spec: AnchorSpec,
    store: MetadataStore,
    documents: DocumentStore,
    *,
    on_drop: DropObserver = ignore_drop,
) -> Iterator[IndexEntry]:
    """Yield the entries of one anchor type.

    Query failures propagate as ``MetadataQueryError``. Candidates whose page
    is missing or whose name cannot be found are reported to ``on_drop``.
    """
    rows = store.select(spec.where)
    LOGGER.debug("%s anchors: %d candidates", spec.type.value, len(rows))

    for row in rows:
        page = row.page
        if not documents.exists(page):
            on_drop(_dropped(spec, row, "document missing"))
            continue
        try:
            document = documents.load(page)
        except OSError as exc:
            on_drop(_dropped(spec, row, f"unreadable document: {exc}"))
            continue

        name = first_match(spec.lookups, document, row.docbook_id)
        if not name:
            on_drop(_dropped(spec, row, "name not found"))
            continue
        if spec.qualify is not None:
            name = spec.qualify(store, row, name)
            if not name:
                on_drop(_dropped(spec, row, "class name not found"))
                continue
        yield IndexEntry(name=name, type=spec.type, path=row.anchor_path)


def _dropped(spec: AnchorSpec, row: MetadataRow, reason: str) -> DroppedCandidate:
    return DroppedCandidate(spec.type, row.docbook_id, row.page, reason)
