"""Rendered HTML pages and the structural lookups run against them.

Every lookup is a pure function ``(Document, anchor) -> Optional[str]``; the
anchor resolver chains them per entry type and keeps the first non-empty
answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from phpdocset.utils.text import collapse_whitespace

LOGGER = logging.getLogger(__name__)

CODE_SELECTOR = "code"
VARNAME_SELECTOR = ".varname"


@dataclass(frozen=True, slots=True)
class Document:
    """A parsed page together with the name it is rendered under."""

    page: str
    soup: BeautifulSoup

    @classmethod
    def parse(cls, page: str, html: str) -> "Document":
        return cls(page=page, soup=BeautifulSoup(html, "html.parser"))

    def element(self, anchor: str) -> Optional[Tag]:
        return self.soup.find(id=anchor)


Lookup = Callable[[Document, str], Optional[str]]


class DocumentStore:
    """Directory of rendered pages, one ``<filename>.html`` per page."""

    def __init__(self, root: Path, *, cache_size: int = 128) -> None:
        self.root = Path(root)
        self._load = lru_cache(maxsize=cache_size)(self._read)

    def path_for(self, page: str) -> Path:
        return self.root / page

    def exists(self, page: str) -> bool:
        if not page or "/" in page or "\\" in page or page.startswith("."):
            return False
        return self.path_for(page).is_file()

    def load(self, page: str) -> Document:
        """Parse ``page``; parsed documents are cached by name."""
        return self._load(page)

    def _read(self, page: str) -> Document:
        LOGGER.debug("Parsing %s", page)
        html = self.path_for(page).read_text(encoding="utf-8", errors="replace")
        return Document.parse(page, html)


def _text(element: Optional[Tag]) -> Optional[str]:
    if element is None:
        return None
    text = collapse_whitespace(element.get_text())
    return text or None


def anchor_code_text(document: Document, anchor: str) -> Optional[str]:
    """Text of the first code span nested in the anchored element."""
    element = document.element(anchor)
    if element is None:
        return None
    return _text(element.select_one(CODE_SELECTOR))


def anchor_varname_text(document: Document, anchor: str) -> Optional[str]:
    """Text of the first variable-name span nested in the anchored element."""
    element = document.element(anchor)
    if element is None:
        return None
    return _text(element.select_one(VARNAME_SELECTOR))


def anchor_link_text(document: Document, anchor: str) -> Optional[str]:
    """Text of the first hyperlink in the page pointing at the anchor.

    Links are matched on their full target (``page.html#anchor``) or on the
    bare fragment. The first one in document order wins even when several
    links with different text point at the same anchor.
    """
    targets = {f"{document.page}#{anchor}", f"#{anchor}"}
    for link in document.soup.find_all("a", href=True):
        if link["href"] in targets:
            return _text(link)
    return None


def first_match(lookups: Sequence[Lookup], document: Document, anchor: str) -> Optional[str]:
    """Run ``lookups`` in order and return the first non-empty name."""
    for lookup in lookups:
        name = lookup(document, anchor)
        if name:
            return name
    return None
