"""Text helpers shared by the index writer and the HTML lookups."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def escape_sql_string(value: str) -> str:
    """Quote ``value`` for use inside a single-quoted SQL literal.

    Single quotes are doubled first, then backslashes. Apply it once: the
    result is not meant to be escaped again.
    """
    return value.replace("'", "''").replace("\\", "\\\\")


def collapse_whitespace(text: str) -> str:
    """Trim ``text`` and collapse inner runs of whitespace to one space."""
    return _WHITESPACE.sub(" ", text).strip()
