"""Small typed filter builder compiled to parameterised SQL.

Rules and anchor selectors describe which metadata rows they want with
expressions such as::

    col("element").eq("refentry") & col("sdesc").contains("::")

The expression tree is compiled to a ``WHERE`` clause plus its bound
parameters, so no rule ever carries query text of its own. Pattern matching
uses SQL ``LIKE`` semantics (``%`` and ``_`` wildcards, ASCII
case-insensitive). Negative comparisons treat ``NULL`` as the empty string so
that rows without a parent are never silently excluded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


class Filter:
    """Base class of all filter expressions."""

    def to_sql(self) -> tuple[str, list[Any]]:
        raise NotImplementedError

    def __and__(self, other: "Filter") -> "Filter":
        return All((self, other))

    def __or__(self, other: "Filter") -> "Filter":
        return AnyOf((self, other))


@dataclass(frozen=True, slots=True)
class Comparison(Filter):
    column: str
    operator: str
    value: Any = None

    def to_sql(self) -> tuple[str, list[Any]]:
        if not _IDENTIFIER.match(self.column):
            raise ValueError(f"Invalid column name: {self.column!r}")
        column = self.column
        if self.operator == "=":
            return f"{column} = ?", [self.value]
        if self.operator == "!=":
            return f"{column} IS NOT ?", [self.value]
        if self.operator == "like":
            return f"{column} LIKE ?", [self.value]
        if self.operator == "not like":
            return f"COALESCE({column}, '') NOT LIKE ?", [self.value]
        if self.operator in ("in", "not in"):
            values = list(self.value)
            if not values:
                raise ValueError(f"Empty value list for {column} {self.operator}")
            placeholders = ", ".join("?" for _ in values)
            if self.operator == "in":
                return f"{column} IN ({placeholders})", values
            return f"COALESCE({column}, '') NOT IN ({placeholders})", values
        if self.operator == "present":
            return f"COALESCE({column}, '') <> ''", []
        if self.operator == "missing":
            return f"COALESCE({column}, '') = ''", []
        raise ValueError(f"Unsupported operator: {self.operator!r}")


@dataclass(frozen=True, slots=True)
class All(Filter):
    parts: tuple[Filter, ...]

    def to_sql(self) -> tuple[str, list[Any]]:
        return _join(self.parts, " AND ")

    def __and__(self, other: Filter) -> Filter:
        return All(self.parts + (other,))


@dataclass(frozen=True, slots=True)
class AnyOf(Filter):
    parts: tuple[Filter, ...]

    def to_sql(self) -> tuple[str, list[Any]]:
        return _join(self.parts, " OR ")

    def __or__(self, other: Filter) -> Filter:
        return AnyOf(self.parts + (other,))


def _join(parts: Sequence[Filter], separator: str) -> tuple[str, list[Any]]:
    if not parts:
        raise ValueError("Cannot compile an empty filter group")
    clauses: list[str] = []
    params: list[Any] = []
    for part in parts:
        clause, values = part.to_sql()
        clauses.append(f"({clause})")
        params.extend(values)
    return separator.join(clauses), params


@dataclass(frozen=True, slots=True)
class Column:
    """Entry point of the builder: ``col("filename").like("class.%")``."""

    name: str

    def eq(self, value: Any) -> Filter:
        return Comparison(self.name, "=", value)

    def ne(self, value: Any) -> Filter:
        return Comparison(self.name, "!=", value)

    def like(self, pattern: str) -> Filter:
        return Comparison(self.name, "like", pattern)

    def not_like(self, pattern: str) -> Filter:
        return Comparison(self.name, "not like", pattern)

    def startswith(self, prefix: str) -> Filter:
        return self.like(f"{prefix}%")

    def contains(self, text: str) -> Filter:
        return self.like(f"%{text}%")

    def not_contains(self, text: str) -> Filter:
        return self.not_like(f"%{text}%")

    def isin(self, values: Sequence[Any]) -> Filter:
        return Comparison(self.name, "in", tuple(values))

    def notin(self, values: Sequence[Any]) -> Filter:
        return Comparison(self.name, "not in", tuple(values))

    def present(self) -> Filter:
        return Comparison(self.name, "present")

    def missing(self) -> Filter:
        return Comparison(self.name, "missing")


def col(name: str) -> Column:
    return Column(name)
