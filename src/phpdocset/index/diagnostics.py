"""Observers notified whenever a candidate is dropped from the index."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, List

from phpdocset.models import DroppedCandidate

LOGGER = logging.getLogger(__name__)

DropObserver = Callable[[DroppedCandidate], None]


def log_drop(candidate: DroppedCandidate) -> None:
    LOGGER.debug(
        "Skipped %s %s in %s: %s",
        candidate.type.value,
        candidate.identifier,
        candidate.document,
        candidate.reason,
    )


def ignore_drop(candidate: DroppedCandidate) -> None:
    return None


@dataclass(slots=True)
class DropCollector:
    """Keeps every dropped candidate for the build summary."""

    dropped: List[DroppedCandidate] = field(default_factory=list)

    def __call__(self, candidate: DroppedCandidate) -> None:
        self.dropped.append(candidate)

    def __len__(self) -> int:
        return len(self.dropped)

    def by_type(self) -> Counter:
        return Counter(candidate.type for candidate in self.dropped)


def chain_observers(observers: Iterable[DropObserver]) -> DropObserver:
    """Fan a drop notification out to several observers."""
    targets = tuple(observers)

    def notify(candidate: DroppedCandidate) -> None:
        for observer in targets:
            observer(candidate)

    return notify
