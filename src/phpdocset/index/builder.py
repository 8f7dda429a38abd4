"""Search index build pipeline."""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from phpdocset.index.anchors import AnchorSpec, anchor_specs, resolve_anchors
from phpdocset.index.diagnostics import DropObserver, log_drop
from phpdocset.index.documents import DocumentStore
from phpdocset.index.rules import CLASSIFICATION_RULES, classify
from phpdocset.index.storage import SearchIndexStore, render_load_script, write_index
from phpdocset.metadata.store import MetadataStore
from phpdocset.models import EntryType, IndexEntry

LOGGER = logging.getLogger(__name__)

Task = Callable[[MetadataStore], List[IndexEntry]]


@dataclass(slots=True)
class BuildStats:
    candidates: int = 0
    written: int = 0
    by_type: Counter = field(default_factory=Counter)
    written_by_type: Dict[str, int] = field(default_factory=dict)

    @property
    def duplicates(self) -> int:
        return self.candidates - self.written

    def record(self, entries: List[IndexEntry]) -> None:
        self.candidates += len(entries)
        self.by_type.update(entry.type for entry in entries)


class IndexBuilder:
    """Collects index entries for one language and writes the index."""

    def __init__(
        self,
        metadata_path: Path,
        documents: DocumentStore,
        *,
        jobs: int = 1,
        on_drop: DropObserver = log_drop,
    ) -> None:
        self.metadata_path = Path(metadata_path)
        self.documents = documents
        self.jobs = max(1, jobs)
        self.on_drop = on_drop

    def _tasks(self) -> List[Task]:
        tasks: List[Task] = [self._classify]
        tasks.extend(self._anchor_task(spec) for spec in anchor_specs())
        return tasks

    def _classify(self, store: MetadataStore) -> List[IndexEntry]:
        return list(
            classify(store, self.documents, rules=CLASSIFICATION_RULES, on_drop=self.on_drop)
        )

    def _anchor_task(self, spec: AnchorSpec) -> Task:
        def run(store: MetadataStore) -> List[IndexEntry]:
            return list(resolve_anchors(spec, store, self.documents, on_drop=self.on_drop))

        return run

    def _run_isolated(self, task: Task) -> List[IndexEntry]:
        with MetadataStore.open(self.metadata_path) as store:
            return task(store)

    def collect(self) -> List[IndexEntry]:
        """Run every extraction task and merge the results in task order."""
        tasks = self._tasks()
        if self.jobs == 1:
            with MetadataStore.open(self.metadata_path) as store:
                results = [task(store) for task in tasks]
        else:
            # sqlite connections stay on the thread that opened them
            with ThreadPoolExecutor(max_workers=self.jobs) as pool:
                results = list(pool.map(self._run_isolated, tasks))

        entries: List[IndexEntry] = []
        for batch in results:
            entries.extend(batch)
        return entries

    def build(self, db_path: Path, *, script_path: Optional[Path] = None) -> BuildStats:
        """Rebuild the index at ``db_path`` from scratch.

        With ``script_path`` the entries kept in the index are also rendered
        as a load script for the ``sqlite3`` shell.
        """
        stats = BuildStats()
        entries = self.collect()
        stats.record(entries)
        for entry_type in EntryType:
            LOGGER.debug("%s: %d candidates", entry_type.value, stats.by_type[entry_type])
        stats.written = write_index(db_path, entries)
        store = SearchIndexStore(db_path)
        try:
            stats.written_by_type = store.count_by_type()
            if script_path is not None:
                Path(script_path).write_text(render_load_script(store.entries()), encoding="utf-8")
        finally:
            store.close()
        LOGGER.info(
            "Indexed %d entries (%d duplicate candidates collapsed)",
            stats.written,
            stats.duplicates,
        )
        return stats
