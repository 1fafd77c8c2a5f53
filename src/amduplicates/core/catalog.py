"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/catalog.py
In-memory collection of discovered files and the derived duplicate index.

The catalog is keyed by absolute path: merging is a set-union over paths where
the first-seen record wins. After every merge, removal or clear the set of
duplicate digests is recomputed from scratch, so it always matches the records.
The catalog is not thread-safe; a single owner (the session) mutates it.
"""
import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from amduplicates.core.grouper import FileGrouperImpl
from amduplicates.core.models import DuplicateGroup, FileRecord, SortOrder
from amduplicates.core.sorter import Sorter

logger = logging.getLogger(__name__)


class Catalog:
    """Authoritative collection of FileRecords plus the duplicate-digest set."""

    def __init__(self, sort_order: Optional[SortOrder] = None):
        self._records: List[FileRecord] = []
        self._by_path: Dict[str, FileRecord] = {}
        self._duplicate_digests: FrozenSet[str] = frozenset()
        self._sort_order = sort_order or SortOrder()

    # ---- mutation ----

    def merge(self, records: Iterable[FileRecord]) -> int:
        """
        Inserts every record whose path is not yet known.
        Returns the number of records actually added.
        """
        added = 0
        for record in records:
            if record.path in self._by_path:
                continue
            self._by_path[record.path] = record
            self._records.append(record)
            added += 1

        Sorter.sort_records(self._records, self._sort_order)
        self._reindex()
        logger.debug(f"Merged {added} new records, catalog holds {len(self._records)}")
        return added

    def remove(self, paths: Iterable[str]) -> int:
        """Deletes the given paths. Unknown paths are ignored. Returns the number removed."""
        doomed = {p for p in paths if p in self._by_path}
        if doomed:
            self._records = [r for r in self._records if r.path not in doomed]
            for path in doomed:
                del self._by_path[path]
        self._reindex()
        logger.debug(f"Removed {len(doomed)} records, catalog holds {len(self._records)}")
        return len(doomed)

    def clear(self) -> None:
        self._records = []
        self._by_path = {}
        self._duplicate_digests = frozenset()

    def set_sort_order(self, sort_order: SortOrder) -> None:
        """Changes the active sort order and re-sorts immediately."""
        self._sort_order = sort_order
        Sorter.sort_records(self._records, sort_order)

    def _reindex(self) -> None:
        self._duplicate_digests = FileGrouperImpl.find_duplicate_digests(self._records)

    # ---- read-only views ----

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    @property
    def records(self) -> Tuple[FileRecord, ...]:
        """All records in the active sort order."""
        return tuple(self._records)

    @property
    def duplicate_digests(self) -> FrozenSet[str]:
        return self._duplicate_digests

    def get(self, path: str) -> Optional[FileRecord]:
        return self._by_path.get(path)

    def duplicates_only(self) -> List[FileRecord]:
        """Records whose digest is shared with at least one other record, in sort order."""
        return [r for r in self._records if r.digest in self._duplicate_digests]

    def duplicate_groups(self) -> List[DuplicateGroup]:
        """Duplicate groups, largest reclaimable size first."""
        return FileGrouperImpl.build_duplicate_groups(self.duplicates_only())

    @property
    def wasted_bytes(self) -> int:
        """Total bytes that could be freed by keeping one copy per group."""
        return sum(g.wasted_bytes for g in self.duplicate_groups())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __repr__(self):
        return f"<Catalog({len(self._records)} records, {len(self._duplicate_digests)} duplicate digests)>"
