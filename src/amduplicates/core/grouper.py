"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Pure grouping functions over FileRecords.
Everything here is a function of its input only, so the catalog can recompute
its duplicate index after any mutation.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, FrozenSet, Iterable, List

from amduplicates.core.models import FileRecord, DuplicateGroup


class FileGrouperImpl:
    """Groups records by content digest, ignoring the failure sentinel."""

    @staticmethod
    def group_by_digest(records: Iterable[FileRecord]) -> Dict[str, List[FileRecord]]:
        """Groups records by digest. Records that failed hashing are left out."""
        return FileGrouperImpl._group_by(
            records,
            lambda r: r.digest if r.is_hashed else None
        )

    @staticmethod
    def find_duplicate_digests(records: Iterable[FileRecord]) -> FrozenSet[str]:
        """Digests shared by at least two records."""
        groups = FileGrouperImpl.group_by_digest(records)
        return frozenset(digest for digest, members in groups.items() if len(members) > 1)

    @staticmethod
    def build_duplicate_groups(records: Iterable[FileRecord]) -> List[DuplicateGroup]:
        """
        DuplicateGroups for every shared digest, largest reclaimable size first.
        Members keep the order they had in `records`.
        """
        groups = [
            DuplicateGroup(digest=digest, files=members)
            for digest, members in FileGrouperImpl.group_by_digest(records).items()
        ]
        groups = [g for g in groups if g.is_duplicate()]
        groups.sort(key=lambda g: (-g.wasted_bytes, g.digest))
        return groups

    @staticmethod
    def _group_by(records: Iterable[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Helper method to group records by any computed key.
        Records whose key is None are skipped.
        """
        groups = defaultdict(list)
        for record in records:
            key = key_func(record)
            if key is not None:
                groups[key].append(record)
        return dict(groups)
