"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sorter.py
Pure sorting logic for catalog records — zero dependencies outside core.
"""
from typing import Any, Callable, Dict, List, Optional

from amduplicates.core.models import FileRecord, SortKey, SortOrder


class Sorter:
    """
    Sorts records by one column, ascending or descending.
    Name and kind compare case-insensitively. Equal keys have no guaranteed order.
    """

    KEY_FUNCTIONS: Dict[SortKey, Callable[[FileRecord], Any]] = {
        SortKey.NAME: lambda r: r.name.casefold(),
        SortKey.KIND: lambda r: r.kind.casefold(),
        SortKey.DATE: lambda r: r.modified,
        SortKey.SIZE: lambda r: r.size,
        SortKey.DIGEST: lambda r: r.digest,
    }

    @staticmethod
    def sort_records(records: List[FileRecord], sort_order: Optional[SortOrder] = None) -> None:
        """Sorts `records` in place."""
        if not records:
            return

        if sort_order is None:
            sort_order = SortOrder()

        records.sort(
            key=Sorter.KEY_FUNCTIONS[sort_order.key],
            reverse=not sort_order.ascending
        )

    @staticmethod
    def sorted_records(records: List[FileRecord], sort_order: Optional[SortOrder] = None) -> List[FileRecord]:
        """Returns a sorted copy of `records`."""
        result = list(records)
        Sorter.sort_records(result, sort_order)
        return result
