"""
Scan session — the single source of truth for catalog state, used by both CLI and GUI.
No Qt/PySide6 dependencies — pure Python on top of asyncio.

The session lives on one event loop and is the only writer of its Catalog and root set.
Scans run on the loop's default executor; worker threads only return records and post
progress counts back with `call_soon_threadsafe`, so listeners always run on the loop
in discovery order.

Usage:
    session = ScanSession()
    session.add_progress_listener(lambda count: print(f"{count} files"))
    await session.add_folder("/photos")
    await session.add_folder("/backup/photos")
    for group in session.duplicate_groups():
        ...
    await session.remove_files([group.files[1].path])
"""
import asyncio
import logging
import os
import threading
from functools import partial
from typing import Callable, FrozenSet, Iterable, List, Optional, Set, Tuple

from amduplicates.core.catalog import Catalog
from amduplicates.core.interfaces import FileScanner, TrashService
from amduplicates.core.models import (
    DuplicateGroup, FileRecord, RemovalResult, ScanOptions, ScanState, SortOrder
)
from amduplicates.core.scanner import FileScannerImpl
from amduplicates.services.file_service import FileService

logger = logging.getLogger(__name__)

ScannerFactory = Callable[[str, ScanOptions], FileScanner]


def _default_scanner_factory(root_dir: str, options: ScanOptions) -> FileScanner:
    return FileScannerImpl(root_dir, options=options)


class ScanSession:
    """
    Coordinates tracked roots, scans and the catalog:
    1. add_folder   — track a root, scan it, merge its records
    2. refresh_all  — drop file data, rescan every tracked root one by one
    3. remove_files — move files to trash, forget the ones that were trashed
    4. clear_all    — back to the initial empty state

    Scans never overlap: add_folder/refresh_all/remove_files wait for the
    running operation to finish before touching the catalog.
    """

    def __init__(
            self,
            options: Optional[ScanOptions] = None,
            scanner_factory: Optional[ScannerFactory] = None,
            file_service: Optional[TrashService] = None,
            sort_order: Optional[SortOrder] = None
    ):
        self.options = options or ScanOptions()
        self._scanner_factory = scanner_factory or _default_scanner_factory
        self._file_service = file_service or FileService()
        self._catalog = Catalog(sort_order)
        self._roots: Set[str] = set()
        self._state = ScanState.IDLE
        self._files_discovered = 0
        self._show_duplicates_only = False

        self._lock = asyncio.Lock()
        self._stop_event = threading.Event()
        # Bumped by clear_all; results of operations started earlier are discarded
        self._generation = 0

        self._progress_listeners: List[Callable[[int], None]] = []
        self._state_listeners: List[Callable[[ScanState], None]] = []

    # =============================
    # Listeners
    # =============================

    def add_progress_listener(self, listener: Callable[[int], None]) -> None:
        """Called on the event loop with the number of files discovered so far."""
        self._progress_listeners.append(listener)

    def add_state_listener(self, listener: Callable[[ScanState], None]) -> None:
        """Called on the event loop whenever the session enters or leaves SCANNING."""
        self._state_listeners.append(listener)

    @staticmethod
    def _notify(listeners, value) -> None:
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.exception("Error in session listener")

    # =============================
    # Operations
    # =============================

    async def add_folder(self, root: str) -> int:
        """
        Tracks `root` and merges the records found under it.
        Files already in the catalog are not duplicated.

        Returns:
            Number of records added to the catalog.
        """
        root = os.path.abspath(os.fspath(root))
        generation = self._generation
        self._roots.add(root)

        async with self._lock:
            if generation != self._generation:
                return 0

            self._begin_scan()
            try:
                records = await self._scan_root(root, generation)
                if generation != self._generation or self._stop_event.is_set():
                    logger.debug(f"Discarding results of cancelled scan of {root}")
                    return 0
                added = self._catalog.merge(records)
            finally:
                self._end_scan()

        logger.info(f"Added {added} files from {root}")
        return added

    async def refresh_all(self) -> int:
        """
        Clears file data and rescans every tracked root, merging each root as it completes.
        Tracked roots are kept. Does nothing when no roots are tracked.

        Returns:
            Number of records in the catalog after the refresh.
        """
        generation = self._generation
        async with self._lock:
            if generation != self._generation or not self._roots:
                return 0

            self._catalog.clear()
            self._begin_scan()
            try:
                for root in sorted(self._roots):
                    records = await self._scan_root(root, generation, base_count=self._files_discovered)
                    if generation != self._generation or self._stop_event.is_set():
                        logger.debug("Refresh cancelled")
                        break
                    self._catalog.merge(records)
            finally:
                self._end_scan()

        return len(self._catalog)

    async def remove_files(self, paths: Iterable[str]) -> RemovalResult:
        """
        Moves each path to the trash, one at a time.
        A failure for one file does not stop the others; files that could not be
        trashed stay in the catalog because they still exist on disk.
        """
        loop = asyncio.get_running_loop()
        result = RemovalResult()
        unique_paths = list(dict.fromkeys(os.path.abspath(os.fspath(p)) for p in paths))

        async with self._lock:
            for path in unique_paths:
                try:
                    await loop.run_in_executor(None, self._file_service.move_to_trash, path)
                except Exception as e:
                    logger.warning(f"Failed to move {path} to trash: {e}")
                    result.failed[path] = str(e)
                    continue
                result.removed.append(path)

            self._catalog.remove(result.removed)

        logger.info(f"Moved {len(result.removed)} files to trash, {len(result.failed)} failed")
        return result

    def clear_all(self) -> None:
        """
        Returns the session to its initial empty state.
        An in-flight scan is asked to stop and its results are discarded.
        """
        self._generation += 1
        self._stop_event.set()
        self._catalog.clear()
        self._roots.clear()
        self._show_duplicates_only = False
        self._files_discovered = 0

    def cancel_scan(self) -> None:
        """Asks the running scan to stop; nothing it found is merged."""
        if self.is_scanning:
            logger.debug("Scan cancellation requested")
            self._stop_event.set()

    # =============================
    # Scanning internals
    # =============================

    async def _scan_root(self, root: str, generation: int, base_count: int = 0) -> List[FileRecord]:
        """Runs one scanner on a worker thread and returns its records."""
        loop = asyncio.get_running_loop()
        scanner = self._scanner_factory(root, self.options)

        def report_progress(count: int) -> None:
            # Runs on the worker thread; hand the value over to the loop
            loop.call_soon_threadsafe(self._on_progress, generation, base_count + count)

        records = await loop.run_in_executor(
            None,
            partial(scanner.scan, stopped_flag=self._stop_event.is_set, progress_callback=report_progress)
        )
        if not records:
            logger.info(f"No files found in {root}")
        return records

    def _on_progress(self, generation: int, count: int) -> None:
        if generation != self._generation:
            return
        self._files_discovered = count
        self._notify(self._progress_listeners, count)

    def _begin_scan(self) -> None:
        self._stop_event.clear()
        self._files_discovered = 0
        self._state = ScanState.SCANNING
        self._notify(self._state_listeners, self._state)

    def _end_scan(self) -> None:
        self._state = ScanState.IDLE
        self._notify(self._state_listeners, self._state)

    # =============================
    # Observable state
    # =============================

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def records(self) -> Tuple[FileRecord, ...]:
        """Records to display: duplicates only when that view is switched on."""
        if self._show_duplicates_only:
            return tuple(self._catalog.duplicates_only())
        return self._catalog.records

    @property
    def all_records(self) -> Tuple[FileRecord, ...]:
        return self._catalog.records

    @property
    def duplicate_digests(self) -> FrozenSet[str]:
        return self._catalog.duplicate_digests

    def duplicate_groups(self) -> List[DuplicateGroup]:
        return self._catalog.duplicate_groups()

    @property
    def tracked_roots(self) -> FrozenSet[str]:
        return frozenset(self._roots)

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state is ScanState.SCANNING

    @property
    def files_discovered(self) -> int:
        return self._files_discovered

    @property
    def show_duplicates_only(self) -> bool:
        return self._show_duplicates_only

    @show_duplicates_only.setter
    def show_duplicates_only(self, value: bool) -> None:
        self._show_duplicates_only = bool(value)

    @property
    def sort_order(self) -> SortOrder:
        return self._catalog.sort_order

    @sort_order.setter
    def sort_order(self, value: SortOrder) -> None:
        self._catalog.set_sort_order(value)
