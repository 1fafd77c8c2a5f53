"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements recursive directory scanning with per-file content hashing.
Features:
- Recursively scans directories with os.walk
- Skips hidden entries, directories, symlinks (unless asked to follow) and special files
- Resolves size, modification time and a type label for each regular file
- Hashes every file through the injected Hasher
- Reports progress at most once per configured interval
"""

import mimetypes
import os
import stat
import time
import logging
from pathlib import Path
from typing import List, Optional, Callable, Set

logger = logging.getLogger(__name__)

# Local imports
from amduplicates.core.models import FileRecord, ScanOptions
from amduplicates.core.interfaces import FileScanner, Hasher
from amduplicates.core.hasher import HasherImpl


def resolve_kind(path: str) -> str:
    """
    Returns a human-readable type label for a file.
    Uses the platform type registry, falls back to the extension.
    """
    mime_type, _ = mimetypes.guess_type(path, strict=False)
    if mime_type:
        return mime_type
    ext = Path(path).suffix.lstrip(".")
    if ext:
        return f"{ext.upper()} file"
    return "Unknown"


class FileScannerImpl(FileScanner):
    """
    Scans one root directory recursively and produces a FileRecord per regular file.

    Attributes:
        root_dir: Root directory to scan
        options: Scan configuration (chunk size, progress interval, hidden/symlink policy)
        hasher: Content hasher, SHA-256 by default
    """

    def __init__(
        self,
        root_dir: str,
        options: Optional[ScanOptions] = None,
        hasher: Optional[Hasher] = None
    ):
        self.root_dir = root_dir
        self.options = options or ScanOptions()
        self.hasher = hasher or HasherImpl(chunk_size=self.options.chunk_size)

    def scan(self,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[int], None]] = None) -> List[FileRecord]:
        """
        Single-pass scanner with rate-limited progress updates.
        Returns an empty list if the root cannot be enumerated or the scan is cancelled.
        """
        logger.debug(f"Starting scan of {self.root_dir}")
        logger.debug(
            f"Options: skip_hidden={self.options.skip_hidden}, "
            f"follow_symlinks={self.options.follow_symlinks}, chunk_size={self.options.chunk_size}"
        )

        if stopped_flag and stopped_flag():
            logger.debug("Scan cancelled before start")
            return []

        if not self._root_is_scannable():
            return []

        found_files: List[FileRecord] = []
        visited_dirs: Set[str] = set()
        seen_paths: Set[str] = set()
        start_time = time.monotonic()
        last_update = start_time

        for root, dirs, files in os.walk(
                self.root_dir,
                onerror=self._on_walk_error,
                followlinks=self.options.follow_symlinks):
            # Check for cancellation at each directory level
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted")
                return []

            if self.options.follow_symlinks:
                real_root = os.path.realpath(root)
                if real_root in visited_dirs:
                    logger.debug(f"Skipping already visited directory: {root}")
                    dirs[:] = []
                    continue
                visited_dirs.add(real_root)

            # Prune subdirectories BEFORE os.walk enters them
            dirs[:] = [d for d in dirs if self._keep_directory(root, d)]

            for filename in files:
                if stopped_flag and stopped_flag():
                    logger.debug("Scan interrupted")
                    return []

                record = self._process_file(os.path.join(root, filename))
                if record is None or record.path in seen_paths:
                    continue
                seen_paths.add(record.path)
                found_files.append(record)

                now = time.monotonic()
                if progress_callback and now - last_update >= self.options.progress_interval:
                    progress_callback(len(found_files))
                    last_update = now

        # Final update so the last count is always delivered
        if progress_callback:
            progress_callback(len(found_files))

        elapsed_time = time.monotonic() - start_time
        logger.debug(f"Total scan time: {elapsed_time:.2f} seconds")
        logger.info(f"Scan of {self.root_dir} completed. Found {len(found_files)} files.")
        return found_files

    def _root_is_scannable(self) -> bool:
        """Validate root directory exists and is accessible."""
        root_path = Path(self.root_dir)
        try:
            if not root_path.exists():
                logger.warning(f"Directory does not exist: {self.root_dir}")
                return False
            if not root_path.is_dir():
                logger.warning(f"Not a directory: {self.root_dir}")
                return False
        except OSError as e:
            logger.warning(f"Cannot access {self.root_dir}: {e}")
            return False
        if not os.access(self.root_dir, os.R_OK | os.X_OK):
            logger.warning(f"Permission denied: {self.root_dir}")
            return False
        return True

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.debug(f"Cannot list directory {error.filename}: {error}")

    def _is_hidden(self, name: str) -> bool:
        return self.options.skip_hidden and name.startswith(".")

    def _keep_directory(self, root: str, name: str) -> bool:
        """Pre-filter directories: skip hidden ones and, unless following, symlinked ones."""
        if self._is_hidden(name):
            logger.debug(f"Skipping hidden directory: {os.path.join(root, name)}")
            return False
        if not self.options.follow_symlinks and os.path.islink(os.path.join(root, name)):
            logger.debug(f"Skipping symbolic link: {os.path.join(root, name)}")
            return False
        return True

    def _process_file(self, path: str) -> Optional[FileRecord]:
        """
        Build a FileRecord for one directory entry.
        Args:
            path: Path of the entry, as produced by the walk
        Returns:
            Optional[FileRecord]: None if the entry is filtered out or its metadata is unavailable
        """
        if self._is_hidden(os.path.basename(path)):
            logger.debug(f"Skipping hidden file: {path}")
            return None

        if not self.options.follow_symlinks and os.path.islink(path):
            logger.debug(f"Skipping symbolic link: {path}")
            return None

        try:
            stat_result = os.stat(path)
        except OSError as e:
            logger.debug(f"Could not read metadata of {path}: {e}")
            return None

        # FIFOs, sockets and devices are not regular files
        if not stat.S_ISREG(stat_result.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            return None

        # A followed link and its target are the same file: key both by the resolved path
        if self.options.follow_symlinks:
            path = os.path.realpath(path)
        else:
            path = os.path.abspath(path)

        digest = self.hasher.compute_digest(path)
        return FileRecord(
            path=path,
            size=stat_result.st_size,
            modified=stat_result.st_mtime,
            digest=digest,
            kind=resolve_kind(path),
        )
