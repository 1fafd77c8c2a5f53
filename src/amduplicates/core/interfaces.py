"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate finder.
These protocols enforce structural typing using Python's `typing.Protocol` so that
hashers, scanners and trash back-ends can be swapped in tests and front-ends.

Key Components:
---------------
- HashObject: a streaming hash state (update + hexdigest), as returned by hashlib.
- HashAlgorithm: factory for HashObject instances (SHA-256 by default).
- Hasher: computes the content digest of a file.
- FileScanner: walks a root directory and returns FileRecords.
- TrashService: moves a file to the system trash.
"""

from typing import Protocol, List, Optional, Callable
from amduplicates.core.models import FileRecord


# ===== Interfaces =====

class HashObject(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for streaming hash algorithms.

    Allows plugging in a different cryptographic function without affecting
    the scanner or the catalog.
    """

    name: str

    def new(self) -> HashObject:
        """Returns a fresh hash state."""
        ...


class Hasher(Protocol):
    """Interface for hashing whole file contents."""
    def compute_digest(self, path: str) -> str: ...


class FileScanner(Protocol):
    """
    Interface for scanning file systems and collecting file records.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[int], None]] = None
    ) -> List[FileRecord]:
        """
        Scan files from the configured directory.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Called with the number of files discovered so far.

        Returns:
            List of FileRecords, one per regular file.
        """
        ...


class TrashService(Protocol):
    """Interface for the platform 'move to trash' primitive."""
    def move_to_trash(self, file_path: str) -> None: ...
