"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for content-based duplicate detection.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
import os
from enum import Enum


# Reserved digest value for files whose content could not be read.
# Never a valid hex string, so it cannot collide with a real digest.
FAILED_DIGEST = "Error"

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_PROGRESS_INTERVAL = 0.1


# =============================
# Enums
# =============================

class SortKey(Enum):
    NAME = "name"
    KIND = "kind"
    DATE = "date"
    SIZE = "size"
    DIGEST = "digest"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            SortKey.NAME: "Name",
            SortKey.KIND: "Kind",
            SortKey.DATE: "Date Modified",
            SortKey.SIZE: "Size",
            SortKey.DIGEST: "SHA-256",
        }
        return mapping.get(self, self.value)


class ScanState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"


# ======================
#  Core Data Models
# ======================

@dataclass
class FileRecord:
    """
    A regular file discovered by a scan.
    The absolute path is the identity key; everything else is metadata.
    """
    path: str
    size: int  # in bytes
    modified: float  # POSIX mtime
    digest: str
    kind: str = "Unknown"
    name: Optional[str] = None
    directory: Optional[str] = None

    def __post_init__(self):
        """Derive display name and containing directory from path if not provided."""
        if self.size < 0:
            raise ValueError(f"File size cannot be negative: {self.size}")
        if self.name is None:
            self.name = os.path.basename(self.path)
        if self.directory is None:
            self.directory = os.path.dirname(self.path)

    @property
    def is_hashed(self) -> bool:
        """False when hashing failed and the digest is the failure sentinel."""
        return self.digest != FAILED_DIGEST

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}, digest={self.digest[:12]}>"


@dataclass
class DuplicateGroup:
    """
    Files sharing one content digest.
    Derived from the catalog on demand, never stored.
    """
    digest: str
    files: List[FileRecord]

    @property
    def size(self) -> int:
        """Size of a single copy."""
        return self.files[0].size if self.files else 0

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def wasted_bytes(self) -> int:
        """Bytes freed by keeping only one copy."""
        return self.size * max(0, self.duplicate_count - 1)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def __repr__(self):
        return f"<DuplicateGroup digest={self.digest[:12]}, count={len(self.files)}>"


@dataclass(frozen=True)
class SortOrder:
    """Active sort column and direction for the catalog."""
    key: SortKey = SortKey.NAME
    ascending: bool = True


@dataclass
class RemovalResult:
    """Outcome of moving a batch of files to the trash."""
    removed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)  # path -> error message

    @property
    def all_removed(self) -> bool:
        return not self.failed


"""
DTO for scan parameters with built-in validation.
Interface-agnostic — used by the session, the CLI and the Qt worker.
"""

@dataclass
class ScanOptions:
    """Parameters for a scan with validation."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL  # seconds between progress updates
    skip_hidden: bool = True
    follow_symlinks: bool = False

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

        if self.progress_interval < 0:
            raise ValueError("Progress interval cannot be negative")
