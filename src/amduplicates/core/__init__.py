"""
Core duplicate-detection engine — hasher, scanner, grouper, sorter and catalog.

This package contains the performance-critical foundation of amduplicates:
- HasherImpl + SHA256AlgorithmImpl: chunked SHA-256 content hashing
- FileScannerImpl: recursive directory traversal with hidden/symlink filtering
- FileGrouperImpl: digest grouping and duplicate-digest detection
- Sorter: record ordering by name, kind, date, size or digest
- Catalog: path-keyed record collection with its duplicate index
- Models: FileRecord, DuplicateGroup and configuration objects

All components are pure Python with no GUI dependencies — suitable for CLI and server usage.
"""

from .models import (
    FileRecord, DuplicateGroup, ScanOptions, ScanState, SortKey, SortOrder,
    RemovalResult, FAILED_DIGEST)
from .hasher import HasherImpl, SHA256AlgorithmImpl
from .scanner import FileScannerImpl, resolve_kind
from .grouper import FileGrouperImpl
from .sorter import Sorter
from .catalog import Catalog

__all__ = [
    "FileRecord",
    "DuplicateGroup",
    "ScanOptions",
    "ScanState",
    "SortKey",
    "SortOrder",
    "RemovalResult",
    "FAILED_DIGEST",
    "HasherImpl",
    "SHA256AlgorithmImpl",
    "FileScannerImpl",
    "resolve_kind",
    "FileGrouperImpl",
    "Sorter",
    "Catalog",
]
