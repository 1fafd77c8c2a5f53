"""
AMDuplicates — content-based duplicate file finder.

Core features:
- SHA-256 digests of full file contents, read in 64 KiB chunks
- Several overlapping folders tracked in one session, refreshable at any time
- Scans run off the event loop with rate-limited progress reporting
- Safe deletion to system trash (via send2trash)
- Optional Qt worker for PySide6 front-ends (install with [gui] extra)
"""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("amduplicates")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API — only what users should import directly
from amduplicates.session import ScanSession
from amduplicates.core import (
    Catalog, FileRecord, DuplicateGroup, ScanOptions, ScanState, SortKey, SortOrder,
    RemovalResult, FAILED_DIGEST)
from amduplicates.services import FileService

__all__ = [
    "ScanSession",
    "Catalog",
    "FileRecord",
    "DuplicateGroup",
    "ScanOptions",
    "ScanState",
    "SortKey",
    "SortOrder",
    "RemovalResult",
    "FAILED_DIGEST",
    "FileService",
    "__version__",
]
