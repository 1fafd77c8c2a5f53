"""
Shared fixtures for duplicate finder tests.
Creates isolated temporary directories with controlled test files.
"""
import hashlib
import time

import pytest
import tempfile
from pathlib import Path
from typing import Dict

from amduplicates.core.models import FileRecord


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_record(path: str, content: bytes = b"", digest: str = None, size: int = None,
                modified: float = 0.0, kind: str = "text/plain") -> FileRecord:
    """FileRecord factory for tests that don't touch the disk."""
    return FileRecord(
        path=path,
        size=len(content) if size is None else size,
        modified=modified,
        digest=sha256_hex(content) if digest is None else digest,
        kind=kind,
    )


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def hello_tree(temp_dir) -> Dict[str, Path]:
    """
    Folder with x.txt ("hello"), y.txt ("hello") and z.txt ("world").
    """
    files = {
        "x": temp_dir / "x.txt",
        "y": temp_dir / "y.txt",
        "z": temp_dir / "z.txt",
    }
    files["x"].write_bytes(b"hello")
    files["y"].write_bytes(b"hello")
    files["z"].write_bytes(b"world")
    return files


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for scanning scenarios:
    - 2 identical files (duplicates) plus a third copy in a subdirectory
    - 2 unique files (different content)
    - 1 empty file (recorded like any other file)
    - 1 hidden file and 1 hidden directory (must be skipped)
    """
    files = {}

    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.jpg"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    files["hidden"] = temp_dir / ".hidden.txt"
    files["hidden"].write_bytes(content_a)

    hidden_dir = temp_dir / ".cache"
    hidden_dir.mkdir()
    files["in_hidden_dir"] = hidden_dir / "cached.txt"
    files["in_hidden_dir"].write_bytes(content_a)

    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


@pytest.fixture
def ten_file_tree(temp_dir) -> Path:
    """Ten files with distinct content."""
    for i in range(10):
        (temp_dir / f"file_{i}.bin").write_bytes(f"content {i}".encode() * (i + 1))
    return temp_dir


@pytest.fixture
def wait_until():
    """Polls a condition from async tests without blocking the loop."""
    import asyncio

    async def _wait(condition, timeout: float = 5.0):
        deadline = time.monotonic() + timeout
        while not condition():
            if time.monotonic() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(0.01)
    return _wait
