"""
Tests for ScanSession — multi-folder scanning, refresh, trash deletion, clearing and
progress delivery on the event loop.
"""
import asyncio
import threading
import time
from unittest.mock import Mock

import pytest

from amduplicates.core.models import FileRecord, ScanOptions, ScanState, SortKey, SortOrder
from amduplicates.session import ScanSession

from conftest import sha256_hex


class BlockingScanner:
    """Scanner that holds the worker thread until it is stopped or released."""

    def __init__(self, root, records=None):
        self.root = root
        self.records = records or []
        self.started = threading.Event()
        self.release = threading.Event()

    def scan(self, stopped_flag=None, progress_callback=None):
        self.started.set()
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if stopped_flag and stopped_flag():
                return []
            if self.release.is_set():
                break
            time.sleep(0.005)
        if progress_callback:
            progress_callback(len(self.records))
        return list(self.records)


class CountingScanner:
    """Scanner that records how many scans run at the same time."""
    active = 0
    max_active = 0
    lock = threading.Lock()

    def __init__(self, root, options=None):
        self.root = root

    def scan(self, stopped_flag=None, progress_callback=None):
        cls = type(self)
        with cls.lock:
            cls.active += 1
            cls.max_active = max(cls.max_active, cls.active)
        time.sleep(0.05)
        with cls.lock:
            cls.active -= 1
        return [FileRecord(path=f"{self.root}/f.txt", size=1, modified=0.0, digest="d")]


@pytest.fixture
def trash():
    """Stand-in trash service; nothing is really moved."""
    return Mock()


# ----------------------------------------------------------------------
# add_folder
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_folder_finds_duplicates(hello_tree):
    session = ScanSession()

    added = await session.add_folder(str(hello_tree["x"].parent))

    hello = sha256_hex(b"hello")
    assert added == 3
    assert len(session.all_records) == 3
    assert session.duplicate_digests == frozenset({hello})

    session.show_duplicates_only = True
    assert [r.name for r in session.records] == ["x.txt", "y.txt"]
    assert all(r.digest == hello for r in session.records)
    assert session.state is ScanState.IDLE


@pytest.mark.asyncio
async def test_adding_same_folder_twice_adds_nothing(hello_tree):
    session = ScanSession()
    root = str(hello_tree["x"].parent)

    await session.add_folder(root)
    added_again = await session.add_folder(root)

    assert added_again == 0
    assert len(session.all_records) == 3
    assert session.tracked_roots == frozenset({root})


@pytest.mark.asyncio
async def test_overlapping_folders_are_merged_by_path(test_files, temp_dir):
    """A subfolder of an already scanned root contributes no new records."""
    session = ScanSession()

    await session.add_folder(str(temp_dir))
    before = len(session.all_records)
    added = await session.add_folder(str(temp_dir / "subdir"))

    assert added == 0
    assert len(session.all_records) == before
    paths = [r.path for r in session.all_records]
    assert len(paths) == len(set(paths))
    assert len(session.tracked_roots) == 2


@pytest.mark.asyncio
async def test_copies_in_different_folders_form_a_group(temp_dir):
    (temp_dir / "one").mkdir()
    (temp_dir / "two").mkdir()
    (temp_dir / "one" / "a.txt").write_bytes(b"same")
    (temp_dir / "two" / "b.txt").write_bytes(b"same")

    session = ScanSession()
    await session.add_folder(str(temp_dir / "one"))
    assert session.duplicate_digests == frozenset()

    await session.add_folder(str(temp_dir / "two"))
    groups = session.duplicate_groups()
    assert len(groups) == 1
    assert {r.name for r in groups[0].files} == {"a.txt", "b.txt"}


@pytest.mark.asyncio
async def test_records_follow_sort_order(hello_tree):
    session = ScanSession(sort_order=SortOrder(key=SortKey.NAME, ascending=False))
    await session.add_folder(str(hello_tree["x"].parent))
    assert [r.name for r in session.all_records] == ["z.txt", "y.txt", "x.txt"]

    session.sort_order = SortOrder(key=SortKey.NAME)
    assert [r.name for r in session.all_records] == ["x.txt", "y.txt", "z.txt"]


@pytest.mark.asyncio
async def test_missing_folder_is_tracked_but_empty(temp_dir):
    session = ScanSession()
    added = await session.add_folder(str(temp_dir / "gone"))

    assert added == 0
    assert len(session.all_records) == 0
    assert str(temp_dir / "gone") in session.tracked_roots


@pytest.mark.asyncio
async def test_linked_folder_and_its_target_share_records(temp_dir):
    """Scanning a real folder and, via another root, a link to it records each file once."""
    real = temp_dir / "real"
    real.mkdir()
    (real / "photo.jpg").write_bytes(b"pixels")
    other = temp_dir / "other"
    other.mkdir()
    try:
        (other / "linked").symlink_to(real, target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("Symlinks not supported")

    session = ScanSession(options=ScanOptions(follow_symlinks=True))
    await session.add_folder(str(other))
    added = await session.add_folder(str(real))

    assert added == 0
    assert [r.path for r in session.all_records] == [str(real / "photo.jpg")]
    assert session.duplicate_digests == frozenset()


# ----------------------------------------------------------------------
# refresh_all
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_refresh_picks_up_disk_changes(hello_tree):
    session = ScanSession()
    root = hello_tree["x"].parent
    await session.add_folder(str(root))

    hello_tree["y"].unlink()
    (root / "w.txt").write_bytes(b"world")

    total = await session.refresh_all()

    assert total == 3
    assert sorted(r.name for r in session.all_records) == ["w.txt", "x.txt", "z.txt"]
    assert session.duplicate_digests == frozenset({sha256_hex(b"world")})
    assert session.tracked_roots == frozenset({str(root)})


@pytest.mark.asyncio
async def test_refresh_with_no_roots_does_nothing():
    factory = Mock()
    session = ScanSession(scanner_factory=factory)
    states = []
    session.add_state_listener(states.append)

    assert await session.refresh_all() == 0
    factory.assert_not_called()
    assert states == []


@pytest.mark.asyncio
async def test_refresh_scans_every_root(temp_dir):
    for name in ("a", "b"):
        (temp_dir / name).mkdir()
        (temp_dir / name / "f.txt").write_bytes(name.encode())

    session = ScanSession()
    await session.add_folder(str(temp_dir / "a"))
    await session.add_folder(str(temp_dir / "b"))

    progress = []
    session.add_progress_listener(progress.append)
    assert await session.refresh_all() == 2
    assert progress[-1] == 2
    assert progress == sorted(progress)


# ----------------------------------------------------------------------
# remove_files
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_remove_files_dissolves_group(hello_tree, trash):
    session = ScanSession(file_service=trash)
    await session.add_folder(str(hello_tree["x"].parent))

    result = await session.remove_files([str(hello_tree["x"])])

    trash.move_to_trash.assert_called_once_with(str(hello_tree["x"]))
    assert result.removed == [str(hello_tree["x"])]
    assert result.all_removed
    assert sorted(r.name for r in session.all_records) == ["y.txt", "z.txt"]
    assert session.duplicate_digests == frozenset()


@pytest.mark.asyncio
async def test_failed_removal_keeps_record(hello_tree, trash):
    """A file that could not be trashed still exists, so it stays in the catalog."""
    def move(path):
        if path == str(hello_tree["y"]):
            raise RuntimeError("Failed to move to trash: permission denied")

    trash.move_to_trash.side_effect = move
    session = ScanSession(file_service=trash)
    await session.add_folder(str(hello_tree["x"].parent))

    result = await session.remove_files([str(hello_tree["x"]), str(hello_tree["y"])])

    assert result.removed == [str(hello_tree["x"])]
    assert list(result.failed) == [str(hello_tree["y"])]
    assert "permission denied" in result.failed[str(hello_tree["y"])]
    assert str(hello_tree["y"]) in session.catalog
    assert str(hello_tree["x"]) not in session.catalog
    assert trash.move_to_trash.call_count == 2


@pytest.mark.asyncio
async def test_remove_files_ignores_repeated_paths(hello_tree, trash):
    session = ScanSession(file_service=trash)
    await session.add_folder(str(hello_tree["x"].parent))

    await session.remove_files([str(hello_tree["z"]), str(hello_tree["z"])])

    assert trash.move_to_trash.call_count == 1


@pytest.mark.asyncio
async def test_remove_files_uses_real_trash(hello_tree):
    """End to end with send2trash: the file leaves the folder, its sibling stays."""
    pytest.importorskip("send2trash")
    session = ScanSession()
    await session.add_folder(str(hello_tree["x"].parent))

    result = await session.remove_files([str(hello_tree["x"])])
    if result.failed:
        pytest.skip(f"Trash not available here: {result.failed}")

    assert not hello_tree["x"].exists()
    assert hello_tree["y"].exists()
    assert session.duplicate_digests == frozenset()


# ----------------------------------------------------------------------
# clear_all / cancel_scan
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_clear_all_resets_session(hello_tree):
    session = ScanSession()
    await session.add_folder(str(hello_tree["x"].parent))
    session.show_duplicates_only = True

    session.clear_all()

    assert session.all_records == ()
    assert session.records == ()
    assert session.duplicate_digests == frozenset()
    assert session.tracked_roots == frozenset()
    assert session.show_duplicates_only is False
    assert session.files_discovered == 0


@pytest.mark.asyncio
async def test_clear_all_discards_running_scan(temp_dir, wait_until):
    record = FileRecord(path=str(temp_dir / "late.txt"), size=1, modified=0.0, digest="d")
    scanners = []

    def factory(root, options):
        scanners.append(BlockingScanner(root, [record]))
        return scanners[-1]

    session = ScanSession(scanner_factory=factory)
    task = asyncio.create_task(session.add_folder(str(temp_dir)))
    await wait_until(lambda: scanners and scanners[0].started.is_set())

    session.clear_all()
    added = await task

    assert added == 0
    assert session.all_records == ()
    assert session.tracked_roots == frozenset()
    assert session.state is ScanState.IDLE


@pytest.mark.asyncio
async def test_scan_after_clear_all_works(hello_tree):
    session = ScanSession()
    root = str(hello_tree["x"].parent)
    await session.add_folder(root)
    session.clear_all()

    assert await session.add_folder(root) == 3


@pytest.mark.asyncio
async def test_cancel_scan_merges_nothing(temp_dir, wait_until):
    record = FileRecord(path=str(temp_dir / "late.txt"), size=1, modified=0.0, digest="d")
    scanners = []

    def factory(root, options):
        scanners.append(BlockingScanner(root, [record]))
        return scanners[-1]

    session = ScanSession(scanner_factory=factory)
    task = asyncio.create_task(session.add_folder(str(temp_dir)))
    await wait_until(lambda: session.is_scanning and scanners and scanners[0].started.is_set())

    session.cancel_scan()

    assert await task == 0
    assert session.all_records == ()
    assert str(temp_dir) in session.tracked_roots


def test_cancel_scan_when_idle_is_harmless():
    session = ScanSession()
    session.cancel_scan()
    assert session.state is ScanState.IDLE


# ----------------------------------------------------------------------
# Coordination and notifications
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_concurrent_add_folder_calls_are_queued():
    CountingScanner.active = 0
    CountingScanner.max_active = 0
    session = ScanSession(scanner_factory=CountingScanner)

    results = await asyncio.gather(
        session.add_folder("/virtual/a"),
        session.add_folder("/virtual/b"),
        session.add_folder("/virtual/c"),
    )

    assert results == [1, 1, 1]
    assert CountingScanner.max_active == 1
    assert len(session.all_records) == 3


@pytest.mark.asyncio
async def test_progress_is_delivered_in_order(ten_file_tree):
    session = ScanSession(options=ScanOptions(progress_interval=0))
    counts = []
    session.add_progress_listener(counts.append)

    await session.add_folder(str(ten_file_tree))

    assert counts[-1] == 10
    assert counts == sorted(counts)
    assert session.files_discovered == 10


@pytest.mark.asyncio
async def test_progress_listener_runs_on_loop_thread(ten_file_tree):
    session = ScanSession(options=ScanOptions(progress_interval=0))
    threads = set()
    session.add_progress_listener(lambda _: threads.add(threading.get_ident()))

    await session.add_folder(str(ten_file_tree))

    assert threads == {threading.get_ident()}


@pytest.mark.asyncio
async def test_state_listener_sees_scan_lifecycle(hello_tree):
    session = ScanSession()
    states = []
    session.add_state_listener(states.append)

    await session.add_folder(str(hello_tree["x"].parent))

    assert states == [ScanState.SCANNING, ScanState.IDLE]


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_scan(hello_tree):
    session = ScanSession()

    def broken(_):
        raise ValueError("listener bug")

    session.add_progress_listener(broken)
    session.add_state_listener(broken)

    assert await session.add_folder(str(hello_tree["x"].parent)) == 3
    assert session.state is ScanState.IDLE
