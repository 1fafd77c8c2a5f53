"""
Qt worker runnable — follows modern Qt pattern: QRunnable + QThreadPool.
Scans a list of roots off the GUI thread. The GUI thread merges the emitted
records into its Catalog, so only one thread ever mutates it.
"""
from typing import List, Optional

from PySide6.QtCore import QRunnable, QObject, Signal, QMutex, QMutexLocker

from amduplicates.core.models import ScanOptions
from amduplicates.core.scanner import FileScannerImpl


class WorkerSignals(QObject):
    """Separate QObject to hold signals (QRunnable cannot emit signals directly)."""
    progress = Signal(int)  # files discovered so far
    root_finished = Signal(str, list)  # root, records
    finished = Signal(list)  # all records
    error = Signal(str)


class ScanWorker(QRunnable):
    """
    Worker runnable that scans roots in the thread pool.
    Automatically deleted after execution (setAutoDelete=True).
    """
    def __init__(self, roots: List[str], options: Optional[ScanOptions] = None):
        super().__init__()
        self.roots = list(roots)
        self.options = options or ScanOptions()
        self.signals = WorkerSignals()
        self._stopped = False
        self._mutex = QMutex()
        self._base_count = 0
        self.setAutoDelete(True)  # Critical: auto-delete after run() completes

    def stop(self):
        """Sets the stopped flag to signal the worker to terminate gracefully."""
        with QMutexLocker(self._mutex):
            self._stopped = True

    def is_stopped(self) -> bool:
        """Returns True if the worker has been requested to stop."""
        with QMutexLocker(self._mutex):
            return self._stopped

    def safe_progress_emit(self, count: int):
        """Emits progress signal safely with mutex protection."""
        with QMutexLocker(self._mutex):
            if not self._stopped:
                try:
                    self.signals.progress.emit(self._base_count + count)
                except RuntimeError:
                    pass

    def create_scanner(self, root: str) -> FileScannerImpl:
        return FileScannerImpl(root, options=self.options)

    def run(self):
        """Main execution method. Runs in thread pool thread."""
        try:
            if self.is_stopped():
                return

            all_records = []
            for root in self.roots:
                self._base_count = len(all_records)
                records = self.create_scanner(root).scan(
                    stopped_flag=self.is_stopped,
                    progress_callback=self.safe_progress_emit
                )
                if self.is_stopped():
                    return
                all_records.extend(records)
                self.signals.root_finished.emit(root, records)

            self.signals.finished.emit(all_records)
        except Exception as e:
            if not self.is_stopped():
                self.signals.error.emit(f"{type(e).__name__}: {str(e)}")
