from __future__ import annotations

from enum import Enum
import threading

from rcopy.models import CopyStats


class FileOutcome(str, Enum):
    COPIED = "copied"
    SIMULATED = "simulated"
    FAILED = "failed"


class StatsAggregator:
    """Lock-guarded counters shared by the directory and file phases."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats = CopyStats()

    def record_dir(self, failed: bool = False) -> None:
        with self._lock:
            self._stats.dirs += 1
            if failed:
                self._stats.failed += 1

    def record_failure(self) -> None:
        with self._lock:
            self._stats.failed += 1

    def record_excluded(self) -> None:
        with self._lock:
            self._stats.excluded += 1

    def record_file(self, outcome: FileOutcome) -> None:
        with self._lock:
            self._stats.files += 1
            if outcome is FileOutcome.FAILED:
                self._stats.failed += 1

    def snapshot(self) -> CopyStats:
        with self._lock:
            return CopyStats(
                files=self._stats.files,
                dirs=self._stats.dirs,
                excluded=self._stats.excluded,
                failed=self._stats.failed,
            )
