from __future__ import annotations

import threading
from typing import Protocol

from tqdm import tqdm


BAR_FORMAT = "{bar:40} {n_fmt}/{total_fmt} [{elapsed}]"


class ProgressReporter(Protocol):
    def set_total(self, total: int) -> None: ...

    def increment(self) -> None: ...

    def finish(self, message: str) -> None: ...


class NullProgress:
    """Counts events without rendering anything."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total = 0
        self.count = 0
        self.message: str | None = None

    def set_total(self, total: int) -> None:
        self.total = total

    def increment(self) -> None:
        with self._lock:
            self.count += 1

    def finish(self, message: str) -> None:
        self.message = message


class TqdmProgress:
    def __init__(self, disable: bool | None = None) -> None:
        self._lock = threading.Lock()
        self._disable = disable
        self._bar: tqdm | None = None

    def set_total(self, total: int) -> None:
        with self._lock:
            if self._bar is not None:
                self._bar.close()
            self._bar = tqdm(total=total, unit="entry", bar_format=BAR_FORMAT, disable=self._disable)

    def increment(self) -> None:
        with self._lock:
            if self._bar is not None:
                self._bar.update(1)

    def finish(self, message: str) -> None:
        with self._lock:
            if self._bar is not None:
                self._bar.close()
                self._bar = None
        if message and not self._disable:
            tqdm.write(message)
