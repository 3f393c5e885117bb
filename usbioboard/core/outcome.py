"""First-arrival outcome of a process run.

Every exporter thread, the metrics server and the signal handler report into
one OutcomeAggregator. Only the first report is kept; later reports return
immediately without blocking.
"""

from __future__ import annotations

import threading
from typing import Optional


class OutcomeAggregator:
    """Single-slot result carrier: first report wins."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._error: Optional[BaseException] = None

    def report_error(self, error: BaseException) -> bool:
        """Record ``error`` as the outcome. Returns False if one was already set."""
        return self._settle(error)

    def report_success(self) -> bool:
        """Record an explicit stop as the outcome. Returns False if one was already set."""
        return self._settle(None)

    def _settle(self, error: Optional[BaseException]) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self._error = error
            self._done.set()
        return True

    @property
    def settled(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """Block until the first outcome arrives.

        Returns:
            None for success, otherwise the reported error.

        Raises:
            TimeoutError: if ``timeout`` elapses with no outcome
        """
        if not self._done.wait(timeout):
            raise TimeoutError("no outcome reported")
        return self._error
