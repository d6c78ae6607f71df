"""
Guardian State

Process-wide record of when the retention guardian last swept, plus the
single-flight lock that keeps overlapping callers from sweeping twice.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import ContextManager, Iterator, Optional


class IGuardianStateRepository(ABC):
    """
    Storage for GuardianState.

    One instance must be shared by every caller of the guardian; a fresh
    instance per request would always read as "never swept".
    """

    @abstractmethod
    def get_last_check(self) -> Optional[datetime]:
        """Time of the last completed sweep, or None if none has run."""
        pass  # pragma: no cover

    @abstractmethod
    def set_last_check(self, checked_at: datetime) -> None:
        """Record a completed sweep."""
        pass  # pragma: no cover

    @abstractmethod
    def sweep_lock(self) -> ContextManager[bool]:
        """
        Non-blocking single-flight guard.

        Yields True when the caller owns the sweep, False when another
        caller is already sweeping.
        """
        pass  # pragma: no cover


class InMemoryGuardianState(IGuardianStateRepository):
    """Guardian state for a single process, guarded by threading locks."""

    def __init__(self, last_check: Optional[datetime] = None):
        self._last_check = last_check
        self._state_lock = threading.Lock()
        self._sweep_lock = threading.Lock()

    def get_last_check(self) -> Optional[datetime]:
        with self._state_lock:
            return self._last_check

    def set_last_check(self, checked_at: datetime) -> None:
        with self._state_lock:
            self._last_check = checked_at

    @contextmanager
    def sweep_lock(self) -> Iterator[bool]:
        acquired = self._sweep_lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._sweep_lock.release()
