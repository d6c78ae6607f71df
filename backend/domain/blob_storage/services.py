"""
Blob Storage Services

Domain service for lazy, throttled reclamation of expired blobs.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..errors import BlobError, BlobNotFoundError
from ..events import BlobEvictedEvent, DomainEvent, SweepCompletedEvent, SweepEntryFailedEvent
from .entities import SweepReport
from .guardian_state import IGuardianStateRepository
from .retention import RetentionPolicy
from .storage_repository import IBlobStore

logger = logging.getLogger(__name__)

HOURLY_INTERVAL_MINUTES = 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RetentionGuardian:
    """
    Domain service that sweeps the store and evicts expired blobs.

    The guardian is cooperative, not a scheduler: request handlers call
    check() before serving, and a sweep only runs when the configured
    interval has elapsed since the last one. Sweeps are idempotent, so a
    redundant sweep is wasteful but harmless.
    """

    def __init__(
        self,
        store: IBlobStore,
        state: IGuardianStateRepository,
        policy: Optional[RetentionPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
        event_sink: Optional[Callable[[DomainEvent], None]] = None,
    ):
        """
        Initialize RetentionGuardian.

        Args:
            store: Blob store to sweep
            state: Shared guardian state (must be the process-wide instance)
            policy: Retention policy, defaults to the standard one
            clock: Source of "now", injectable for tests
            event_sink: Optional callable receiving domain events
        """
        self.store = store
        self.state = state
        self.policy = policy or RetentionPolicy()
        self.clock = clock
        self._event_sink = event_sink

    @property
    def last_check(self) -> Optional[datetime]:
        return self.state.get_last_check()

    def is_due(self, interval_minutes: int, now: Optional[datetime] = None) -> bool:
        """Return True when no sweep ran within the last interval_minutes."""
        now = now or self.clock()
        last_check = self.state.get_last_check()
        if last_check is None:
            return True
        return now - last_check >= timedelta(minutes=interval_minutes)

    def check(self, interval_minutes: int) -> bool:
        """
        Sweep if the interval has elapsed since the last sweep.

        Args:
            interval_minutes: Minimum minutes between two sweeps

        Returns:
            True if this call performed a sweep

        Raises:
            StorageInternalError: If the storage root cannot be listed;
                last_check is left untouched so the next call retries
        """
        now = self.clock()
        if not self.is_due(interval_minutes, now):
            return False
        return self._locked_sweep(now, interval_minutes) is not None

    def check_hourly(self) -> bool:
        return self.check(HOURLY_INTERVAL_MINUTES)

    def sweep_now(self) -> Optional[SweepReport]:
        """
        Sweep immediately, ignoring the interval, and record it as last check.

        Returns:
            SweepReport, or None if another caller is already sweeping
        """
        return self._locked_sweep(self.clock(), None)

    def _locked_sweep(self, now: datetime, interval_minutes: Optional[int]) -> Optional[SweepReport]:
        with self.state.sweep_lock() as acquired:
            if not acquired:
                logger.debug("Sweep already in progress, skipping")
                return None

            # Another caller may have finished a sweep since our first look
            if interval_minutes is not None and not self.is_due(interval_minutes, now):
                return None

            report = self.sweep(now)
            self.state.set_last_check(now)
            return report

    def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        """
        Evaluate every stored entry and evict those with 0 days remaining.

        Failures on individual entries are logged and skipped so one bad
        entry cannot block reclamation of the rest.

        Args:
            now: Evaluation time, defaults to the guardian's clock

        Returns:
            SweepReport with per-outcome counters
        """
        now = now or self.clock()
        scanned = evicted = skipped = failed = 0

        for key in self.store.list_keys():
            try:
                entry = self.store.describe(key)
            except BlobNotFoundError:
                # Empty directory from a crashed writer, or removed concurrently
                skipped += 1
                continue
            except BlobError as e:
                failed += 1
                self._entry_failed(key.value, e, now)
                continue

            scanned += 1
            if not self.policy.is_expired(entry.size_bytes, entry.created_at, now):
                continue

            try:
                self.store.delete(key)
            except BlobError as e:
                failed += 1
                self._entry_failed(key.value, e, now)
                continue

            evicted += 1
            self._emit(
                BlobEvictedEvent(
                    aggregate_id=entry.key,
                    occurred_at=now,
                    size_bytes=entry.size_bytes,
                    created_at=entry.created_at,
                )
            )

        report = SweepReport(scanned=scanned, evicted=evicted, skipped=skipped, failed=failed)
        self._emit(
            SweepCompletedEvent(
                aggregate_id="guardian",
                occurred_at=now,
                scanned=report.scanned,
                evicted=report.evicted,
                skipped=report.skipped,
                failed=report.failed,
            )
        )
        return report

    def _entry_failed(self, name: str, error: BlobError, now: datetime) -> None:
        logger.warning(f"Sweep failed on entry {name}: {error}", exc_info=error)
        self._emit(SweepEntryFailedEvent(aggregate_id=name, occurred_at=now, error_message=str(error)))

    def _emit(self, event: DomainEvent) -> None:
        if self._event_sink is not None:
            self._event_sink(event)
