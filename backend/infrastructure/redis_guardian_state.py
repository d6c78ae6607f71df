"""
Redis Guardian State

GuardianState shared across worker processes, so a deployment running
several Flask workers (plus the Celery beat task) sweeps once per interval
rather than once per process.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from domain.blob_storage.guardian_state import IGuardianStateRepository
from infrastructure.redis_repository import RedisRepository

logger = logging.getLogger(__name__)

STATE_KEY = "state"
SWEEP_LOCK_NAME = "sweep"


class RedisGuardianState(IGuardianStateRepository):
    """
    Redis-backed implementation of IGuardianStateRepository.

    The last check time is stored as an ISO timestamp under
    ``{prefix}:state``; the single-flight guard is a redis-py lock.
    """

    def __init__(self, redis_repository: RedisRepository, lock_timeout: int = 600):
        """
        Args:
            redis_repository: RedisRepository, typically prefixed "guardian"
            lock_timeout: Seconds before an abandoned sweep lock is released
        """
        self.redis_repo = redis_repository
        self.lock_timeout = lock_timeout

    def get_last_check(self) -> Optional[datetime]:
        data = self.redis_repo.get_json(STATE_KEY)
        if not data or not data.get("last_check"):
            return None

        try:
            return datetime.fromisoformat(data["last_check"])
        except ValueError:
            logger.warning(f"Ignoring malformed guardian state: {data!r}")
            return None

    def set_last_check(self, checked_at: datetime) -> None:
        if not self.redis_repo.set_json(STATE_KEY, {"last_check": checked_at.isoformat()}):
            logger.warning("Failed to persist guardian last_check; next request may sweep again")

    @contextmanager
    def sweep_lock(self) -> Iterator[bool]:
        with self.redis_repo.try_lock(SWEEP_LOCK_NAME, timeout=self.lock_timeout) as acquired:
            yield acquired
