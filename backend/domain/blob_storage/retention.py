"""
Retention Policy

Pure computation of how long a blob is kept. Larger blobs get shorter
windows; every blob is capped at MAX_RETENTION_DAYS.
"""

from datetime import datetime

from .entities import BYTES_PER_MEGABYTE

MAX_RETENTION_DAYS = 30.0
MIN_RETENTION_DAYS = 0.0

# Size-days budget: a blob of N megabytes is granted RETENTION_BUDGET / N days
RETENTION_BUDGET_MB_DAYS = 150.0

# Blobs smaller than this are billed as if they were this large
MIN_EFFECTIVE_SIZE_MB = 5.0


class RetentionPolicy:
    """
    Computes the remaining lifetime of a blob from its size and age.

    The policy holds no state; the constants are attributes so a deployment
    can tune them without touching the formula.
    """

    def __init__(
        self,
        budget_mb_days: float = RETENTION_BUDGET_MB_DAYS,
        min_effective_size_mb: float = MIN_EFFECTIVE_SIZE_MB,
        max_days: float = MAX_RETENTION_DAYS,
    ):
        self.budget_mb_days = budget_mb_days
        self.min_effective_size_mb = min_effective_size_mb
        self.max_days = max_days

    @staticmethod
    def age_in_days(created_at: datetime, now: datetime) -> int:
        """Whole days elapsed since creation (never negative)."""
        return max(0, (now - created_at).days)

    def remaining_days(self, size_bytes: int, created_at: datetime, now: datetime) -> float:
        """
        Remaining retention in days, clamped to [0, max_days].

        Args:
            size_bytes: Payload length
            created_at: Creation time of the blob
            now: Evaluation time

        Returns:
            Days left; 0.0 means the blob is eligible for reclamation now
        """
        size_mb = size_bytes / BYTES_PER_MEGABYTE
        effective_size_mb = max(size_mb, self.min_effective_size_mb)
        raw_days = self.budget_mb_days / effective_size_mb - self.age_in_days(created_at, now)
        return min(self.max_days, max(MIN_RETENTION_DAYS, raw_days))

    def is_expired(self, size_bytes: int, created_at: datetime, now: datetime) -> bool:
        return self.remaining_days(size_bytes, created_at, now) == MIN_RETENTION_DAYS
