"""
Blob Service

Application service behind both HTTP surfaces. Every entry point first
gives the retention guardian a chance to run its throttled sweep, then
delegates to the blob store.
"""

import logging
from typing import Any, Dict, Optional

from domain.blob_storage.entities import BlobDownload, SweepReport
from domain.blob_storage.services import HOURLY_INTERVAL_MINUTES, RetentionGuardian
from domain.blob_storage.storage_repository import IBlobStore
from domain.errors import BlobExpiredError
from infrastructure.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class BlobService:
    """
    Orchestrates uploads, downloads and reclamation.

    Guardian failures are never fatal here: a sweep that cannot run is
    logged and the triggering request is served anyway.
    """

    def __init__(
        self,
        store: IBlobStore,
        resolver: PathResolver,
        guardian: RetentionGuardian,
        public_url: str,
        guardian_interval_minutes: int = HOURLY_INTERVAL_MINUTES,
    ):
        """
        Initialize BlobService.

        Args:
            store: Blob store
            resolver: Validates client-supplied keys
            guardian: Process-wide retention guardian
            public_url: Base URL used in retrieval links
            guardian_interval_minutes: Minimum minutes between two sweeps
        """
        self.store = store
        self.resolver = resolver
        self.guardian = guardian
        self.public_url = public_url
        self.guardian_interval_minutes = guardian_interval_minutes

    def upload(self, content: bytes, name: Optional[str] = None) -> str:
        """
        Store an uploaded body.

        Args:
            content: Raw request body
            name: Optional client-supplied name; accepted and ignored, the
                key is derived from the content alone

        Returns:
            Plain-text report, duplicate notice, or size advisory

        Raises:
            StorageInternalError: If the write fails
        """
        self._run_guardian()
        if name:
            logger.debug(f"Ignoring client-supplied name {name!r}")
        return self.store.put(content)

    def download(self, raw_key: str) -> BlobDownload:
        """
        Open a stored blob by client-supplied key.

        Raises:
            BlobNotFoundError: If raw_key is malformed or unknown
            BlobExpiredError: If the blob aged out before being swept
        """
        self._run_guardian()
        key = self.resolver.validate_user_key(raw_key)
        return self.store.get(key)

    def describe(self, raw_key: str) -> Dict[str, Any]:
        """
        Structured info for one blob (JSON API).

        Raises:
            BlobNotFoundError: If raw_key is malformed or unknown
            BlobExpiredError: If the blob reached zero days but was not swept yet
        """
        self._run_guardian()
        key = self.resolver.validate_user_key(raw_key)
        entry = self.store.describe(key)
        now = self.guardian.clock()
        if self.guardian.policy.is_expired(entry.size_bytes, entry.created_at, now):
            raise BlobExpiredError(entry.key)
        days = self.guardian.policy.remaining_days(entry.size_bytes, entry.created_at, now)

        data = entry.to_dict()
        data.update({
            "url": f"{self.public_url}?file={entry.key}",
            "days_remaining": days,
        })
        return data

    def force_sweep(self) -> Optional[SweepReport]:
        """
        Sweep now regardless of the interval.

        Returns:
            SweepReport, or None when another sweep is already running

        Raises:
            StorageInternalError: If the storage root cannot be listed
        """
        report = self.guardian.sweep_now()
        if report is None:
            logger.info("Forced sweep skipped: a sweep is already running")
        return report

    def _run_guardian(self) -> None:
        try:
            self.guardian.check(self.guardian_interval_minutes)
        except Exception as e:
            logger.error(f"Retention sweep failed, serving request anyway: {e}", exc_info=True)
