"""
Local Blob Store Implementation

Concrete implementation of IBlobStore on the local filesystem.

On-disk layout::

    {storage_root}/{key}/{RFC3339 creation time}

One directory per key and exactly one file per directory. The filename is
the only record of the creation time; there is no separate metadata file.
"""

import logging
import os
import re
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from domain.blob_storage.entities import BYTES_PER_MEGABYTE, BlobDownload, BlobEntry
from domain.blob_storage.retention import RetentionPolicy
from domain.blob_storage.services import utc_now
from domain.blob_storage.storage_repository import IBlobStore
from domain.blob_storage.value_objects import BlobKey
from domain.errors import BlobExpiredError, BlobNotFoundError, BlobStoreError, StorageInternalError
from domain.events import BlobStoredEvent, DomainEvent
from infrastructure.keyed_lock import KeyedLock
from infrastructure.path_resolver import PathResolver

logger = logging.getLogger(__name__)

MAX_BLOB_BYTES = 150_000_000
DEFAULT_PUBLIC_URL = "http://localhost:8000/"

OVERSIZE_ADVISORY = "I don't accept fat files. file_size > 150m"
DUPLICATE_NOTICE = "Someone has already uploaded this file before. No need to recreate it.\n"
INFO_TEMPLATE = """
URL: {url}?file={key}
File size: {size_mb}M
Days remaining: {days}
"""

# Staging directories live in the root but never look like a key
STAGING_PREFIX = "."
STAGING_SUFFIX = ".part"

# fromisoformat() before 3.11 wants "+00:00" and a 3- or 6-digit fraction
_TIMESTAMP_UTC_SUFFIX = re.compile(r"[Zz]$")
_TIMESTAMP_FRACTION = re.compile(r"\.(\d+)")


def _format_days(days: float) -> str:
    return f"{days:g}"


def _normalize_timestamp(name: str) -> str:
    """
    Rewrite an RFC3339 filename into the subset datetime.fromisoformat()
    accepts on every supported interpreter: a "Z" suffix becomes "+00:00"
    and the fraction is padded or truncated to microseconds.
    """
    name = _TIMESTAMP_UTC_SUFFIX.sub("+00:00", name)
    return _TIMESTAMP_FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), name, count=1)


class LocalBlobStore(IBlobStore):
    """
    Local filesystem implementation of IBlobStore.

    Thread Safety:
        Writers for the same key are serialized by an in-process keyed lock.
        Across processes, the payload is written into a hidden staging
        directory which is then renamed to the key directory in one step.
        Readers never see a partial payload and the rename fails if another
        writer already holds the key, so a key directory never holds a second
        file.

    Attributes:
        resolver: Maps keys to directories under the storage root
        base_url: Public base URL used in retrieval links
        policy: Retention policy used for "days remaining"
        max_blob_bytes: Largest accepted payload
    """

    def __init__(
        self,
        resolver: PathResolver,
        base_url: str = DEFAULT_PUBLIC_URL,
        policy: Optional[RetentionPolicy] = None,
        max_blob_bytes: int = MAX_BLOB_BYTES,
        clock: Callable[[], datetime] = utc_now,
        event_sink: Optional[Callable[[DomainEvent], None]] = None,
    ):
        """
        Initialize the local blob store.

        Args:
            resolver: PathResolver bound to the storage root
            base_url: Public base URL (e.g. http://localhost:8000/)
            policy: Retention policy, defaults to the standard one
            max_blob_bytes: Uploads above this size get an advisory instead
            clock: Source of "now", injectable for tests
            event_sink: Optional callable receiving BlobStoredEvent
        """
        self.resolver = resolver
        self.base_url = base_url
        self.policy = policy or RetentionPolicy()
        self.max_blob_bytes = max_blob_bytes
        self._clock = clock
        self._event_sink = event_sink
        self._writers = KeyedLock()
        self._ensure_base_directory()

    @property
    def storage_root(self) -> Path:
        return self.resolver.storage_root

    def _ensure_base_directory(self) -> None:
        """
        Ensure the storage root exists.

        Raises:
            StorageInternalError: If the directory cannot be created
        """
        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageInternalError(e) from e

    # IBlobStore interface methods

    def put(self, content: bytes) -> str:
        """
        Persist content under its derived key.

        Duplicates and oversized payloads are informational results, not
        errors. An empty key directory found in the way (for instance one
        created by hand) is removed before the new write.

        Args:
            content: Raw payload bytes

        Returns:
            Report text, duplicate notice, or size advisory

        Raises:
            StorageInternalError: If creating or writing the entry fails
        """
        key = BlobKey.derive(content)
        location = self.resolver.resolve(key)

        with self._writers.hold(key.value):
            if self._has_payload(location):
                logger.info(f"Duplicate upload for key {key}")
                return DUPLICATE_NOTICE + self.info(key)

            if location.is_dir():
                logger.warning(f"Removing empty entry {location} before writing")
                self._remove_tree(location)

            if len(content) > self.max_blob_bytes:
                logger.info(f"Rejected oversized upload of {len(content)} bytes")
                return OVERSIZE_ADVISORY

            created_at = self._clock()
            if not self._write_payload(key, location, created_at, content):
                return DUPLICATE_NOTICE + self.info(key)

        if self._event_sink is not None:
            self._event_sink(
                BlobStoredEvent(
                    aggregate_id=key.value,
                    occurred_at=created_at,
                    size_bytes=len(content),
                    days_remaining=self.policy.remaining_days(len(content), created_at, created_at),
                )
            )
        return self.info(key, created_at)

    def get(self, key: BlobKey) -> BlobDownload:
        """
        Open the payload stored under key.

        A blob whose retention already reached zero but has not been swept
        yet is removed here and reported as expired.

        Raises:
            BlobNotFoundError: If the entry is missing, empty, or vanished mid-read
            BlobExpiredError: If the entry has 0 days remaining
            StorageInternalError: On other filesystem failures
        """
        payload = self._payload_path(key)
        try:
            size = payload.stat().st_size
            created_at = self._parse_created_at(key, payload)
            if self.policy.is_expired(size, created_at, self._clock()):
                logger.info(f"Blob {key} requested after expiry, removing")
                self.delete(key)
                raise BlobExpiredError(key.value)
            stream = open(payload, "rb")
        except FileNotFoundError as e:
            raise BlobNotFoundError(key.value, e) from e
        except OSError as e:
            raise StorageInternalError(e) from e

        return BlobDownload(key=key.value, filename=payload.name, stream=stream, size_bytes=size)

    def delete(self, key: BlobKey) -> None:
        """
        Remove the whole directory for key.

        Deleting an absent entry is a no-op.

        Raises:
            BlobNotFoundError: If the key does not map to a directory directly
                under the storage root
            StorageInternalError: If removal fails
        """
        location = self.resolver.resolve(key)
        if not self.resolver.is_key_location(location):
            raise BlobNotFoundError(key.value)
        self._remove_tree(location)

    def info(self, key: BlobKey, created_at: Optional[datetime] = None) -> str:
        """
        Three-line report: retrieval URL, size in MB, days remaining.

        Args:
            key: Blob key
            created_at: Creation time of an entry written by this call chain;
                read from the payload filename when omitted
        """
        if created_at is None:
            entry = self.describe(key)
            created_at, size = entry.created_at, entry.size_bytes
        else:
            size = self.size_bytes(key)

        days = self.policy.remaining_days(size, created_at, self._clock())
        return INFO_TEMPLATE.format(
            url=self.base_url,
            key=key,
            size_mb=size // BYTES_PER_MEGABYTE,
            days=_format_days(days),
        )

    def size_bytes(self, key: BlobKey) -> int:
        payload = self._payload_path(key)
        try:
            return payload.stat().st_size
        except FileNotFoundError as e:
            raise BlobNotFoundError(key.value, e) from e
        except OSError as e:
            raise StorageInternalError(e) from e

    def created_at(self, key: BlobKey) -> datetime:
        return self._parse_created_at(key, self._payload_path(key))

    def describe(self, key: BlobKey) -> BlobEntry:
        payload = self._payload_path(key)
        created_at = self._parse_created_at(key, payload)
        try:
            size = payload.stat().st_size
        except FileNotFoundError as e:
            raise BlobNotFoundError(key.value, e) from e
        except OSError as e:
            raise StorageInternalError(e) from e

        return BlobEntry(
            key=key.value,
            location=payload.parent,
            created_at=created_at,
            size_bytes=size,
        )

    def list_keys(self) -> List[BlobKey]:
        """
        Every key directory under the storage root.

        Staging directories and any entry whose name is not a key are ignored.
        """
        try:
            children = sorted(self.storage_root.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageInternalError(e) from e

        return [BlobKey(child.name) for child in children if BlobKey.is_valid(child.name) and child.is_dir()]

    def purge_staging(self, max_age_seconds: int = 3600) -> int:
        """
        Remove staging entries left behind by writers that died mid-upload.

        Only entries older than max_age_seconds are touched so an upload in
        flight keeps its staging directory.

        Returns:
            Number of staging entries removed
        """
        now = self._clock().timestamp()
        count = 0

        for item in self.storage_root.glob(f"{STAGING_PREFIX}*{STAGING_SUFFIX}"):
            try:
                if now - item.stat().st_mtime > max_age_seconds:
                    if item.is_dir():
                        shutil.rmtree(item)
                    else:
                        item.unlink()
                    count += 1
                    logger.info(f"Removed orphaned staging entry: {item}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Failed to remove staging entry {item}: {e}")

        return count

    # Internal helpers

    def _has_payload(self, location: Path) -> bool:
        try:
            return location.is_dir() and any(location.iterdir())
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageInternalError(e) from e

    def _payload_path(self, key: BlobKey) -> Path:
        """
        The single file under the key directory.

        Raises:
            BlobNotFoundError: If the directory is absent or empty
        """
        location = self.resolver.resolve(key)
        try:
            entries = sorted(location.iterdir())
        except (FileNotFoundError, NotADirectoryError) as e:
            raise BlobNotFoundError(key.value, e) from e
        except OSError as e:
            raise StorageInternalError(e) from e

        if not entries:
            raise BlobNotFoundError(key.value)
        return entries[0]

    def _parse_created_at(self, key: BlobKey, payload: Path) -> datetime:
        try:
            created_at = datetime.fromisoformat(_normalize_timestamp(payload.name))
        except ValueError as e:
            raise BlobStoreError(
                f"Unreadable creation time for blob {key}: {payload.name}", e
            ) from e

        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at

    def _write_payload(self, key: BlobKey, location: Path, created_at: datetime, content: bytes) -> bool:
        """
        Build the entry in a hidden staging directory and rename it into place.

        The rename claims the key atomically: a key directory only ever
        appears with its payload already inside.

        Returns:
            False if another writer claimed the key first
        """
        staging = self.storage_root / f"{STAGING_PREFIX}{key}.{uuid.uuid4().hex}{STAGING_SUFFIX}"
        try:
            staging.mkdir()
            with open(staging / created_at.isoformat(), "wb") as f:
                f.write(content)

            try:
                os.rename(staging, location)
            except OSError:
                if self._has_payload(location):
                    logger.info(f"Key {key} was stored concurrently, discarding staged copy")
                    return False
                raise
            return True
        except OSError as e:
            raise StorageInternalError(e) from e
        finally:
            self._discard_staging(staging)

    def _discard_staging(self, staging: Path) -> None:
        try:
            shutil.rmtree(staging)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(f"Could not remove staging directory {staging}: {e}")

    def _remove_tree(self, location: Path) -> None:
        try:
            shutil.rmtree(location)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageInternalError(e) from e
