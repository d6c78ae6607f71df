"""
Blob Store Interface

Abstract interface for content-addressed blob persistence.
The domain layer (the retention guardian) depends on this contract only,
so the on-disk layout stays an infrastructure concern.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import BlobDownload, BlobEntry
from .value_objects import BlobKey


class IBlobStore(ABC):
    """
    Unified interface for blob storage operations.

    Contract Guarantees:
    - A stored key maps to exactly one payload
    - put() is idempotent for identical content (deduplication)
    - delete() of an absent key is a no-op
    - Missing or empty entries surface as BlobNotFoundError
    - Storage failures surface as StorageInternalError, never raw OSError
    """

    @abstractmethod
    def put(self, content: bytes) -> str:
        """
        Persist content under its derived key.

        Returns:
            Human-readable report (URL, size, days remaining), the
            "already uploaded" notice for duplicates, or the size advisory
            for oversized content

        Raises:
            StorageInternalError: If the filesystem fails during the write
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, key: BlobKey) -> BlobDownload:
        """
        Open the payload stored under key.

        Raises:
            BlobNotFoundError: If nothing is stored under key
            BlobExpiredError: If the blob's retention window already reached zero
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, key: BlobKey) -> None:
        """Remove the whole entry for key."""
        pass  # pragma: no cover

    @abstractmethod
    def info(self, key: BlobKey, created_at: Optional[datetime] = None) -> str:
        """
        Three-line report: retrieval URL, size in MB, days remaining.

        Args:
            key: Blob key
            created_at: Creation time when already known to the caller
        """
        pass  # pragma: no cover

    @abstractmethod
    def size_bytes(self, key: BlobKey) -> int:
        """Payload length; BlobNotFoundError when missing or empty."""
        pass  # pragma: no cover

    @abstractmethod
    def created_at(self, key: BlobKey) -> datetime:
        """Creation time recovered from the persisted payload."""
        pass  # pragma: no cover

    @abstractmethod
    def describe(self, key: BlobKey) -> BlobEntry:
        """Structured view of one entry."""
        pass  # pragma: no cover

    @abstractmethod
    def list_keys(self) -> List[BlobKey]:
        """
        Every key with a directory under the storage root.

        Raises:
            StorageInternalError: If the storage root cannot be listed
        """
        pass  # pragma: no cover
