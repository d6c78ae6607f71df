"""
Blob Storage Entities

Domain entities for stored blobs.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict

BYTES_PER_MEGABYTE = 1_000_000


@dataclass(frozen=True)
class BlobEntry:
    """
    Entity describing one stored blob.

    The payload itself is not part of the entity; it lives in the single
    file under ``location`` and is only held in memory while being written.

    Attributes:
        key: Digits-only key derived from the content
        location: Directory holding the payload file
        created_at: Creation time, recovered from the payload filename
        size_bytes: Payload length
    """
    key: str
    location: Path
    created_at: datetime
    size_bytes: int

    @property
    def size_mb(self) -> int:
        """Size in whole megabytes (10^6 bytes), rounded down."""
        return self.size_bytes // BYTES_PER_MEGABYTE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "created_at": self.created_at.isoformat(),
            "size_bytes": self.size_bytes,
            "size_mb": self.size_mb,
        }


@dataclass
class BlobDownload:
    """
    Result of a read: an open byte stream plus the payload's filename.

    The caller owns ``stream`` and must close it.
    """
    key: str
    filename: str
    stream: BinaryIO
    size_bytes: int


@dataclass(frozen=True)
class SweepReport:
    """Outcome counters for one guardian sweep."""
    scanned: int = 0
    evicted: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "scanned": self.scanned,
            "evicted": self.evicted,
            "skipped": self.skipped,
            "failed": self.failed,
        }
