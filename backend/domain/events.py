"""
Domain Events

Immutable records of significant state changes in the blob store.
Events decouple side effects (logging) from core storage logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (a blob key,
            or "guardian" for sweep-level events)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class BlobStoredEvent(DomainEvent):
    """
    Event emitted when a new blob is persisted.

    Attributes:
        aggregate_id: Blob key
        occurred_at: Creation time recorded in the payload filename
        size_bytes: Payload length
        days_remaining: Retention window at creation
    """
    size_bytes: int
    days_remaining: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "size_bytes": self.size_bytes,
            "days_remaining": self.days_remaining,
        })
        return base_dict


@dataclass(frozen=True)
class BlobEvictedEvent(DomainEvent):
    """
    Event emitted when an expired blob is removed.

    Attributes:
        aggregate_id: Blob key
        occurred_at: When the eviction happened
        size_bytes: Size of the removed payload
        created_at: Creation time of the removed blob
    """
    size_bytes: int
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class SweepEntryFailedEvent(DomainEvent):
    """
    Event emitted when the guardian could not evaluate or evict one entry.

    Attributes:
        aggregate_id: Name of the entry under the storage root
        occurred_at: When the failure happened
        error_message: Display message of the failure
    """
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict["error_message"] = self.error_message
        return base_dict


@dataclass(frozen=True)
class SweepCompletedEvent(DomainEvent):
    """
    Event emitted at the end of every guardian sweep.

    Attributes:
        aggregate_id: Always "guardian"
        occurred_at: Sweep time
        scanned: Number of key directories evaluated
        evicted: Number of directories removed
        skipped: Number of entries ignored (empty or not a key)
        failed: Number of entries that raised during evaluation
    """
    scanned: int
    evicted: int
    skipped: int
    failed: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "scanned": self.scanned,
            "evicted": self.evicted,
            "skipped": self.skipped,
            "failed": self.failed,
        })
        return base_dict


__all__ = [
    "DomainEvent",
    "BlobStoredEvent",
    "BlobEvictedEvent",
    "SweepEntryFailedEvent",
    "SweepCompletedEvent",
]
