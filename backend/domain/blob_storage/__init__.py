"""
Blob Storage Domain

Handles content addressing, retention policy, and lazy reclamation.
"""

from .entities import BlobDownload, BlobEntry, SweepReport
from .guardian_state import IGuardianStateRepository, InMemoryGuardianState
from .retention import RetentionPolicy
from .services import RetentionGuardian
from .storage_repository import IBlobStore
from .value_objects import BlobKey, InvalidBlobKeyError

__all__ = [
    "BlobDownload",
    "BlobEntry",
    "BlobKey",
    "IBlobStore",
    "IGuardianStateRepository",
    "InMemoryGuardianState",
    "InvalidBlobKeyError",
    "RetentionGuardian",
    "RetentionPolicy",
    "SweepReport",
]
