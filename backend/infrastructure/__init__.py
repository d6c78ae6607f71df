"""Infrastructure layer for the filesystem blob store and Redis."""

from .keyed_lock import KeyedLock
from .local_blob_store import LocalBlobStore
from .path_resolver import PathResolver
from .redis_guardian_state import RedisGuardianState
from .redis_repository import RedisConnectionManager, RedisRepository

__all__ = [
    'KeyedLock',
    'LocalBlobStore',
    'PathResolver',
    'RedisConnectionManager',
    'RedisGuardianState',
    'RedisRepository',
]
