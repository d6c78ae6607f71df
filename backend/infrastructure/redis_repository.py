"""
Redis Repository Base Class

Provides JSON persistence and distributed locking on top of redis-py.
Used to share guardian state between worker processes.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with JSON values and distributed locking."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def set_json(self, key: str, data: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Set JSON data with optional TTL.

        Args:
            key: Redis key
            data: Dictionary to store as JSON
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        try:
            redis_key = self._make_key(key)
            json_data = json.dumps(data)

            if ttl:
                return bool(self.redis.setex(redis_key, ttl, json_data))
            return bool(self.redis.set(redis_key, json_data))
        except (RedisConnectionError, TypeError) as e:
            logger.error(f"Error setting JSON data for key {key}: {e}")
            return False

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found and valid JSON, None otherwise
        """
        try:
            redis_key = self._make_key(key)
            data = self.redis.get(redis_key)

            if data is None:
                return None

            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return json.loads(data)
        except (RedisConnectionError, json.JSONDecodeError) as e:
            logger.error(f"Error getting JSON data for key {key}: {e}")
            return None

    @contextmanager
    def try_lock(self, lock_name: str, timeout: int = 600) -> Iterator[bool]:
        """
        Non-blocking distributed lock.

        Args:
            lock_name: Name of the lock
            timeout: Seconds after which Redis releases a lock whose holder died

        Yields:
            True if the lock was acquired, False if someone else holds it
        """
        lock_key = self._make_key(f"lock:{lock_name}")
        lock = self.redis.lock(lock_key, timeout=timeout)
        acquired = lock.acquire(blocking=False)

        try:
            yield bool(acquired)
        finally:
            if acquired:
                try:
                    lock.release()
                except LockError:
                    # Lock may have expired, which is fine
                    logger.debug(f"Lock {lock_name} expired before release")


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisConnectionError:
            return False
