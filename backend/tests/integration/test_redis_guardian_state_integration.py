"""
Integration tests for RedisGuardianState against a live Redis.

Skipped when no Redis server is reachable (see the redis_client fixture).
"""

from datetime import datetime, timezone

from infrastructure.redis_guardian_state import RedisGuardianState
from infrastructure.redis_repository import RedisRepository


def test_state_is_shared_between_instances(redis_client):
    checked_at = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    writer = RedisGuardianState(RedisRepository(redis_client, "floppy:guardian"))
    reader = RedisGuardianState(RedisRepository(redis_client, "floppy:guardian"))

    writer.set_last_check(checked_at)

    assert reader.get_last_check() == checked_at


def test_sweep_lock_is_exclusive_across_instances(redis_client):
    first = RedisGuardianState(RedisRepository(redis_client, "floppy:guardian"))
    second = RedisGuardianState(RedisRepository(redis_client, "floppy:guardian"))

    with first.sweep_lock() as outer:
        with second.sweep_lock() as inner:
            assert outer is True
            assert inner is False

    with second.sweep_lock() as acquired:
        assert acquired is True
