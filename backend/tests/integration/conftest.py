import os

import pytest
import redis


@pytest.fixture
def redis_client():
    """
    Yields a clean Redis client for integration testing.
    Uses a dedicated database so guardian keys never mix with real state.
    """
    host = os.getenv("REDIS_HOST", "localhost")
    port = int(os.getenv("REDIS_PORT", 6379))
    db = int(os.getenv("REDIS_TEST_DB", 15))

    client = redis.Redis(host=host, port=port, db=db, decode_responses=False)

    try:
        client.ping()
    except redis.ConnectionError:
        pytest.skip("Redis service not available. Skipping integration tests.")

    # Clean before test
    client.flushdb()

    yield client

    # Clean after test
    client.flushdb()
    client.close()
