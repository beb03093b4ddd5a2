from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis

from shortlink.models import LinkView
from shortlink.dao.cache import LinkCacheDAO


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock cache client, every read is a miss unless a test says otherwise."""
    client = MagicMock(spec=redis.Redis)
    client.connection_pool = MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'cache.test', 'port': 6379, 'db': 1})
    client.get.return_value = None
    client.delete.return_value = 1
    return client


@pytest.fixture
def view() -> LinkView:
    return LinkView(
        target_url='https://example.com/test',
        expires_at=datetime(2026, 10, 15, 0, 0, 0, tzinfo=UTC),
        is_active=True,
    )


@pytest.fixture
def cache(redis_client: redis.Redis) -> LinkCacheDAO:
    return LinkCacheDAO(redis_client=redis_client, prefix='testapp:test', ttl_seconds=86400, jitter_max_seconds=300)
