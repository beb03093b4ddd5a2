import json
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis

from shortlink.models import LinkModel


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.exists.return_value = False
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    return client


@pytest.fixture
def link() -> LinkModel:
    return LinkModel(
        id='6f1c2a8e-0b4d-4f7e-9a51-3c2d8e7f9b10',
        slug='abc123',
        target_url='https://example.com/test',
        created_at=datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC),
        expires_at=datetime(2026, 10, 15, 0, 0, 0, tzinfo=UTC),
        is_active=True,
        created_ip_hash='a' * 64,
    )


@pytest.fixture
def link_record(link: LinkModel) -> str:
    return json.dumps(link.to_dict())
