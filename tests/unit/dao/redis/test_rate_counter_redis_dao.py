import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from shortlink.dao.exceptions import DataStoreError
from shortlink.dao.redis import RateCounterRedisDAO


class TestRateCounterRedisDAO:
    dao: RateCounterRedisDAO
    redis_client: redis.Redis

    @pytest.fixture(autouse=True)
    def setup(self, redis_client: redis.Redis, app_prefix: str):
        self.dao = RateCounterRedisDAO(redis_client=redis_client, prefix=app_prefix)
        self.redis_client = redis_client

    def test_increment_starts_window(self):
        self.redis_client.execute.return_value = [1, True]

        assert self.dao.increment('198.51.100.7', 600) == 1

        self.redis_client.pipeline.assert_called_once_with(transaction=True)
        self.redis_client.incr.assert_called_once_with('testapp:test:ratelimit:create:198.51.100.7')
        self.redis_client.expire.assert_called_once_with('testapp:test:ratelimit:create:198.51.100.7', 600, nx=True)

    def test_increment_within_window(self):
        self.redis_client.execute.return_value = [17, False]  # expiry already set, NX is a no-op
        assert self.dao.increment('198.51.100.7', 600) == 17

    def test_increment_with_string_count(self):
        self.redis_client.execute.return_value = ['3', True]
        assert self.dao.increment('198.51.100.7', 600) == 3

    def test_increment_with_non_numeric_count(self):
        self.redis_client.execute.return_value = ['garbage', True]
        with pytest.raises(ValueError):
            self.dao.increment('198.51.100.7', 600)

    def test_ttl(self):
        self.redis_client.ttl.return_value = 412
        assert self.dao.ttl('198.51.100.7') == 412
        self.redis_client.ttl.assert_called_once_with('testapp:test:ratelimit:create:198.51.100.7')

    def test_ttl_of_missing_counter(self):
        self.redis_client.ttl.return_value = -2
        assert self.dao.ttl('198.51.100.7') == -2

    def test_connection_error_raises_data_store_error(self):
        self.redis_client.execute.side_effect = redis.exceptions.ConnectionError('Connection refused')

        with pytest.raises(DataStoreError, match="Can't connect to Redis at redis.test:6379/0."):
            self.dao.increment('198.51.100.7', 600)

    def test_error_reply_on_increment_raises_data_store_error(self):
        # Counter key overwritten with a non-integer value
        self.redis_client.execute.side_effect = redis.exceptions.ResponseError(
            'Command # 1 (INCRBY testapp:test:ratelimit:create:198.51.100.7 1) of pipeline caused error: value is not an integer or out of range'
        )

        with pytest.raises(DataStoreError, match='Redis at redis.test:6379/0 replied with an error'):
            self.dao.increment('198.51.100.7', 600)

    def test_error_reply_on_ttl_raises_data_store_error(self):
        self.redis_client.ttl.side_effect = redis.exceptions.ReadOnlyError("You can't write against a read only replica.")

        with pytest.raises(DataStoreError):
            self.dao.ttl('198.51.100.7')

    def test_argument_types_are_enforced(self):
        with pytest.raises(BeartypeCallHintParamViolation):
            self.dao.increment('198.51.100.7', '600')
