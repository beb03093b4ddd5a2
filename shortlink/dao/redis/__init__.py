from shortlink.dao.redis.redis_key_schema import RedisKeySchema
from shortlink.dao.redis.mixins import RedisClientMixin
from shortlink.dao.redis.link_redis_dao import LinkRedisDAO
from shortlink.dao.redis.rate_counter_redis_dao import RateCounterRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'LinkRedisDAO',
    'RateCounterRedisDAO',
]
