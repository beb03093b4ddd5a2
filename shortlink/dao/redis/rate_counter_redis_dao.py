"""Fixed-window rate counters stored in Redis

Each client gets one counter per window under `<prefix>:ratelimit:create:<client>`.
The first increment of a window also sets its expiry; later increments leave it alone.
"""

from beartype import beartype

from shortlink.dao.base import RateCounterBaseDAO
from shortlink.dao.redis.mixins import RedisClientMixin
from shortlink.dao.redis.helpers import handle_redis_connection_error


class RateCounterRedisDAO(RedisClientMixin, RateCounterBaseDAO):
    """Redis-based rate counter (INCR + EXPIRE NX)

    Methods:
        increment(client_key: str, window_seconds: int) -> int:
            Increment the client's counter and start its window if needed.
            Raises ValueError/TypeError if Redis returns a non-numeric count.
            Raises DataStoreError on connectivity issues with Redis or an error reply
            (e.g. the counter key holds a non-integer value).

        ttl(client_key: str) -> int:
            Remaining lifetime of the client's window.
            Raises DataStoreError on connectivity issues with Redis or an error reply.

    Example:
        >>> dao = RateCounterRedisDAO(prefix='shortlink:dev')
        >>> dao.increment('203.0.113.7', 600)
        1
        >>> dao.ttl('203.0.113.7')
        600
    """

    @handle_redis_connection_error
    @beartype
    def increment(self, client_key: str, window_seconds: int) -> int:
        key = self.keys.rate_limit_key(client_key)

        # NOTE: EXPIRE ... NX only sets the expiry if the key has none. A plain EXPIRE
        #       would let every request in a window push the deadline back, so a
        #       client sending steady traffic would never see its window reset:
        #
        #       (t=0)   INCR => 1, EXPIRE 600     => window ends at t=600
        #       (t=300) INCR => 2, EXPIRE 600     => window now ends at t=900
        #
        #       INCR and EXPIRE NX also run in one MULTI block, so a counter can't
        #       be created without its expiry.
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = pipe.execute()

        return int(count)

    @handle_redis_connection_error
    @beartype
    def ttl(self, client_key: str) -> int:
        return int(self.redis.ttl(self.keys.rate_limit_key(client_key)))
