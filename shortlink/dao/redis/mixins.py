"""Shared Redis client setup for the link store, rate counters and link cache

All three stores talk to Redis through the same mixin, so they share one way of
building a client (bounded socket timeouts on every call) and one startup check
(a PING on construction).

Example:
    >>> class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    ...     pass
    ...
    >>> dao = LinkRedisDAO(redis_host='redis.internal', prefix='shortlink:prod')
    >>> dao.keys.link_key('aZ3k9Qx')
    'shortlink:prod:links:aZ3k9Qx'
"""

import redis

from shortlink.constants import Redis
from shortlink.dao.redis.redis_key_schema import RedisKeySchema
from shortlink.dao.redis.helpers import REDIS_CONNECTIVITY_ERRORS, redis_location
from shortlink.dao.exceptions import DataStoreError


def connect(
    host: str = 'localhost',
    port: int | str = 6379,
    db: int | str = 0,
    decode_responses: bool = True,
    username: str | None = None,
    password: str | None = None,
    socket_timeout: float = Redis.SOCKET_TIMEOUT,
    socket_connect_timeout: float = Redis.SOCKET_CONNECT_TIMEOUT,
) -> redis.Redis:
    """Build a Redis client whose every call gives up after the socket timeouts"""
    return redis.Redis(
        host=host,
        port=int(port),  # AppConfig documents may carry ports as strings
        db=int(db),
        decode_responses=decode_responses,
        username=username,
        password=password,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_connect_timeout,
    )


class RedisClientMixin:
    """Redis client and key schema for Redis-backed DAOs

    Connection parameters mirror the `redis` section of the Lambda's AppConfig
    document, prefixed with `redis_` (host, port, db, decode_responses,
    username, password, socket_timeout, socket_connect_timeout). Pass
    `redis_client` instead to reuse an existing client.

    Attributes:
        redis (redis.Redis):
            Client used by subclasses.
        keys (RedisKeySchema):
            Key names under `prefix` (e.g. 'shortlink:prod').

    Raises:
        DataStoreError:
            On construction, if Redis doesn't answer the PING.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_socket_timeout: float = Redis.SOCKET_TIMEOUT,
        redis_socket_connect_timeout: float = Redis.SOCKET_CONNECT_TIMEOUT,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        if redis_client is None:
            redis_client = connect(
                host=redis_host,
                port=redis_port,
                db=redis_db,
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
                socket_connect_timeout=redis_socket_connect_timeout,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._heatlhcheck()

    def _heatlhcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered. False if it didn't and raise_error=False.

        Raises:
            DataStoreError: if Redis didn't answer and raise_error=True.
        """
        try:
            self.redis.ping()
        except REDIS_CONNECTIVITY_ERRORS as e:
            if not raise_error:
                return False
            raise DataStoreError(f"Can't connect to Redis at {redis_location(self.redis)}. Check the provided configuration paramters.") from e
        return True
