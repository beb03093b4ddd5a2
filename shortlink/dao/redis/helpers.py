import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from shortlink.dao.exceptions import DataStoreError, CacheUnavailableError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])

# Connectivity failures: refused/dropped connections and socket timeouts
REDIS_CONNECTIVITY_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def redis_location(client: redis.Redis) -> str:
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors and error replies

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.ConnectionError,
            redis.exceptions.TimeoutError or an error reply (redis.exceptions.ResponseError:
            WRONGTYPE, OOM, READONLY, ...).

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis
            and on error replies. WatchError is left to the optimistic locking loops.

    Example:
        >>> @handle_redis_connection_error
        ... def ttl(self, client_key):
        ...     return self.redis.ttl(client_key)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except REDIS_CONNECTIVITY_ERRORS as e:
            raise DataStoreError(f"Can't connect to Redis at {redis_location(self.redis)}.") from e
        except redis.exceptions.WatchError:
            raise
        except redis.exceptions.RedisError as e:
            raise DataStoreError(f'Redis at {redis_location(self.redis)} replied with an error: {e}') from e

    return wrapper


def handle_cache_connection_error[F](method: F) -> F:
    """Wrap link cache methods to handle connection errors and error replies

    Same as handle_redis_connection_error, but raises CacheUnavailableError so that
    callers can tell a missing cache apart from a missing data store.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except REDIS_CONNECTIVITY_ERRORS as e:
            raise CacheUnavailableError(f"Can't connect to cache at {redis_location(self.redis)}.") from e
        except redis.exceptions.WatchError:
            raise
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f'Cache at {redis_location(self.redis)} replied with an error: {e}') from e

    return wrapper
