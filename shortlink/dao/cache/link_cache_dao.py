"""Read-through link cache backed by Redis

This module caches LinkView projections of links, keyed by slug.

Responsibilities:
    - Store compact projections only: {"u": target_url, "x": expires_at, "a": is_active}.
      Identifiers, creation time and provenance never enter the cache.
    - Apply a jittered TTL to every entry (base TTL + uniform random jitter), so that
      links cached at the same moment don't all expire at the same moment.
    - Treat corrupt payloads as cache misses and drop them.
    - Delete entries on demand (invalidation on link updates and deletes).

Classes:
    LinkCacheDAO:
        Redis-backed implementation of LinkCacheBaseDAO.

Example:
    >>> cache = LinkCacheDAO(prefix='shortlink:dev')
    >>> cache.get('aZ3k9Qx') is None
    True
    >>> cache.set('aZ3k9Qx', LinkView(target_url='https://example.com'))
    86512
    >>> cache.get('aZ3k9Qx')
    LinkView(target_url='https://example.com', expires_at=None, is_active=True)
    >>> cache.invalidate('aZ3k9Qx')
    True
"""

import json
import logging
import random

import redis
from beartype import beartype

from shortlink.constants import TTL, LogEvent
from shortlink.exceptions import InvalidArgumentError
from shortlink.models import LinkView, to_iso, from_iso
from shortlink.dao.base import LinkCacheBaseDAO
from shortlink.dao.cache.cache_key_schema import CacheKeySchema
from shortlink.dao.redis.mixins import RedisClientMixin
from shortlink.dao.redis.helpers import handle_cache_connection_error, redis_location
from shortlink.dao.exceptions import DataStoreError, CacheUnavailableError, CorruptCacheEntryError


logger = logging.getLogger(__name__)


def encode_view(view: LinkView) -> str:
    payload = {'u': view.target_url, 'x': to_iso(view.expires_at), 'a': view.is_active}
    return json.dumps(payload, separators=(',', ':'))


def decode_view(blob: str | bytes) -> LinkView:
    """Decode a cached payload

    Raises:
        CorruptCacheEntryError:
            If the payload isn't valid JSON or doesn't have the expected shape.
    """
    try:
        payload = json.loads(blob)
        target_url, expires_at, is_active = payload['u'], payload.get('x'), payload['a']
        if not isinstance(target_url, str) or not isinstance(is_active, bool):
            raise TypeError(f'Unexpected cache payload types: {payload!r}')
        return LinkView(target_url=target_url, expires_at=from_iso(expires_at), is_active=is_active)
    except (json.JSONDecodeError, TypeError, KeyError, ValueError) as e:
        raise CorruptCacheEntryError('Cached link payload could not be decoded.') from e


class LinkCacheDAO(RedisClientMixin, LinkCacheBaseDAO):
    """Redis-backed link cache with jittered expiry

    Attributes (via mixins):
        redis (redis.Redis):
            Redis client used to communicate with the cache.
        keys (CacheKeySchema):
            Key schema helper for generating namespaced cache keys.
        ttl_seconds (int):
            Base TTL of every entry.
        jitter_max_seconds (int):
            Upper bound (inclusive) of the random jitter added to the base TTL.

    Methods:
        get(slug: str) -> LinkView | None
        set(slug: str, view: LinkView) -> int
        invalidate(slug: str) -> bool

    All methods raise CacheUnavailableError on connectivity issues with Redis and on
    error replies (WRONGTYPE, OOM, READONLY replica).
    """

    def __init__(self, *args, ttl_seconds: int = TTL.CACHE_BASE, jitter_max_seconds: int = TTL.CACHE_JITTER_MAX, **kwargs):
        if ttl_seconds <= 0:
            raise InvalidArgumentError(f'Cache TTL must be a positive integer (given value: {ttl_seconds}).')
        if jitter_max_seconds < 0:
            raise InvalidArgumentError(f'Cache TTL jitter must be a non-negative integer (given value: {jitter_max_seconds}).')

        super().__init__(*args, **kwargs)
        self.keys = CacheKeySchema(prefix=self.keys.prefix)
        self.ttl_seconds = ttl_seconds
        self.jitter_max_seconds = jitter_max_seconds

    def _heatlhcheck(self, raise_error: bool = False) -> bool:
        """PING the cache

        Unlike the data store DAOs, an unreachable cache doesn't fail construction
        by default: every later call raises CacheUnavailableError, which callers
        degrade on.

        Raises:
            CacheUnavailableError:
                If the cache can't be reached and raise_error=True.
        """
        try:
            return super()._heatlhcheck(raise_error=True)
        except DataStoreError as e:
            if raise_error:
                raise CacheUnavailableError(f"Can't connect to cache at {redis_location(self.redis)}.") from e
            logger.warning('Link cache is unreachable.', extra={'error': str(e), 'event': LogEvent.CACHE_UNAVAILABLE})
            return False

    def ttl(self) -> int:
        """Draw the TTL for a new cache entry"""
        return self.ttl_seconds + random.randint(0, self.jitter_max_seconds)  # noqa: S311

    @handle_cache_connection_error
    @beartype
    def get(self, slug: str) -> LinkView | None:
        """Retrieve a cached link projection

        A payload which fails to decode is treated as a miss and removed from the
        cache (best effort), so the next resolution repopulates it from the data store.

        Returns:
            LinkView | None: the cached projection, None on a miss.
        """
        key = self.keys.link_key(slug)
        blob = self.redis.get(key)
        if blob is None:
            return None

        try:
            return decode_view(blob)
        except CorruptCacheEntryError:
            logger.warning(
                'Link cache contained a corrupt entry. Treating as cache miss.',
                extra={'slug': slug, 'event': LogEvent.CACHE_CORRUPT_ENTRY},
            )
            self._discard(key)
            return None

    @handle_cache_connection_error
    @beartype
    def set(self, slug: str, view: LinkView) -> int:
        ttl = self.ttl()
        self.redis.set(self.keys.link_key(slug), encode_view(view), ex=ttl)
        return ttl

    @handle_cache_connection_error
    @beartype
    def invalidate(self, slug: str) -> bool:
        """Delete a cached link projection

        Returns:
            bool: True if an entry was deleted, False if there was none.
        """
        return self.redis.delete(self.keys.link_key(slug)) == 1

    def _discard(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except redis.exceptions.RedisError:
            logger.warning('Failed to discard corrupt link cache entry.', extra={'key': key, 'event': LogEvent.CACHE_UNAVAILABLE})
