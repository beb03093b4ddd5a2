"""Data Access Object (DAO) implementation for storing links in Redis

This module provides a Redis-based implementation of LinkBaseDAO.

Responsibilities:
    - Insert links with an atomic SET NX, which makes Redis the final arbiter of slug uniqueness;
    - Retrieve links by exact slug, whether they are expired, suspended or not;
    - Apply partial updates with optimistic locking (WATCH/MULTI);
    - Delete links;
    - List links newest first through a creation index (sorted set scored by creation time);
    - Raise appropriate DAO exceptions.

Records are stored as JSON strings under `<prefix>:links:<slug>` without a Redis TTL,
and indexed by creation time under `<prefix>:index:links:created`.
Expired links stay readable so that callers can tell "expired" apart from "not found".

Classes:
    LinkRedisDAO:
        DAO for storing and retrieving LinkModel in a Redis datastore.

Example:
    >>> from shortlink.models import LinkModel, LinkPatch
    >>> from shortlink.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(prefix="app:dev")
    >>> dao.insert(link)
    <LinkRedisDAO>

    >>> dao.get('aZ3k9Qx').target_url
    'https://example.com/page'

    >>> dao.update('aZ3k9Qx', LinkPatch(target_url='https://example.com/other')).target_url
    'https://example.com/other'
"""

import json
import logging

import redis
from beartype import beartype

from shortlink.constants import Redis
from shortlink.exceptions import InvalidArgumentError
from shortlink.models import LinkModel, LinkPatch
from shortlink.dao.base import LinkBaseDAO
from shortlink.dao.redis.mixins import RedisClientMixin
from shortlink.dao.redis.helpers import handle_redis_connection_error
from shortlink.dao.exceptions import DataStoreError, LinkAlreadyExistsError, LinkUpdateConflictError


logger = logging.getLogger(__name__)


def _encode(link: LinkModel) -> str:
    return json.dumps(link.to_dict(), separators=(',', ':'))


def _decode(slug: str, blob: str | bytes) -> LinkModel:
    try:
        return LinkModel.from_dict(json.loads(blob))
    except (json.JSONDecodeError, TypeError, KeyError, ValueError) as e:
        raise DataStoreError(f"Malformed link record stored for slug '{slug}'.") from e


class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing links

    This class implements the LinkBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        get(slug: str, **kwargs) -> LinkModel | None:
            Retrieve a link by slug. None if the slug doesn't exist.

        exists(slug: str, **kwargs) -> bool:
            Check whether a slug is taken.

        insert(link: LinkModel, **kwargs) -> LinkRedisDAO:
            Insert a link. Raises LinkAlreadyExistsError when the slug is taken.

        update(slug: str, patch: LinkPatch, **kwargs) -> LinkModel | None:
            Apply a partial update. None if the slug doesn't exist.
            Raises LinkUpdateConflictError if concurrent writers keep winning.

        delete(slug: str, **kwargs) -> bool:
            Delete a link. False if the slug doesn't exist.

        list_recent(limit: int, **kwargs) -> list[LinkModel]:
            Up to `limit` links, newest first.

    All methods raise DataStoreError on connectivity issues with Redis and on error replies.
    """

    @handle_redis_connection_error
    @beartype
    def get(self, slug: str, **kwargs) -> LinkModel | None:
        """Retrieve a stored link by slug

        No filtering on expiry or active flag is done here.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur or the stored record is malformed.
        """
        blob = self.redis.get(self.keys.link_key(slug))
        if blob is None:
            return None
        return _decode(slug, blob)

    @handle_redis_connection_error
    @beartype
    def exists(self, slug: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.link_key(slug)))

    @handle_redis_connection_error
    @beartype
    def insert(self, link: LinkModel, **kwargs) -> 'LinkRedisDAO':
        """Insert a link into Redis if its slug is absent

        Args:
            link (LinkModel):
                LinkModel instance to be stored.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            LinkRedisDAO: self (for method chaining)

        Raises:
            LinkAlreadyExistsError:
                If a link with the same slug already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        # NOTE: SET NX is the uniqueness constraint. An EXISTS check followed by
        #       a plain SET would let two concurrent inserts with the same slug
        #       both succeed, the second silently overwriting the first:
        #
        #       (lambda 1): EXISTS <app>:links:<slug>  => 0
        #       (lambda 2): EXISTS <app>:links:<slug>  => 0
        #       (lambda 1): SET <app>:links:<slug> <link 1>
        #       (lambda 2): SET <app>:links:<slug> <link 2>  => link 1 is lost
        #
        #       The creation index entry goes into the same MULTI block. ZADD NX
        #       keeps the score of a slug which is already indexed, so a losing
        #       insert leaves the winner's position untouched.
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(self.keys.link_key(link.slug), _encode(link), nx=True)
            pipe.zadd(self.keys.link_index_key(), {link.slug: link.created_at.timestamp()}, nx=True)
            created, _ = pipe.execute()

        if not created:
            raise LinkAlreadyExistsError(f"Link with slug '{link.slug}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def update(self, slug: str, patch: LinkPatch, **kwargs) -> LinkModel | None:
        """Apply a partial update to a stored link

        The read-modify-write cycle runs under WATCH, so a concurrent write to the
        same link aborts the transaction instead of being overwritten. Aborted
        transactions are retried a bounded number of times.

        Args:
            slug (str):
                The slug of the link to update.
            patch (LinkPatch):
                Fields to change. None fields are left untouched.

        Returns:
            LinkModel | None: the updated link, None if the slug doesn't exist.

        Raises:
            LinkUpdateConflictError:
                If every attempt lost to a concurrent writer.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        key = self.keys.link_key(slug)

        with self.redis.pipeline(transaction=True) as pipe:
            for attempt in range(1, Redis.UPDATE_MAX_ATTEMPTS + 1):
                try:
                    pipe.watch(key)
                    blob = pipe.get(key)
                    if blob is None:
                        return None

                    link = _decode(slug, blob).patched(patch)
                    pipe.multi()
                    pipe.set(key, _encode(link))
                    pipe.execute()
                    return link
                except redis.WatchError:
                    logger.debug('Link changed during update, retrying.', extra={'slug': slug, 'attempt': attempt})

        raise LinkUpdateConflictError(f"Link with slug '{slug}' kept changing during update ({Redis.UPDATE_MAX_ATTEMPTS} attempts).")

    @handle_redis_connection_error
    @beartype
    def delete(self, slug: str, **kwargs) -> bool:
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(self.keys.link_key(slug))
            pipe.zrem(self.keys.link_index_key(), slug)
            deleted, _ = pipe.execute()

        return deleted == 1

    @handle_redis_connection_error
    @beartype
    def list_recent(self, limit: int, **kwargs) -> list[LinkModel]:
        """List the newest links first

        Slugs are read from the creation index, then their records in one MGET.

        Raises:
            InvalidArgumentError:
                If limit is not a positive integer.
            DataStoreError:
                If Redis connectivity issues occur or a stored record is malformed.
        """
        if limit <= 0:
            raise InvalidArgumentError(f'limit must be greater than 0 (given value: {limit}).')

        slugs = self.redis.zrevrange(self.keys.link_index_key(), 0, limit - 1)
        if not slugs:
            return []

        blobs = self.redis.mget([self.keys.link_key(slug) for slug in slugs])
        # A delete committed between both reads leaves no record behind
        return [_decode(slug, blob) for slug, blob in zip(slugs, blobs, strict=True) if blob is not None]
