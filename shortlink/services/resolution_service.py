"""Slug resolution for the redirect path

Cache-aside lookup: the cache is consulted first, the durable store on a miss,
and a usable record found in the store is written back to the cache with a
jittered TTL. The cache only ever holds usable links. Anything else found in
the store (expired, suspended) evicts the slug from the cache instead.

The cache is an optimization: when it is unreachable every lookup falls
through to the store. Store failures are not recoverable here and propagate
as DataStoreError.
"""

import logging
from datetime import datetime

from shortlink.constants import LogEvent
from shortlink.models import LinkView, LinkState, link_state
from shortlink.dao.base import LinkBaseDAO, LinkCacheBaseDAO
from shortlink.dao.exceptions import CacheError
from shortlink.services.outcomes import Resolution, Usable, Expired, Inactive, NotFound


logger = logging.getLogger(__name__)


class ResolutionService:
    """Resolve slugs to link projections

    Attributes:
        link_dao (LinkBaseDAO):
            Authoritative link store.
        cache (LinkCacheBaseDAO):
            Link cache (best effort).
    """

    def __init__(self, link_dao: LinkBaseDAO, cache: LinkCacheBaseDAO):
        self.link_dao = link_dao
        self.cache = cache

    def resolve(self, slug: str) -> LinkView | None:
        """Look up a slug, cache first

        Returns:
            LinkView | None: projection of the link, None if the slug doesn't exist.
                Expired or suspended links are returned as well, classify them
                with link_state().

        Raises:
            DataStoreError: if the durable store can't be reached.
        """
        cached = self._cache_get(slug)
        if cached is not None:
            return cached

        link = self.link_dao.get(slug)
        if link is None:
            return None

        view = link.view()
        if view.is_usable():
            self._cache_set(slug, view)
        else:
            self._cache_evict(slug)
        return view

    def resolve_outcome(self, slug: str, now: datetime | None = None) -> Resolution:
        view = self.resolve(slug)
        match link_state(view, now):
            case LinkState.USABLE:
                return Usable(target_url=view.target_url, view=view)
            case LinkState.EXPIRED:
                return Expired(view=view)
            case LinkState.INACTIVE:
                return Inactive(view=view)
            case _:
                return NotFound(slug=slug)

    def _cache_get(self, slug: str) -> LinkView | None:
        try:
            return self.cache.get(slug)
        except CacheError as e:
            logger.warning(
                'Cache unavailable, reading from the data store.',
                extra={'slug': slug, 'error': str(e), 'event': LogEvent.CACHE_UNAVAILABLE},
            )
            return None

    def _cache_set(self, slug: str, view: LinkView) -> None:
        try:
            self.cache.set(slug, view)
        except CacheError as e:
            logger.warning(
                'Failed to populate the cache.',
                extra={'slug': slug, 'error': str(e), 'event': LogEvent.CACHE_WRITE_FAILED},
            )

    def _cache_evict(self, slug: str) -> None:
        try:
            self.cache.invalidate(slug)
        except CacheError as e:
            logger.warning(
                'Failed to evict an unusable link from the cache.',
                extra={'slug': slug, 'error': str(e), 'event': LogEvent.CACHE_UNAVAILABLE},
            )
