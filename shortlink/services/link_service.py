"""Link lifecycle: creation, lookup, listing, update and deletion

Mutations go to the durable store first and then evict the slug from the
cache before returning, so a caller which saw the mutation succeed never
resolves the stale version afterwards. An eviction failure is reported to the
caller (CacheUnavailableError): the durable write has happened, but the cache
may serve the old version until its TTL runs out.
"""

import logging
import uuid
from datetime import datetime, UTC

from shortlink.constants import LogEvent, Listing
from shortlink.exceptions import SlugExhaustedError
from shortlink.models import LinkModel, LinkPatch
from shortlink.dao.base import LinkBaseDAO, LinkCacheBaseDAO
from shortlink.dao.exceptions import LinkAlreadyExistsError
from shortlink.services.outcomes import Created, RateLimited, Denied
from shortlink.services.rate_limiter import RateLimiter
from shortlink.services.slug_issuer import SlugIssuer


logger = logging.getLogger(__name__)


class LinkService:
    """Create and manage short links

    Attributes:
        link_dao (LinkBaseDAO):
            Authoritative link store.
        cache (LinkCacheBaseDAO):
            Link cache, evicted on every mutation.
        issuer (SlugIssuer):
            Source of fresh slugs.
        limiter (RateLimiter | None):
            Admission control for shorten(). None disables rate limiting.

    Example:
        >>> service = LinkService(link_dao, cache, SlugIssuer(link_dao), RateLimiter(counter_dao))
        >>> outcome = service.shorten('https://example.com', client_key='203.0.113.7')
        >>> outcome.slug
        'Xk29aBq'
    """

    def __init__(
        self,
        link_dao: LinkBaseDAO,
        cache: LinkCacheBaseDAO,
        issuer: SlugIssuer,
        limiter: RateLimiter | None = None,
    ):
        self.link_dao = link_dao
        self.cache = cache
        self.issuer = issuer
        self.limiter = limiter

    def create(
        self,
        target_url: str,
        expires_at: datetime | None = None,
        is_active: bool = True,
        created_ip_hash: str | None = None,
    ) -> Created:
        """Store a new link under a freshly issued slug

        A slug taken between the issuer's check and the insert is treated as
        another collision and a new slug is issued, within the issuer's bound.

        Raises:
            SlugExhaustedError: if no free slug could be issued.
            DataStoreError: if the durable store can't be reached.
        """
        for attempt in range(1, self.issuer.max_attempts + 1):
            slug = self.issuer.issue()
            link = LinkModel(
                id=str(uuid.uuid4()),
                slug=slug,
                target_url=target_url,
                created_at=datetime.now(UTC),
                expires_at=expires_at,
                is_active=is_active,
                created_ip_hash=created_ip_hash,
            )
            try:
                self.link_dao.insert(link)
            except LinkAlreadyExistsError:
                logger.warning(
                    'Slug taken at insert, issuing a new one.',
                    extra={'slug': slug, 'attempt': attempt, 'event': LogEvent.SLUG_COLLISION},
                )
                continue

            logger.info('Link created.', extra={'slug': slug})
            return Created(slug=slug, link=link)

        raise SlugExhaustedError(f'Failed to store a link under a unique slug after {self.issuer.max_attempts} attempts.')

    def shorten(
        self,
        target_url: str,
        client_key: str | None,
        expires_at: datetime | None = None,
        created_ip_hash: str | None = None,
    ) -> Created | RateLimited:
        if self.limiter is not None:
            admission = self.limiter.admit(client_key)
            if isinstance(admission, Denied):
                return RateLimited(retry_after_seconds=admission.retry_after_seconds)

        return self.create(target_url, expires_at=expires_at, created_ip_hash=created_ip_hash)

    def get(self, slug: str) -> LinkModel | None:
        return self.link_dao.get(slug)

    def list_recent(self, limit: int = Listing.DEFAULT_LIMIT) -> list[LinkModel]:
        return self.link_dao.list_recent(limit)

    def update(self, slug: str, patch: LinkPatch) -> LinkModel | None:
        """Apply a partial update, then evict the slug from the cache

        An empty patch changes nothing: the stored link is returned as is,
        without a write or an eviction.

        Returns:
            LinkModel | None: updated record, None if the slug doesn't exist.

        Raises:
            LinkUpdateConflictError: if concurrent writers kept winning the race.
            DataStoreError: if the durable store can't be reached.
            CacheUnavailableError: if the cache eviction failed after the write.
        """
        if patch.is_empty():
            return self.link_dao.get(slug)

        updated = self.link_dao.update(slug, patch)
        if updated is None:
            return None

        self.cache.invalidate(slug)
        logger.info('Link updated.', extra={'slug': slug})
        return updated

    def delete(self, slug: str) -> bool:
        deleted = self.link_dao.delete(slug)
        if not deleted:
            return False

        self.cache.invalidate(slug)
        logger.info('Link deleted.', extra={'slug': slug})
        return True
