"""In-memory fakes of the link store, the rate counters and the link cache."""

from datetime import datetime, timedelta, UTC

import pytest

from shortlink.models import LinkModel, LinkView, LinkPatch
from shortlink.dao.base import LinkBaseDAO, LinkCacheBaseDAO, RateCounterBaseDAO
from shortlink.dao.exceptions import LinkAlreadyExistsError, DataStoreError, CacheUnavailableError


class InMemoryLinkDAO(LinkBaseDAO):
    def __init__(self):
        self.links: dict[str, LinkModel] = {}
        self.available = True

    def _check(self) -> None:
        if not self.available:
            raise DataStoreError("Can't connect to Redis at memory:0/0.")

    def get(self, slug, **kwargs):
        self._check()
        return self.links.get(slug)

    def exists(self, slug, **kwargs):
        self._check()
        return slug in self.links

    def insert(self, link, **kwargs):
        self._check()
        if link.slug in self.links:
            raise LinkAlreadyExistsError(f"Link with slug '{link.slug}' already exists.")
        self.links[link.slug] = link
        return self

    def update(self, slug, patch: LinkPatch, **kwargs):
        self._check()
        if slug not in self.links:
            return None
        self.links[slug] = self.links[slug].patched(patch)
        return self.links[slug]

    def delete(self, slug, **kwargs):
        self._check()
        return self.links.pop(slug, None) is not None

    def list_recent(self, limit, **kwargs):
        self._check()
        return sorted(self.links.values(), key=lambda link: link.created_at, reverse=True)[:limit]


class InMemoryLinkCache(LinkCacheBaseDAO):
    def __init__(self, ttl: int = 86400):
        self.entries: dict[str, LinkView] = {}
        self.ttl = ttl
        self.available = True
        self.reads = 0

    def _check(self) -> None:
        if not self.available:
            raise CacheUnavailableError("Can't connect to cache at memory:0/0.")

    def get(self, slug):
        self._check()
        self.reads += 1
        return self.entries.get(slug)

    def set(self, slug, view):
        self._check()
        self.entries[slug] = view
        return self.ttl

    def invalidate(self, slug):
        self._check()
        return self.entries.pop(slug, None) is not None


class InMemoryRateCounter(RateCounterBaseDAO):
    """Fixed-window counters driven by a manual clock (seconds)."""

    def __init__(self):
        self.now = 0
        self.counters: dict[str, tuple[int, int]] = {}  # client -> (count, window end)
        self.available = True

    def increment(self, client_key, window_seconds):
        if not self.available:
            raise DataStoreError("Can't connect to Redis at memory:0/0.")
        count, ends_at = self.counters.get(client_key, (0, self.now + window_seconds))
        if ends_at <= self.now:
            count, ends_at = 0, self.now + window_seconds
        self.counters[client_key] = (count + 1, ends_at)
        return count + 1

    def ttl(self, client_key):
        if client_key not in self.counters:
            return -2
        return self.counters[client_key][1] - self.now


@pytest.fixture
def link_dao() -> InMemoryLinkDAO:
    return InMemoryLinkDAO()


@pytest.fixture
def cache() -> InMemoryLinkCache:
    return InMemoryLinkCache()


@pytest.fixture
def counter_dao() -> InMemoryRateCounter:
    return InMemoryRateCounter()


@pytest.fixture
def now() -> datetime:
    return datetime.now(UTC)


@pytest.fixture
def make_link(now: datetime):
    def _make_link(slug: str = 'abc123', target_url: str = 'https://example.com', **kwargs) -> LinkModel:
        return LinkModel(id=f'id-{slug}', slug=slug, target_url=target_url, created_at=now - timedelta(days=1), **kwargs)

    return _make_link
