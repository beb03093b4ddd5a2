"""Abstract base class for the link cache.

The cache is not authoritative: a miss means "unknown", never "does not exist".
Implementations store LinkView projections only and must expire entries on their own.
"""

from abc import ABC, abstractmethod

from shortlink.models import LinkView


class LinkCacheBaseDAO(ABC):
    """Interface for link cache data access objects (DAOs).

    Methods:
        get(slug: str) -> LinkView | None:
            Retrieve a cached projection. Corrupt entries are reported as a miss.
            Raises CacheUnavailableError if the cache can't be reached.

        set(slug: str, view: LinkView) -> int:
            Cache a projection and return the TTL (seconds) applied to it.
            Raises CacheUnavailableError if the cache can't be reached.

        invalidate(slug: str) -> bool:
            Delete a cached projection. Deleting a missing key is a no-op.
            Raises CacheUnavailableError if the cache can't be reached.
    """

    @abstractmethod
    def get(self, slug: str) -> LinkView | None:
        pass

    @abstractmethod
    def set(self, slug: str, view: LinkView) -> int:
        pass

    @abstractmethod
    def invalidate(self, slug: str) -> bool:
        pass
