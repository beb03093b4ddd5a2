"""Abstract base class for link data access objects (DAOs).

This class establishes a consistent contract for the durable link store,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, PostgreSQL).

Responsibilities:
    - Provide an interface for inserting, retrieving, listing, updating and deleting LinkModel objects.
    - Enforce slug uniqueness at write time. This is the final collision guarantee,
      slug issuers only reduce the odds of a collision.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlink.models import LinkModel, LinkPatch
        >>> from shortlink.dao.redis import LinkRedisDAO

        >>> dao = LinkRedisDAO(...)
        >>> dao.insert(link)

        >>> dao.get('aZ3k9Qx').target_url
        'https://example.com/blog/article-123'

        >>> dao.update('aZ3k9Qx', LinkPatch(is_active=False)).is_active
        False

        >>> dao.delete('aZ3k9Qx')
        True
"""

from abc import ABC, abstractmethod

from shortlink.models import LinkModel, LinkPatch


class LinkBaseDAO(ABC):
    """Interface for durable link data access objects (DAOs).

    Methods:
        get(slug: str, **kwargs) -> LinkModel | None:
            Retrieve a link by exact slug, regardless of its expiry or active flag.

        exists(slug: str, **kwargs) -> bool:
            Check whether a slug is taken.

        insert(link: LinkModel, **kwargs) -> LinkBaseDAO:
            Insert a link if its slug is absent.
            Raises LinkAlreadyExistsError if the slug is taken.

        update(slug: str, patch: LinkPatch, **kwargs) -> LinkModel | None:
            Apply a partial update. Returns None if the slug doesn't exist.

        delete(slug: str, **kwargs) -> bool:
            Delete a link. Returns False if the slug doesn't exist.

        list_recent(limit: int, **kwargs) -> list[LinkModel]:
            List the newest links first.

    All methods raise DataStoreError on connection or read/write failure.
    """

    @abstractmethod
    def get(self, slug: str, **kwargs) -> LinkModel | None:
        """Retrieve a LinkModel from the data store by its slug.

        Args:
            slug (str):
                The slug of the link to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LinkModel | None: The LinkModel instance if found, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, slug: str, **kwargs) -> bool:
        """Check whether a slug is already taken.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def insert(self, link: LinkModel, **kwargs) -> 'LinkBaseDAO':
        """Insert a new LinkModel into the data store.

        Args:
            link (LinkModel):
                The LinkModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LinkBaseDAO: self (for method chaining)

        Raises:
            LinkAlreadyExistsError:
                If a link with the same slug already exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def update(self, slug: str, patch: LinkPatch, **kwargs) -> LinkModel | None:
        """Apply a partial update to an existing link.

        Args:
            slug (str):
                The slug of the link to be updated.

            patch (LinkPatch):
                Fields to change. None fields are left untouched.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LinkModel | None: The updated link, or None if the slug doesn't exist.

        Raises:
            LinkUpdateConflictError:
                If concurrent writers keep modifying the link.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, slug: str, **kwargs) -> bool:
        """Delete a link by slug.

        Returns:
            bool: True if a link was deleted, False if it didn't exist.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_recent(self, limit: int, **kwargs) -> list[LinkModel]:
        """List the most recently created links, newest first.

        Args:
            limit (int):
                Maximum number of links returned.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
