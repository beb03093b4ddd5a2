"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    LinkAlreadyExistsError:
        Raised when inserting a link whose slug is already taken.

    LinkUpdateConflictError:
        Raised when a link keeps changing under a concurrent update.

    DataStoreError:
        Raised when the data store is unreachable or misbehaves (connection issues, timeouts, OOM, etc.).

    CacheError:
        Generic base class for link cache exceptions.

    CacheUnavailableError:
        Raised when the link cache can't be reached.

    CorruptCacheEntryError:
        Raised when a cached payload can't be decoded.

Example:
    >>> from shortlink.dao.exceptions import LinkAlreadyExistsError
    >>> raise LinkAlreadyExistsError("Link with slug 'aZ3k9Qx' already exists.")
    Traceback (most recent call last):
        ...
    shortlink.dao.exceptions.LinkAlreadyExistsError: Link with slug 'aZ3k9Qx' already exists.
"""

from shortlink.exceptions import ShortlinkError


class DAOError(ShortlinkError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class LinkAlreadyExistsError(DAOError):
    """Raised when inserting a link whose slug already exists in the data store."""

    error_code = 'dao:link_already_exists_error'


class LinkUpdateConflictError(DAOError):
    """Raised when an optimistic link update keeps losing to concurrent writers."""

    error_code = 'dao:link_update_conflict_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'


class CacheError(DAOError):
    """Generic base class for link cache exceptions."""

    error_code = 'dao:cache_error'


class CacheUnavailableError(CacheError):
    """Raised when the link cache can't be reached."""

    error_code = 'dao:cache_unavailable_error'


class CorruptCacheEntryError(CacheError):
    """Raised when a cached link payload can't be decoded."""

    error_code = 'dao:corrupt_cache_entry_error'
