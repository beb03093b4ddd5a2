"""Abstract base class for fixed-window rate counters.

Implementations must provide atomic single-key operations: the increment and
the conditional (set-if-absent) window expiry are applied together, so that
concurrent first requests in a window never push its deadline back.
"""

from abc import ABC, abstractmethod


class RateCounterBaseDAO(ABC):
    """Interface for per-client rate counters.

    Methods:
        increment(client_key: str, window_seconds: int) -> int:
            Increment the client's counter for the current window and return the new count.
            The window expiry is only set when the counter doesn't have one yet.
            Raises DataStoreError on connection or write failure.

        ttl(client_key: str) -> int:
            Remaining lifetime of the client's current window in seconds.
            Negative values follow Redis semantics (-1: no expiry, -2: no counter).
            Raises DataStoreError on connection or read failure.
    """

    @abstractmethod
    def increment(self, client_key: str, window_seconds: int) -> int:
        pass

    @abstractmethod
    def ttl(self, client_key: str) -> int:
        pass
