"""Fixed-window admission control for link creation

Each client gets a counter which is incremented on every request and expires
`window_seconds` after the first request of the window. Requests beyond `limit`
within the window are denied with a retry hint.

The limiter fails open: when the counter store is unreachable, returns garbage,
or the client can't be identified, the request is admitted as Degraded and
the degradation is logged.
"""

import logging
from collections.abc import Mapping

from shortlink.constants import DefaultRateLimit, LogEvent
from shortlink.exceptions import InvalidArgumentError
from shortlink.dao.base import RateCounterBaseDAO
from shortlink.dao.exceptions import DataStoreError
from shortlink.services.outcomes import Admission, Allowed, Denied, Degraded


logger = logging.getLogger(__name__)


def normalize_ip(address: str | None) -> str | None:
    """Canonical form of a client address.

    IPv6 loopback maps to 127.0.0.1 and IPv4-mapped IPv6 addresses lose their
    `::ffff:` prefix, so the same client always lands on the same counter.
    """
    if not address:
        return None
    address = address.strip()
    if address == '::1':
        return '127.0.0.1'
    if address.startswith('::ffff:'):
        return address[len('::ffff:') :]
    return address or None


def client_key(headers: Mapping[str, str] | None, peer: str | None = None) -> str | None:
    """Identify the client of a request.

    Precedence: X-Real-IP, first entry of X-Forwarded-For, transport peer.
    Header names are matched case-insensitively.

    Returns:
        str | None: normalized client address, None if nothing identifies the client.
    """
    headers = {k.lower(): v for k, v in (headers or {}).items()}

    candidate = (headers.get('x-real-ip') or '').strip()
    if not candidate:
        candidate = (headers.get('x-forwarded-for') or '').split(',')[0].strip()
    if not candidate:
        candidate = peer

    return normalize_ip(candidate)


class RateLimiter:
    """Fixed-window rate limiter

    Attributes:
        counter_dao (RateCounterBaseDAO):
            Store holding the per-client counters.
        limit (int):
            Requests admitted per window. Defaults to 30.
        window_seconds (int):
            Window length in seconds. Defaults to 600.

    Example:
        >>> limiter = RateLimiter(counter_dao, limit=2, window_seconds=60)
        >>> limiter.admit('1.2.3.4'), limiter.admit('1.2.3.4'), limiter.admit('1.2.3.4')
        (Allowed(), Allowed(), Denied(retry_after_seconds=60))
    """

    def __init__(
        self,
        counter_dao: RateCounterBaseDAO,
        limit: int = DefaultRateLimit.LIMIT,
        window_seconds: int = DefaultRateLimit.WINDOW_SECONDS,
    ):
        if limit <= 0:
            raise InvalidArgumentError(f'limit must be greater than 0 (given value: {limit}).')
        if window_seconds <= 0:
            raise InvalidArgumentError(f'window_seconds must be greater than 0 (given value: {window_seconds}).')

        self.counter_dao = counter_dao
        self.limit = limit
        self.window_seconds = window_seconds

    def admit(self, client_key: str | None) -> Admission:
        if not client_key:
            logger.warning(
                'Rate limiter could not determine the client; allowing request.',
                extra={'event': LogEvent.RATE_LIMITER_UNKNOWN_CLIENT},
            )
            return Degraded(reason='unknown_client')

        try:
            count = self.counter_dao.increment(client_key, self.window_seconds)
        except DataStoreError as e:
            logger.error(
                'Rate limiter failed; allowing request.',
                extra={'client': client_key, 'error': str(e), 'event': LogEvent.RATE_LIMITER_UNAVAILABLE},
            )
            return Degraded(reason='store_unavailable')
        except (TypeError, ValueError) as e:
            logger.warning(
                'Rate limiter received a non-numeric counter; allowing request.',
                extra={'client': client_key, 'error': str(e), 'event': LogEvent.RATE_LIMITER_NON_NUMERIC},
            )
            return Degraded(reason='non_numeric_counter')

        if count <= self.limit:
            return Allowed()

        retry_after = self._retry_after(client_key)
        logger.warning(
            'Rate limit exceeded for client.',
            extra={'client': client_key, 'count': count, 'limit': self.limit, 'event': LogEvent.RATE_LIMIT_EXCEEDED},
        )
        return Denied(retry_after_seconds=retry_after)

    def _retry_after(self, client_key: str) -> int:
        # Counter already proves the client is over the limit, a failed TTL lookup
        # only loses precision of the hint
        try:
            ttl = self.counter_dao.ttl(client_key)
        except (DataStoreError, TypeError, ValueError):
            return self.window_seconds

        if ttl <= 0:
            return self.window_seconds
        return max(1, min(ttl, self.window_seconds))
