"""Request validation for link creation and updates

Link targets are validated before they reach slug issuance: only absolute
http(s) URLs pointing at public hosts are accepted, so the shortener can't be
used to bounce visitors to internal services.

Functions:
    validate_target_url(url: str) -> str
    validate_slug(slug: str) -> str
    parse_expires_at(value: str, now: datetime | None = None, require_future: bool = True) -> datetime
    parse_limit(value: str | None) -> int

All functions raise ValidationError on invalid input.
"""

import os
import re
import ipaddress
from datetime import datetime, UTC
from urllib.parse import urlsplit

from shortlink.constants import ENV, Slug, Listing
from shortlink.exceptions import ValidationError


SAFE_SCHEMES = frozenset({'http', 'https'})
BLOCKED_HOSTS = frozenset({'localhost', '127.0.0.1', '0.0.0.0', '::1'})  # noqa: S104
BLOCKED_SUFFIXES = ('.localhost', '.local', '.internal', '.test')

SLUG_PATTERN = re.compile(rf'^[A-Za-z0-9_-]{{1,{Slug.MAX_LENGTH}}}$')


def blocklist() -> frozenset[str]:
    entries = os.environ.get(ENV.Validation.URL_BLOCKLIST, '').split(',')
    return BLOCKED_HOSTS | {entry.strip().lower() for entry in entries if entry.strip()}


def is_private_address(host: str) -> bool:
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False  # not an IP literal
    return address.is_private or address.is_loopback or address.is_link_local or address.is_unspecified or address.is_reserved


def validate_target_url(url: str) -> str:
    """Validate a link target

    Args:
        url (str): candidate target URL.

    Returns:
        str: the URL, unchanged.

    Raises:
        ValidationError:
            If the URL isn't an absolute http(s) URL, or points at a blocked or private host.

    Example:
        >>> validate_target_url('https://example.com/page')
        'https://example.com/page'
        >>> validate_target_url('http://169.254.169.254/latest/meta-data')
        ValidationError: Target host is not allowed
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError('Must be a valid URL')

    try:
        components = urlsplit(url.strip())
        host = components.hostname
        _ = components.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise ValidationError('Must be a valid URL') from e

    if components.scheme.lower() not in SAFE_SCHEMES:
        raise ValidationError('Protocol must be http or https')
    if not host:
        raise ValidationError('Must be a valid URL')

    host = host.lower()
    if host in blocklist() or host.endswith(BLOCKED_SUFFIXES) or is_private_address(host):
        raise ValidationError('Target host is not allowed')

    return url


def validate_slug(slug: str | None) -> str:
    """Validate a slug taken from a request path (1-16 characters of [A-Za-z0-9_-])."""
    slug = (slug or '').strip()
    if not SLUG_PATTERN.match(slug):
        raise ValidationError(f'Invalid slug {slug!r}')
    return slug


def parse_expires_at(value: str, now: datetime | None = None, require_future: bool = True) -> datetime:
    """Parse an ISO 8601 expiry timestamp

    Args:
        value (str):
            ISO 8601 timestamp with an explicit UTC offset, e.g. '2026-01-01T00:00:00Z'.
        now (datetime | None):
            Reference time for the future check. Defaults to the current time in UTC.
        require_future (bool):
            If True (default), reject timestamps which are not in the future.

    Returns:
        datetime: timezone aware expiry.

    Raises:
        ValidationError:
            If the value isn't an ISO 8601 timestamp with timezone, or isn't in the future.
    """
    if not isinstance(value, str):
        raise ValidationError('Must be ISO 8601 with timezone')
    try:
        expires_at = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError('Must be ISO 8601 with timezone') from e
    if expires_at.tzinfo is None:
        raise ValidationError('Must be ISO 8601 with timezone')

    if require_future and expires_at <= (now or datetime.now(UTC)):
        raise ValidationError('Expiration must be in the future')
    return expires_at


def parse_limit(value: str | None) -> int:
    """Parse the `limit` query parameter of a link listing

    Returns:
        int: Listing.DEFAULT_LIMIT when the parameter is absent.

    Raises:
        ValidationError: if the value isn't an integer in [1, Listing.MAX_LIMIT].
    """
    if value is None or value == '':
        return Listing.DEFAULT_LIMIT
    try:
        limit = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError('Limit must be an integer') from e
    if not 1 <= limit <= Listing.MAX_LIMIT:
        raise ValidationError(f'Limit must be between 1 and {Listing.MAX_LIMIT}')
    return limit
