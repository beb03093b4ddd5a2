"""Link records and their derived views.

Classes:
    LinkModel:
        Durable link record, owned by the link data store.
    LinkView:
        Compact projection of a LinkModel (target, expiry, active flag).
        This is what the link cache stores and what resolution returns.
    LinkPatch:
        Partial update of a LinkModel. Fields left as None are not changed.
    LinkState:
        Usability state of a resolved link.

Functions:
    link_state(view: LinkView | None, now: datetime | None = None) -> LinkState
        Classify a resolved link as usable, expired, inactive or not found.

Example:
    >>> from datetime import datetime, timedelta, UTC
    >>> view = LinkView(
    ...     target_url='https://example.com',
    ...     expires_at=datetime.now(UTC) - timedelta(seconds=1),
    ...     is_active=True,
    ... )
    >>> link_state(view)
    <LinkState.EXPIRED: 'expired'>
    >>> link_state(None)
    <LinkState.NOT_FOUND: 'not_found'>
"""

from dataclasses import dataclass, asdict, replace
from datetime import datetime, UTC
from enum import StrEnum
from typing import Any


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def from_iso(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    # Naive timestamps are always written as UTC
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


class LinkState(StrEnum):
    USABLE = 'usable'
    EXPIRED = 'expired'
    INACTIVE = 'inactive'
    NOT_FOUND = 'not_found'


# fmt: off
@dataclass(frozen=True)
class LinkView:
    target_url: str                     # Redirect destination
    expires_at: datetime | None = None  # Absolute expiry, None if the link never expires
    is_active: bool = True              # False if the link is suspended

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return self.expires_at is not None and self.expires_at <= now

    def is_usable(self, now: datetime | None = None) -> bool:
        return self.is_active and not self.is_expired(now)
# fmt: on


@dataclass(frozen=True)
class LinkModel:
    """Represent a stored short link.

    Attributes:
        id (str):
            Opaque unique identifier, assigned at creation.
        slug (str):
            Short public identifier (1-16 characters), unique across all links.
        target_url (str):
            Absolute URL the slug redirects to.
        created_at (datetime):
            Creation timestamp (timezone aware).
        expires_at (datetime | None):
            Optional absolute expiry. In the past means the link is expired.
        is_active (bool):
            When False the link is suspended regardless of its expiry.
        created_ip_hash (str | None):
            SHA-256 hex digest of the creator's address (provenance only).

    Example:
        >>> link = LinkModel(
        ...     id='0f8c...',
        ...     slug='aZ3k9Qx',
        ...     target_url='https://example.com',
        ...     created_at=datetime.now(UTC),
        ... )
        >>> link.view()
        LinkView(target_url='https://example.com', expires_at=None, is_active=True)
    """

    id: str
    slug: str
    target_url: str
    created_at: datetime
    expires_at: datetime | None = None
    is_active: bool = True
    created_ip_hash: str | None = None

    def view(self) -> LinkView:
        return LinkView(target_url=self.target_url, expires_at=self.expires_at, is_active=self.is_active)

    def patched(self, patch: 'LinkPatch') -> 'LinkModel':
        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data['created_at'] = to_iso(self.created_at)
        data['expires_at'] = to_iso(self.expires_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'LinkModel':
        return cls(
            id=data['id'],
            slug=data['slug'],
            target_url=data['target_url'],
            created_at=from_iso(data['created_at']),
            expires_at=from_iso(data.get('expires_at')),
            is_active=bool(data.get('is_active', True)),
            created_ip_hash=data.get('created_ip_hash'),
        )


# fmt: off
@dataclass(frozen=True)
class LinkPatch:
    target_url: str | None = None       # New redirect destination
    expires_at: datetime | None = None  # New absolute expiry
    is_active: bool | None = None       # Suspend (False) or reactivate (True)

    def is_empty(self) -> bool:
        return all(value is None for value in asdict(self).values())
# fmt: on


def link_state(view: LinkView | None, now: datetime | None = None) -> LinkState:
    """Classify a resolved link

    Expiry is checked before the active flag, so an expired link which is
    still flagged active reports as expired.

    Args:
        view (LinkView | None):
            Resolved link projection, None if the slug doesn't exist.
        now (datetime | None):
            Reference time. Defaults to the current time in UTC.

    Returns:
        LinkState: usability state of the link.
    """
    if view is None:
        return LinkState.NOT_FOUND
    if view.is_expired(now):
        return LinkState.EXPIRED
    if not view.is_active:
        return LinkState.INACTIVE
    return LinkState.USABLE
