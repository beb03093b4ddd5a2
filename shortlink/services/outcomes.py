"""Caller-facing outcomes of the link services

Admission (RateLimiter.admit):
    Allowed, Denied(retry_after_seconds), Degraded(reason)

Creation (LinkService.shorten / LinkService.create):
    Created(slug, link), RateLimited(retry_after_seconds)

Resolution (ResolutionService.resolve_outcome):
    Usable(target_url), Expired, Inactive, NotFound

Hard failures are exceptions, not outcomes: SlugExhaustedError, DataStoreError.
Framework layers translate outcomes into transport responses (status codes, redirects).
"""

from dataclasses import dataclass

from shortlink.models import LinkModel, LinkView


@dataclass(frozen=True)
class Allowed:
    admitted = True


@dataclass(frozen=True)
class Denied:
    retry_after_seconds: int
    admitted = False


@dataclass(frozen=True)
class Degraded:
    """Admitted without a rate check (fail open)."""

    reason: str
    admitted = True


type Admission = Allowed | Denied | Degraded


@dataclass(frozen=True)
class Created:
    slug: str
    link: LinkModel


@dataclass(frozen=True)
class RateLimited:
    retry_after_seconds: int


@dataclass(frozen=True)
class Usable:
    target_url: str
    view: LinkView


@dataclass(frozen=True)
class Expired:
    view: LinkView


@dataclass(frozen=True)
class Inactive:
    view: LinkView


@dataclass(frozen=True)
class NotFound:
    slug: str


type Resolution = Usable | Expired | Inactive | NotFound
