from shortlink.services.outcomes import (
    Allowed,
    Denied,
    Degraded,
    Created,
    RateLimited,
    Usable,
    Expired,
    Inactive,
    NotFound,
)
from shortlink.services.slug_issuer import SlugIssuer
from shortlink.services.rate_limiter import RateLimiter, client_key, normalize_ip
from shortlink.services.resolution_service import ResolutionService
from shortlink.services.link_service import LinkService


__all__ = [
    'Allowed',
    'Denied',
    'Degraded',
    'Created',
    'RateLimited',
    'Usable',
    'Expired',
    'Inactive',
    'NotFound',
    'SlugIssuer',
    'RateLimiter',
    'client_key',
    'normalize_ip',
    'ResolutionService',
    'LinkService',
]
