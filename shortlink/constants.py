import string
from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Link cache entry base TTL (24 hours in seconds)
    CACHE_BASE = 86_400  # 60 * 60 * 24
    # Upper bound of the random jitter added to every cache entry TTL
    CACHE_JITTER_MAX = 300


class DefaultRateLimit:
    """Default link creation rate limit (fixed window)."""

    LIMIT = 30  # Requests admitted per window and client
    WINDOW_SECONDS = 600  # 10 minutes


class Slug:
    """Slug generation parameters."""

    ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
    LENGTH = 7  # Default length of issued slugs
    MAX_LENGTH = 16  # Longest slug the durable store accepts
    MAX_ATTEMPTS = 3  # Bound on collision retries when issuing a slug


class Redis:
    """Redis client defaults."""

    SOCKET_TIMEOUT = 2.0  # seconds, bounds every store call
    SOCKET_CONNECT_TIMEOUT = 2.0
    UPDATE_MAX_ATTEMPTS = 3  # WATCH/MULTI retries before giving up on an update


class Listing:
    """Link listing bounds."""

    DEFAULT_LIMIT = 50  # Links per listing when the caller doesn't ask for a count
    MAX_LIMIT = 500


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class RateLimit(StrEnum):
        LIMIT = 'RATE_LIMIT_CREATE_LIMIT'
        WINDOW_SECONDS = 'RATE_LIMIT_CREATE_WINDOW_SECONDS'

    class Cache(StrEnum):
        TTL_SECONDS = 'CACHE_TTL_SECONDS'
        JITTER_MAX = 'CACHE_JITTER_MAX'

    class Validation(StrEnum):
        URL_BLOCKLIST = 'URL_BLOCKLIST'  # comma separated hostnames


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'


class LogEvent(StrEnum):
    """Structured `event` codes attached to log records."""

    SLUG_COLLISION = 'SLUG_COLLISION'
    RATE_LIMIT_EXCEEDED = 'RATE_LIMIT_EXCEEDED'
    RATE_LIMITER_UNAVAILABLE = 'RATE_LIMITER_UNAVAILABLE'
    RATE_LIMITER_NON_NUMERIC = 'RATE_LIMITER_NON_NUMERIC'
    RATE_LIMITER_UNKNOWN_CLIENT = 'RATE_LIMITER_UNKNOWN_CLIENT'
    CACHE_UNAVAILABLE = 'CACHE_UNAVAILABLE'
    CACHE_CORRUPT_ENTRY = 'CACHE_CORRUPT_ENTRY'
    CACHE_WRITE_FAILED = 'CACHE_WRITE_FAILED'
