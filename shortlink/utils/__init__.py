from shortlink.utils.config import app_env, app_name, app_prefix, load_config, RateLimitConfig, CacheConfig
from shortlink.utils.helpers import base_url, get_short_url, hash_client_address, require_environment, guarantee_500_response
from shortlink.utils.shortener import generate_slug
from shortlink.utils.logging import initialize_logging


__all__ = [
    'generate_slug',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'RateLimitConfig',
    'CacheConfig',
    'base_url',
    'get_short_url',
    'hash_client_address',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
