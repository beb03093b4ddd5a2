from shortlink.dao.cache.cache_key_schema import CacheKeySchema
from shortlink.dao.cache.link_cache_dao import LinkCacheDAO

__all__ = [
    'CacheKeySchema',
    'LinkCacheDAO',
]
