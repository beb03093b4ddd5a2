from shortlink.dao.base.link_base_dao import LinkBaseDAO
from shortlink.dao.base.link_cache_base_dao import LinkCacheBaseDAO
from shortlink.dao.base.rate_counter_base_dao import RateCounterBaseDAO


__all__ = [
    'LinkBaseDAO',
    'LinkCacheBaseDAO',
    'RateCounterBaseDAO',
]
