# Error codes (response bodies & log events)
INVALID_SLUG = 'INVALID_SLUG'
INVALID_JSON = 'INVALID_JSON'
INVALID_TARGET_URL = 'INVALID_TARGET_URL'
INVALID_EXPIRES_AT = 'INVALID_EXPIRES_AT'
INVALID_IS_ACTIVE = 'INVALID_IS_ACTIVE'
INVALID_LIMIT = 'INVALID_LIMIT'
LINK_NOT_FOUND = 'LINK_NOT_FOUND'
METHOD_NOT_ALLOWED = 'METHOD_NOT_ALLOWED'
UPDATE_CONFLICT = 'UPDATE_CONFLICT'
STORE_UNAVAILABLE = 'STORE_UNAVAILABLE'
CACHE_UNAVAILABLE = 'CACHE_UNAVAILABLE'

# Log events
LINK_UPDATED = 'LINK_UPDATED'
LINK_DELETED = 'LINK_DELETED'
