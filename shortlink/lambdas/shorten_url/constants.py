# Error codes (response bodies & log events)
INVALID_JSON = 'INVALID_JSON'
MISSING_TARGET_URL = 'MISSING_TARGET_URL'
INVALID_TARGET_URL = 'INVALID_TARGET_URL'
INVALID_EXPIRES_AT = 'INVALID_EXPIRES_AT'
RATE_LIMITED = 'RATE_LIMITED'
SLUG_EXHAUSTED = 'SLUG_EXHAUSTED'
STORE_UNAVAILABLE = 'STORE_UNAVAILABLE'

# Log events
LINK_CREATED = 'LINK_CREATED'
