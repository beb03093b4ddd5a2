# Error codes (response bodies & log events)
INVALID_SLUG = 'INVALID_SLUG'
LINK_NOT_FOUND = 'LINK_NOT_FOUND'
LINK_EXPIRED = 'LINK_EXPIRED'
LINK_INACTIVE = 'LINK_INACTIVE'
STORE_UNAVAILABLE = 'STORE_UNAVAILABLE'

# Log events
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
