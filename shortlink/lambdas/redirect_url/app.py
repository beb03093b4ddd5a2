import json
import logging

from shortlink.types import LambdaEvent, LambdaContext, LambdaResponse
from shortlink.exceptions import ValidationError
from shortlink.dao.redis import LinkRedisDAO
from shortlink.dao.cache import LinkCacheDAO
from shortlink.dao.exceptions import DataStoreError
from shortlink.services import ResolutionService, Usable, Expired, Inactive
from shortlink.utils import load_config, app_prefix, get_short_url, guarantee_500_response
from shortlink.utils.config import CacheConfig
from shortlink.utils.runtime import get_path_parameter
from shortlink.utils.validators import validate_slug
from shortlink.lambdas.redirect_url.constants import (
    INVALID_SLUG,
    LINK_NOT_FOUND,
    LINK_EXPIRED,
    LINK_INACTIVE,
    STORE_UNAVAILABLE,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_error(status_code: int, reason: str, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = {'message': reason if not message else f'{reason} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {
            'Location': location,
            # Clients revalidate every redirect
            'Cache-Control': 'private, max-age=0, no-cache',
        },
        'body': json.dumps({}),  # no body needed for redirects
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect short links

    This Lambda handler follows this procedure to redirect:
    - Step 1: Extract and validate the slug from the request path
    - Step 2: Resolve the slug (link cache first, data store on a miss)
    - Step 3: Redirect the client if the link is usable

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL
                Cache-Control: private, max-age=0, no-cache
        400: Invalid slug in path
        403: Link is suspended
        404: Link doesn't exist
        410: Link has expired
        503: Link data store is unavailable
        500: Internal server error

    Args:
        event (LambdaEvent):
            API Gateway event payload containing the slug path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse: API Gateway-compatible response.

    Example:
        >>> event = {'pathParameters': {'slug': 'q3ZbT0x'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Extract slug from request's path
    try:
        slug = validate_slug(get_path_parameter(event, 'slug'))
    except ValidationError as e:
        logger.info('Invalid slug in path. Responding with 400.', extra={'event': INVALID_SLUG, 'reason': str(e)})
        return response_error(400, 'Bad Request', message='invalid slug in path', error_code=INVALID_SLUG)
    logger.debug('Client requested short URL %s.', get_short_url(slug, event))

    # 2- Resolve the slug
    app_config = load_config('redirect_url')
    redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    cache_config = CacheConfig.from_config(app_config)

    try:
        cache = LinkCacheDAO(
            **redis_config,
            prefix=app_prefix(),
            ttl_seconds=cache_config.ttl_seconds,
            jitter_max_seconds=cache_config.jitter_max_seconds,
        )
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        outcome = ResolutionService(link_dao, cache).resolve_outcome(slug)
    except DataStoreError:
        logger.exception('Link data store is unavailable. Responding with 503.', extra={'slug': slug, 'event': STORE_UNAVAILABLE})
        return response_error(503, 'Service Unavailable', message='link store is unavailable', error_code=STORE_UNAVAILABLE)

    # 3- Redirect client to target URL
    match outcome:
        case Usable(target_url=target_url):
            logger.info('Redirecting client to target URL. Responding with 302.', extra={'slug': slug, 'event': REDIRECT_SUCCESS})
            return response_302(location=target_url)
        case Expired():
            logger.info('Link has expired. Responding with 410.', extra={'slug': slug, 'event': LINK_EXPIRED})
            return response_error(410, 'Gone', message='link has expired', error_code=LINK_EXPIRED)
        case Inactive():
            logger.info('Link is inactive. Responding with 403.', extra={'slug': slug, 'event': LINK_INACTIVE})
            return response_error(403, 'Forbidden', message='link is inactive', error_code=LINK_INACTIVE)
        case _:
            logger.info('Link not found. Responding with 404.', extra={'slug': slug, 'event': LINK_NOT_FOUND})
            return response_error(404, 'Not Found', message=f"short url {get_short_url(slug, event)} doesn't exist", error_code=LINK_NOT_FOUND)
