import json
import logging

from shortlink.types import LambdaEvent, LambdaContext, LambdaResponse, JsonBody
from shortlink.exceptions import ValidationError, SlugExhaustedError
from shortlink.dao.redis import LinkRedisDAO, RateCounterRedisDAO
from shortlink.dao.cache import LinkCacheDAO
from shortlink.dao.exceptions import DataStoreError
from shortlink.services import LinkService, SlugIssuer, RateLimiter, RateLimited, client_key
from shortlink.utils import load_config, app_prefix, get_short_url, hash_client_address, guarantee_500_response
from shortlink.utils.config import RateLimitConfig, CacheConfig
from shortlink.utils.runtime import get_headers, get_source_ip
from shortlink.utils.validators import validate_target_url, parse_expires_at
from shortlink.models import to_iso
from shortlink.lambdas.shorten_url.constants import (
    INVALID_JSON,
    MISSING_TARGET_URL,
    INVALID_TARGET_URL,
    INVALID_EXPIRES_AT,
    RATE_LIMITED,
    SLUG_EXHAUSTED,
    STORE_UNAVAILABLE,
    LINK_CREATED,
)


logger = logging.getLogger(__name__)


def response_201(*, body: JsonBody) -> LambdaResponse:
    return {
        'statusCode': 201,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Bad Request'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 400,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_429(*, retry_after: int, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = {'message': message or 'Too Many Requests'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 429,
        'headers': {
            'Content-Type': 'application/json',
            'Retry-After': str(retry_after),
        },
        'body': json.dumps(body),
    }


def response_503(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Service Unavailable'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 503,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Parse and validate the JSON body (target_url, optional expires_at)
    - Step 2: Identify the client (X-Real-IP, X-Forwarded-For, source IP)
    - Step 3: Admit the request through the fixed-window rate limiter
    - Step 4: Issue a unique slug and store the link
    - Step 5: Respond with 201 and the new short URL

    HTTP responses:
        201: Link created
            slug, shortUrl, targetUrl, expiresAt, isActive
        400: Bad client request
            errorCode: INVALID_JSON | MISSING_TARGET_URL | INVALID_TARGET_URL | INVALID_EXPIRES_AT
        429: Too many link creation requests
            headers:
                Retry-After: seconds until the client's window resets
        503: Service unavailable
            errorCode: SLUG_EXHAUSTED | STORE_UNAVAILABLE
        500: Internal server error

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse: API Gateway-compatible response.

    Example:
        >>> event = {'body': '{"target_url": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['shortUrl']
        'https://sho.rt/q3ZbT0x'
    """
    # 1- Parse and validate request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Request body is not valid JSON. Responding with 400.', extra={'event': INVALID_JSON})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON)
    if not isinstance(request_body, dict):
        logger.info('Request body is not a JSON object. Responding with 400.', extra={'event': INVALID_JSON})
        return response_400(message='JSON body must be an object', error_code=INVALID_JSON)

    target_url = request_body.get('target_url')
    if not target_url:
        logger.info('Missing "target_url" in request body. Responding with 400.', extra={'event': MISSING_TARGET_URL})
        return response_400(message="missing 'target_url' in JSON body", error_code=MISSING_TARGET_URL)

    try:
        target_url = validate_target_url(target_url)
    except ValidationError as e:
        logger.info('Invalid target URL. Responding with 400.', extra={'event': INVALID_TARGET_URL, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_TARGET_URL)

    expires_at = None
    if request_body.get('expires_at') is not None:
        try:
            expires_at = parse_expires_at(request_body['expires_at'])
        except ValidationError as e:
            logger.info('Invalid expiration. Responding with 400.', extra={'event': INVALID_EXPIRES_AT, 'reason': str(e)})
            return response_400(message=str(e), error_code=INVALID_EXPIRES_AT)

    # 2- Identify the client
    client = client_key(get_headers(event), get_source_ip(event))
    created_ip_hash = hash_client_address(client) if client else None

    # 3/4- Admit the request, then issue a slug and store the link
    app_config = load_config('shorten_url')
    redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    rate_limit = RateLimitConfig.from_config(app_config)
    cache_config = CacheConfig.from_config(app_config)

    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        counter_dao = RateCounterRedisDAO(**redis_config, prefix=app_prefix())
        cache = LinkCacheDAO(
            **redis_config,
            prefix=app_prefix(),
            ttl_seconds=cache_config.ttl_seconds,
            jitter_max_seconds=cache_config.jitter_max_seconds,
        )
        service = LinkService(
            link_dao,
            cache,
            SlugIssuer(link_dao),
            RateLimiter(counter_dao, limit=rate_limit.limit, window_seconds=rate_limit.window_seconds),
        )
        outcome = service.shorten(target_url, client, expires_at=expires_at, created_ip_hash=created_ip_hash)
    except SlugExhaustedError:
        logger.exception('Failed to issue a unique slug. Responding with 503.', extra={'event': SLUG_EXHAUSTED})
        return response_503(message='could not allocate a short link, try again', error_code=SLUG_EXHAUSTED)
    except DataStoreError:
        logger.exception('Link data store is unavailable. Responding with 503.', extra={'event': STORE_UNAVAILABLE})
        return response_503(message='link store is unavailable', error_code=STORE_UNAVAILABLE)

    if isinstance(outcome, RateLimited):
        return response_429(
            retry_after=outcome.retry_after_seconds,
            message='Rate limit exceeded. Please try again later.',
            error_code=RATE_LIMITED,
        )

    # 5- Respond with the new short URL
    link = outcome.link
    logger.info('Link created. Responding with 201.', extra={'slug': outcome.slug, 'event': LINK_CREATED})
    return response_201(
        body={
            'slug': outcome.slug,
            'shortUrl': get_short_url(outcome.slug, event),
            'targetUrl': link.target_url,
            'expiresAt': to_iso(link.expires_at),
            'isActive': link.is_active,
        }
    )
