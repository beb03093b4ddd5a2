import json
import logging

from shortlink.types import LambdaEvent, LambdaContext, LambdaResponse, JsonBody
from shortlink.exceptions import ValidationError
from shortlink.models import LinkModel, LinkPatch, to_iso
from shortlink.dao.redis import LinkRedisDAO
from shortlink.dao.cache import LinkCacheDAO
from shortlink.dao.exceptions import DataStoreError, CacheUnavailableError, LinkUpdateConflictError
from shortlink.services import LinkService, SlugIssuer
from shortlink.utils import load_config, app_prefix, get_short_url, guarantee_500_response
from shortlink.utils.config import CacheConfig
from shortlink.utils.runtime import get_path_parameter, get_query_parameter, get_http_method
from shortlink.utils.validators import validate_slug, validate_target_url, parse_expires_at, parse_limit
from shortlink.lambdas.manage_link.constants import (
    INVALID_SLUG,
    INVALID_JSON,
    INVALID_TARGET_URL,
    INVALID_EXPIRES_AT,
    INVALID_IS_ACTIVE,
    INVALID_LIMIT,
    LINK_NOT_FOUND,
    METHOD_NOT_ALLOWED,
    UPDATE_CONFLICT,
    STORE_UNAVAILABLE,
    CACHE_UNAVAILABLE,
    LINK_UPDATED,
    LINK_DELETED,
)


logger = logging.getLogger(__name__)

ALLOWED_METHODS = ('GET', 'PATCH', 'DELETE')
COLLECTION_METHODS = ('GET',)


def response_json(status_code: int, body: JsonBody) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_error(status_code: int, reason: str, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = {'message': reason if not message else f'{reason} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return response_json(status_code, body)


def response_204() -> LambdaResponse:
    return {'statusCode': 204, 'body': ''}


def response_405(allowed_methods: tuple[str, ...] = ALLOWED_METHODS) -> LambdaResponse:
    response = response_error(405, 'Method Not Allowed', error_code=METHOD_NOT_ALLOWED)
    response['headers']['Allow'] = ', '.join(allowed_methods)
    return response


def link_body(link: LinkModel, event: LambdaEvent) -> JsonBody:
    return {
        'id': link.id,
        'slug': link.slug,
        'shortUrl': get_short_url(link.slug, event),
        'targetUrl': link.target_url,
        'createdAt': to_iso(link.created_at),
        'expiresAt': to_iso(link.expires_at),
        'isActive': link.is_active,
    }


class InvalidPatchError(ValidationError):
    """Raised when a PATCH body is rejected, carries the response error code."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.response_error_code = error_code


def parse_patch(event: LambdaEvent) -> LinkPatch:
    """Build a LinkPatch from a PATCH request body

    Raises:
        InvalidPatchError: if a field is malformed or out of range.
    """
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError as e:
        raise InvalidPatchError('invalid JSON body', error_code=INVALID_JSON) from e
    if not isinstance(request_body, dict):
        raise InvalidPatchError('JSON body must be an object', error_code=INVALID_JSON)

    target_url = request_body.get('target_url')
    if target_url is not None:
        try:
            target_url = validate_target_url(target_url)
        except ValidationError as e:
            raise InvalidPatchError(str(e), error_code=INVALID_TARGET_URL) from e

    expires_at = request_body.get('expires_at')
    if expires_at is not None:
        try:
            expires_at = parse_expires_at(expires_at)
        except ValidationError as e:
            raise InvalidPatchError(str(e), error_code=INVALID_EXPIRES_AT) from e

    is_active = request_body.get('is_active')
    if is_active is not None and not isinstance(is_active, bool):
        raise InvalidPatchError("'is_active' must be a boolean", error_code=INVALID_IS_ACTIVE)

    return LinkPatch(target_url=target_url, expires_at=expires_at, is_active=is_active)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle API Gateway requests to list, inspect, update and delete links

    Routes:
        GET /links:             200 {links: [...]} newest first | 400
                                query: limit (1-500, default 50)
        GET /links/{slug}:      200 link record | 404
        PATCH /links/{slug}:    200 updated link record | 400 | 404 | 409
                                body: {target_url?, expires_at?, is_active?}, omitted fields are left unchanged
        DELETE /links/{slug}:   204 | 404
        other:                  405

    Updates and deletes evict the slug from the link cache before responding.
    If the eviction fails the change is stored, but the response is 503
    (CACHE_UNAVAILABLE) since redirects may serve the previous version until
    the cache entry expires. Link records never include the creator's address hash.

    Args:
        event (LambdaEvent):
            API Gateway event payload, with the slug path parameter on /links/{slug}.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse: API Gateway-compatible response.
    """
    # 1- Route by path and method
    method = get_http_method(event)
    raw_slug = get_path_parameter(event, 'slug')
    allowed_methods = COLLECTION_METHODS if raw_slug is None else ALLOWED_METHODS
    if method not in allowed_methods:
        logger.info('Unsupported method %s. Responding with 405.', method, extra={'event': METHOD_NOT_ALLOWED})
        return response_405(allowed_methods)

    # 2- Validate the request
    slug = patch = limit = None
    if raw_slug is None:
        try:
            limit = parse_limit(get_query_parameter(event, 'limit'))
        except ValidationError as e:
            logger.info('Invalid listing limit. Responding with 400.', extra={'event': INVALID_LIMIT, 'reason': str(e)})
            return response_error(400, 'Bad Request', message=str(e), error_code=INVALID_LIMIT)
    else:
        try:
            slug = validate_slug(raw_slug)
        except ValidationError as e:
            logger.info('Invalid slug in path. Responding with 400.', extra={'event': INVALID_SLUG, 'reason': str(e)})
            return response_error(400, 'Bad Request', message='invalid slug in path', error_code=INVALID_SLUG)

    if method == 'PATCH':
        try:
            patch = parse_patch(event)
        except InvalidPatchError as e:
            logger.info('Invalid link update. Responding with 400.', extra={'slug': slug, 'event': e.response_error_code, 'reason': str(e)})
            return response_error(400, 'Bad Request', message=str(e), error_code=e.response_error_code)

    # 3- Build the stores from AppConfig
    app_config = load_config('manage_link')
    redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    cache_config = CacheConfig.from_config(app_config)

    try:
        link_dao = LinkRedisDAO(**redis_config, prefix=app_prefix())
        cache = LinkCacheDAO(
            **redis_config,
            prefix=app_prefix(),
            ttl_seconds=cache_config.ttl_seconds,
            jitter_max_seconds=cache_config.jitter_max_seconds,
        )
        service = LinkService(link_dao, cache, SlugIssuer(link_dao))

        # 4- Serve the request
        match method:
            case 'GET' if slug is None:
                links = service.list_recent(limit)
                return response_json(200, {'links': [link_body(link, event) for link in links]})

            case 'GET':
                link = service.get(slug)
                if link is None:
                    return response_error(404, 'Not Found', message=f"link '{slug}' doesn't exist", error_code=LINK_NOT_FOUND)
                return response_json(200, link_body(link, event))

            case 'PATCH':
                link = service.update(slug, patch)
                if link is None:
                    return response_error(404, 'Not Found', message=f"link '{slug}' doesn't exist", error_code=LINK_NOT_FOUND)
                logger.info('Link updated. Responding with 200.', extra={'slug': slug, 'event': LINK_UPDATED})
                return response_json(200, link_body(link, event))

            case _:
                if not service.delete(slug):
                    return response_error(404, 'Not Found', message=f"link '{slug}' doesn't exist", error_code=LINK_NOT_FOUND)
                logger.info('Link deleted. Responding with 204.', extra={'slug': slug, 'event': LINK_DELETED})
                return response_204()

    except LinkUpdateConflictError:
        logger.warning('Link update lost to concurrent writers. Responding with 409.', extra={'slug': slug, 'event': UPDATE_CONFLICT})
        return response_error(409, 'Conflict', message='link was modified concurrently, try again', error_code=UPDATE_CONFLICT)
    except DataStoreError:
        logger.exception('Link data store is unavailable. Responding with 503.', extra={'slug': slug, 'event': STORE_UNAVAILABLE})
        return response_error(503, 'Service Unavailable', message='link store is unavailable', error_code=STORE_UNAVAILABLE)
    except CacheUnavailableError:
        logger.exception('Link changed but cache eviction failed. Responding with 503.', extra={'slug': slug, 'event': CACHE_UNAVAILABLE})
        return response_error(
            503,
            'Service Unavailable',
            message='change stored, redirects may serve the previous version until the cache entry expires',
            error_code=CACHE_UNAVAILABLE,
        )
