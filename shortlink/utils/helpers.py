"""Lambda-side helpers shared by the shorten, redirect and manage handlers

Short links are reported by the handler that minted them, so the public URL is
rebuilt from the API Gateway request each time:

    custom domain       https://sho.rt/aZ3k9Qx
    execute-api domain  https://k3x9.execute-api.eu-central-1.amazonaws.com/Prod/aZ3k9Qx
    SAM local           http://localhost:3000/aZ3k9Qx
"""

import os
import json
import hashlib
import logging
import functools
from collections.abc import Callable

from shortlink.types import LambdaEvent, LambdaResponse
from shortlink.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from shortlink.exceptions import MissingEnvironmentVariableError
from shortlink.utils.runtime import running_locally
from shortlink.utils.logging import bind_request


logger = logging.getLogger(__name__)

LOCAL_BASE_URL = 'http://localhost:3000'


def base_url(event: LambdaEvent) -> str:
    """Public origin the client used to reach the API

    The stage segment is only part of the path on execute-api domains, custom
    domains map stages through base path mappings.
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName') or ''
    stage = request_context.get('stage') or ''

    if not domain:
        return LOCAL_BASE_URL
    if domain.startswith(('localhost', '127.0.0.1')):
        return f'http://{domain}'
    if 'execute-api' in domain:
        return f'https://{domain}/{stage}'
    return f'https://{domain}'


def get_short_url(slug: str, event: LambdaEvent) -> str:
    return f'{base_url(event).rstrip("/")}/{slug}'


def hash_client_address(address: str) -> str:
    """Return the SHA-256 hex digest of a client address

    Link records keep this digest instead of the raw address.
    """
    return hashlib.sha256(address.encode('utf-8')).hexdigest()


def require_environment(*names: str) -> Callable:
    """Decorator: fail fast when environment variables a function reads are unset

    Raises:
        MissingEnvironmentVariableError:
            Listing every variable that is missing or empty, e.g.
            "Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'"
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            unset = ', '.join(f"'{name}'" for name in names if not os.environ.get(name))
            if unset:
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {unset}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable[..., LambdaResponse]) -> Callable[..., LambdaResponse]:
    """Decorator: respond with HTTP 500 when a Lambda handler raises unexpectedly

    When running locally the original exception is re-raised, so it shows up in
    the SAM console instead of being hidden behind a generic response.
    Log records emitted during the invocation carry its `requestId`.
    """

    @functools.wraps(handler)
    def wrapper(event, context, *args, **kwargs) -> LambdaResponse:
        bind_request(getattr(context, 'aws_request_id', None))
        try:
            return handler(event, context, *args, **kwargs)
        except Exception:
            if running_locally():
                raise
            logger.exception('Unhandled exception in Lambda handler. Responding with 500.', extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR})
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps({'message': 'Internal Server Error', 'errorCode': UNKNOWN_INTERNAL_SERVER_ERROR}),
            }

    return wrapper
