import os

from shortlink.types import LambdaEvent, HttpHeaders
from shortlink.constants import ENV


def running_locally() -> bool:
    """Return True if running in SAM local invoke/api, False otherwise."""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


def get_headers(event: LambdaEvent) -> HttpHeaders:
    """Return request headers with lowercased names (API Gateway keeps the client's casing)."""
    headers = event.get('headers') or {}
    return {str(name).lower(): value for name, value in headers.items() if value is not None}


def get_source_ip(event: LambdaEvent) -> str | None:
    """Return the transport-level peer address of the request.

    REST APIs (payload v1) expose it under requestContext.identity,
    HTTP APIs (payload v2) under requestContext.http.
    """
    request_context = event.get('requestContext') or {}
    identity = request_context.get('identity') or {}
    http = request_context.get('http') or {}
    return identity.get('sourceIp') or http.get('sourceIp')


def get_path_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('pathParameters') or {}).get(name)


def get_query_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('queryStringParameters') or {}).get(name)


def get_http_method(event: LambdaEvent) -> str:
    method = event.get('httpMethod') or event.get('requestContext', {}).get('http', {}).get('method', '')
    return method.upper()
