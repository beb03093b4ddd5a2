"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to
access configuration data stored in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is
stored as a JSON document under a configuration profile (typically
`backend-config`) and deployed to the corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": { ... },
                "rate_limit": {"limit": 30, "window_seconds": 600}
            },
            "redirect_url": {
                "redis": { ... },
                "cache": {"ttl_seconds": 86400, "jitter_max_seconds": 300}
            },
            "manage_link": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this
AppConfig document. The `rate_limit` and `cache` sections are optional;
missing values fall back to environment variables, then to defaults.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    _sam_load_local_appconfig(func) -> Callable[[str], dict]:
        Load AppConfig from a local AppConfig agent when running under SAM.
        Decorates `load_config()`.

    load_config(lambda_name: str) -> dict
        Load configuration for a given Lambda from AWS AppConfig and
        return it as a Python dictionary.

Classes:
    RateLimitConfig:
        Link creation rate limit (requests per window, window length).

    CacheConfig:
        Link cache TTL and TTL jitter.

Example:
    Typical usage inside a Lambda handler:

        >>> from shortlink.utils.config import load_config, RateLimitConfig
        >>> config = load_config('shorten_url')
        >>> config['redis']['host']
        'redis-15501.host.docker.internal'
        >>> RateLimitConfig.from_config(config)
        RateLimitConfig(limit=30, window_seconds=600)
"""

import os
import json
import functools
import logging
import urllib.parse
import urllib.request
from dataclasses import dataclass
from collections.abc import Callable
from typing import Any

import boto3

from shortlink.types import LambdaConfiguration
from shortlink.constants import ENV, TTL, DefaultRateLimit
from shortlink.exceptions import BadConfigurationError
from shortlink.utils.helpers import require_environment
from shortlink.utils.runtime import running_locally


logger = logging.getLogger(__name__)

# Optional per-lambda sections passed through next to the active backend's section
TUNING_SECTIONS = ('rate_limit', 'cache')


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Returns:
        str:
            Value of `APP_ENV` environment variable, `'local'` by default.

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'

    Returns:
        str:
            Value of `APP_NAME` environment variable.
            None if variable is not set.
    """
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortlink'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortlink:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _select_lambda_config(document: dict[str, Any], lambda_name: str) -> LambdaConfiguration:
    """Pick the active backend's section and the tuning sections for one Lambda

    Raises:
        BadConfigurationError:
            If the document has no active backend, no section for the Lambda,
            or the Lambda's section has no object for the active backend.
    """
    backend = document.get('active_backend')
    if not backend:
        raise BadConfigurationError(f"AppConfig document (build {document.get('build')}) has no 'active_backend'.")

    lambda_config = (document.get('configs') or {}).get(lambda_name)
    if not isinstance(lambda_config, dict):
        raise BadConfigurationError(f"AppConfig document (build {document.get('build')}) has no section for '{lambda_name}'.")
    if not isinstance(lambda_config.get(backend), dict):
        raise BadConfigurationError(f"AppConfig section '{lambda_name}' has no '{backend}' settings.")

    data = {backend: lambda_config[backend]}
    for section in TUNING_SECTIONS:
        if section in lambda_config:
            data[section] = lambda_config[section]
    return data


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        data = _select_lambda_config(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url').

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The active backend's section plus the optional tuning sections.

    Example:
        >>> app_config = load_config('redirect_url')
        >>> sorted(app_config)
        ['cache', 'redis']
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    data = _select_lambda_config(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data


def _setting(section: dict[str, Any], key: str, env_name: str, default: int) -> int:
    """Resolve an integer setting: AppConfig section, then environment variable, then default."""
    raw = section.get(key, os.environ.get(env_name, default))
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise BadConfigurationError(f'Setting {key!r} must be an integer (given value: {raw!r}).') from e


@dataclass(frozen=True)
class RateLimitConfig:
    limit: int = DefaultRateLimit.LIMIT
    window_seconds: int = DefaultRateLimit.WINDOW_SECONDS

    @classmethod
    def from_config(cls, app_config: LambdaConfiguration) -> 'RateLimitConfig':
        section = app_config.get('rate_limit') or {}
        config = cls(
            limit=_setting(section, 'limit', ENV.RateLimit.LIMIT, DefaultRateLimit.LIMIT),
            window_seconds=_setting(section, 'window_seconds', ENV.RateLimit.WINDOW_SECONDS, DefaultRateLimit.WINDOW_SECONDS),
        )
        if config.limit <= 0 or config.window_seconds <= 0:
            raise BadConfigurationError(f'Rate limit settings must be positive integers (given: {config}).')
        return config


@dataclass(frozen=True)
class CacheConfig:
    ttl_seconds: int = TTL.CACHE_BASE
    jitter_max_seconds: int = TTL.CACHE_JITTER_MAX

    @classmethod
    def from_config(cls, app_config: LambdaConfiguration) -> 'CacheConfig':
        section = app_config.get('cache') or {}
        config = cls(
            ttl_seconds=_setting(section, 'ttl_seconds', ENV.Cache.TTL_SECONDS, TTL.CACHE_BASE),
            jitter_max_seconds=_setting(section, 'jitter_max_seconds', ENV.Cache.JITTER_MAX, TTL.CACHE_JITTER_MAX),
        )
        if config.ttl_seconds <= 0 or config.jitter_max_seconds < 0:
            raise BadConfigurationError(f'Cache settings are out of range (given: {config}).')
        return config
