"""Unit tests for configuration utilities in config.py."""

import json
from io import BytesIO
from typing import cast
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from pytest import MonkeyPatch

from shortlink.types import AppConfig
from shortlink.utils import config
from shortlink.utils.config import RateLimitConfig, CacheConfig
from shortlink.constants import ENV
from shortlink.exceptions import BadConfigurationError, MissingEnvironmentVariableError


class TestLoadConfig:
    appconfig_payload: AppConfig

    @pytest.fixture
    def appconfig_payload(self) -> AppConfig:
        # fmt: off
        return cast(AppConfig, {
            'build': 42,
            'active_backend': 'redis',
            'configs': {
                'shorten_url': {
                    'redis': {
                        'host': 'monkey',
                        'port': 659595,
                        'db': 3
                    },
                    'rate_limit': {
                        'limit': 5,
                        'window_seconds': 60
                    }
                },
                'redirect_url': {
                    'redis': {
                        'host': 'monkey',
                        'port': 659595,
                        'db': 3
                    }
                }
            },
        })
        # fmt: on

    @pytest.fixture
    def appconfig_client(self, appconfig_payload: AppConfig) -> MagicMock:
        client = MagicMock()
        client.start_configuration_session.return_value = {'InitialConfigurationToken': 'token-123'}
        client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}
        return client

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, appconfig_client: MagicMock) -> None:
        monkeypatch.setenv(ENV.App.APP_ENV, 'test')
        monkeypatch.delenv(ENV.App.AWS_SAM_LOCAL, raising=False)
        monkeypatch.delenv(ENV.AppConfig.AGENT_URL, raising=False)
        monkeypatch.setenv(ENV.AppConfig.APP_ID, 'app123')
        monkeypatch.setenv(ENV.AppConfig.ENV_ID, 'env123')
        monkeypatch.setenv(ENV.AppConfig.PROFILE_ID, 'prof123')
        monkeypatch.setattr(config.boto3, 'client', lambda service: appconfig_client)
        self.appconfig_client = appconfig_client

    def test_load_config_selects_lambda_section(self):
        app_config = config.load_config('shorten_url')

        assert app_config == {
            'redis': {'host': 'monkey', 'port': 659595, 'db': 3},
            'rate_limit': {'limit': 5, 'window_seconds': 60},
        }
        self.appconfig_client.start_configuration_session.assert_called_once_with(
            ApplicationIdentifier='app123',
            EnvironmentIdentifier='env123',
            ConfigurationProfileIdentifier='prof123',
        )
        self.appconfig_client.get_latest_configuration.assert_called_once_with(ConfigurationToken='token-123')

    def test_load_config_without_tuning_sections(self):
        app_config = config.load_config('redirect_url')
        assert app_config == {'redis': {'host': 'monkey', 'port': 659595, 'db': 3}}

    def test_load_config_for_unknown_lambda(self):
        with pytest.raises(BadConfigurationError, match="has no section for 'unknown_lambda'"):
            config.load_config('unknown_lambda')

    @pytest.mark.parametrize(
        'document, message',
        [
            ({'build': 1, 'configs': {'shorten_url': {'redis': {}}}}, "has no 'active_backend'"),
            ({'build': 1, 'active_backend': 'redis'}, "has no section for 'shorten_url'"),
            ({'build': 1, 'active_backend': 'redis', 'configs': {'shorten_url': {'rate_limit': {'limit': 5}}}}, "has no 'redis' settings"),
            ({'build': 1, 'active_backend': 'redis', 'configs': {'shorten_url': {'redis': 'redis://monkey:6379'}}}, "has no 'redis' settings"),
        ],
    )
    def test_load_config_with_malformed_document(self, document: dict, message: str):
        self.appconfig_client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(document).encode('utf-8'))}

        with pytest.raises(BadConfigurationError, match=message):
            config.load_config('shorten_url')

    def test_missing_appconfig_raises_error(self):
        self.appconfig_client.start_configuration_session.side_effect = ClientError(
            {'Error': {'Code': 'ResourceNotFoundException', 'Message': 'Not found'}},
            'StartConfigurationSession',
        )

        with pytest.raises(ClientError):
            config.load_config('shorten_url')

    def test_missing_environment_raises_error(self, monkeypatch: MonkeyPatch):
        monkeypatch.delenv(ENV.AppConfig.PROFILE_ID)

        with pytest.raises(MissingEnvironmentVariableError, match=ENV.AppConfig.PROFILE_ID):
            config.load_config('shorten_url')


class TestAppIdentity:
    def test_app_env_defaults_to_local(self, monkeypatch: MonkeyPatch):
        monkeypatch.delenv(ENV.App.APP_ENV, raising=False)
        assert config.app_env() == 'local'

    def test_app_prefix(self, monkeypatch: MonkeyPatch):
        monkeypatch.setenv(ENV.App.APP_NAME, 'shortlink')
        monkeypatch.setenv(ENV.App.APP_ENV, 'Prod')
        assert config.app_prefix() == 'shortlink:prod'

    def test_app_prefix_without_app_name(self, monkeypatch: MonkeyPatch):
        monkeypatch.delenv(ENV.App.APP_NAME, raising=False)
        assert config.app_prefix() is None


class TestTuningConfig:
    @pytest.fixture(autouse=True)
    def clean_environment(self, monkeypatch: MonkeyPatch) -> None:
        for name in (ENV.RateLimit.LIMIT, ENV.RateLimit.WINDOW_SECONDS, ENV.Cache.TTL_SECONDS, ENV.Cache.JITTER_MAX):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        assert RateLimitConfig.from_config({}) == RateLimitConfig(limit=30, window_seconds=600)
        assert CacheConfig.from_config({}) == CacheConfig(ttl_seconds=86400, jitter_max_seconds=300)

    def test_environment_overrides_defaults(self, monkeypatch: MonkeyPatch):
        monkeypatch.setenv(ENV.RateLimit.LIMIT, '10')
        monkeypatch.setenv(ENV.RateLimit.WINDOW_SECONDS, '120')
        monkeypatch.setenv(ENV.Cache.TTL_SECONDS, '3600')
        monkeypatch.setenv(ENV.Cache.JITTER_MAX, '0')

        assert RateLimitConfig.from_config({}) == RateLimitConfig(limit=10, window_seconds=120)
        assert CacheConfig.from_config({}) == CacheConfig(ttl_seconds=3600, jitter_max_seconds=0)

    def test_appconfig_overrides_environment(self, monkeypatch: MonkeyPatch):
        monkeypatch.setenv(ENV.RateLimit.LIMIT, '10')
        app_config = {'rate_limit': {'limit': 5}, 'cache': {'ttl_seconds': 60, 'jitter_max_seconds': 5}}

        assert RateLimitConfig.from_config(app_config) == RateLimitConfig(limit=5, window_seconds=600)
        assert CacheConfig.from_config(app_config) == CacheConfig(ttl_seconds=60, jitter_max_seconds=5)

    @pytest.mark.parametrize('rate_limit', [{'limit': 'many'}, {'limit': 0}, {'window_seconds': -1}, {'limit': None}])
    def test_bad_rate_limit_settings(self, rate_limit):
        with pytest.raises(BadConfigurationError):
            RateLimitConfig.from_config({'rate_limit': rate_limit})

    @pytest.mark.parametrize('cache', [{'ttl_seconds': 0}, {'jitter_max_seconds': -1}, {'ttl_seconds': '1d'}])
    def test_bad_cache_settings(self, cache):
        with pytest.raises(BadConfigurationError):
            CacheConfig.from_config({'cache': cache})
