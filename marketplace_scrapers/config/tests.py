"""
Tests for scraper settings and logging configuration
"""
import pytest

from .settings import LOGGING, ScraperSettings, env_float, env_int
from ..exceptions import ConfigurationException


class TestEnvParsing:

    def test_defaults_when_unset_or_blank(self, monkeypatch):
        monkeypatch.delenv('SCRAPER_TIMEOUT_SECONDS', raising=False)
        monkeypatch.setenv('DEFAULT_EVENT_LIMIT', '  ')
        assert env_float('SCRAPER_TIMEOUT_SECONDS', 15) == 15.0
        assert env_int('DEFAULT_EVENT_LIMIT', 12) == 12

    def test_values_are_cast(self, monkeypatch):
        monkeypatch.setenv('SCRAPER_TIMEOUT_SECONDS', '2.5')
        monkeypatch.setenv('EVENT_FALLBACK_THRESHOLD', '5')
        assert env_float('SCRAPER_TIMEOUT_SECONDS', 15) == 2.5
        assert env_int('EVENT_FALLBACK_THRESHOLD', 3) == 5

    def test_malformed_value_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv('DEFAULT_EVENT_LIMIT', 'twelve')
        with pytest.raises(ConfigurationException) as exc_info:
            env_int('DEFAULT_EVENT_LIMIT', 12)
        assert 'DEFAULT_EVENT_LIMIT' in exc_info.value.message


class TestScraperSettings:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('VIVID_BASE_URL', 'https://example.test/')
        monkeypatch.setenv('SCRAPER_TIMEOUT_SECONDS', '3')
        monkeypatch.setenv('LISTING_ID_STRATEGY', 'UUID')
        settings = ScraperSettings.from_env()
        assert settings.base_url == 'https://example.test'
        assert settings.timeout_seconds == 3.0
        assert settings.listing_id_strategy == 'uuid'

    def test_from_env_malformed_number(self, monkeypatch):
        monkeypatch.setenv('SCRAPER_TIMEOUT_SECONDS', 'soon')
        with pytest.raises(ConfigurationException):
            ScraperSettings.from_env()

    @pytest.mark.parametrize("overrides", [
        {"base_url": "www.vividseats.com"},
        {"timeout_seconds": 0},
        {"event_fallback_threshold": -1},
        {"listing_id_strategy": "random"},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationException):
            ScraperSettings(**overrides)


class TestLoggingConfig:

    def test_every_formatter_is_used_by_a_handler(self):
        used = {handler['formatter'] for handler in LOGGING['handlers'].values()}
        assert set(LOGGING['formatters']) == used

    def test_package_logger(self):
        assert 'marketplace_scrapers' in LOGGING['loggers']
