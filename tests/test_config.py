# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Unit tests for loading configuration from the environment.
"""

from unittest.mock import patch

import pytest

from archaeologist.config import ArchaeologistConfig, load_config
from archaeologist.constants import (
    DEFAULT_ALLOWED_POLL_FAILURES,
    DEFAULT_CHECK_NAME,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_REPOSITORY,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
)

ENV_VARS = (
    'GITHUB_TOKEN',
    'CIRCLE_TOKEN',
    'ARCHAEOLOGIST_CHECK_NAME',
    'ARCHAEOLOGIST_REPOSITORY',
    'ARCHAEOLOGIST_RETRY_ATTEMPTS',
    'ARCHAEOLOGIST_RETRY_DELAY_MS',
    'ARCHAEOLOGIST_POLL_INTERVAL_MS',
    'ARCHAEOLOGIST_ALLOWED_POLL_FAILURES',
    'ARCHAEOLOGIST_EVENTS_DIR',
)


@pytest.fixture
def clean_env(monkeypatch):
    """Clear every variable load_config reads and keep .env files out of the way."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch('archaeologist.config.load_dotenv') as mock_load_dotenv:
        yield mock_load_dotenv


class TestLoadConfig:
    def test_defaults(self, clean_env):
        config = load_config()

        assert config.check_name == DEFAULT_CHECK_NAME
        assert config.api_token == ''
        assert config.circle_token == ''
        assert config.repository == DEFAULT_REPOSITORY
        assert config.retry_attempts == DEFAULT_RETRY_ATTEMPTS
        assert config.retry_delay_ms == DEFAULT_RETRY_DELAY_MS
        assert config.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
        assert config.allowed_poll_failures == DEFAULT_ALLOWED_POLL_FAILURES
        assert config.events_log_dir is None
        clean_env.assert_called_once_with()

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv('GITHUB_TOKEN', 'gh')
        monkeypatch.setenv('CIRCLE_TOKEN', 'circle')
        monkeypatch.setenv('ARCHAEOLOGIST_CHECK_NAME', 'Custom Dig')
        monkeypatch.setenv('ARCHAEOLOGIST_REPOSITORY', 'someone/electron')
        monkeypatch.setenv('ARCHAEOLOGIST_RETRY_ATTEMPTS', '2')
        monkeypatch.setenv('ARCHAEOLOGIST_RETRY_DELAY_MS', '250')
        monkeypatch.setenv('ARCHAEOLOGIST_POLL_INTERVAL_MS', '100')
        monkeypatch.setenv('ARCHAEOLOGIST_ALLOWED_POLL_FAILURES', '0')
        monkeypatch.setenv('ARCHAEOLOGIST_EVENTS_DIR', '/var/log/archaeologist')

        config = load_config()

        assert config == ArchaeologistConfig(
            check_name='Custom Dig',
            api_token='gh',
            retry_attempts=2,
            retry_delay_ms=250,
            repository='someone/electron',
            circle_token='circle',
            poll_interval_ms=100,
            allowed_poll_failures=0,
            events_log_dir='/var/log/archaeologist',
        )

    def test_invalid_integer_falls_back_to_default(self, clean_env, monkeypatch):
        monkeypatch.setenv('ARCHAEOLOGIST_RETRY_ATTEMPTS', 'lots')

        with patch('archaeologist.config.bt.logging') as mock_logging:
            config = load_config()

        assert config.retry_attempts == DEFAULT_RETRY_ATTEMPTS
        mock_logging.warning.assert_called_once()

    def test_empty_values_use_defaults(self, clean_env, monkeypatch):
        monkeypatch.setenv('ARCHAEOLOGIST_CHECK_NAME', '')
        monkeypatch.setenv('ARCHAEOLOGIST_RETRY_DELAY_MS', ' ')

        config = load_config()

        assert config.check_name == DEFAULT_CHECK_NAME
        assert config.retry_delay_ms == DEFAULT_RETRY_DELAY_MS

    def test_env_file_is_loaded(self, clean_env):
        load_config('/tmp/archaeologist.env')
        clean_env.assert_called_once_with('/tmp/archaeologist.env')


class TestDelays:
    def test_milliseconds_to_seconds(self):
        config = ArchaeologistConfig(retry_delay_ms=10_000, poll_interval_ms=2_500)

        assert config.retry_delay_seconds == 10.0
        assert config.poll_interval_seconds == 2.5
