# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Configuration for the archaeologist bot.

Values come from an optional .env file and the process environment, and are
collected once into an ArchaeologistConfig that gets passed to everything
that needs it.
"""

import os
from dataclasses import dataclass
from typing import Optional

import bittensor as bt
from dotenv import load_dotenv

from archaeologist.constants import (
    DEFAULT_ALLOWED_POLL_FAILURES,
    DEFAULT_CHECK_NAME,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_REPOSITORY,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
)

DEFAULT_EVENTS_RETENTION_SIZE = 10 * 1024 * 1024  # 10 MB


@dataclass
class ArchaeologistConfig:
    """Configuration for a single orchestrator and its collaborators."""

    check_name: str = DEFAULT_CHECK_NAME
    api_token: str = ''
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    repository: str = DEFAULT_REPOSITORY  # owner/repo
    circle_token: str = ''
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    allowed_poll_failures: int = DEFAULT_ALLOWED_POLL_FAILURES
    events_log_dir: Optional[str] = None
    events_retention_size: int = DEFAULT_EVENTS_RETENTION_SIZE

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        bt.logging.warning(f'Ignoring {name}={raw!r}: not an integer, using default {default}')
        return default


def load_config(env_file: Optional[str] = None) -> ArchaeologistConfig:
    """
    Build an ArchaeologistConfig from a .env file and the environment.

    Args:
        env_file: Optional path to a .env file. When omitted, python-dotenv looks for one
            in the current directory and its parents.

    Returns:
        ArchaeologistConfig with values from the environment or defaults
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return ArchaeologistConfig(
        check_name=os.getenv('ARCHAEOLOGIST_CHECK_NAME') or DEFAULT_CHECK_NAME,
        api_token=os.getenv('GITHUB_TOKEN', ''),
        retry_attempts=_env_int('ARCHAEOLOGIST_RETRY_ATTEMPTS', DEFAULT_RETRY_ATTEMPTS),
        retry_delay_ms=_env_int('ARCHAEOLOGIST_RETRY_DELAY_MS', DEFAULT_RETRY_DELAY_MS),
        repository=os.getenv('ARCHAEOLOGIST_REPOSITORY') or DEFAULT_REPOSITORY,
        circle_token=os.getenv('CIRCLE_TOKEN', ''),
        poll_interval_ms=_env_int('ARCHAEOLOGIST_POLL_INTERVAL_MS', DEFAULT_POLL_INTERVAL_MS),
        allowed_poll_failures=_env_int('ARCHAEOLOGIST_ALLOWED_POLL_FAILURES', DEFAULT_ALLOWED_POLL_FAILURES),
        events_log_dir=os.getenv('ARCHAEOLOGIST_EVENTS_DIR') or None,
    )
