# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared pytest fixtures.

Usage:
    def test_something(config, make_bundle):
        bundle = make_bundle(new='interface A {}')
        ...
"""

import io
import zipfile
from typing import Dict, Optional, Union
from unittest.mock import AsyncMock, Mock, patch

import pytest

from archaeologist.classes import ArtifactBundle
from archaeologist.config import ArchaeologistConfig
from archaeologist.constants import DIG_SPOT_ARTIFACT, NEW_DTS_ARTIFACT, OLD_DTS_ARTIFACT

DTS_BODY = """declare namespace Electron {
  interface App {
    quit(): void;
  }
}
"""


def make_dts(version: str, body: str = DTS_BODY) -> str:
    return f"// Type definitions for Electron {version}\n// Project: http://electronjs.org/\n{body}"


def make_artifact_zip(files: Dict[str, Union[str, bytes]]) -> bytes:
    """Build an in-memory zip holding the given files at its top level."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def config() -> ArchaeologistConfig:
    """Config with fake tokens and no real waiting between attempts."""
    return ArchaeologistConfig(
        api_token='fake_github_token',
        circle_token='fake_circle_token',
        retry_attempts=5,
        retry_delay_ms=0,
        poll_interval_ms=0,
        allowed_poll_failures=3,
    )


@pytest.fixture
def make_bundle():
    """Factory for complete (or deliberately incomplete) artifact bundles."""

    def _make(
        new: Optional[str] = None,
        old: Optional[str] = None,
        dig_spot: Optional[str] = 'abc123\n',
    ) -> ArtifactBundle:
        contents = {}
        if new is not None:
            contents[NEW_DTS_ARTIFACT] = new
        if old is not None:
            contents[OLD_DTS_ARTIFACT] = old
        if dig_spot is not None:
            contents[DIG_SPOT_ARTIFACT] = dig_spot
        return ArtifactBundle.from_contents(contents)

    return _make


@pytest.fixture
def github_checks():
    """Patch the checks API; yields (create_mock, update_mock)."""
    with patch('archaeologist.checks.github_api_tools.create_check_run') as mock_create, patch(
        'archaeologist.checks.github_api_tools.update_check_run'
    ) as mock_update:
        mock_create.return_value = {'id': 4242, 'status': 'in_progress'}
        mock_update.return_value = True
        yield mock_create, mock_update


@pytest.fixture
def no_sleep():
    """Make asyncio.sleep return immediately; yields the mock to inspect delays."""
    with patch('asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def fake_fetcher():
    """A fetcher whose fetch() returns whatever bundle the test sets."""

    def _make(bundle: ArtifactBundle):
        fetcher = Mock()
        fetcher.fetch = AsyncMock(return_value=bundle)
        return fetcher

    return _make


@pytest.fixture
def fake_build_runner():
    """A CircleCI runner that triggers build 77 and reports it as passed by default."""
    runner = Mock()
    runner.trigger = AsyncMock(return_value=77)
    runner.wait = AsyncMock(return_value=True)
    return runner


@pytest.fixture
def dts():
    """Factory for a small generated electron.d.ts stamped with a version banner."""
    return make_dts


@pytest.fixture
def artifact_zip():
    """Factory for artifact zip archives."""
    return make_artifact_zip
