# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tests for the archaeologist CLI.

Covers:
    - run: ignored events, concluded checks, reporting errors
    - config: secrets are masked
    - diff: version-only changes vs real changes
    - label-check: policy outcomes
"""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from archaeologist.checks import CheckReportingError
from archaeologist.classes import CheckConclusion, CheckRun
from archaeologist.cli import cli
from archaeologist.config import ArchaeologistConfig


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_config():
    with patch('archaeologist.cli.main.load_config') as mock_load:
        mock_load.return_value = ArchaeologistConfig(api_token='ghp_supersecret', circle_token='')
        yield mock_load


def _write_event(tmp_path, payload) -> str:
    path = tmp_path / 'event.json'
    path.write_text(json.dumps(payload))
    return str(path)


def _check_payload():
    return {
        'action': 'completed',
        'check_run': {
            'id': 12345,
            'name': 'Archaeologist Dig',
            'head_sha': 'abc123',
            'html_url': 'https://github.com/electron/electron/runs/12345',
            'conclusion': 'success',
        },
    }


def _check_run(conclusion: CheckConclusion, title: str) -> CheckRun:
    started_at = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    return CheckRun(
        id=4242,
        name='Artifact Comparison',
        head_sha='abc123',
        started_at=started_at,
        conclusion=conclusion,
        title=title,
        completed_at=started_at,
    )


# ============================================================================
# run
# ============================================================================


class TestRunCommand:
    def test_ignored_event(self, runner, fake_config, tmp_path):
        event_path = _write_event(tmp_path, {'action': 'closed'})

        with patch('archaeologist.cli.main.run_orchestration') as mock_run:
            result = runner.invoke(cli, ['run', '--event-name', 'pull_request', '--event-path', event_path])

        assert result.exit_code == 0
        assert 'Nothing to do' in result.output
        mock_run.assert_not_called()

    def test_concluded_check_is_printed(self, runner, fake_config, tmp_path):
        event_path = _write_event(tmp_path, _check_payload())
        check_run = _check_run(CheckConclusion.NEUTRAL, 'Changes Detected')

        with patch('archaeologist.cli.main.run_orchestration', new=AsyncMock(return_value=check_run)) as mock_run:
            result = runner.invoke(cli, ['run', '--event-name', 'check_run', '--event-path', event_path])

        assert result.exit_code == 0, result.output
        assert 'Changes Detected' in result.output
        trigger = mock_run.await_args[0][0]
        assert trigger.build_or_run_id == 12345

    def test_failure_conclusion_exits_nonzero(self, runner, fake_config, tmp_path):
        event_path = _write_event(tmp_path, _check_payload())
        check_run = _check_run(CheckConclusion.FAILURE, 'Digging Failed')

        with patch('archaeologist.cli.main.run_orchestration', new=AsyncMock(return_value=check_run)):
            result = runner.invoke(cli, ['run', '--event-name', 'check_run', '--event-path', event_path])

        assert result.exit_code == 1
        assert 'Digging Failed' in result.output

    def test_reporting_error(self, runner, fake_config, tmp_path):
        event_path = _write_event(tmp_path, _check_payload())

        with patch(
            'archaeologist.cli.main.run_orchestration',
            new=AsyncMock(side_effect=CheckReportingError('could not create check')),
        ):
            result = runner.invoke(cli, ['run', '--event-name', 'check_run', '--event-path', event_path])

        assert result.exit_code == 1
        assert 'could not create check' in result.output

    def test_event_settings_from_environment(self, runner, fake_config, tmp_path):
        event_path = _write_event(tmp_path, {'action': 'closed'})

        result = runner.invoke(
            cli, ['run'], env={'GITHUB_EVENT_NAME': 'pull_request', 'GITHUB_EVENT_PATH': event_path}
        )

        assert result.exit_code == 0
        assert 'Nothing to do for pull_request' in result.output


# ============================================================================
# config
# ============================================================================


class TestConfigCommand:
    def test_secrets_are_masked(self, runner, fake_config):
        result = runner.invoke(cli, ['config'])

        assert result.exit_code == 0
        assert 'supersecret' not in result.output
        assert '<masked:' in result.output
        assert '<unset>' in result.output
        assert 'electron/electron' in result.output


# ============================================================================
# diff
# ============================================================================


class TestDiffCommand:
    def test_version_only_difference(self, runner, tmp_path, dts):
        old = tmp_path / 'electron.old.d.ts'
        new = tmp_path / 'electron.new.d.ts'
        old.write_text(dts('30.0.0'))
        new.write_text(dts('31.0.0'))

        result = runner.invoke(cli, ['diff', str(old), str(new)])

        assert result.exit_code == 0
        assert 'No Changes' in result.output

    def test_changes_are_rendered(self, runner, tmp_path, dts):
        old = tmp_path / 'electron.old.d.ts'
        new = tmp_path / 'electron.new.d.ts'
        old.write_text(dts('30.0.0'))
        new.write_text(dts('31.0.0', 'interface B {}\n'))

        with patch('archaeologist.cli.main.render_patch', return_value='+interface B {}') as mock_render:
            result = runner.invoke(cli, ['diff', str(old), str(new)])

        assert result.exit_code == 0
        assert 'Changes Detected' in result.output
        assert '+interface B {}' in result.output
        mock_render.assert_called_once()


# ============================================================================
# label-check
# ============================================================================


class TestLabelCheckCommand:
    @pytest.mark.parametrize(
        'args,expected',
        [
            (['--label', 'semver/minor', '--changes'], 'validChanges'),
            (['--label', 'semver/none', '--changes'], 'invalidChanges'),
            (['--changes'], 'invalidChanges'),
            (['--label', 'semver/none', '--no-changes'], 'validNoChanges'),
            (['--label', 'semver/major', '--no-changes'], 'invalidNoChanges'),
        ],
    )
    def test_outcomes(self, runner, args, expected):
        result = runner.invoke(cli, ['label-check', *args])

        assert result.exit_code == 0
        assert f'({expected})' in result.output

    def test_label_order_matters(self, runner):
        result = runner.invoke(cli, ['label-check', '--label', 'semver/none', '--label', 'semver/major'])
        assert '(invalidChanges)' in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert '1.0.0' in result.output
