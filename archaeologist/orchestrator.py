# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Run Orchestrator.

One instance handles one triggering event:

    STARTED -> AWAITING_BUILD -> COMPARING -> CONCLUDED

The check opened in STARTED is concluded exactly once, whichever way the run
ends, including when something raises along the way.
"""

import asyncio
from enum import Enum
from typing import List, Optional, Tuple

import bittensor as bt

from archaeologist.artifacts import ArtifactFetcher, CircleArtifactFetcher, GHAArtifactFetcher
from archaeologist.builds import CircleBuildRunner
from archaeologist.checks import CheckReporter
from archaeologist.classes import (
    ArtifactBundle,
    CheckCompletedTrigger,
    CheckConclusion,
    CheckRun,
    CheckStatus,
    PullRequestTrigger,
    Trigger,
)
from archaeologist.config import ArchaeologistConfig
from archaeologist.constants import ARTIFACT_COMPARISON_CHECK_NAME
from archaeologist.dts import fit_summary, render_changes_report, render_patch, strip_version
from archaeologist.labels import VALID_CHANGES, VALID_NO_CHANGES, get_check_status

DIGGING_FAILED_TITLE = 'Digging Failed'
DIGGING_FAILED_SUMMARY = (
    'Although the .d.ts build appears to have succeeded, artifacts were not generated correctly for us to compare'
)
BUILD_FAILED_TITLE = 'Build Failed'
BUILD_FAILED_SUMMARY = 'The .d.ts build did not succeed, so there was nothing for us to compare'
UNEXPECTED_ERROR_SUMMARY = 'Something went wrong while comparing the `electron.d.ts` artifacts: {error}'


class RunState(Enum):
    STARTED = 'started'
    AWAITING_BUILD = 'awaiting_build'
    COMPARING = 'comparing'
    CONCLUDED = 'concluded'


class RunOrchestrator:
    """Drives one artifact comparison check from creation to conclusion."""

    def __init__(
        self,
        config: ArchaeologistConfig,
        reporter: Optional[CheckReporter] = None,
        gha_fetcher: Optional[ArtifactFetcher] = None,
        circle_fetcher: Optional[ArtifactFetcher] = None,
        build_runner: Optional[CircleBuildRunner] = None,
    ):
        self.config = config
        self.reporter = reporter or CheckReporter(config)
        self.gha_fetcher = gha_fetcher or GHAArtifactFetcher(config)
        self.circle_fetcher = circle_fetcher or CircleArtifactFetcher(config)
        self.build_runner = build_runner or CircleBuildRunner(config)
        self.state = RunState.STARTED
        self.check_run: Optional[CheckRun] = None

    async def run(self, trigger: Trigger) -> CheckRun:
        """
        Run the whole state machine for one trigger.

        Returns:
            The concluded CheckRun

        Raises:
            RuntimeError: if this instance already ran
            CheckReportingError: if the check could not be created or concluded
        """
        if self.state is not RunState.STARTED:
            raise RuntimeError(f'orchestrator already used (state {self.state.value})')

        bt.logging.info(f'Starting check run for: {trigger.head_sha}')
        self.check_run = await self.reporter.open(ARTIFACT_COMPARISON_CHECK_NAME, trigger.head_sha, trigger.details_url)

        try:
            self.state = RunState.AWAITING_BUILD
            build = await self._await_build(trigger)
            if build is None:
                return await self._conclude(CheckConclusion.FAILURE, BUILD_FAILED_TITLE, BUILD_FAILED_SUMMARY)

            fetcher, build_id = build
            self.state = RunState.COMPARING
            bundle = await fetcher.fetch(build_id)
            labels = trigger.labels if isinstance(trigger, PullRequestTrigger) else None
            return await self._compare(bundle, labels)
        except Exception as e:
            if self.check_run.is_concluded:
                raise
            bt.logging.error(f'Check run {self.check_run.id} for {trigger.head_sha} failed in {self.state.value}: {e}')
            await self._conclude(
                CheckConclusion.FAILURE,
                DIGGING_FAILED_TITLE,
                fit_summary(UNEXPECTED_ERROR_SUMMARY.format(error=e), fallback=DIGGING_FAILED_SUMMARY),
            )
            raise

    async def _await_build(self, trigger: Trigger) -> Optional[Tuple[ArtifactFetcher, int]]:
        """Get to a finished, passing build. None means the build failed or never ran."""
        if isinstance(trigger, CheckCompletedTrigger):
            if trigger.build_conclusion != 'success':
                bt.logging.warning(
                    f'Upstream check {trigger.build_or_run_id} concluded {trigger.build_conclusion}, not comparing'
                )
                return None
            return self.gha_fetcher, trigger.build_or_run_id

        build_number = await self.build_runner.trigger(trigger)
        if build_number is None:
            return None
        bt.logging.info(f'Waiting for build {build_number} ({trigger.head_sha} against {trigger.base_branch})')
        if not await self.build_runner.wait(build_number):
            return None
        return self.circle_fetcher, build_number

    async def _compare(self, bundle: ArtifactBundle, labels: Optional[List[str]]) -> CheckRun:
        if not bundle.is_complete or not bundle.dig_spot_marker:
            missing = ', '.join(bundle.missing_names) or 'empty dig spot'
            bt.logging.error(f'Check run {self.check_run.id}: artifacts unusable ({missing})')
            return await self._conclude(CheckConclusion.FAILURE, DIGGING_FAILED_TITLE, DIGGING_FAILED_SUMMARY)

        bt.logging.info(f'Comparing against dig spot: {bundle.dig_spot_marker}')
        new_document = strip_version(bundle.new_document)
        old_document = strip_version(bundle.old_document)
        has_changes = new_document != old_document

        status = self._pick_status(labels, has_changes)
        if not has_changes:
            return await self._conclude(status.conclusion, status.title, status.summary)

        bt.logging.info('Creating patch')
        patch = await asyncio.to_thread(render_patch, old_document, new_document)
        bt.logging.info(f'Patch created with length: {len(patch)}')

        summary = fit_summary(render_changes_report(patch, status.summary), preface=status.summary)
        return await self._conclude(status.conclusion, status.title, summary)

    @staticmethod
    def _pick_status(labels: Optional[List[str]], has_changes: bool) -> CheckStatus:
        if labels is not None:
            return get_check_status(labels, has_changes)
        # no label policy for this trigger: changes only need a human to look
        return VALID_CHANGES if has_changes else VALID_NO_CHANGES

    async def _conclude(self, conclusion: CheckConclusion, title: str, summary: str) -> CheckRun:
        check_run = await self.reporter.finalize(self.check_run, conclusion, title, summary)
        self.state = RunState.CONCLUDED
        return check_run


async def run_orchestration(trigger: Trigger, config: ArchaeologistConfig) -> CheckRun:
    """Entry point: a fresh orchestrator per trigger."""
    return await RunOrchestrator(config).run(trigger)
