# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Triggering the CircleCI dig job and waiting for it to finish."""

import asyncio
from typing import Any, Dict, Optional

import bittensor as bt
import requests

from archaeologist.classes import BuildStatus, PullRequestTrigger
from archaeologist.config import ArchaeologistConfig
from archaeologist.constants import CIRCLE_FAILED_STATUSES
from archaeologist.utils import circleci_api_tools


def classify_job(job: Dict[str, Any]) -> BuildStatus:
    """Map a CircleCI v2 job record onto passed/failed/running."""
    status = job.get('status')
    if status == 'success':
        return BuildStatus.PASSED
    if status in CIRCLE_FAILED_STATUSES:
        return BuildStatus.FAILED
    return BuildStatus.RUNNING


class CircleBuildRunner:
    """Starts a dig on CircleCI for a pull request and polls it to a terminal state."""

    def __init__(self, config: ArchaeologistConfig):
        self.config = config

    async def trigger(self, trigger: PullRequestTrigger) -> Optional[int]:
        """Start the dig job. Returns its build number, or None if CircleCI refused."""
        return await asyncio.to_thread(
            circleci_api_tools.trigger_dig_build,
            self.config.repository,
            self.config.circle_token,
            trigger.head_sha,
            trigger.base_branch,
            trigger.fork_remote,
        )

    async def wait(self, build_number: int) -> bool:
        """
        Poll a build until it passes or fails.

        There is no deadline: a build that stays running keeps being polled. Only
        consecutive errors talking to CircleCI end the wait early.

        Returns:
            bool: True if the build passed
        """
        failures_left = self.config.allowed_poll_failures

        while True:
            bt.logging.debug(f'Waiter pinging build: {build_number}')
            try:
                job = await asyncio.to_thread(
                    circleci_api_tools.get_job, self.config.repository, self.config.circle_token, build_number
                )
            except (requests.exceptions.RequestException, ValueError) as e:
                bt.logging.error(f'Waiter error for build: {build_number} ({failures_left} failures left): {e}')
                if failures_left <= 0:
                    return False
                failures_left -= 1
                await asyncio.sleep(self.config.poll_interval_seconds)
                continue

            failures_left = self.config.allowed_poll_failures
            status = classify_job(job)
            if status is BuildStatus.PASSED:
                bt.logging.info(f'Waiter success for build: {build_number}')
                return True
            if status is BuildStatus.FAILED:
                bt.logging.info(f'Waiter failed for build: {build_number} (status {job.get("status")})')
                return False

            await asyncio.sleep(self.config.poll_interval_seconds)
