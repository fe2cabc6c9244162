# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Check Reporter: opens a pending check run and concludes it exactly once."""

import asyncio
from datetime import datetime, timezone

import bittensor as bt

from archaeologist.classes import CheckConclusion, CheckRun
from archaeologist.config import ArchaeologistConfig
from archaeologist.utils import github_api_tools
from archaeologist.utils.logging import log_check_conclusion


class CheckReportingError(Exception):
    """The check could not be created or concluded."""


class CheckReporter:
    """
    Reports one check run per orchestration to GitHub.

    open() always leaves the check in progress; finalize() is the only way it
    reaches a terminal conclusion, and refuses to run twice for the same check.
    """

    def __init__(self, config: ArchaeologistConfig):
        self.config = config

    async def open(self, name: str, head_sha: str, details_url: str = '') -> CheckRun:
        """
        Create a pending check run.

        Raises:
            CheckReportingError: if GitHub did not create the check
        """
        started_at = datetime.now(timezone.utc)
        bt.logging.info(f"Creating check '{name}' for {head_sha}")

        data = await asyncio.to_thread(
            github_api_tools.create_check_run,
            self.config.repository,
            self.config.api_token,
            name,
            head_sha,
            details_url,
            started_at,
        )
        if not data or 'id' not in data:
            raise CheckReportingError(f"could not create check '{name}' for {head_sha}")

        return CheckRun(
            id=data['id'],
            name=name,
            head_sha=head_sha,
            started_at=started_at,
            details_url=details_url,
        )

    async def finalize(self, check_run: CheckRun, conclusion: CheckConclusion, title: str, summary: str) -> CheckRun:
        """
        Move a pending check to its terminal conclusion.

        started_at is kept from open(); completed_at is stamped now.

        Raises:
            CheckReportingError: if the check already concluded, the conclusion is
                not terminal, or GitHub rejected the update
        """
        if check_run.is_concluded:
            raise CheckReportingError(f'check {check_run.id} already concluded as {check_run.conclusion.value}')
        if conclusion is CheckConclusion.PENDING:
            raise CheckReportingError(f'check {check_run.id} cannot be finalized as pending')

        completed_at = datetime.now(timezone.utc)
        ok = await asyncio.to_thread(
            github_api_tools.update_check_run,
            self.config.repository,
            self.config.api_token,
            check_run.id,
            conclusion.value,
            check_run.started_at,
            completed_at,
            title,
            summary,
        )
        if not ok:
            raise CheckReportingError(f'could not conclude check {check_run.id} as {conclusion.value}')

        check_run.conclusion = conclusion
        check_run.title = title
        check_run.summary = summary
        check_run.completed_at = completed_at
        log_check_conclusion(check_run)
        return check_run
