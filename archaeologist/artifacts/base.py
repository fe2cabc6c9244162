# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Bounded-retry artifact fetching shared by the CI providers."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import bittensor as bt

from archaeologist.classes import ArtifactBundle
from archaeologist.config import ArchaeologistConfig


class ArtifactFetcher(ABC):
    """
    Retrieves the three dig artifacts for a build.

    The whole listing step is retried with a fixed delay. Running out of attempts,
    or finding an empty listing, yields a bundle with everything missing rather
    than an exception, so callers must always look at missing_names.
    """

    # what a build id refers to on this provider, used in log lines
    build_kind = 'build'

    def __init__(self, config: ArchaeologistConfig):
        self.config = config

    @abstractmethod
    async def list_artifacts(self, build_id: int, attempts_left: int) -> Optional[List[Any]]:
        """
        Resolve build_id to its artifact listing.

        Returns None on a transient failure (after logging it with attempts_left),
        otherwise the listing, which may be empty.
        """

    @abstractmethod
    async def collect(self, build_id: int, listing: List[Any]) -> ArtifactBundle:
        """Download what the listing points at and build the bundle."""

    async def fetch(self, build_id: int, max_attempts: Optional[int] = None) -> ArtifactBundle:
        """
        Fetch artifacts for build_id.

        Args:
            build_id: Provider specific build/run/job identifier
            max_attempts: Listing attempts, defaults to config.retry_attempts

        Returns:
            ArtifactBundle; never raises for upstream failures
        """
        attempts_left = self.config.retry_attempts if max_attempts is None else max_attempts

        while attempts_left > 0:
            attempts_left -= 1
            listing = await self.list_artifacts(build_id, attempts_left)

            if listing is None:
                if attempts_left > 0:
                    await asyncio.sleep(self.config.retry_delay_seconds)
                continue

            # an empty listing is final for this fetch, it does not consume the remaining attempts
            if not listing:
                bt.logging.error(f'no artifacts found for {self.build_kind}: {build_id}')
                return ArtifactBundle()

            bundle = await self.collect(build_id, listing)
            if bundle.missing_names:
                bt.logging.warning(
                    f'{self.build_kind} {build_id} is missing artifacts: {", ".join(bundle.missing_names)}'
                )
            return bundle

        bt.logging.error(f'giving up on artifacts for {self.build_kind}: {build_id}, no attempts left')
        return ArtifactBundle()
