# The MIT License (MIT)
# Copyright © 2025 Entrius

import asyncio
from typing import Any, List, Optional

import bittensor as bt

from archaeologist.artifacts.base import ArtifactFetcher
from archaeologist.classes import ArtifactBundle
from archaeologist.constants import ARTIFACT_FILES
from archaeologist.utils import circleci_api_tools


class CircleArtifactFetcher(ArtifactFetcher):
    """Artifacts stored individually on a CircleCI build, matched by path suffix."""

    build_kind = 'build'

    async def list_artifacts(self, build_id: int, attempts_left: int) -> Optional[List[Any]]:
        bt.logging.info(f'fetching all artifacts for build: {build_id}')
        response = await asyncio.to_thread(
            circleci_api_tools.list_build_artifacts, self.config.repository, self.config.circle_token, build_id
        )
        if response is None or not response.ok:
            bt.logging.error(
                f'failed to fetch artifacts for build: {build_id}, backing off and retrying in a bit '
                f'({attempts_left} more attempts)'
            )
            return None
        return response.json() or []

    async def collect(self, build_id: int, listing: List[Any]) -> ArtifactBundle:
        contents = {}
        for name in ARTIFACT_FILES:
            artifact = circleci_api_tools.find_artifact(listing, name)
            if artifact is None:
                continue
            bt.logging.info(f'fetching artifact "{name}" for build: {build_id}')
            text = await asyncio.to_thread(
                circleci_api_tools.fetch_artifact_text, artifact['url'], self.config.circle_token
            )
            if text is not None:
                contents[name] = text
        return ArtifactBundle.from_contents(contents)
