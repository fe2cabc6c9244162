# The MIT License (MIT)
# Copyright © 2025 Entrius

import asyncio
import os
import zipfile
from typing import Any, Dict, List, Optional

import bittensor as bt

from archaeologist.artifacts.base import ArtifactFetcher
from archaeologist.classes import ArtifactBundle
from archaeologist.constants import ARTIFACT_FILES
from archaeologist.utils import github_api_tools
from archaeologist.utils.tmp import temp_dir

ARCHIVE_NAME = 'artifacts.zip'


def _is_ok(response) -> bool:
    return response is not None and response.status_code == 200


def read_artifact_files(directory: str, build_id: Optional[int] = None) -> Dict[str, str]:
    """
    Read every expected artifact that is present directly inside directory.

    Entries that are not regular files, or cannot be read as utf-8 text, are
    left out so the bundle reports them as missing.
    """
    contents = {}
    for name in sorted(os.listdir(directory)):
        if name not in ARTIFACT_FILES:
            continue
        path = os.path.join(directory, name)
        if not os.path.isfile(path):
            bt.logging.error(f'artifact "{name}" for job: {build_id} is not a regular file')
            continue
        try:
            with open(path, encoding='utf-8') as f:
                contents[name] = f.read()
        except (UnicodeDecodeError, OSError) as e:
            bt.logging.error(f'could not read artifact "{name}" for job: {build_id}: {e}')
    return contents


class GHAArtifactFetcher(ArtifactFetcher):
    """
    Artifacts uploaded by a GitHub Actions job.

    The id we get from a completed check run is the job id; the job points at
    its workflow run, and the run's first artifact is a zip holding the files.
    """

    build_kind = 'job'

    async def list_artifacts(self, build_id: int, attempts_left: int) -> Optional[List[Any]]:
        repository, token = self.config.repository, self.config.api_token

        job = await asyncio.to_thread(github_api_tools.get_workflow_job, repository, build_id, token)
        if not _is_ok(job):
            bt.logging.error(
                f'failed to fetch job: {build_id}, backing off and retrying in a bit ({attempts_left} more attempts)'
            )
            return None

        run_id = job.json().get('run_id')
        bt.logging.info(f'fetching all artifacts for run: {run_id} (job {build_id})')

        listing = await asyncio.to_thread(github_api_tools.list_workflow_run_artifacts, repository, run_id, token)
        if not _is_ok(listing):
            bt.logging.error(
                f'failed to fetch artifacts for run: {run_id}, backing off and retrying in a bit '
                f'({attempts_left} more attempts)'
            )
            return None

        return listing.json().get('artifacts') or []

    async def collect(self, build_id: int, listing: List[Any]) -> ArtifactBundle:
        return await asyncio.to_thread(self._download_and_extract, build_id, listing[0]['id'])

    def _download_and_extract(self, build_id: int, artifact_id: int) -> ArtifactBundle:
        bt.logging.info(f'downloading artifact {artifact_id} for job: {build_id}')
        zip_data = github_api_tools.download_artifact(self.config.repository, artifact_id, self.config.api_token)
        if zip_data is None:
            return ArtifactBundle()

        with temp_dir() as scratch:
            archive_path = os.path.join(scratch, ARCHIVE_NAME)
            with open(archive_path, 'wb') as f:
                f.write(zip_data)

            try:
                with zipfile.ZipFile(archive_path) as archive:
                    archive.extractall(scratch)
            except zipfile.BadZipFile as e:
                bt.logging.error(f'artifact {artifact_id} for job {build_id} is not a valid zip: {e}')
                return ArtifactBundle()

            return ArtifactBundle.from_contents(read_artifact_files(scratch, build_id))
