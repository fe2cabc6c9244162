# Entrius 2025
from typing import Any, Dict, List, Optional

import bittensor as bt
import requests

from archaeologist.constants import (
    BASE_CIRCLECI_V1_URL,
    BASE_CIRCLECI_V2_URL,
    CIRCLE_DIG_JOB,
    HTTP_TIMEOUT_SECONDS,
)


def make_headers(token: str) -> Dict[str, str]:
    return {
        'Circle-Token': token,
        'Accept': 'application/json',
    }


def parse_build_number(build_url: str) -> Optional[int]:
    """Pull the trailing build number out of a CircleCI build_url."""
    tail = build_url.rstrip('/').split('/')[-1] if build_url else ''
    try:
        return int(tail)
    except ValueError:
        return None


def trigger_dig_build(
    repository: str,
    token: str,
    dig_spot: str,
    base_branch: str,
    additional_remote: str,
) -> Optional[int]:
    """
    Ask CircleCI to run the dig job for a commit.

    Args:
        repository (str): Project slug in format 'owner/repo'
        token (str): CircleCI token
        dig_spot (str): Commit to dig at
        base_branch (str): Branch the PR targets, used as the "old" side
        additional_remote (str): Clone URL of the fork the commit lives on

    Returns:
        Optional[int]: Build number of the triggered job, or None on failure
    """
    bt.logging.info(f"Triggering CircleCI to run dig for target: {dig_spot}")
    build_request = {
        'build_parameters': {
            'DIG_SPOT': dig_spot,
            'CIRCLE_JOB': CIRCLE_DIG_JOB,
            'BASE_BRANCH': base_branch,
            'ADDITIONAL_REMOTE': additional_remote,
        }
    }

    try:
        response = requests.post(
            f'{BASE_CIRCLECI_V1_URL}/{repository}/tree/master',
            headers={**make_headers(token), 'Content-Type': 'application/json'},
            json=build_request,
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        bt.logging.error(f"Failed to trigger CircleCI dig for {dig_spot}: {e}")
        return None

    if not response.ok:
        bt.logging.error(f"CircleCI refused dig for {dig_spot}: status {response.status_code}")
        return None

    build_number = parse_build_number(response.json().get('build_url', ''))
    if build_number is None:
        bt.logging.error(f"CircleCI response for {dig_spot} did not include a usable build_url")
    return build_number


def get_job(repository: str, token: str, build_number: int) -> Dict[str, Any]:
    """
    Fetch the v2 job record for a build.

    Raises:
        requests.exceptions.RequestException: on transport errors and non-2xx responses
    """
    response = requests.get(
        f'{BASE_CIRCLECI_V2_URL}/{repository}/job/{build_number}',
        headers=make_headers(token),
        timeout=HTTP_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return response.json()


def list_build_artifacts(repository: str, token: str, build_number: int) -> Optional[requests.Response]:
    """List artifacts for a build. Returns None when the request itself fails."""
    try:
        return requests.get(
            f'{BASE_CIRCLECI_V1_URL}/{repository}/{build_number}/artifacts',
            headers=make_headers(token),
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        bt.logging.warning(f"Could not list artifacts for build {build_number}: {e}")
        return None


def find_artifact(artifact_list: List[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    """Return the first listed artifact whose path ends with name."""
    for artifact in artifact_list:
        if str(artifact.get('path', '')).endswith(name):
            return artifact
    return None


def fetch_artifact_text(url: str, token: str) -> Optional[str]:
    """Download a single artifact's contents as text."""
    try:
        response = requests.get(url, headers=make_headers(token), timeout=HTTP_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
        bt.logging.warning(f"Could not download artifact {url}: {e}")
        return None
    if not response.ok:
        bt.logging.warning(f"Could not download artifact {url}: status {response.status_code}")
        return None
    return response.text
