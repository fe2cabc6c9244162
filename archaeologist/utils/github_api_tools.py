# Entrius 2025
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import bittensor as bt
import requests

from archaeologist.constants import BASE_GITHUB_API_URL, HTTP_TIMEOUT_SECONDS

# =============================================================================
# Rate Limit Configuration
# =============================================================================
RATE_LIMIT_BUFFER_SECONDS = 5  # Extra buffer time when waiting for rate limit reset
RATE_LIMIT_MIN_REMAINING = 10  # Minimum remaining requests before preemptive wait
RATE_LIMIT_MAX_WAIT_SECONDS = 900  # Maximum time to wait for rate limit reset (15 min)

SERVER_ERROR_BACKOFF_SECONDS = 2
CHECK_RUN_MAX_ATTEMPTS = 3


@dataclass
class RateLimitInfo:
    """Represents GitHub API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed per hour
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets
    used: int  # Requests used in current window

    @property
    def is_exceeded(self) -> bool:
        """Check if rate limit has been exceeded."""
        return self.remaining == 0

    @property
    def seconds_until_reset(self) -> int:
        """Calculate seconds until rate limit resets."""
        current_time = int(time.time())
        return max(0, self.reset_timestamp - current_time)

    def __str__(self) -> str:
        return f"RateLimit(remaining={self.remaining}/{self.limit}, resets_in={self.seconds_until_reset}s)"


def parse_rate_limit_headers(response: requests.Response) -> Optional[RateLimitInfo]:
    """
    Parse GitHub API rate limit information from response headers.

    Args:
        response: The HTTP response from GitHub API

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    headers = response.headers

    try:
        limit = int(headers.get('X-RateLimit-Limit', 0))
        remaining = int(headers.get('X-RateLimit-Remaining', 0))
        reset_timestamp = int(headers.get('X-RateLimit-Reset', 0))
        used = int(headers.get('X-RateLimit-Used', 0))

        if limit == 0 and reset_timestamp == 0:
            return None

        return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp, used=used)
    except (ValueError, TypeError) as e:
        bt.logging.debug(f"Could not parse rate limit headers: {e}")
        return None


def is_rate_limited(response: requests.Response) -> Tuple[bool, Optional[int]]:
    """
    Check if a response indicates rate limiting and calculate wait time.

    Args:
        response: The HTTP response from GitHub API

    Returns:
        Tuple of (is_rate_limited, seconds_to_wait)
    """
    if response.status_code not in (403, 429):
        return (False, None)

    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info and rate_limit_info.is_exceeded:
        wait_seconds = min(rate_limit_info.seconds_until_reset + RATE_LIMIT_BUFFER_SECONDS, RATE_LIMIT_MAX_WAIT_SECONDS)
        return (True, wait_seconds)

    response_text = (response.text or '').lower()
    if 'rate limit' in response_text:
        reset_header = response.headers.get('X-RateLimit-Reset')
        if reset_header:
            try:
                reset_time = int(reset_header)
                wait_seconds = min(
                    max(0, reset_time - int(time.time())) + RATE_LIMIT_BUFFER_SECONDS,
                    RATE_LIMIT_MAX_WAIT_SECONDS,
                )
                return (True, wait_seconds)
            except ValueError:
                pass
        return (True, 60)

    return (False, None)


def check_preemptive_rate_limit(response: requests.Response) -> None:
    """
    Check if we're approaching rate limit and log a warning.

    Args:
        response: The HTTP response from GitHub API
    """
    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info:
        if rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
            bt.logging.warning(f"Approaching GitHub API rate limit: {rate_limit_info}")
        elif rate_limit_info.remaining <= rate_limit_info.limit * 0.1:
            bt.logging.info(f"GitHub API rate limit status: {rate_limit_info.used} used, {rate_limit_info}")


def wait_for_rate_limit_reset(wait_seconds: int, context: str = "") -> None:
    """
    Wait for rate limit to reset with progress logging.

    Args:
        wait_seconds: Number of seconds to wait
        context: Optional context string for logging (e.g., "check run update")
    """
    context_str = f" for {context}" if context else ""
    bt.logging.warning(f"GitHub API rate limit exceeded{context_str}. Waiting {wait_seconds}s for reset...")

    if wait_seconds <= 60:
        time.sleep(wait_seconds)
    else:
        intervals = wait_seconds // 60
        remaining = wait_seconds % 60

        for i in range(intervals):
            time.sleep(60)
            elapsed = (i + 1) * 60
            bt.logging.info(f"Rate limit wait: {elapsed}s elapsed, {wait_seconds - elapsed}s remaining")

        if remaining > 0:
            time.sleep(remaining)

    bt.logging.info("Rate limit wait complete, resuming API requests")


def make_headers(token: str) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a token.

    Args:
        token (str): GitHub token (PAT or app installation token)
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }


def format_timestamp(moment: datetime) -> str:
    """Render a datetime the way the checks API expects (ISO 8601, UTC, Z suffix)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def github_request(
    method: str,
    path: str,
    token: str,
    max_attempts: int = 1,
    context: str = "",
    **kwargs: Any,
) -> Optional[requests.Response]:
    """
    Send one GitHub REST request, retrying transport errors, 5xx and rate limits.

    Any other status is handed back to the caller untouched so it can decide
    whether the attempt counts as a failure.

    Args:
        method: HTTP method
        path: API path starting with '/'
        token: GitHub token
        max_attempts: Attempts before giving up
        context: Short description used in log lines
        **kwargs: Passed through to requests.request (json, params, ...)

    Returns:
        The last response received, or None if every attempt raised
    """
    url = f'{BASE_GITHUB_API_URL}{path}'
    headers = make_headers(token)
    context = context or f'{method} {path}'
    response: Optional[requests.Response] = None

    for attempt in range(max_attempts):
        try:
            response = requests.request(method, url, headers=headers, timeout=HTTP_TIMEOUT_SECONDS, **kwargs)
        except requests.exceptions.RequestException as e:
            bt.logging.warning(f"GitHub request failed for {context} (attempt {attempt + 1}/{max_attempts}): {e}")
            if attempt < max_attempts - 1:
                time.sleep(SERVER_ERROR_BACKOFF_SECONDS)
            continue

        rate_limited, wait_seconds = is_rate_limited(response)
        if rate_limited and wait_seconds:
            if attempt < max_attempts - 1:
                wait_for_rate_limit_reset(wait_seconds, context=context)
                continue
            bt.logging.error(f"Rate limit exceeded on final attempt for {context}")
            return response

        if response.status_code >= 500 and attempt < max_attempts - 1:
            backoff = SERVER_ERROR_BACKOFF_SECONDS * (attempt + 1)
            bt.logging.warning(
                f"GitHub returned {response.status_code} for {context}, retrying in {backoff}s "
                f"(attempt {attempt + 1}/{max_attempts})"
            )
            time.sleep(backoff)
            continue

        if response.ok:
            check_preemptive_rate_limit(response)
        return response

    return response


# =============================================================================
# Checks API
# =============================================================================


def create_check_run(
    repository: str,
    token: str,
    name: str,
    head_sha: str,
    details_url: str,
    started_at: datetime,
) -> Optional[Dict[str, Any]]:
    """
    Create an in-progress check run on a commit.

    Args:
        repository (str): Repository in format 'owner/repo'
        token (str): GitHub token
        name (str): Check name shown on the commit
        head_sha (str): Commit the check is attached to
        details_url (str): Link shown next to the check
        started_at (datetime): Start time recorded on the check

    Returns:
        Parsed check run JSON, or None if it could not be created
    """
    payload = {
        'name': name,
        'head_sha': head_sha,
        'status': 'in_progress',
        'started_at': format_timestamp(started_at),
    }
    if details_url:
        payload['details_url'] = details_url

    response = github_request(
        'POST',
        f'/repos/{repository}/check-runs',
        token,
        max_attempts=CHECK_RUN_MAX_ATTEMPTS,
        context=f'create check "{name}" on {head_sha[:8]}',
        json=payload,
    )
    if response is None or response.status_code not in (200, 201):
        status = response.status_code if response is not None else 'no response'
        bt.logging.error(f"Failed to create check run '{name}' for {head_sha}: {status}")
        return None
    return response.json()


def update_check_run(
    repository: str,
    token: str,
    check_run_id: int,
    conclusion: str,
    started_at: datetime,
    completed_at: datetime,
    title: str,
    summary: str,
) -> bool:
    """
    Conclude a check run.

    Args:
        repository (str): Repository in format 'owner/repo'
        token (str): GitHub token
        check_run_id (int): Id returned when the check was created
        conclusion (str): success, failure or neutral
        started_at (datetime): Original start time, preserved so the duration is accurate
        completed_at (datetime): Time the decision was made
        title (str): Output title
        summary (str): Output summary (markdown)

    Returns:
        bool: True if GitHub acknowledged the update
    """
    payload = {
        'conclusion': conclusion,
        'started_at': format_timestamp(started_at),
        'completed_at': format_timestamp(completed_at),
        'output': {'title': title, 'summary': summary},
    }
    response = github_request(
        'PATCH',
        f'/repos/{repository}/check-runs/{check_run_id}',
        token,
        max_attempts=CHECK_RUN_MAX_ATTEMPTS,
        context=f'update check {check_run_id}',
        json=payload,
    )
    if response is None or response.status_code != 200:
        status = response.status_code if response is not None else 'no response'
        bt.logging.error(f"Failed to update check run {check_run_id}: {status}")
        return False
    return True


# =============================================================================
# Actions API
# =============================================================================


def get_workflow_job(repository: str, job_id: int, token: str) -> Optional[requests.Response]:
    """Fetch a workflow job. A check run id reported by Actions is the job id."""
    return github_request('GET', f'/repos/{repository}/actions/jobs/{job_id}', token, context=f'job {job_id}')


def list_workflow_run_artifacts(repository: str, run_id: int, token: str) -> Optional[requests.Response]:
    """List the artifacts uploaded by a workflow run."""
    return github_request(
        'GET', f'/repos/{repository}/actions/runs/{run_id}/artifacts', token, context=f'artifacts for run {run_id}'
    )


def download_artifact(repository: str, artifact_id: int, token: str) -> Optional[bytes]:
    """
    Download one workflow artifact as a zip archive.

    Args:
        repository (str): Repository in format 'owner/repo'
        artifact_id (int): Artifact id from the run listing
        token (str): GitHub token

    Returns:
        Raw zip bytes, or None on failure
    """
    response = github_request(
        'GET',
        f'/repos/{repository}/actions/artifacts/{artifact_id}/zip',
        token,
        context=f'artifact {artifact_id}',
    )
    if response is None or response.status_code != 200:
        status = response.status_code if response is not None else 'no response'
        bt.logging.error(f"Failed to download artifact {artifact_id}: {status}")
        return None
    return response.content
