# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Turning GitHub webhook payloads into orchestration triggers."""

from typing import Any, Dict, Optional

import bittensor as bt

from archaeologist.classes import CheckCompletedTrigger, PullRequestTrigger, Trigger
from archaeologist.config import ArchaeologistConfig

PULL_REQUEST_ACTIONS = ('opened', 'reopened', 'synchronize')


def pull_request_trigger(payload: Dict[str, Any]) -> Optional[PullRequestTrigger]:
    if payload.get('action') not in PULL_REQUEST_ACTIONS:
        return None

    pr = payload['pull_request']
    head_repo = pr['head'].get('repo') or {}
    return PullRequestTrigger(
        head_sha=pr['head']['sha'],
        base_branch=pr['base']['ref'],
        fork_remote=head_repo.get('clone_url', ''),
        labels=[label['name'] for label in pr.get('labels', [])],
        details_url=pr.get('html_url', ''),
    )


def check_completed_trigger(payload: Dict[str, Any], check_name: str) -> Optional[CheckCompletedTrigger]:
    if payload.get('action') != 'completed':
        return None

    check_run = payload['check_run']
    if check_run.get('name') != check_name:
        return None

    return CheckCompletedTrigger(
        head_sha=check_run['head_sha'],
        details_url=check_run.get('html_url') or check_run.get('url', ''),
        build_or_run_id=check_run['id'],
        build_conclusion=check_run.get('conclusion'),
    )


def trigger_from_event(event_name: str, payload: Dict[str, Any], config: ArchaeologistConfig) -> Optional[Trigger]:
    """
    Build a trigger for an incoming event.

    Args:
        event_name: GitHub event name (X-GitHub-Event / GITHUB_EVENT_NAME)
        payload: Parsed event payload
        config: Configuration, for the upstream check name to listen for

    Returns:
        The trigger, or None when the event is not one we act on
    """
    if event_name == 'pull_request':
        trigger = pull_request_trigger(payload)
    elif event_name == 'check_run':
        trigger = check_completed_trigger(payload, config.check_name)
    else:
        trigger = None

    if trigger is None:
        bt.logging.debug(f'Ignoring {event_name} event (action={payload.get("action")})')
    return trigger
