# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Semver label policy.

A change to the generated API surface must be acknowledged with a
semver/patch, semver/minor or semver/major label; a PR that does not change it
must not claim an impact.
"""

from typing import Iterable, Optional

from archaeologist.classes import CheckConclusion, CheckStatus, SemverLabel
from archaeologist.constants import SEMVER_PREFIX

VALID_NO_CHANGES = CheckStatus(
    conclusion=CheckConclusion.SUCCESS,
    title='No Changes',
    summary="We couldn't see any changes in the `electron.d.ts` artifact",
)
INVALID_NO_CHANGES = CheckStatus(
    conclusion=CheckConclusion.FAILURE,
    title='Label Mismatch with No Changes',
    summary="No changes detected despite the presence of a 'semver/patch', 'semver/minor' or 'semver/major' label.",
)
VALID_CHANGES = CheckStatus(
    conclusion=CheckConclusion.NEUTRAL,
    title='Changes Detected',
    summary='',
)
INVALID_CHANGES = CheckStatus(
    conclusion=CheckConclusion.FAILURE,
    title='Label Mismatch with Changes Detected',
    summary="Changes detected, but the PR is labeled 'semver/none' or has no semver label.",
)

CHECK_STATUSES = {
    'validNoChanges': VALID_NO_CHANGES,
    'invalidNoChanges': INVALID_NO_CHANGES,
    'validChanges': VALID_CHANGES,
    'invalidChanges': INVALID_CHANGES,
}


def get_semver_label(labels: Iterable[str]) -> Optional[str]:
    """First label carrying the semver prefix, in the order the PR reports them."""
    for name in labels:
        if name.startswith(SEMVER_PREFIX):
            return name
    return None


def classify_labels(labels: Iterable[str]) -> Optional[SemverLabel]:
    """Resolve the declared semver impact. An unknown semver/* label counts as no label."""
    return SemverLabel.from_label(get_semver_label(labels))


def get_check_status(labels: Iterable[str], has_changes: bool) -> CheckStatus:
    """
    Pick the check outcome for a PR.

    Args:
        labels: Label names attached to the pull request
        has_changes: Whether the normalized documents differ

    Returns:
        One of the four fixed CheckStatus records
    """
    semver_label = classify_labels(labels)
    declares_impact = semver_label is not None and semver_label.declares_impact

    if has_changes:
        return VALID_CHANGES if declares_impact else INVALID_CHANGES
    return INVALID_NO_CHANGES if declares_impact else VALID_NO_CHANGES
