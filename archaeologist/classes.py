# The MIT License (MIT)
# Copyright © 2025 Entrius

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from archaeologist.constants import (
    ARTIFACT_FILES,
    DIG_SPOT_ARTIFACT,
    NEW_DTS_ARTIFACT,
    OLD_DTS_ARTIFACT,
    SEMVER_MAJOR,
    SEMVER_MINOR,
    SEMVER_NONE,
    SEMVER_PATCH,
)


class CheckConclusion(Enum):
    """State of an external check run"""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"


class SemverLabel(Enum):
    """Semver impact declared on a pull request through its labels"""

    NONE = SEMVER_NONE
    PATCH = SEMVER_PATCH
    MINOR = SEMVER_MINOR
    MAJOR = SEMVER_MAJOR

    @classmethod
    def from_label(cls, name: Optional[str]) -> Optional['SemverLabel']:
        """Map a label name to a known semver label, or None when it is not one we recognize."""
        for label in cls:
            if label.value == name:
                return label
        return None

    @property
    def declares_impact(self) -> bool:
        return self is not SemverLabel.NONE


class BuildStatus(Enum):
    """Upstream CI build state as seen by the poller"""

    PASSED = "passed"
    FAILED = "failed"
    RUNNING = "running"


@dataclass(frozen=True)
class CheckStatus:
    """One row of the label policy: what the check concludes and what it says."""

    conclusion: CheckConclusion
    title: str
    summary: str


@dataclass(frozen=True)
class ArtifactBundle:
    """Result of a single artifact fetch.

    Every name in ARTIFACT_FILES is either resolved into its field or listed in
    missing_names, never both.
    """

    missing_names: Tuple[str, ...] = ARTIFACT_FILES
    new_document: Optional[str] = None
    old_document: Optional[str] = None
    dig_spot_marker: Optional[str] = None

    @classmethod
    def from_contents(cls, contents: Dict[str, str]) -> 'ArtifactBundle':
        """Build a bundle from a mapping of artifact file name to its text."""
        missing = tuple(name for name in ARTIFACT_FILES if contents.get(name) is None)
        dig_spot = contents.get(DIG_SPOT_ARTIFACT)
        return cls(
            missing_names=missing,
            new_document=contents.get(NEW_DTS_ARTIFACT),
            old_document=contents.get(OLD_DTS_ARTIFACT),
            dig_spot_marker=dig_spot.strip() if dig_spot is not None else None,
        )

    @property
    def is_complete(self) -> bool:
        return not self.missing_names


@dataclass
class CheckRun:
    """Local mirror of an external check run"""

    id: int
    name: str
    head_sha: str
    started_at: datetime
    details_url: str = ""
    conclusion: CheckConclusion = CheckConclusion.PENDING
    title: str = ""
    summary: str = ""
    completed_at: Optional[datetime] = None

    @property
    def is_concluded(self) -> bool:
        return self.conclusion is not CheckConclusion.PENDING

    @property
    def elapsed_seconds(self) -> float:
        end = self.completed_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()

    def __str__(self) -> str:
        return f"CheckRun(id={self.id}, sha={self.head_sha[:8]}, conclusion={self.conclusion.value})"


@dataclass(frozen=True)
class PullRequestTrigger:
    """A pull request was opened, reopened or synchronized; we trigger the dig ourselves."""

    head_sha: str
    base_branch: str
    fork_remote: str
    labels: List[str] = field(default_factory=list)
    details_url: str = ""


@dataclass(frozen=True)
class CheckCompletedTrigger:
    """Some other infrastructure already ran the dig and reported it as a check run."""

    head_sha: str
    details_url: str
    build_or_run_id: int
    build_conclusion: Optional[str] = "success"


Trigger = Union[PullRequestTrigger, CheckCompletedTrigger]
