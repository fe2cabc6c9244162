# The MIT License (MIT)
# Copyright © 2025 Entrius

# =============================================================================
# GitHub API
# =============================================================================
BASE_GITHUB_API_URL = "https://api.github.com"
DEFAULT_REPOSITORY = "electron/electron"

# =============================================================================
# CircleCI API
# =============================================================================
BASE_CIRCLECI_V1_URL = "https://circleci.com/api/v1.1/project/github"
BASE_CIRCLECI_V2_URL = "https://circleci.com/api/v2/project/gh"
CIRCLE_DIG_JOB = "dig"
# terminal job statuses that mean the dig never produced usable artifacts
CIRCLE_FAILED_STATUSES = ("failed", "canceled", "infrastructure_fail", "timedout")

# =============================================================================
# Checks
# =============================================================================
DEFAULT_CHECK_NAME = "Archaeologist Dig"  # upstream check we listen for
ARTIFACT_COMPARISON_CHECK_NAME = "Artifact Comparison"  # check we report
MAX_SUMMARY_BYTES = 65535

# =============================================================================
# Artifacts
# =============================================================================
NEW_DTS_ARTIFACT = "electron.new.d.ts"
OLD_DTS_ARTIFACT = "electron.old.d.ts"
DIG_SPOT_ARTIFACT = ".dig-old"
ARTIFACT_FILES = (NEW_DTS_ARTIFACT, OLD_DTS_ARTIFACT, DIG_SPOT_ARTIFACT)
TEMP_DIR_NAMESPACE = "diffing"

# =============================================================================
# Semver labels
# =============================================================================
SEMVER_PREFIX = "semver/"
SEMVER_NONE = "semver/none"
SEMVER_PATCH = "semver/patch"
SEMVER_MINOR = "semver/minor"
SEMVER_MAJOR = "semver/major"

# =============================================================================
# Retry & polling defaults
# =============================================================================
DEFAULT_RETRY_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_MS = 10_000
DEFAULT_POLL_INTERVAL_MS = 5_000
DEFAULT_ALLOWED_POLL_FAILURES = 3
HTTP_TIMEOUT_SECONDS = 30
