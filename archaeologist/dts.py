# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Helpers for the generated electron.d.ts documents: stripping the version banner,
rendering a diff between two versions and keeping the rendered report under the
checks API output limit.
"""

import os
import re
import subprocess

from archaeologist.constants import MAX_SUMMARY_BYTES, NEW_DTS_ARTIFACT, OLD_DTS_ARTIFACT
from archaeologist.utils.tmp import temp_dir

# A whole line carrying the generator's version stamp, including its line break.
VERSION_BANNER = re.compile(r'^[^\n]*Type definitions for Electron [^\n]+(?:\n|$)', re.MULTILINE)

# git prints "diff --git ..." and "index ..." before the ---/+++ lines
DIFF_PREAMBLE_LINES = 2

CHANGED_SUMMARY = "Looks like the `electron.d.ts` file changed."
TOO_LARGE_SUMMARY = (
    "Looks like the `electron.d.ts` file changed, but the diff is too large to display here. "
    "See artifacts on the CI build."
)


class DiffGenerationError(Exception):
    """git could not produce a diff between the two documents."""


def strip_version(document: str) -> str:
    """Remove every version banner line, leaving all other lines in order."""
    return VERSION_BANNER.sub('', document)


def render_patch(old_document: str, new_document: str) -> str:
    """
    Produce a unified diff from old_document to new_document without git's file header.

    Args:
        old_document: Normalized contents of electron.old.d.ts
        new_document: Normalized contents of electron.new.d.ts

    Returns:
        The patch text, starting at the ---/+++ lines

    Raises:
        DiffGenerationError: if git exits with an error status
    """
    with temp_dir() as scratch:
        with open(os.path.join(scratch, OLD_DTS_ARTIFACT), 'w', encoding='utf-8') as f:
            f.write(old_document)
        with open(os.path.join(scratch, NEW_DTS_ARTIFACT), 'w', encoding='utf-8') as f:
            f.write(new_document)

        # exit status 1 just means the files differ
        result = subprocess.run(
            ['git', 'diff', '--no-index', '--no-color', OLD_DTS_ARTIFACT, NEW_DTS_ARTIFACT],
            cwd=scratch,
            capture_output=True,
            text=True,
            encoding='utf-8',
        )

    if result.returncode not in (0, 1):
        raise DiffGenerationError(f'git diff exited with {result.returncode}: {result.stderr.strip()}')

    return '\n'.join(result.stdout.split('\n')[DIFF_PREAMBLE_LINES:])


def render_changes_report(patch: str, preface: str = '') -> str:
    """Wrap a patch in a fenced diff block, optionally preceded by a policy message."""
    body = f"{CHANGED_SUMMARY}\n\n``````diff\n{patch}\n``````"
    return f"{preface}\n\n{body}" if preface else body


def fit_summary(summary: str, fallback: str = TOO_LARGE_SUMMARY, preface: str = '') -> str:
    """
    Return summary unchanged if it fits in the checks API output limit, otherwise
    the fallback message. The diff is never truncated.
    """
    if len(summary.encode('utf-8')) <= MAX_SUMMARY_BYTES:
        return summary
    return f"{preface}\n\n{fallback}" if preface else fallback
