"""
Commit-message drafting for git-helper.

The orchestration is:
  - collect the staged diff and status, falling back to unstaged changes;
  - tell "nothing to analyze" apart from "stage your files first";
  - cap the diff so request size stays bounded; and
  - ask the completion client for a single-line message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .ai.interface import CompletionClient
from .errors import AIRequestError, NothingToAnalyzeError, StageFirstError
from .git_adapter import (
    get_staged_diff,
    get_staged_status,
    get_unstaged_diff,
    get_unstaged_status,
    list_untracked_files,
)

LOG = logging.getLogger(__name__)

MAX_DIFF_CHARS = 4000
TRUNCATION_MARKER = "\n... [diff truncated]"

SYSTEM_PROMPT = (
    "You write git commit messages. Given a file status listing and a diff, "
    "reply with a single concise commit message line in the imperative mood, "
    "at most 72 characters, with no quotes, no code fences and no trailing period."
)


@dataclass
class ChangeSnapshot:
    """Diff and name-status text describing one set of pending changes."""

    diff: str
    status: str
    staged: bool

    def is_empty(self) -> bool:
        return not self.diff.strip() and not self.status.strip()


def cap_diff(diff: str, limit: int = MAX_DIFF_CHARS) -> str:
    if len(diff) <= limit:
        return diff
    LOG.info("Diff is %d characters; truncating to %d", len(diff), limit)
    return diff[:limit] + TRUNCATION_MARKER


def collect_changes(*, staged_only: bool = False, cwd: Optional[str] = None) -> ChangeSnapshot:
    """
    Return the changes a commit message should describe.

    Raises StageFirstError when only untracked files (or, with
    staged_only, only unstaged edits) are present, and
    NothingToAnalyzeError when the work tree has no changes at all.
    """

    snapshot = ChangeSnapshot(
        diff=get_staged_diff(cwd), status=get_staged_status(cwd), staged=True
    )
    if not snapshot.is_empty():
        LOG.info("Using staged changes")
        return snapshot

    unstaged = ChangeSnapshot(
        diff=get_unstaged_diff(cwd), status=get_unstaged_status(cwd), staged=False
    )
    if not unstaged.is_empty():
        if staged_only:
            raise StageFirstError(
                "no staged changes to analyze; stage your changes first (git add)"
            )
        LOG.info("No staged changes; using unstaged changes")
        return unstaged

    untracked = list_untracked_files(cwd)
    if untracked:
        raise StageFirstError(
            f"only untracked files found ({len(untracked)}); "
            "stage them first (git add) so their contents can be analyzed"
        )
    raise NothingToAnalyzeError("no changes found; nothing to analyze")


def build_user_content(snapshot: ChangeSnapshot) -> str:
    kind = "Staged" if snapshot.staged else "Unstaged"
    return (
        f"{kind} file status:\n{snapshot.status.strip()}\n\n"
        f"Diff:\n{cap_diff(snapshot.diff)}"
    )


def generate_commit_message(
    client: CompletionClient,
    model: str,
    *,
    staged_only: bool = False,
    cwd: Optional[str] = None,
) -> str:
    """
    Draft a one-line commit message for the pending changes.
    """

    snapshot = collect_changes(staged_only=staged_only, cwd=cwd)
    reply = client.complete(SYSTEM_PROMPT, build_user_content(snapshot), model)

    for line in reply.strip().splitlines():
        if line.strip():
            return line.strip()
    raise AIRequestError("empty-response", "the API returned an empty commit message")
