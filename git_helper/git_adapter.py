"""
Git integration for git-helper.

Every git invocation goes through _run_git, which passes arguments as a
list so nothing is ever interpolated into a shell command line.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional

from .errors import GitError, NotARepositoryError

LOG = logging.getLogger(__name__)


def _run_git(
    args: list[str],
    cwd: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    A non-zero exit status raises GitError with the command line and
    whatever git wrote to stderr.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
        )
    except OSError as exc:
        raise GitError(f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        LOG.debug("git stderr: %s", stderr)
        message = f"git command failed: {' '.join(cmd)}"
        if stderr:
            message = f"{message}: {stderr}"
        raise GitError(message)

    return completed


def ensure_repository(cwd: Optional[str] = None) -> str:
    """
    Return the top-level directory of the enclosing work tree.

    Raises NotARepositoryError when cwd is not inside a git work tree.
    """

    try:
        completed = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    except GitError as exc:
        LOG.debug("Repository check failed: %s", exc)
        raise NotARepositoryError(
            "not inside a git repository; run this command from a git work tree"
        ) from exc
    return completed.stdout.strip()


def find_repository_root(cwd: Optional[str] = None) -> Optional[str]:
    """Like ensure_repository, but return None outside a work tree."""

    try:
        return ensure_repository(cwd)
    except NotARepositoryError:
        return None


def has_changes(cwd: Optional[str] = None) -> bool:
    """
    Return True if the work tree has staged, unstaged or untracked changes.
    """

    status = _run_git(["status", "--porcelain"], cwd=cwd).stdout
    return bool(status.strip())


def get_staged_diff(cwd: Optional[str] = None) -> str:
    return _run_git(["diff", "--cached"], cwd=cwd).stdout


def get_staged_status(cwd: Optional[str] = None) -> str:
    return _run_git(["diff", "--cached", "--name-status"], cwd=cwd).stdout


def get_unstaged_diff(cwd: Optional[str] = None) -> str:
    return _run_git(["diff"], cwd=cwd).stdout


def get_unstaged_status(cwd: Optional[str] = None) -> str:
    return _run_git(["diff", "--name-status"], cwd=cwd).stdout


def list_untracked_files(cwd: Optional[str] = None) -> List[str]:
    """
    Return paths of untracked files, honoring .gitignore.
    """

    output = _run_git(["ls-files", "--others", "--exclude-standard"], cwd=cwd).stdout
    return [line for line in output.splitlines() if line.strip()]
