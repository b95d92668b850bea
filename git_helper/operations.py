"""
Stage, commit, push and pull pipelines for git-helper.

Each operation is a linear list of git steps. Steps run in order and the
first failure stops the pipeline; nothing is rolled back or retried, so
the effects of earlier steps (for example staging) stay applied.

In dry-run mode no step is executed and the exact command lines are
printed instead.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import RunOptions
from .errors import GitError, MissingMessageError
from .git_adapter import _run_git, has_changes

LOG = logging.getLogger(__name__)

Output = Callable[[str], None]


@dataclass
class Step:
    """
    A single git invocation in a pipeline.

    args never pass through a shell, so a commit message is always one
    argv element regardless of the quotes or backticks it contains.
    """

    name: str
    args: List[str]
    description: str


@dataclass
class OperationResult:
    completed: List[Step] = field(default_factory=list)
    failed: Optional[Step] = None
    error: Optional[str] = None
    skipped: bool = False
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed is None

    def extend(self, other: "OperationResult") -> "OperationResult":
        self.completed.extend(other.completed)
        self.failed = other.failed
        self.error = other.error
        return self


def format_command(step: Step) -> str:
    """Render a step as a copy-pasteable shell command line."""

    return shlex.join(["git", *step.args])


def stage_step() -> Step:
    return Step(name="stage", args=["add", "-A"], description="Staging changes...")


def commit_step(message: str) -> Step:
    return Step(name="commit", args=["commit", "-m", message], description="Committing...")


def push_step(branch: str, remote: str = "origin") -> Step:
    return Step(
        name="push",
        args=["push", remote, branch],
        description=f"Pushing to {remote}/{branch}...",
    )


def push_steps(message: str, branch: str, remote: str = "origin") -> List[Step]:
    return [stage_step(), commit_step(message), push_step(branch, remote)]


def pull_steps(branch: str, remote: str = "origin") -> List[Step]:
    return [
        Step(
            name="pull",
            args=["pull", remote, branch],
            description=f"Pulling changes from {remote}/{branch}...",
        )
    ]


def run_steps(
    steps: List[Step],
    *,
    dry_run: bool = False,
    cwd: Optional[str] = None,
    out: Output = print,
) -> OperationResult:
    """
    Run steps in order, stopping at the first failure.
    """

    result = OperationResult()
    for step in steps:
        if dry_run:
            out(format_command(step))
            continue

        out(step.description)
        try:
            _run_git(step.args, cwd=cwd)
        except GitError as exc:
            LOG.info("Step %s failed: %s", step.name, exc)
            result.failed = step
            result.error = str(exc)
            return result
        result.completed.append(step)

    return result


def run_push(
    options: RunOptions,
    *,
    generate_message: Optional[Callable[[], str]] = None,
    cwd: Optional[str] = None,
    out: Output = print,
) -> OperationResult:
    """
    Stage everything, commit and push.

    When options.use_ai is set and no message was given, generate_message
    is called to draft one. On a real run the stage step goes first so
    the message describes the staged diff; a dry run drafts from the work
    tree as it is.
    """

    if not has_changes(cwd):
        out("Nothing to commit; working tree clean.")
        return OperationResult(skipped=True)

    message = options.message
    wants_ai = options.use_ai and not message
    if options.use_ai and message:
        LOG.warning("Commit message given; not generating one")
    if wants_ai and generate_message is None:
        raise MissingMessageError("message generation was requested but is not available")
    if not wants_ai and not message:
        raise MissingMessageError("a commit message is required (or pass --ai)")

    if options.dry_run:
        if wants_ai:
            message = generate_message()
            out(f"Commit message: {message}")
        result = run_steps(
            push_steps(message, options.branch, options.remote), dry_run=True, cwd=cwd, out=out
        )
        result.message = message
        return result

    if not wants_ai:
        result = run_steps(
            push_steps(message, options.branch, options.remote), cwd=cwd, out=out
        )
        result.message = message
        return result

    result = run_steps([stage_step()], cwd=cwd, out=out)
    if not result.ok:
        return result

    message = generate_message()
    out(f"Commit message: {message}")
    result.message = message
    return result.extend(
        run_steps(
            [commit_step(message), push_step(options.branch, options.remote)],
            cwd=cwd,
            out=out,
        )
    )


def run_pull(
    options: RunOptions,
    *,
    cwd: Optional[str] = None,
    out: Output = print,
) -> OperationResult:
    return run_steps(
        pull_steps(options.branch, options.remote),
        dry_run=options.dry_run,
        cwd=cwd,
        out=out,
    )
