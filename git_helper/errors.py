"""
Custom exception types used across git-helper.

Defining explicit error classes lets the CLI tell user-facing failures
apart from unexpected bugs and pick the right exit code for each.
"""

from __future__ import annotations


class GitHelperError(Exception):
    """Base class for all git-helper specific errors."""


class GitError(GitHelperError):
    """Raised when a git command fails or git cannot be executed."""


class NotARepositoryError(GitHelperError):
    """Raised when a command needs a git work tree and none is found."""


class ConfigWriteError(GitHelperError):
    """Raised when a configuration file cannot be written."""


class MissingCredentialError(GitHelperError):
    """Raised when an API key is required but none is configured."""


class MissingMessageError(GitHelperError):
    """Raised when a commit is requested without a message."""


class MessageGenerationError(GitHelperError):
    """Base class for failures while drafting a commit message."""


class NothingToAnalyzeError(MessageGenerationError):
    """Raised when there are no changes at all to describe."""


class StageFirstError(MessageGenerationError):
    """Raised when changes exist but none of them can be diffed yet."""


class AIRequestError(MessageGenerationError):
    """
    Raised when the completion endpoint call fails.

    kind is one of "invalid-request", "authentication", "rate-limit",
    "api-error", "empty-response" or "unexpected".
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
