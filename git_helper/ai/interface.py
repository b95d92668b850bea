"""
Abstract interface for text-completion backends used by git-helper.

Keeping this separate from any specific provider lets the message
orchestration be exercised with a fake client and keeps the SDK import
out of code paths that never talk to a model.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CompletionClient(ABC):
    """
    Abstract interface for AI interactions.
    """

    @abstractmethod
    def complete(self, system_prompt: str, user_content: str, model: str) -> str:
        """
        Send a system instruction and user content to the given model and
        return the text of the first reply.

        Implementations raise AIRequestError for every failure, with a
        kind describing the cause.
        """
