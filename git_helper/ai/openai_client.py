"""
OpenAI-based completion client for git-helper.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import openai
from openai import OpenAI

from ..errors import AIRequestError
from .interface import CompletionClient

LOG = logging.getLogger(__name__)


class OpenAIClient(CompletionClient):
    """
    Completion client backed by the OpenAI chat completions API.

    SDK exceptions are translated into AIRequestError so callers only
    deal with git-helper's own error types.
    """

    def __init__(self, api_key: str, client: Optional[Any] = None) -> None:
        self._client = client if client is not None else OpenAI(api_key=api_key)

    def complete(self, system_prompt: str, user_content: str, model: str) -> str:
        LOG.debug("Requesting completion from model %s (%d chars)", model, len(user_content))
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
            )
        except openai.BadRequestError as exc:
            raise AIRequestError(
                "invalid-request",
                f"the API rejected the request as invalid (check the model name): {exc}",
            ) from exc
        except openai.AuthenticationError as exc:
            raise AIRequestError(
                "authentication",
                "authentication failed; check your API key with `git-helper config set-key`",
            ) from exc
        except openai.RateLimitError as exc:
            raise AIRequestError(
                "rate-limit",
                "rate limit or quota exceeded; wait a moment or check your plan",
            ) from exc
        except openai.APIError as exc:
            raise AIRequestError("api-error", f"the API returned an error: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise AIRequestError(
                "unexpected", f"unexpected failure while contacting the API: {exc}"
            ) from exc

        if not response.choices:
            raise AIRequestError("empty-response", "the API returned no choices")
        return (response.choices[0].message.content or "").strip()
