"""
Purpose: Thin client wrapper around OpenAI chat completions.
One place for auth, model options, response/usage normalization.

Collaborator calls are single-shot: a failed call surfaces as
CollaboratorFailure and is never retried here.

Testing: Mock SDK calls; assert it maps usage and errors correctly.
"""

from __future__ import annotations
import logging
from typing import Optional

from openai import APIError, OpenAI, OpenAIError

from ..errors import CollaboratorFailure, ConfigurationError
from ..models import LLMSettings

logger = logging.getLogger(__name__)


class OpenAILLMClient:
    def __init__(self, api_key: Optional[str], *, client=None):
        self.api_key = api_key
        if not self.api_key:
            raise ConfigurationError(
                "OpenAI API key is missing. Please set the OPENAI_API_KEY "
                "environment variable."
            )
        if client is not None:
            self.client = client
            return
        try:
            self.client = OpenAI(api_key=self.api_key)
        except OpenAIError as e:
            raise ConfigurationError(f"Failed to initialize OpenAI client: {e}") from e

    def chat(
        self,
        messages: list[dict[str, str]],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]:
        payload = []
        if system:
            payload.append({"role": "system", "content": system})
        payload.extend(messages)

        try:
            cc = self.client.chat.completions.create(
                model=settings.model,
                messages=payload,
                temperature=settings.temperature,
                top_p=settings.top_p,
                max_tokens=settings.max_tokens,
                frequency_penalty=settings.frequency_penalty,
                presence_penalty=settings.presence_penalty,
            )
        except APIError as e:
            logger.warning("OpenAI API error for model %s: %s", settings.model, e)
            raise CollaboratorFailure(f"OpenAI API error: {e}") from e
        except OpenAIError as e:
            raise CollaboratorFailure(f"OpenAI request failed: {e}") from e

        choices = getattr(cc, "choices", None) or []
        text = choices[0].message.content if choices else None
        if not text:
            raise CollaboratorFailure("OpenAI returned an empty completion.")
        usage = getattr(cc, "usage", None)
        tokens_in = getattr(usage, "prompt_tokens", 0) if usage else 0
        tokens_out = getattr(usage, "completion_tokens", 0) if usage else 0
        return text, {
            "model": getattr(cc, "model", settings.model),
            "tokens_in": tokens_in or 0,
            "tokens_out": tokens_out or 0,
            "raw": cc,
        }
