"""
Purpose: Guardrails for the inbound respondent message.
Content: early, predictable failures; prevent empty or oversized turns from
reaching the generation service.
"""

import logging

from ..errors import InputRejected

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 8000


class DefaultSecurity:
    def sanitize_for_prompt(self, text: str) -> str:
        return (text or "").replace("\x00", "").strip()

    def validate_user_input(self, text: str) -> str:
        """Return the usable message, clipped to MAX_INPUT_CHARS."""
        text = self.sanitize_for_prompt(text)
        if not text:
            raise InputRejected("Please enter a non-empty message.")
        if len(text) > MAX_INPUT_CHARS:
            logger.warning(
                "Clipping respondent message from %d to %d characters",
                len(text),
                MAX_INPUT_CHARS,
            )
            text = text[:MAX_INPUT_CHARS]
        return text
