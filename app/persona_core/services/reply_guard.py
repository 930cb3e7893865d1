"""
Purpose: Force the generated persona reply back onto the script.

The generation service paraphrases, adds follow-up questions and summarizes
early. These rules run in order on its raw text:
1. Missing mandated question -> replace with the question (acknowledged).
2. Extra question after the first one -> truncate.
3. Premature summary while a question is pending -> replace with the question.
4. Script exhausted but reply still asks something -> neutral closing.

Testing: Pure string functions, no collaborator needed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..models import Question

logger = logging.getLogger(__name__)

ACKNOWLEDGMENTS: tuple[str, ...] = (
    "Thank you for sharing that.",
    "Thanks, that's helpful.",
    "Got it, thank you.",
    "Appreciate the detail.",
)

CLOSING_ACKNOWLEDGMENT = (
    "Thank you for answering all of my questions. I have what I need for now "
    "and will review our conversation."
)

_INTERROGATIVE = re.compile(
    r"(?:^|[.!:;\n]\s*)(?:and\s+|also,?\s+|so,?\s+)?"
    r"(?:what|how|why|when|where|who|whom|which|could you|can you|would you|"
    r"will you|do you|does|did you|are you|is there|have you|tell me|"
    r"walk me through|describe)\b",
    re.IGNORECASE,
)

_SUMMARY_CUES = re.compile(
    r"\b(?:in summary|to summarize|to summarise|summing up|to sum up|to recap|"
    r"in conclusion|recap of our conversation|based on our conversation)\b",
    re.IGNORECASE,
)


@dataclass
class ReplyCorrection:
    text: str
    rules_applied: list[str] = field(default_factory=list)

    @property
    def corrected(self) -> bool:
        return bool(self.rules_applied)


def looks_like_question(text: str) -> bool:
    """True for a question mark or a sentence opening with interrogative phrasing."""
    t = (text or "").strip()
    if not t:
        return False
    return "?" in t or bool(_INTERROGATIVE.search(t))


def has_summary_phrasing(text: str) -> bool:
    return bool(_SUMMARY_CUES.search(text or ""))


def acknowledgment_for(turn_count: int) -> str:
    return ACKNOWLEDGMENTS[turn_count % len(ACKNOWLEDGMENTS)]


def mandated_reply(question: Question, *, first_turn: bool, turn_count: int = 0) -> str:
    if first_turn:
        return question.text
    return f"{acknowledgment_for(turn_count)} {question.text}"


def truncate_extra_questions(text: str, mandated: Optional[str] = None) -> str:
    """
    Cut the reply after its first question when more question-like text follows.

    The mandated question is treated as one unit so question marks inside it
    do not split it.
    """
    if mandated:
        idx = text.find(mandated)
        if idx >= 0:
            end = idx + len(mandated)
            if looks_like_question(text[end:]):
                return text[:end].rstrip()
            return text
    qmark = text.find("?")
    if qmark < 0:
        return text
    if looks_like_question(text[qmark + 1:]):
        return text[: qmark + 1].rstrip()
    return text


def correct_reply(
    raw_text: Optional[str],
    *,
    next_question: Optional[Question],
    all_asked: bool,
    first_turn: bool = False,
    turn_count: int = 0,
) -> ReplyCorrection:
    """Apply the correction rules and return the final reply text."""
    text = (raw_text or "").strip()
    applied: list[str] = []

    def fallback() -> str:
        return mandated_reply(next_question, first_turn=first_turn, turn_count=turn_count)

    if next_question is not None and next_question.text not in text:
        text = fallback()
        applied.append("missing_question")

    truncated = truncate_extra_questions(
        text, next_question.text if next_question is not None else None
    )
    if truncated != text:
        text = truncated
        applied.append("extra_question")

    if next_question is not None:
        if has_summary_phrasing(text):
            text = next_question.text
            applied.append("premature_summary")
        else:
            prefix = text[: text.find(next_question.text)]
            if looks_like_question(prefix):
                text = fallback()
                applied.append("question_before_mandated")

    if all_asked and next_question is None and (not text or looks_like_question(text)):
        text = CLOSING_ACKNOWLEDGMENT
        applied.append("question_after_script")

    if applied:
        logger.info("Corrected persona reply: %s", ", ".join(applied))
    return ReplyCorrection(text=text, rules_applied=applied)
