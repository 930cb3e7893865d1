"""
Purpose: Rebuild, from scratch, which catalog questions the persona has
already asked, by comparing each past persona turn against the question texts.

Matching is a heuristic: generated replies paraphrase and decorate the
questions they were told to ask. Strategies sit behind the QuestionMatcher
protocol so the thresholds can be tuned or replaced by an exact variant.

Testing: Pure functions; same (catalog, transcript) always yields the same
flags.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Optional, Sequence

from ..interfaces import QuestionMatcher
from ..models import ConversationTurn, Question

logger = logging.getLogger(__name__)

_WORD = re.compile(r"[a-z0-9']+")


def _normalize(text: str) -> str:
    return " ".join((text or "").lower().split())


class ExactQuestionMatcher:
    """Equality or containment only (case-insensitive, whitespace-normalized)."""

    def matches(self, question_text: str, turn_text: str) -> bool:
        q = _normalize(question_text)
        t = _normalize(turn_text)
        if not q or not t:
            return False
        return t == q or q in t


class FuzzyQuestionMatcher(ExactQuestionMatcher):
    """Exact/containment checks plus significant-word overlap."""

    def __init__(
        self, *, word_overlap_threshold: float = 0.7, min_word_length: int = 4
    ) -> None:
        self.word_overlap_threshold = word_overlap_threshold
        self.min_word_length = min_word_length

    def significant_words(self, text: str) -> list[str]:
        return [
            w.strip("'")
            for w in _WORD.findall(_normalize(text))
            if len(w.strip("'")) >= self.min_word_length
        ]

    def word_overlap(self, question_text: str, turn_text: str) -> float:
        words = self.significant_words(question_text)
        if not words:
            return 0.0
        present = {w.strip("'") for w in _WORD.findall(_normalize(turn_text))}
        hits = sum(1 for w in words if w in present)
        return hits / len(words)

    def matches(self, question_text: str, turn_text: str) -> bool:
        if super().matches(question_text, turn_text):
            return True
        return self.word_overlap(question_text, turn_text) >= self.word_overlap_threshold


def mark_asked_questions(
    catalog: Sequence[Question],
    transcript: Sequence[ConversationTurn],
    matcher: Optional[QuestionMatcher] = None,
) -> list[Question]:
    """
    Return a copy of ``catalog`` with ``asked`` recomputed from ``transcript``.

    Each persona turn, in order, marks at most the first still-unmatched
    question it satisfies. Incoming ``asked`` flags are ignored.
    """
    matcher = matcher or FuzzyQuestionMatcher()
    asked = [False] * len(catalog)

    for turn in transcript:
        if not turn.is_persona:
            continue
        for idx, question in enumerate(catalog):
            if asked[idx]:
                continue
            if matcher.matches(question.text, turn.text):
                asked[idx] = True
                break

    has_custom = any(q.is_custom for q in catalog)
    custom_hit = any(a for a, q in zip(asked, catalog) if q.is_custom)
    if has_custom and not custom_hit:
        undone = [q.id for a, q in zip(asked, catalog) if a and not q.is_custom]
        if undone:
            logger.info(
                "Discarding default matches %s because no custom question was asked yet",
                undone,
            )
        asked = [a if q.is_custom else False for a, q in zip(asked, catalog)]

    return [replace(q, asked=a) for q, a in zip(catalog, asked)]


def build_matcher(
    kind: str = "fuzzy",
    *,
    word_overlap_threshold: float = 0.7,
    min_word_length: int = 4,
) -> QuestionMatcher:
    if kind == "exact":
        return ExactQuestionMatcher()
    if kind == "fuzzy":
        return FuzzyQuestionMatcher(
            word_overlap_threshold=word_overlap_threshold,
            min_word_length=min_word_length,
        )
    raise ValueError(f"Unsupported matcher kind: {kind!r}")
