"""
Question Catalog Builder.

Merges investor-authored custom questions with the standard default set into
one ordered catalog: every custom question comes before every default one.
Malformed custom entries are filtered out and logged, never surfaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from .models import Question, QuestionOrigin, RejectedEntry, ValidCustomQuestion

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONS: tuple[str, ...] = (
    "Tell me about your business model?",
    "What traction do you have so far?",
    "Who are your competitors and how do you differentiate?",
    "What's your go-to-market strategy?",
    "Tell me about your team background?",
)


@dataclass(frozen=True)
class CatalogBuild:
    questions: tuple[Question, ...]
    accepted: tuple[ValidCustomQuestion, ...]
    rejected: tuple[RejectedEntry, ...]

    @property
    def custom_questions(self) -> tuple[Question, ...]:
        return tuple(q for q in self.questions if q.is_custom)

    @property
    def default_questions(self) -> tuple[Question, ...]:
        return tuple(q for q in self.questions if not q.is_custom)


def validate_custom_questions(
    records: Optional[Iterable[Any]],
) -> tuple[list[ValidCustomQuestion], list[RejectedEntry]]:
    """Split caller-supplied records into usable questions and rejected entries."""
    accepted: list[ValidCustomQuestion] = []
    rejected: list[RejectedEntry] = []
    seen_ids: set[str] = set()

    for idx, raw in enumerate(records or []):
        if not isinstance(raw, dict):
            rejected.append(RejectedEntry(idx, "not an object", raw))
            continue
        if raw.get("enabled") is False:
            rejected.append(RejectedEntry(idx, "disabled", raw))
            continue
        text = raw.get("question")
        if not isinstance(text, str):
            rejected.append(RejectedEntry(idx, "missing question text", raw))
            continue
        text = text.strip()
        if not text:
            rejected.append(RejectedEntry(idx, "empty question text", raw))
            continue

        qid = str(raw.get("id") or "").strip() or f"custom-{idx}"
        if qid in seen_ids:
            unique = _dedupe_id(qid, seen_ids)
            logger.warning(
                "Duplicate custom question id %r at index %d; using %r", qid, idx, unique
            )
            qid = unique
        seen_ids.add(qid)
        accepted.append(ValidCustomQuestion(id=qid, text=text))

    for entry in rejected:
        logger.warning(
            "Discarding custom question at index %d: %s", entry.index, entry.reason
        )
    return accepted, rejected


def _dedupe_id(qid: str, taken: set[str]) -> str:
    n = 2
    while f"{qid}-{n}" in taken:
        n += 1
    return f"{qid}-{n}"


def build_catalog(
    custom_records: Optional[Iterable[Any]] = None,
    default_texts: Sequence[str] = DEFAULT_QUESTIONS,
) -> CatalogBuild:
    """Return ``[...valid custom, ...defaults]`` with every ``asked`` flag cleared."""
    accepted, rejected = validate_custom_questions(custom_records)
    questions: list[Question] = [
        Question(id=c.id, text=c.text, origin=QuestionOrigin.CUSTOM) for c in accepted
    ]
    taken = {q.id for q in questions}
    for idx, text in enumerate(default_texts):
        qid = f"default-{idx}"
        if qid in taken:
            qid = _dedupe_id(qid, taken)
        taken.add(qid)
        questions.append(Question(id=qid, text=text, origin=QuestionOrigin.DEFAULT))

    if not accepted:
        logger.debug("No custom questions configured; using defaults only")
    return CatalogBuild(
        questions=tuple(questions),
        accepted=tuple(accepted),
        rejected=tuple(rejected),
    )
