"""
Purpose: Ask the scoring service how well the startup fits the investor once
every scripted question has been asked, and parse its JSON verdict.

A failed call or an unparseable reply never blocks the conversation: the
caller gets ``(None, meta)`` and the reply goes out without a score.

Testing: Fake LLMClient returning canned JSON / prose / raising.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..errors import CollaboratorFailure, ParseFailure
from ..interfaces import LLMClient, PromptFactory
from ..models import ConversationTurn, LLMSettings, MatchScore, PersonaContext
from ..utils.llm_json import require_object

logger = logging.getLogger(__name__)


def required_turns(catalog_size: int) -> int:
    """Minimum transcript length before the script can count as complete."""
    return max(0, 2 * catalog_size - 1)


def is_script_complete(
    *, asked_flags: Sequence[bool], transcript_length: int
) -> bool:
    return all(asked_flags) and transcript_length >= required_turns(len(asked_flags))


def previous_transcript(
    transcript: Sequence[ConversationTurn],
) -> Optional[list[ConversationTurn]]:
    """The transcript as the previous call saw it, or None for the first reply.

    Drops the last persona turn along with whatever follows it, and the
    respondent message that prompted it.
    """
    for idx in range(len(transcript) - 1, -1, -1):
        if transcript[idx].is_persona:
            break
    else:
        return None
    prior = list(transcript[:idx])
    if prior and not prior[-1].is_persona:
        prior.pop()
    return prior


def parse_match_score(text: str) -> MatchScore:
    """Parse ``{"score": number, "summary": str}``; raise ParseFailure otherwise."""
    obj = require_object(text, err="Scoring reply is not a JSON object.")
    raw_score = obj.get("score")
    if isinstance(raw_score, bool):
        raise ParseFailure("Scoring reply has a boolean score.")
    try:
        score = float(raw_score)
    except (TypeError, ValueError) as e:
        raise ParseFailure(f"Scoring reply has a non-numeric score: {raw_score!r}") from e
    if score != score:
        raise ParseFailure("Scoring reply score is NaN.")
    score = max(0.0, min(100.0, score))
    summary = obj.get("summary")
    summary = summary.strip() if isinstance(summary, str) else ""
    return MatchScore(score=score, summary=summary)


def score_match_llm(
    *,
    llm: LLMClient,
    prompts: PromptFactory,
    settings: LLMSettings,
    context: PersonaContext,
    transcript: Sequence[ConversationTurn],
) -> tuple[Optional[MatchScore], dict]:
    """Return (MatchScore or None, meta) for the full conversation."""
    messages = [
        {"role": "system", "content": prompts.build_scoring_system()},
        {
            "role": "user",
            "content": prompts.scoring_instruction(context=context, transcript=transcript),
        },
    ]
    try:
        text, meta = llm.chat(messages, settings)
    except CollaboratorFailure as e:
        logger.warning("Match scoring call failed: %s", e)
        return None, {}

    try:
        return parse_match_score(text), meta
    except ParseFailure as e:
        logger.warning("Error parsing match score: %s", e)
        return None, meta
