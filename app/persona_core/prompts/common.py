"""Shared prompt helpers used across prompt modules."""

from __future__ import annotations
import json
from typing import Any, Sequence

from ..models import ConversationTurn, Question, TurnRole


def question_tag(q: Question) -> str:
    origin = "[CUSTOM]" if q.is_custom else "[default]"
    status = "(already asked)" if q.asked else "(not asked yet)"
    return f"{origin} {status}"


def render_question_list(catalog: Sequence[Question]) -> str:
    if not catalog:
        return "(no questions configured)"
    return "\n".join(
        f"{i}. {question_tag(q)} {q.text}" for i, q in enumerate(catalog, start=1)
    )


def profile_block(label: str, profile: Any, *, max_chars: int = 1500) -> str:
    if not profile:
        return f"{label}: not provided."
    try:
        rendered = json.dumps(profile, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        rendered = str(profile)
    return f"{label}:\n{_clip_text(rendered, max_chars)}"


def render_transcript(
    turns: Sequence[ConversationTurn],
    *,
    persona_label: str = "Investor",
    respondent_label: str = "Startup",
    max_chars: int = 6000,
) -> str:
    lines: list[str] = []
    for t in turns:
        content = (t.text or "").strip()
        if not content:
            continue
        label = persona_label if t.is_persona else respondent_label
        lines.append(f"{label}: {content}")
    return _clip_text("\n\n".join(lines), max_chars)


def _clip_text(s: str, max_chars: int) -> str:
    """Keep the tail of long text; the latest turns matter most."""
    if len(s) <= max_chars:
        return s
    return "…" + s[-(max_chars - 1):].lstrip()


def assemble(
    *, system: str, history: Sequence[ConversationTurn], user_text: str
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system},
        *(
            {
                "role": "user" if t.role == TurnRole.RESPONDENT else "assistant",
                "content": t.text,
            }
            for t in history
        ),
        {"role": "user", "content": user_text},
    ]
