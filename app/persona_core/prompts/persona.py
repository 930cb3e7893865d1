"""Persona prompts: the instruction payload for the next persona turn."""

from __future__ import annotations
from textwrap import dedent
from typing import Optional, Sequence

from ..models import PersonaContext, Question
from .common import profile_block, render_question_list


def persona_intro(context: PersonaContext) -> str:
    name = (context.persona_name or "").strip() or "the investor"
    respondent = (context.respondent_name or "").strip() or "the startup founder"
    return (
        f"You are an AI simulation of the investor {name}, "
        f"interviewing {respondent} about their startup."
    )


def next_question_rules(next_question: Question) -> str:
    return dedent(
        f"""\
        CRITICAL INSTRUCTION: You MUST ask the following question EXACTLY as written:
        "{next_question.text}"
        Rules:
        - Ask that exact text, verbatim. Do not rephrase, shorten or extend it.
        - No introduction and no explanation before or after the question.
        - Do not ask any additional question.
        - Do not summarize the conversation."""
    )


def all_asked_rules() -> str:
    return dedent(
        """\
        All required questions have been asked.
        Rules:
        - Do NOT ask any question at all.
        - Briefly acknowledge the founder's last answer and thank them.
        - Keep it to one or two sentences."""
    )


def custom_priority_rules() -> str:
    return (
        "IMPORTANT: [CUSTOM] questions take ABSOLUTE PRIORITY. None of them has "
        "been asked yet. Ask [CUSTOM] questions before any [default] question."
    )


def build_persona_system(
    *,
    catalog: Sequence[Question],
    next_question: Optional[Question],
    context: PersonaContext,
    behavior_prompt: Optional[str] = None,
) -> str:
    parts = [persona_intro(context)]

    behavior = (behavior_prompt or "").strip()
    if behavior:
        parts.append(f"Persona behavior:\n{behavior}")

    parts.append(profile_block("Investor profile", context.persona_profile))
    parts.append(profile_block("Startup profile", context.respondent_profile))
    parts.append(
        "Interview questions, in the order they must be asked:\n"
        + render_question_list(catalog)
    )

    customs = [q for q in catalog if q.is_custom]
    if customs and not any(q.asked for q in customs):
        parts.append(custom_priority_rules())

    if next_question is not None:
        parts.append(next_question_rules(next_question))
    else:
        parts.append(all_asked_rules())

    return "\n\n".join(parts)
