"""Match scoring prompts: startup-investor fit once the script is exhausted."""

from __future__ import annotations
from textwrap import dedent
from typing import Sequence

from ..models import ConversationTurn, PersonaContext
from .common import profile_block, render_transcript


def build_scoring_system() -> str:
    return (
        "You are an AI that evaluates startup-investor fit based on "
        "conversations. Output only JSON."
    )


def scoring_instruction(
    *, context: PersonaContext, transcript: Sequence[ConversationTurn]
) -> str:
    investor = profile_block(
        "Investor profile",
        context.persona_profile or "General investor with no specific preferences",
    )
    startup = profile_block(
        "Startup information",
        context.respondent_profile or "Information gathered only from conversation",
    )
    convo = render_transcript(transcript) or "(empty conversation)"
    return dedent(
        """\
        Based on the conversation between the startup and the investor, evaluate
        how well the startup matches the investor's preferences.

        {investor}

        {startup}

        Conversation:
        {convo}

        Provide:
        1. A match score from 0-100 where 100 is a perfect match
        2. A 2-3 sentence summary of why the startup might be interesting to this investor
        Output ONLY this JSON object (no code fences, no commentary):
        {{"score": <number 0-100>, "summary": "<text explanation>"}}"""
    ).format(investor=investor, startup=startup, convo=convo)
