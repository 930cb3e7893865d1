"""Facade that exposes the prompt modules through the PromptFactory protocol."""

from __future__ import annotations
from typing import Optional, Sequence

from ..models import ConversationTurn, PersonaContext, Question
from . import persona as _persona
from . import scoring as _scoring
from .common import assemble as _assemble


class DefaultPromptFactory:
    # PERSONA
    def build_persona_system(
        self,
        *,
        catalog: Sequence[Question],
        next_question: Optional[Question],
        context: PersonaContext,
        behavior_prompt: Optional[str] = None,
    ) -> str:
        return _persona.build_persona_system(
            catalog=catalog,
            next_question=next_question,
            context=context,
            behavior_prompt=behavior_prompt,
        )

    def assemble(
        self,
        *,
        system: str,
        history: Sequence[ConversationTurn],
        user_text: str,
    ) -> list[dict[str, str]]:
        return _assemble(system=system, history=history, user_text=user_text)

    # SCORING
    def build_scoring_system(self) -> str:
        return _scoring.build_scoring_system()

    def scoring_instruction(
        self,
        *,
        context: PersonaContext,
        transcript: Sequence[ConversationTurn],
    ) -> str:
        return _scoring.scoring_instruction(context=context, transcript=transcript)
