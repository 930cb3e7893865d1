"""
Abstractions for pluggable collaborators. The controller depends on these
protocols, not on concrete services, so fakes can stand in for the network.

Common protocols:
- LLMClient.chat(messages, settings) -> (reply, meta)
- QuestionMatcher.matches(question_text, turn_text) -> bool
- PromptFactory.build_persona_system(...) -> str & assemble(...) -> messages

Testing: Use simple fake implementations to test the controller without
network calls.
"""

from __future__ import annotations
from typing import Optional, Protocol, Sequence

from .models import ConversationTurn, LLMSettings, PersonaContext, Question


class LLMClient(Protocol):
    def chat(
        self,
        messages: list[dict[str, str]],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]: ...


class QuestionMatcher(Protocol):
    def matches(self, question_text: str, turn_text: str) -> bool: ...


class PromptFactory(Protocol):
    def build_persona_system(
        self,
        *,
        catalog: Sequence[Question],
        next_question: Optional[Question],
        context: PersonaContext,
        behavior_prompt: Optional[str] = None,
    ) -> str: ...

    def assemble(
        self,
        *,
        system: str,
        history: Sequence[ConversationTurn],
        user_text: str,
    ) -> list[dict[str, str]]: ...

    def build_scoring_system(self) -> str: ...

    def scoring_instruction(
        self,
        *,
        context: PersonaContext,
        transcript: Sequence[ConversationTurn],
    ) -> str: ...
