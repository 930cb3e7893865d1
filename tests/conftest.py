"""Shared fixtures: a scripted LLM client and transcript builders."""

from __future__ import annotations

from typing import Callable, Optional, Union

import pytest

from persona_core.catalog import DEFAULT_QUESTIONS
from persona_core.models import ConversationTurn, TurnRole


class FakeLLM:
    """Returns scripted replies in order and records every call."""

    def __init__(self, replies: Optional[list[Union[str, Exception]]] = None) -> None:
        self.replies = list(replies or [])
        self.calls: list[dict] = []
        self.responder: Optional[Callable[[list[dict]], str]] = None

    def chat(self, messages, settings, system=None):
        self.calls.append({"messages": messages, "settings": settings})
        if self.responder is not None:
            text = self.responder(messages)
        elif self.replies:
            text = self.replies.pop(0)
        else:
            text = "Thanks for sharing."
        if isinstance(text, Exception):
            raise text
        return text, {"model": settings.model, "tokens_in": 100, "tokens_out": 20}


def persona(text: str) -> ConversationTurn:
    return ConversationTurn(role=TurnRole.PERSONA, text=text)


def respondent(text: str) -> ConversationTurn:
    return ConversationTurn(role=TurnRole.RESPONDENT, text=text)


def scripted_transcript(questions, *, answer: str = "Here is our answer.") -> list:
    """Persona asks each question, respondent answers all but the last."""
    turns = []
    for i, q in enumerate(questions):
        turns.append(persona(q))
        if i < len(questions) - 1:
            turns.append(respondent(answer))
    return turns


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def custom_records():
    return [
        {"id": "c1", "question": "What problem is your startup solving?", "enabled": True},
        {"id": "c2", "question": "How did you come up with this idea?", "enabled": True},
    ]


@pytest.fixture
def default_texts():
    return list(DEFAULT_QUESTIONS)
