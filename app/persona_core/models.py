"""
Canonical data shapes shared by every stage of the persona pipeline.

Typical contents:
- Question / QuestionOrigin: one entry of the ordered catalog.
- ConversationTurn / TurnRole: one line of the transcript.
- OrchestrationResult: the immutable outcome of a single call.
- LLMSettings, Price: collaborator-facing shapes.

Testing: Trivial; mostly types. Parsing helpers live next to the shapes they
build so the JSON boundary and the UI share them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class QuestionOrigin(str, Enum):
    CUSTOM = "custom"
    DEFAULT = "default"


class TurnRole(str, Enum):
    RESPONDENT = "respondent"
    PERSONA = "persona"

    @classmethod
    def parse(cls, raw: Any) -> "TurnRole":
        """Accept engine names as well as the chat table's sender types."""
        value = str(raw or "").strip().lower()
        if value in {"respondent", "startup", "user"}:
            return cls.RESPONDENT
        if value in {"persona", "ai", "assistant", "investor"}:
            return cls.PERSONA
        raise ValueError(f"Unsupported turn role: {raw!r}")


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    origin: QuestionOrigin
    asked: bool = False

    @property
    def is_custom(self) -> bool:
        return self.origin == QuestionOrigin.CUSTOM

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "origin": self.origin.value,
            "asked": self.asked,
        }


@dataclass(frozen=True)
class ValidCustomQuestion:
    id: str
    text: str


@dataclass(frozen=True)
class RejectedEntry:
    index: int
    reason: str
    raw: Any = None


@dataclass(frozen=True)
class ConversationTurn:
    role: TurnRole
    text: str
    occurred_at: Optional[datetime] = None

    @property
    def is_persona(self) -> bool:
        return self.role == TurnRole.PERSONA

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationTurn":
        """Build a turn from either the engine's or the chat table's field names."""
        if not isinstance(data, dict):
            raise ValueError(f"Conversation turn must be an object, got {type(data)!r}")
        role = TurnRole.parse(data.get("role") or data.get("sender_type"))
        text = data.get("text")
        if text is None:
            text = data.get("content")
        stamp = data.get("occurredAt") or data.get("timestamp") or data.get("created_at")
        return cls(role=role, text=str(text or ""), occurred_at=_parse_timestamp(stamp))

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "text": self.text,
            "occurredAt": self.occurred_at.isoformat() if self.occurred_at else None,
        }


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    text = str(raw).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid turn timestamp: {raw!r}") from e


@dataclass(frozen=True)
class PersonaContext:
    respondent_profile: dict = field(default_factory=dict)
    persona_profile: dict = field(default_factory=dict)
    persona_name: str = ""
    respondent_name: str = ""


@dataclass(frozen=True)
class QuestionConfig:
    custom_questions: tuple = ()
    behavior_prompt: Optional[str] = None


@dataclass(frozen=True)
class PersonaRequest:
    message: str
    chat_history: tuple[ConversationTurn, ...]
    persona_context: PersonaContext
    question_config: QuestionConfig
    conversation_id: str


@dataclass(frozen=True)
class MatchScore:
    score: float
    summary: str


@dataclass(frozen=True)
class UsageSummary:
    model: Optional[str] = None
    tokens_in: int = 0
    tokens_out: int = 0
    estimated_cost_usd: float = 0.0

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "tokensIn": self.tokens_in,
            "tokensOut": self.tokens_out,
            "estimatedCostUsd": round(self.estimated_cost_usd, 6),
        }


@dataclass(frozen=True)
class OrchestrationResult:
    reply_text: str
    is_complete: bool
    is_question_pending: bool
    match_score: Optional[float]
    match_summary: Optional[str]
    asked_question_ids: tuple[str, ...]
    remaining_questions: tuple[Question, ...]
    custom_asked: int
    custom_total: int
    default_asked: int
    default_total: int
    usage: UsageSummary = field(default_factory=UsageSummary)

    def to_response(self, conversation_id: str) -> dict:
        """Render the camelCase response document for the chat client."""
        return {
            "response": self.reply_text,
            "matchScore": self.match_score,
            "matchSummary": self.match_summary,
            "conversationId": conversation_id,
            "isQuestionPending": self.is_question_pending,
            "isComplete": self.is_complete,
            "remainingQuestions": [q.to_dict() for q in self.remaining_questions],
            "askedQuestionIds": list(self.asked_question_ids),
            "customAsked": self.custom_asked,
            "customTotal": self.custom_total,
            "defaultAsked": self.default_asked,
            "defaultTotal": self.default_total,
            "usage": self.usage.to_dict(),
        }


@dataclass
class LLMSettings:
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 500
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


@dataclass(frozen=True)
class Price:
    input_per_1M: float
    output_per_1M: float
