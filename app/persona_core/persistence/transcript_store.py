"""
Purpose: Conversation transcripts for the demo UI (in-memory).
The engine never reads from here; the UI passes the full transcript on every
call, the way the chat client does with the managed database.

Testing: simple state tests.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from ..models import ConversationTurn, TurnRole


class InMemoryTranscriptStore:
    def __init__(self) -> None:
        self._turns: dict[str, list[ConversationTurn]] = {}

    def get(self, conversation_id: str) -> list[ConversationTurn]:
        return list(self._turns.get(conversation_id, []))

    def append(
        self,
        conversation_id: str,
        role: TurnRole,
        text: str,
        *,
        occurred_at: Optional[datetime] = None,
    ) -> ConversationTurn:
        turn = ConversationTurn(
            role=role,
            text=text,
            occurred_at=occurred_at or datetime.now(timezone.utc),
        )
        self._turns.setdefault(conversation_id, []).append(turn)
        return turn

    def reset(self, conversation_id: str) -> None:
        self._turns.pop(conversation_id, None)
