"""
JSON boundary for the persona engine.

``handle_persona_request`` takes the decoded request document sent by the chat
client and returns ``(status, body)``: the response document on success, or
``{"error": message}`` when no reply can be produced.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import EngineSettings
from .controller import PersonaInterviewController
from .errors import InputRejected, PersonaEngineError
from .models import ConversationTurn, PersonaContext, PersonaRequest, QuestionConfig

logger = logging.getLogger(__name__)


class MalformedRequest(ValueError):
    """Raised when the request document does not have the expected shape."""


def _as_dict(value: Any, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedRequest(f"{name} must be an object")
    return value


def parse_request(payload: Any) -> PersonaRequest:
    """Decode the request document into a PersonaRequest."""
    if not isinstance(payload, dict):
        raise MalformedRequest("Request body must be a JSON object")

    message = payload.get("message")
    if not isinstance(message, str):
        raise MalformedRequest("message must be a string")

    raw_history = payload.get("chatHistory") or []
    if not isinstance(raw_history, list):
        raise MalformedRequest("chatHistory must be a list")
    try:
        history = tuple(ConversationTurn.from_dict(t) for t in raw_history)
    except ValueError as e:
        raise MalformedRequest(f"Invalid chatHistory entry: {e}") from e

    ctx = _as_dict(payload.get("personaContext"), "personaContext")
    context = PersonaContext(
        respondent_profile=_as_dict(ctx.get("respondentProfile"), "respondentProfile"),
        persona_profile=_as_dict(ctx.get("personaProfile"), "personaProfile"),
        persona_name=str(ctx.get("personaName") or ""),
        respondent_name=str(ctx.get("respondentName") or ""),
    )

    qc = payload.get("questionConfig")
    if qc is not None:
        qc = _as_dict(qc, "questionConfig")
        customs = qc.get("customQuestions")
        behavior = qc.get("behaviorPrompt")
    else:
        # Stored persona settings rows use snake_case column names.
        legacy = _as_dict(payload.get("personaSettings"), "personaSettings")
        customs = legacy.get("custom_questions")
        behavior = legacy.get("system_prompt")
    if customs is not None and not isinstance(customs, list):
        raise MalformedRequest("customQuestions must be a list")

    conversation_id = payload.get("conversationId") or payload.get("chatId") or ""
    return PersonaRequest(
        message=message,
        chat_history=history,
        persona_context=context,
        question_config=QuestionConfig(
            custom_questions=tuple(customs or ()),
            behavior_prompt=behavior if isinstance(behavior, str) else None,
        ),
        conversation_id=str(conversation_id),
    )


def handle_persona_request(
    payload: Any,
    *,
    controller: Optional[PersonaInterviewController] = None,
    settings: Optional[EngineSettings] = None,
) -> tuple[int, dict]:
    """Run one persona turn and return ``(http_status, body)``."""
    try:
        request = parse_request(payload)
    except MalformedRequest as e:
        logger.warning("Rejected persona request: %s", e)
        return 400, {"error": str(e)}

    try:
        if controller is None:
            controller = PersonaInterviewController.from_settings(
                settings or EngineSettings.load()
            )
        result = controller.handle_message(request)
    except InputRejected as e:
        return 400, {"error": str(e)}
    except PersonaEngineError as e:
        logger.error(
            "Error in investor persona for conversation %s: %s",
            request.conversation_id,
            e,
        )
        return 500, {"error": str(e)}

    return 200, result.to_response(request.conversation_id)
