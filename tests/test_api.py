"""
Tests for the JSON request/response boundary.
"""

import pytest

from persona_core.api import MalformedRequest, handle_persona_request, parse_request
from persona_core.config import EngineSettings
from persona_core.controller import PersonaInterviewController
from persona_core.errors import CollaboratorFailure
from persona_core.models import TurnRole

from conftest import FakeLLM


@pytest.fixture
def payload():
    return {
        "message": "We build scheduling software for clinics.",
        "chatHistory": [],
        "personaContext": {
            "respondentProfile": {"name": "Acme"},
            "personaProfile": {"focus": "B2B SaaS"},
            "personaName": "Dana",
        },
        "questionConfig": {
            "customQuestions": [
                {"id": "q1", "question": "What problem is your startup solving?", "enabled": True},
                {"question": "", "enabled": True},
            ],
            "behaviorPrompt": "Be concise.",
        },
        "conversationId": "abc-123",
    }


class TestParseRequest:
    def test_parses_full_document(self, payload):
        request = parse_request(payload)
        assert request.conversation_id == "abc-123"
        assert request.persona_context.persona_name == "Dana"
        assert request.question_config.behavior_prompt == "Be concise."
        assert len(request.question_config.custom_questions) == 2

    def test_accepts_chat_table_turns(self, payload):
        payload["chatHistory"] = [
            {"sender_type": "startup", "content": "Hi", "timestamp": "2024-03-01T10:00:00Z"},
            {"sender_type": "ai", "content": "What problem is your startup solving?"},
        ]
        request = parse_request(payload)
        assert [t.role for t in request.chat_history] == [TurnRole.RESPONDENT, TurnRole.PERSONA]
        assert request.chat_history[0].occurred_at.year == 2024

    def test_accepts_stored_persona_settings(self, payload):
        del payload["questionConfig"]
        payload["personaSettings"] = {
            "custom_questions": [{"question": "Why now?"}],
            "system_prompt": "Skeptical investor.",
        }
        payload["chatId"] = payload.pop("conversationId")
        request = parse_request(payload)
        assert request.question_config.custom_questions == ({"question": "Why now?"},)
        assert request.question_config.behavior_prompt == "Skeptical investor."
        assert request.conversation_id == "abc-123"

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda p: p.update(message=None),
            lambda p: p.update(chatHistory="nope"),
            lambda p: p.update(chatHistory=[{"role": "moderator", "text": "x"}]),
            lambda p: p["questionConfig"].update(customQuestions={"a": 1}),
            lambda p: p.update(personaContext=[]),
        ],
    )
    def test_malformed_documents(self, payload, mutate):
        mutate(payload)
        with pytest.raises(MalformedRequest):
            parse_request(payload)


class TestHandlePersonaRequest:
    def test_first_turn_response(self, payload):
        controller = PersonaInterviewController(FakeLLM())
        status, body = handle_persona_request(payload, controller=controller)
        assert status == 200
        assert body["response"] == "What problem is your startup solving?"
        assert body["isQuestionPending"] is True
        assert body["customAsked"] == 1
        assert body["customTotal"] == 1
        assert body["conversationId"] == "abc-123"

    def test_malformed_request_is_400(self):
        status, body = handle_persona_request("not an object")
        assert status == 400
        assert "error" in body

    def test_empty_message_is_400(self, payload):
        payload["message"] = "  "
        status, body = handle_persona_request(
            payload, controller=PersonaInterviewController(FakeLLM())
        )
        assert status == 400

    def test_missing_api_key_is_500(self, payload):
        status, body = handle_persona_request(
            payload, settings=EngineSettings(openai_api_key=None)
        )
        assert status == 500
        assert "OPENAI_API_KEY" in body["error"]

    def test_generation_failure_is_500(self, payload):
        payload["chatHistory"] = [{"role": "respondent", "text": "Hi"}]
        controller = PersonaInterviewController(FakeLLM([CollaboratorFailure("boom")]))
        status, body = handle_persona_request(payload, controller=controller)
        assert status == 500
        assert body == {"error": "boom"}
