"""
Tests for the persona reply corrector.

Covers:
- Verbatim enforcement of the mandated question
- Truncation of smuggled extra questions
- Premature summaries
- Closing acknowledgment once the script is exhausted
"""

import pytest

from persona_core.models import Question, QuestionOrigin
from persona_core.services.reply_guard import (
    ACKNOWLEDGMENTS,
    CLOSING_ACKNOWLEDGMENT,
    correct_reply,
    looks_like_question,
    truncate_extra_questions,
)


@pytest.fixture
def question():
    return Question(
        id="default-0",
        text="Tell me about your business model?",
        origin=QuestionOrigin.DEFAULT,
    )


# ---------------------------------------------------------------------------
# Test: Question detection
# ---------------------------------------------------------------------------

class TestLooksLikeQuestion:
    @pytest.mark.parametrize(
        "text",
        [
            "Any revenue yet?",
            "Thanks. What is your burn rate.",
            "Great! Could you share your deck",
            "Also, how big is the team",
        ],
    )
    def test_detects_questions(self, text):
        assert looks_like_question(text)

    @pytest.mark.parametrize(
        "text",
        ["", "Thank you for sharing that.", "Looking forward to hearing more."],
    )
    def test_plain_statements(self, text):
        assert not looks_like_question(text)


# ---------------------------------------------------------------------------
# Test: Mandated question enforcement
# ---------------------------------------------------------------------------

class TestMandatedQuestion:
    def test_reply_with_question_is_kept(self, question):
        raw = "Thanks for the intro. Tell me about your business model?"
        result = correct_reply(raw, next_question=question, all_asked=False)
        assert result.text == raw
        assert not result.corrected

    def test_missing_question_is_replaced_with_acknowledgment(self, question):
        """Scenario D: paraphrased reply on a non-empty history."""
        result = correct_reply(
            "How do you make money?",
            next_question=question,
            all_asked=False,
            first_turn=False,
            turn_count=3,
        )
        assert result.text == f"{ACKNOWLEDGMENTS[3]} {question.text}"
        assert "missing_question" in result.rules_applied

    def test_missing_question_on_first_turn_has_no_prefix(self, question):
        result = correct_reply(
            "Hello!", next_question=question, all_asked=False, first_turn=True
        )
        assert result.text == question.text

    def test_empty_reply_is_replaced(self, question):
        result = correct_reply(None, next_question=question, all_asked=False, turn_count=1)
        assert question.text in result.text

    def test_question_before_mandated_is_removed(self, question):
        raw = "How are you today? Tell me about your business model?"
        result = correct_reply(raw, next_question=question, all_asked=False)
        assert result.text.endswith(question.text)
        assert "How are you" not in result.text


# ---------------------------------------------------------------------------
# Test: Extra questions and summaries
# ---------------------------------------------------------------------------

class TestExtraQuestions:
    def test_second_question_is_truncated(self, question):
        """Scenario E: two ?-terminated questions become one."""
        raw = "Tell me about your business model? And what is your current revenue?"
        result = correct_reply(raw, next_question=question, all_asked=False)
        assert result.text == question.text
        assert "extra_question" in result.rules_applied

    def test_trailing_statement_is_kept(self, question):
        raw = "Tell me about your business model? Looking forward to it."
        assert truncate_extra_questions(raw, question.text) == raw

    def test_mandated_question_with_inner_question_mark(self):
        q = Question(id="c1", text="Revenue? And margins?", origin=QuestionOrigin.CUSTOM)
        raw = "Revenue? And margins? What about churn?"
        result = correct_reply(raw, next_question=q, all_asked=False)
        assert result.text == "Revenue? And margins?"

    def test_truncates_at_first_question_mark_without_mandate(self):
        assert truncate_extra_questions("One? Two?") == "One?"

    def test_premature_summary_is_replaced(self, question):
        raw = "To recap, you run a clinic marketplace. Tell me about your business model?"
        result = correct_reply(raw, next_question=question, all_asked=False)
        assert result.text == question.text
        assert "premature_summary" in result.rules_applied


# ---------------------------------------------------------------------------
# Test: Script exhausted
# ---------------------------------------------------------------------------

class TestAllAsked:
    def test_invented_question_becomes_closing(self):
        result = correct_reply(
            "Great answers. What is your exit strategy?", next_question=None, all_asked=True
        )
        assert result.text == CLOSING_ACKNOWLEDGMENT

    def test_plain_acknowledgment_is_kept(self):
        raw = "Thank you, this was a great conversation."
        result = correct_reply(raw, next_question=None, all_asked=True)
        assert result.text == raw

    def test_empty_reply_becomes_closing(self):
        assert correct_reply("", next_question=None, all_asked=True).text == CLOSING_ACKNOWLEDGMENT

    def test_closing_contains_no_question(self):
        assert not looks_like_question(CLOSING_ACKNOWLEDGMENT)
