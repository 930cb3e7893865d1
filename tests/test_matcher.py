"""
Tests for the transcript matcher and the next-question selector.
"""

from dataclasses import replace

import pytest

from persona_core.catalog import build_catalog
from persona_core.services.matcher import (
    ExactQuestionMatcher,
    FuzzyQuestionMatcher,
    build_matcher,
    mark_asked_questions,
)
from persona_core.services.selector import select_next_question

from conftest import persona, respondent, scripted_transcript


@pytest.fixture
def catalog(custom_records):
    return build_catalog(custom_records).questions


@pytest.fixture
def defaults_only():
    return build_catalog([]).questions


# ---------------------------------------------------------------------------
# Test: Matching strategies
# ---------------------------------------------------------------------------

class TestFuzzyMatcher:
    def test_exact_match_ignores_case_and_whitespace(self):
        m = FuzzyQuestionMatcher()
        assert m.matches("What traction do you have so far?", "  what traction do you HAVE so far?  ")

    def test_containment(self):
        m = FuzzyQuestionMatcher()
        assert m.matches(
            "What traction do you have so far?",
            "Thanks, that's helpful. What traction do you have so far?",
        )

    def test_significant_word_overlap(self):
        m = FuzzyQuestionMatcher()
        assert m.matches(
            "Who are your competitors and how do you differentiate?",
            "Could you walk me through your competitors and how you differentiate from them",
        )

    def test_overlap_below_threshold(self):
        m = FuzzyQuestionMatcher()
        assert not m.matches(
            "Tell me about your team background?",
            "Tell me about your business model?",
        )

    def test_short_question_without_significant_words_needs_exact_text(self):
        m = FuzzyQuestionMatcher()
        assert not m.matches("Why now?", "Great. So why is it the right time?")
        assert m.matches("Why now?", "Great. Why now?")

    def test_threshold_is_configurable(self):
        strict = FuzzyQuestionMatcher(word_overlap_threshold=1.0)
        assert not strict.matches(
            "Who are your competitors and how do you differentiate?",
            "Who are your main competitors?",
        )

    def test_exact_matcher_has_no_overlap_rule(self):
        assert not ExactQuestionMatcher().matches(
            "Who are your competitors and how do you differentiate?",
            "Could you walk me through your competitors and how you differentiate from them",
        )

    def test_build_matcher_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            build_matcher("semantic")


# ---------------------------------------------------------------------------
# Test: Transcript replay
# ---------------------------------------------------------------------------

class TestMarkAskedQuestions:
    def test_empty_transcript_asks_nothing(self, catalog):
        assert not any(q.asked for q in mark_asked_questions(catalog, []))

    def test_respondent_turns_are_ignored(self, catalog):
        result = mark_asked_questions(
            catalog, [respondent("What problem is your startup solving?")]
        )
        assert not any(q.asked for q in result)

    def test_one_turn_marks_at_most_one_question(self, catalog):
        turn = persona(
            "What problem is your startup solving? How did you come up with this idea?"
        )
        result = mark_asked_questions(catalog, [turn])
        assert [q.id for q in result if q.asked] == ["c1"]

    def test_questions_are_matched_in_order(self, catalog):
        texts = [q.text for q in catalog[:3]]
        result = mark_asked_questions(catalog, scripted_transcript(texts))
        assert [q.asked for q in result] == [True, True, True, False, False, False, False]

    def test_stale_flags_are_ignored(self, catalog):
        stale = [replace(q, asked=True) for q in catalog]
        assert not any(q.asked for q in mark_asked_questions(stale, []))

    def test_repeated_turn_does_not_mark_twice(self, catalog):
        turns = [persona(catalog[0].text), respondent("ok"), persona(catalog[0].text)]
        result = mark_asked_questions(catalog, turns)
        assert [q.id for q in result if q.asked] == ["c1"]

    def test_default_match_is_undone_while_no_custom_asked(self, catalog):
        result = mark_asked_questions(catalog, [persona("Tell me about your business model?")])
        assert not any(q.asked for q in result)

    def test_default_match_kept_once_custom_asked(self, catalog):
        turns = [
            persona(catalog[0].text),
            respondent("Payments for clinics."),
            persona("Tell me about your business model?"),
        ]
        result = mark_asked_questions(catalog, turns)
        assert {q.id for q in result if q.asked} == {"c1", "default-0"}

    def test_defaults_only_catalog_matches_defaults(self, defaults_only):
        result = mark_asked_questions(defaults_only, [persona(defaults_only[0].text)])
        assert result[0].asked

    def test_matching_is_deterministic(self, catalog):
        turns = scripted_transcript([q.text for q in catalog[:4]])
        assert mark_asked_questions(catalog, turns) == mark_asked_questions(catalog, turns)


# ---------------------------------------------------------------------------
# Test: Next-question selection
# ---------------------------------------------------------------------------

class TestSelectNextQuestion:
    def test_first_unasked(self, catalog):
        flags = [replace(q, asked=(i == 0)) for i, q in enumerate(catalog)]
        assert select_next_question(flags).id == "c2"

    def test_none_when_all_asked(self, catalog):
        assert select_next_question([replace(q, asked=True) for q in catalog]) is None

    def test_custom_overrides_inconsistent_default_pick(self, catalog):
        # Default-0 unasked ahead of an unasked custom question.
        reordered = [catalog[2], catalog[0]] + list(catalog[3:])
        flags = [replace(q, asked=False) for q in reordered]
        pick = select_next_question(flags)
        assert pick.is_custom
        assert pick.id == "c1"

    def test_custom_never_skipped_for_any_transcript(self, catalog):
        texts = [q.text for q in catalog]
        for n in range(len(texts) + 1):
            asked = mark_asked_questions(catalog, scripted_transcript(texts[2:2 + n]))
            pick = select_next_question(asked)
            assert pick is not None and pick.is_custom
