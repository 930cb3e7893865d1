"""
Purpose: The single orchestration point for one persona turn.
Every call rebuilds the interview state from the transcript it is given;
nothing about a conversation is remembered between calls.

Per inbound message:
- Validate the respondent message (security guard).
- Build the question catalog (custom first, then defaults).
- Recompute which questions were asked from past persona turns.
- Select the next question; on an empty transcript, reply with it directly.
- Otherwise compose the instruction payload, call the LLM, correct its reply.
- On the call where the script first becomes complete, ask the scorer for a
  match score over the transcript plus this message.
- Return an immutable OrchestrationResult.

Testing: Pure unit tests with a fake LLMClient. Verify ordering, correction
and completion gating without network calls.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from .catalog import DEFAULT_QUESTIONS, build_catalog
from .config import EngineSettings
from .interfaces import LLMClient, PromptFactory, QuestionMatcher
from .models import (
    ConversationTurn,
    OrchestrationResult,
    PersonaRequest,
    Question,
    TurnRole,
)
from .prompts import DefaultPromptFactory
from .services.match_scorer import (
    is_script_complete,
    previous_transcript,
    score_match_llm,
)
from .services.matcher import build_matcher, mark_asked_questions
from .services.pricing import UsageMeter
from .services.reply_guard import correct_reply
from .services.security import DefaultSecurity
from .services.selector import select_next_question

logger = logging.getLogger(__name__)


class PersonaInterviewController:
    def __init__(
        self,
        llm: LLMClient,
        *,
        settings: Optional[EngineSettings] = None,
        matcher: Optional[QuestionMatcher] = None,
        prompts: Optional[PromptFactory] = None,
        default_questions: Sequence[str] = DEFAULT_QUESTIONS,
    ):
        self.llm: LLMClient = llm
        self.settings = settings or EngineSettings()
        self.matcher: QuestionMatcher = matcher or build_matcher(
            self.settings.matcher,
            word_overlap_threshold=self.settings.word_overlap_threshold,
            min_word_length=self.settings.min_significant_word_length,
        )
        self.prompts: PromptFactory = prompts or DefaultPromptFactory()
        self.security = DefaultSecurity()
        self.default_questions = tuple(default_questions)

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "PersonaInterviewController":
        """Wire the OpenAI client; raises ConfigurationError without an API key."""
        from .services.llm_openai import OpenAILLMClient

        return cls(OpenAILLMClient(settings.require_api_key()), settings=settings)

    def evaluate_catalog(self, request: PersonaRequest) -> list[Question]:
        """Catalog with ``asked`` flags recomputed from the request transcript."""
        build = build_catalog(
            request.question_config.custom_questions, self.default_questions
        )
        return mark_asked_questions(build.questions, request.chat_history, self.matcher)

    def _was_complete(self, request: PersonaRequest) -> bool:
        """Whether the previous call on this conversation already saw completion."""
        prior = previous_transcript(request.chat_history)
        if prior is None:
            return False
        build = build_catalog(
            request.question_config.custom_questions, self.default_questions
        )
        catalog = mark_asked_questions(build.questions, prior, self.matcher)
        return is_script_complete(
            asked_flags=[q.asked for q in catalog], transcript_length=len(prior)
        )

    def handle_message(self, request: PersonaRequest) -> OrchestrationResult:
        """Produce the persona's next reply for ``request``."""
        message = self.security.validate_user_input(request.message)
        history = request.chat_history
        logger.info(
            "Processing message for conversation %s (%d prior turns)",
            request.conversation_id,
            len(history),
        )

        catalog = self.evaluate_catalog(request)
        next_question = select_next_question(catalog)
        all_asked = next_question is None
        meter = UsageMeter()

        if not history and next_question is not None:
            reply = next_question.text
        else:
            reply = self._generate_reply(
                request, message, catalog, next_question, meter
            )

        complete = is_script_complete(
            asked_flags=[q.asked for q in catalog], transcript_length=len(history)
        )
        score = None
        if complete and not self._was_complete(request):
            score, meta = score_match_llm(
                llm=self.llm,
                prompts=self.prompts,
                settings=self.settings.scoring_settings(),
                context=request.persona_context,
                transcript=tuple(history)
                + (ConversationTurn(TurnRole.RESPONDENT, message),),
            )
            meter.add(meta, model=self.settings.model)
        elif complete:
            logger.info(
                "Conversation %s was already complete; not scoring again",
                request.conversation_id,
            )

        return self._build_result(
            catalog=catalog,
            next_question=next_question,
            reply=reply,
            complete=complete,
            all_asked=all_asked,
            score=score,
            meter=meter,
        )

    def _generate_reply(
        self,
        request: PersonaRequest,
        message: str,
        catalog: Sequence[Question],
        next_question: Optional[Question],
        meter: UsageMeter,
    ) -> str:
        system_prompt = self.prompts.build_persona_system(
            catalog=catalog,
            next_question=next_question,
            context=request.persona_context,
            behavior_prompt=request.question_config.behavior_prompt,
        )
        messages = self.prompts.assemble(
            system=system_prompt, history=request.chat_history, user_text=message
        )
        raw, meta = self.llm.chat(messages, self.settings.generation_settings())
        meter.add(meta, model=self.settings.model)

        correction = correct_reply(
            raw,
            next_question=next_question,
            all_asked=next_question is None,
            first_turn=not request.chat_history,
            turn_count=len(request.chat_history),
        )
        return correction.text

    @staticmethod
    def _build_result(
        *,
        catalog: Sequence[Question],
        next_question: Optional[Question],
        reply: str,
        complete: bool,
        all_asked: bool,
        score,
        meter: UsageMeter,
    ) -> OrchestrationResult:
        # The question carried by this reply counts as asked from here on.
        after = [
            replace(q, asked=True)
            if next_question is not None and q.id == next_question.id
            else q
            for q in catalog
        ]
        customs = [q for q in after if q.is_custom]
        defaults = [q for q in after if not q.is_custom]
        return OrchestrationResult(
            reply_text=reply,
            is_complete=complete,
            is_question_pending=not all_asked,
            match_score=score.score if score else None,
            match_summary=score.summary if score else None,
            asked_question_ids=tuple(q.id for q in after if q.asked),
            remaining_questions=tuple(q for q in after if not q.asked),
            custom_asked=sum(1 for q in customs if q.asked),
            custom_total=len(customs),
            default_asked=sum(1 for q in defaults if q.asked),
            default_total=len(defaults),
            usage=meter.summary(),
        )
