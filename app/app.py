"""
UI layer
Purpose: Streamlit-only glue for trying out an investor persona. Renders the
persona configuration and the chat, keeps the transcript, and delegates every
turn to the persona controller so the engine stays testable without Streamlit.
"""

import uuid
from dataclasses import replace
from datetime import datetime

import streamlit as st

from persona_core.catalog import DEFAULT_QUESTIONS
from persona_core.config import EngineSettings, configure_logging
from persona_core.controller import PersonaInterviewController
from persona_core.errors import PersonaEngineError
from persona_core.models import (
    PersonaContext,
    PersonaRequest,
    QuestionConfig,
    TurnRole,
)
from persona_core.persistence.transcript_store import InMemoryTranscriptStore
from persona_core.services.llm_openai import OpenAILLMClient
from persona_core.services.pricing import PRICE_TABLE


# ---------------------------
# Page config
# ---------------------------
st.set_page_config(
    page_title="Investor Persona Chat",
    page_icon="💼",
    layout="wide",
    initial_sidebar_state="expanded",
)

base_settings = EngineSettings.load()
configure_logging(base_settings.log_level)

# ---------------------------
# Session state init
# ---------------------------
st_session = st.session_state
st_session.setdefault("llm", None)
st_session.setdefault("store", InMemoryTranscriptStore())
st_session.setdefault("conversation_id", str(uuid.uuid4()))
st_session.setdefault("model", base_settings.model)
st_session.setdefault("temperature", base_settings.temperature)
st_session.setdefault("persona_name", "Alex Morgan")
st_session.setdefault("startup_name", "")
st_session.setdefault("behavior_prompt", "")
st_session.setdefault("custom_questions_text", "")
st_session.setdefault("last_result", None)
st_session.setdefault("tokens_in", 0)
st_session.setdefault("tokens_out", 0)
st_session.setdefault("cost_usd", 0.0)
st_session.setdefault("session_start_ts", datetime.now().timestamp())


# ---------------------------
# Helpers
# ---------------------------
def custom_question_records() -> list[dict]:
    """One custom question per non-empty line; '#' disables a line."""
    records = []
    for idx, line in enumerate(st_session.custom_questions_text.splitlines()):
        text = line.strip()
        if not text:
            continue
        enabled = not text.startswith("#")
        records.append(
            {"id": f"ui-{idx}", "question": text.lstrip("#").strip(), "enabled": enabled}
        )
    return records


def make_controller() -> PersonaInterviewController:
    settings = replace(
        base_settings,
        openai_api_key=st_session.llm.api_key,
        model=st_session.model,
        temperature=float(st_session.temperature),
    )
    return PersonaInterviewController(st_session.llm, settings=settings)


def reset_conversation():
    """Start a fresh conversation with the same persona configuration."""
    st_session.store.reset(st_session.conversation_id)
    st_session.conversation_id = str(uuid.uuid4())
    st_session.last_result = None
    st_session.tokens_in = 0
    st_session.tokens_out = 0
    st_session.cost_usd = 0.0
    st_session.session_start_ts = datetime.now().timestamp()


def send_message(text: str) -> None:
    store = st_session.store
    cid = st_session.conversation_id
    request = PersonaRequest(
        message=text,
        chat_history=tuple(store.get(cid)),
        persona_context=PersonaContext(
            persona_name=st_session.persona_name,
            respondent_name=st_session.startup_name,
        ),
        question_config=QuestionConfig(
            custom_questions=tuple(custom_question_records()),
            behavior_prompt=st_session.behavior_prompt or None,
        ),
        conversation_id=cid,
    )
    result = make_controller().handle_message(request)

    store.append(cid, TurnRole.RESPONDENT, text)
    store.append(cid, TurnRole.PERSONA, result.reply_text)
    st_session.last_result = result
    st_session.tokens_in += result.usage.tokens_in
    st_session.tokens_out += result.usage.tokens_out
    st_session.cost_usd += result.usage.estimated_cost_usd


# ---------------------------
# SIDEBAR: key & persona settings
# ---------------------------
with st.sidebar:
    st.markdown("# Settings")

    st.markdown("## OPEN AI API Key Required")
    user_api_key = st.text_input(
        "Enter your API key",
        type="password",
        value=base_settings.openai_api_key or "",
        help="We do not store your key. It stays in your session only.",
    )
    if not user_api_key:
        st.warning("Please enter your API key in the sidebar to continue.")
        st.stop()
    if st_session.llm is None or st_session.llm.api_key != user_api_key:
        try:
            st_session.llm = OpenAILLMClient(api_key=user_api_key)
        except PersonaEngineError as e:
            st.error(f"OpenAI client init failed: {e}")
            st.stop()

    models = list(PRICE_TABLE.keys())
    st_session.model = st.selectbox(
        "Model",
        models,
        index=models.index(st_session.model) if st_session.model in models else 0,
    )
    st_session.temperature = st.slider(
        "Temperature", 0.0, 1.0, float(st_session.temperature), 0.05
    )
    st.divider()

    st.markdown("## Investor Persona")
    st.text_input("Investor name", key="persona_name")
    st.text_input("Startup name", key="startup_name")
    st.text_area(
        "Behavior",
        key="behavior_prompt",
        placeholder="e.g. Direct, numbers-focused seed investor.",
        height=100,
    )
    st.text_area(
        "Custom questions (one per line, prefix with # to disable)",
        key="custom_questions_text",
        height=160,
    )
    with st.expander("Default questions"):
        st.markdown("\n".join(f"- {q}" for q in DEFAULT_QUESTIONS))
    st.divider()

    st.markdown("## Session Controls")
    st.button("New conversation", type="primary", on_click=reset_conversation)

# ---------------------------
# Header
# ---------------------------
st.title("Investor Persona Chat")
st.caption(
    f"Chatting with **{st_session.persona_name or 'the investor'}** "
    f"· conversation `{st_session.conversation_id[:8]}`"
)

chat_col, status_col = st.columns([3, 1])

with chat_col:
    transcript = st.container(height=500, border=True)
    with transcript:
        for turn in st_session.store.get(st_session.conversation_id):
            role = "assistant" if turn.is_persona else "user"
            with st.chat_message(role):
                st.markdown(turn.text)

    raw = st.chat_input("Introduce your startup or answer the question…")
    if raw is not None:
        if not raw.strip():
            st.toast("Please enter a non-empty message.", icon="⚠️")
        else:
            try:
                with st.spinner("Thinking…"):
                    send_message(raw.strip())
                st.rerun()
            except PersonaEngineError as e:
                st.error(str(e))

with status_col:
    result = st_session.last_result
    st.markdown("### Progress")
    if result is None:
        st.caption("Send a message to start the interview.")
    else:
        st.metric("Custom questions", f"{result.custom_asked}/{result.custom_total}")
        st.metric("Default questions", f"{result.default_asked}/{result.default_total}")
        total = result.custom_total + result.default_total
        asked = result.custom_asked + result.default_asked
        st.progress(asked / total if total else 1.0)
        if result.match_score is not None:
            st.markdown("### Match")
            st.metric("Match score", f"{result.match_score:.0f}/100")
            st.caption(result.match_summary or "")
        elif result.is_complete:
            st.caption("Interview complete; the match score is unavailable.")

    st.markdown("### Usage")
    st.metric("Tokens (in)", f"{st_session.tokens_in:,}")
    st.metric("Tokens (out)", f"{st_session.tokens_out:,}")
    st.metric("Estimated cost", f"${st_session.cost_usd:,.4f}")
