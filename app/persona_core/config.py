"""Configuration helpers for the investor persona engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError
from .models import LLMSettings

MATCHER_KINDS = {"fuzzy", "exact"}

_logging_configured = False


@dataclass(frozen=True)
class EngineSettings:
    """Top-level engine settings loaded from environment variables."""

    openai_api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 500
    scoring_temperature: float = 0.3
    scoring_max_tokens: int = 500
    word_overlap_threshold: float = 0.7
    min_significant_word_length: int = 4
    matcher: str = "fuzzy"
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> "EngineSettings":
        """Load settings from the environment or .env file."""
        load_dotenv(find_dotenv(usecwd=True))
        api_key = (os.getenv("OPENAI_API_KEY") or "").strip() or None
        threshold = _float_env("PERSONA_WORD_OVERLAP", 0.7)
        if not 0.0 < threshold <= 1.0:
            raise ConfigurationError(
                "PERSONA_WORD_OVERLAP must be within (0, 1]"
            )
        min_len = _int_env("PERSONA_MIN_WORD_LENGTH", 4)
        if min_len < 1:
            raise ConfigurationError("PERSONA_MIN_WORD_LENGTH must be at least 1")
        matcher = os.getenv("PERSONA_MATCHER", "fuzzy").strip().lower()
        if matcher not in MATCHER_KINDS:
            raise ConfigurationError(
                f"PERSONA_MATCHER must be one of {sorted(MATCHER_KINDS)}, got {matcher!r}"
            )
        return cls(
            openai_api_key=api_key,
            model=os.getenv("PERSONA_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini",
            temperature=_float_env("PERSONA_TEMPERATURE", 0.7),
            max_tokens=_int_env("PERSONA_MAX_TOKENS", 500),
            scoring_temperature=_float_env("PERSONA_SCORING_TEMPERATURE", 0.3),
            scoring_max_tokens=_int_env("PERSONA_SCORING_MAX_TOKENS", 500),
            word_overlap_threshold=threshold,
            min_significant_word_length=min_len,
            matcher=matcher,
            log_level=os.getenv("PERSONA_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

    def require_api_key(self) -> str:
        if not self.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key is missing. Please set the OPENAI_API_KEY "
                "environment variable."
            )
        return self.openai_api_key

    def generation_settings(self) -> LLMSettings:
        return LLMSettings(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    def scoring_settings(self) -> LLMSettings:
        return LLMSettings(
            model=self.model,
            temperature=self.scoring_temperature,
            max_tokens=self.scoring_max_tokens,
        )


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number") from exc


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer") from exc


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    global _logging_configured
    resolved = getattr(logging, (level or "INFO").upper(), logging.INFO)
    if not _logging_configured:
        logging.basicConfig(
            level=resolved,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        _logging_configured = True
    logging.getLogger().setLevel(resolved)
