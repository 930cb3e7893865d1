"""Prompt builders for the investor persona and the match scorer."""

from .factory import DefaultPromptFactory

__all__ = ["DefaultPromptFactory"]
