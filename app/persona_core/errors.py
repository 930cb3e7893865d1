"""
Error taxonomy for the persona engine.

Anything that prevents producing a reply is raised and surfaced to the caller.
Anything that only prevents producing a match score is absorbed by the
scoring step and logged.
"""

from __future__ import annotations


class PersonaEngineError(RuntimeError):
    """Base class for errors raised by the persona engine."""


class ConfigurationError(PersonaEngineError):
    """Raised when required settings or credentials are missing or malformed."""


class CollaboratorFailure(PersonaEngineError):
    """Raised when the generation or scoring service fails or returns nothing."""


class ParseFailure(PersonaEngineError):
    """Raised when the scoring service reply is not the expected JSON object."""


class InputRejected(PersonaEngineError):
    """Raised when the inbound respondent message cannot be used."""
