"""Utilities for robustly extracting JSON from LLM responses."""

from __future__ import annotations
import json
import re
from typing import Any

from ..errors import ParseFailure

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _strip_code_fences(text: str) -> str:
    """Remove surrounding ```...``` fences (with or without 'json') if present."""
    t = text.strip()
    if t.startswith("```") and t.endswith("```"):
        t = re.sub(r"^```[A-Za-z0-9_-]*\s*", "", t, flags=re.DOTALL)
        t = re.sub(r"\s*```$", "", t, flags=re.DOTALL)
    return t.strip()


def extract_json(text: str) -> Any:
    """
    Parse the JSON object in an LLM response.
    - Handles code fences and leading/trailing prose.
    - Returns the parsed value, or None when nothing parses.
    """
    if not text:
        return None
    t = _strip_code_fences(text)

    try:
        return json.loads(t)
    except ValueError:
        pass

    m = _JSON_OBJECT.search(t)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except ValueError:
        return None


def require_object(text: str, err: str = "Expected a JSON object.") -> dict:
    """Strict: must return an object, else raise ParseFailure."""
    data = extract_json(text)
    if not isinstance(data, dict):
        raise ParseFailure(err)
    return data
