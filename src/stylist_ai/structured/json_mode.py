"""
JSON extraction for model responses.

Models asked for "only JSON" still wrap it in prose or markdown fences;
these helpers find the payload.
"""

from __future__ import annotations

import json
import re
from typing import Any

from stylist_ai.errors import ResponseParseError

_PATTERNS = [
    re.compile(r"```json\s*([\s\S]*?)\s*```"),  # ```json ... ```
    re.compile(r"```\s*([\s\S]*?)\s*```"),  # ``` ... ```
    re.compile(r"\{[\s\S]*\}"),  # Raw JSON object
    re.compile(r"\[[\s\S]*\]"),  # Raw JSON array
]


def extract_json(text: str) -> Any | None:
    """Extract JSON from text that may contain markdown code blocks.

    Args:
        text: Text potentially containing JSON

    Returns:
        Parsed JSON or None

    Example:
        >>> text = '''Here is the analysis:
        ... ```json
        ... {"bodyShape": "waist_balance", "confidence": 0.82}
        ... ```
        ... '''
        >>> extract_json(text)
        {'bodyShape': 'waist_balance', 'confidence': 0.82}
    """
    # Try direct parsing first
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    for pattern in _PATTERNS:
        match = pattern.search(text)
        if match:
            try:
                candidate = match.group(1) if match.lastindex else match.group(0)
                return json.loads(candidate.strip())
            except (json.JSONDecodeError, IndexError):
                continue

    return None


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract a JSON object from model text.

    Raises:
        ResponseParseError: If no JSON object is present
    """
    data = extract_json(text)
    if not isinstance(data, dict):
        raise ResponseParseError("Model response did not contain a JSON object", raw=text)
    return data
