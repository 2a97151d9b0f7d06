"""
Structured output module for stylist-ai.

Provides JSON extraction from free-form model responses.
"""

from stylist_ai.structured.json_mode import extract_json, extract_json_object

__all__ = [
    "extract_json",
    "extract_json_object",
]
