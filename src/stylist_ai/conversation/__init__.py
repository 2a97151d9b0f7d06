"""
Conversational onboarding for stylist-ai.

Provides the onboarding state machine, per-step field extraction and
preference validation.
"""

from stylist_ai.conversation.extraction import (
    EXTRACTION_RESOURCE,
    SchemaExtractor,
    parse_extraction,
    scan_message,
    validate_tags,
)
from stylist_ai.conversation.preferences import (
    MAX_BUDGET,
    MIN_BUDGET,
    budget_range_suggestions,
    climate_info,
    extract_budget_from_text,
    extract_zip_code_from_text,
    validate_budget,
    validate_zip_code,
)
from stylist_ai.conversation.prompts import (
    ONBOARDING_BASE_PROMPT,
    ExtractionPrompt,
    extraction_prompt,
    onboarding_system_prompt,
)
from stylist_ai.conversation.state_machine import (
    CONVERSATION_RESOURCE,
    ConversationStateMachine,
    TurnResult,
)

__all__ = [
    # Extraction
    "EXTRACTION_RESOURCE",
    "SchemaExtractor",
    "parse_extraction",
    "scan_message",
    "validate_tags",
    # Preferences
    "MAX_BUDGET",
    "MIN_BUDGET",
    "budget_range_suggestions",
    "climate_info",
    "extract_budget_from_text",
    "extract_zip_code_from_text",
    "validate_budget",
    "validate_zip_code",
    # Prompts
    "ONBOARDING_BASE_PROMPT",
    "ExtractionPrompt",
    "extraction_prompt",
    "onboarding_system_prompt",
    # State machine
    "CONVERSATION_RESOURCE",
    "ConversationStateMachine",
    "TurnResult",
]
