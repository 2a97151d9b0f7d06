"""
Structured extraction of onboarding fields.

One model call per turn asks for the current step's fields only. Tags are
checked against the taxonomy, zip codes and budgets are normalised, and any
failure yields ``None`` so the turn carries on without new data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stylist_ai.conversation.preferences import (
    extract_budget_from_text,
    extract_zip_code_from_text,
    validate_budget,
    validate_zip_code,
)
from stylist_ai.conversation.prompts import extraction_prompt
from stylist_ai.errors import ValidationError
from stylist_ai.structured import extract_json
from stylist_ai.telemetry import get_logger
from stylist_ai.types import SCHEMA_METADATA, ConversationMessage, OnboardingStep

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from stylist_ai.inference import ModelClient
    from stylist_ai.resilience import AIResilienceOrchestrator

logger = get_logger("stylist_ai.conversation.extraction")

EXTRACTION_RESOURCE = "schema-extraction"

_TAG_FIELDS = ("emotions", "archetype", "essence", "lifestyle", "values")

# Wire names the model may use for scalar fields
_SCALAR_KEYS = {
    "zip_code": ("zipCode", "zip_code"),
    "max_budget": ("maxBudget", "max_budget"),
}


def validate_tags(tags: Any, allowed: Iterable[str]) -> list[str]:
    """Keep known tags, in order, without duplicates.

    Matching is case-insensitive; the canonical spelling is returned. A
    single string is treated as a one-element list.
    """
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        return []

    canonical = {tag.lower(): tag for tag in allowed}
    result: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        match = canonical.get(tag.strip().lower())
        if match and match not in result:
            result.append(match)
    return result


def parse_extraction(step: OnboardingStep, data: dict[str, Any]) -> dict[str, Any]:
    """Validate the model's output for *step*, dropping anything invalid.

    Only the step's own fields are read.

    Returns:
        Mapping of ``ExtractedData`` field name to validated value
    """
    fields: dict[str, Any] = {}

    for name in step.required_fields:
        if name in _TAG_FIELDS:
            tags = validate_tags(data.get(name), SCHEMA_METADATA[name].tags)
            if tags:
                fields[name] = tags
            continue

        raw = next((data[key] for key in _SCALAR_KEYS[name] if data.get(key) is not None), None)
        if raw is None:
            continue
        try:
            fields[name] = validate_zip_code(raw) if name == "zip_code" else validate_budget(raw)
        except ValidationError as e:
            logger.debug("Discarding extracted value", field=name, reason=e.message)

    return fields


def scan_message(step: OnboardingStep, message: str) -> dict[str, Any]:
    """Pattern-based fallback for zip code and budget steps."""
    if step is OnboardingStep.LOCATION:
        zip_code = extract_zip_code_from_text(message)
        return {"zip_code": zip_code} if zip_code else {}
    if step is OnboardingStep.BUDGET:
        budget = extract_budget_from_text(message)
        return {"max_budget": budget} if budget is not None else {}
    return {}


class SchemaExtractor:
    """Runs the per-step extraction call through the orchestrator.

    Example:
        >>> extractor = SchemaExtractor(client, orchestrator)
        >>> await extractor.extract(OnboardingStep.EMOTIONS, history, "I want to feel bold")
        {'emotions': ['Bold']}
    """

    def __init__(
        self,
        client: ModelClient,
        orchestrator: AIResilienceOrchestrator,
        resource_name: str = EXTRACTION_RESOURCE,
    ) -> None:
        self._client = client
        self._orchestrator = orchestrator
        self._resource_name = resource_name

    async def extract(
        self,
        step: OnboardingStep,
        history: Sequence[ConversationMessage],
        message: str = "",
    ) -> dict[str, Any] | None:
        """Extract the fields of *step* from the conversation.

        Args:
            step: Current onboarding step
            history: Conversation including the latest user message
            message: Latest user message, scanned when the model omits a
                zip code or budget

        Returns:
            Validated fields (possibly empty), or None if the call failed
            or returned no JSON object
        """
        if not step.required_fields:
            return {}

        prompt = extraction_prompt(step, history)

        async def call() -> str:
            return await self._client.send_message(
                [ConversationMessage(role="user", content=prompt.user)],
                prompt.system,
            )

        result = await self._orchestrator.run_call(call, self._resource_name)
        if not result.success:
            logger.warning(
                "Extraction call failed",
                step=step.value,
                code=result.error.code if result.error else None,
            )
            return None

        data = extract_json(result.data)
        if not isinstance(data, dict):
            logger.warning("Extraction response had no JSON object", step=step.value)
            return None

        fields = parse_extraction(step, data)
        if not fields and message:
            fields = scan_message(step, message)
        return fields
