"""
Prompt builders for onboarding dialog and extraction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from stylist_ai.types import SCHEMA_METADATA, OnboardingStep

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stylist_ai.types import ConversationMessage, ExtractedData

ONBOARDING_BASE_PROMPT = """\
You are a professional personal stylist AI helping users discover their unique style profile. \
Your goal is to have a natural, conversational chat to understand their style preferences \
across five key areas:

1. EMOTIONS: How they want to feel in their clothes
2. ARCHETYPE: Their personality-based style preferences
3. ESSENCE: Their lifestyle-based style modes
4. LIFESTYLE: Their daily life patterns and habits
5. VALUES: Their ideal style preferences and values

Ask engaging, open-ended questions one at a time. Listen carefully to their responses and ask \
follow-up questions to get deeper insights. Also collect their zip code for climate \
considerations and maximum budget for shopping.

Be warm, friendly, and encouraging. Make the conversation feel natural, not like a survey. \
Once you have enough information across all areas, let them know you're ready to create \
their style profile."""

_COLLECTED_LABELS = {
    "emotions": "emotions",
    "archetype": "personality archetype",
    "essence": "style essence",
    "lifestyle": "lifestyle",
    "values": "values",
    "zip_code": "location",
    "max_budget": "budget",
}

_MISSING_LABELS = {
    "emotions": "emotions (how they want to feel)",
    "archetype": "personality archetype",
    "essence": "style essence",
    "lifestyle": "lifestyle patterns",
    "values": "style values",
    "zip_code": "zip code for climate",
    "max_budget": "budget preferences",
}

_DIALOG_SCHEMAS = ("emotions", "archetype", "essence", "lifestyle", "values")


def onboarding_system_prompt(extracted: ExtractedData) -> str:
    """Build the dialog system prompt from what has been collected so far."""
    prompt = ONBOARDING_BASE_PROMPT + "\n\n"

    collected = extracted.collected()
    if collected:
        prompt += (
            "You have already collected information about: "
            + ", ".join(_COLLECTED_LABELS[name] for name in collected)
            + ". "
        )

    missing = extracted.missing()
    if missing:
        prompt += (
            "Still need to explore: "
            + ", ".join(_MISSING_LABELS[name] for name in missing)
            + ". "
        )

    prompt += "\n\nAvailable schema tags for reference:\n"
    for key in _DIALOG_SCHEMAS:
        schema = SCHEMA_METADATA[key]
        prompt += f"{schema.name}: {', '.join(schema.examples)}\n"

    prompt += (
        "\nFocus on one area at a time and ask engaging follow-up questions "
        "to understand their preferences deeply."
    )
    return prompt


@dataclass(frozen=True)
class ExtractionPrompt:
    """System and user prompt for one extraction call."""

    system: str
    user: str


@dataclass(frozen=True)
class _StepTemplate:
    expert: str
    task: str
    focus: tuple[str, ...]
    example: str
    guidance: str


_TAG_TEMPLATES: dict[str, _StepTemplate] = {
    "emotions": _StepTemplate(
        "You are a style psychology expert. Extract emotional drivers from conversations "
        "and map them to predefined emotion tags.",
        "extract how the person wants to FEEL when wearing clothes. Look for emotional "
        "drivers and desired feelings.",
        (
            "How they want to feel in their clothes",
            "Emotional states they want to achieve through style",
            "Confidence levels and emotional goals",
            "Feelings they associate with looking good",
        ),
        '{\n  "emotions": ["tag1", "tag2"]\n}',
        "Only include tags that have clear evidence in the conversation.",
    ),
    "archetype": _StepTemplate(
        "You are a personality psychology expert. Extract personality archetypes from "
        "conversations and map them to predefined archetype tags.",
        "extract the person's personality archetype based on their style preferences "
        "and personality traits.",
        (
            "Leadership vs. supportive tendencies",
            "Creative vs. structured preferences",
            "Adventurous vs. traditional inclinations",
            "Social vs. independent nature",
            "Authority vs. rebellious traits",
        ),
        '{\n  "archetype": ["tag1"]\n}',
        "Usually select 1-2 primary archetypes that best represent their personality.",
    ),
    "essence": _StepTemplate(
        "You are a style essence expert. Extract style essence preferences from "
        "conversations and map them to predefined essence tags.",
        "extract the person's style essence - their core aesthetic preferences and style modes.",
        (
            "Classic vs. trendy preferences",
            "Dramatic vs. subtle style choices",
            "Natural vs. polished inclinations",
            "Romantic vs. edgy aesthetics",
            "Structured vs. flowing preferences",
        ),
        '{\n  "essence": ["tag1", "tag2"]\n}',
        "Select 1-3 essences that best represent their core style aesthetic.",
    ),
    "lifestyle": _StepTemplate(
        "You are a lifestyle analysis expert. Extract lifestyle patterns from "
        "conversations and map them to predefined lifestyle tags.",
        "extract the person's lifestyle patterns and daily activities.",
        (
            "Work environment and professional needs",
            "Social activities and events",
            "Casual daily activities",
            "Fitness and active pursuits",
            "Leisure and relaxation preferences",
        ),
        '{\n  "lifestyle": ["tag1", "tag2"]\n}',
        "Select 2-4 lifestyle tags that best represent their daily activities.",
    ),
    "values": _StepTemplate(
        "You are a values analysis expert. Extract personal values from conversations "
        "and map them to predefined value tags.",
        "extract the person's values and ideals related to fashion and style.",
        (
            "Environmental and sustainability concerns",
            "Quality vs. quantity preferences",
            "Budget and luxury attitudes",
            "Cultural and identity values",
            "Comfort and practicality priorities",
            "Artistic and creative expression",
        ),
        '{\n  "values": ["tag1", "tag2"]\n}',
        "Select 2-5 values that best represent their style ideals.",
    ),
}

_SCALAR_TEMPLATES: dict[str, tuple[str, str, str]] = {
    "zip_code": (
        "You are a data extraction assistant. Extract the person's US zip code from conversations.",
        "zipCode: the 5-digit US zip code the person lives in, if mentioned",
        '{\n  "zipCode": "12345"\n}',
    ),
    "max_budget": (
        "You are a data extraction assistant. Extract the person's shopping budget from conversations.",
        "maxBudget: the maximum monthly clothing budget in US dollars, as a number, if mentioned",
        '{\n  "maxBudget": 500\n}',
    ),
}

_JSON_ONLY = " Return only valid JSON."


def _format_conversation(history: Sequence[ConversationMessage]) -> str:
    return "\n".join(f"{m.role}: {m.content}" for m in history)


def extraction_prompt(step: OnboardingStep, history: Sequence[ConversationMessage]) -> ExtractionPrompt:
    """Build the extraction prompt for the fields of *step*.

    Raises:
        ValueError: If the step has no extractable fields
    """
    if not step.required_fields:
        raise ValueError(f"step {step.value!r} has no fields to extract")

    name = step.required_fields[0]
    conversation = _format_conversation(history)

    if name in _TAG_TEMPLATES:
        template = _TAG_TEMPLATES[name]
        tags = ", ".join(SCHEMA_METADATA[name].tags)
        focus = "\n".join(f"- {item}" for item in template.focus)
        user = (
            f"Analyze this conversation and {template.task}\n\n"
            f"Available {name} tags: {tags}\n\n"
            f"Conversation:\n{conversation}\n\n"
            f"Extract tags that match the available tags exactly. Focus on:\n{focus}\n\n"
            f"Return ONLY a JSON object in this format:\n{template.example}\n\n"
            f"{template.guidance} Be conservative and accurate."
        )
        return ExtractionPrompt(system=template.expert + _JSON_ONLY, user=user)

    system, field_hint, example = _SCALAR_TEMPLATES[name]
    user = (
        "Analyze this conversation and extract the following field.\n\n"
        f"- {field_hint}\n\n"
        f"Conversation:\n{conversation}\n\n"
        f"Return ONLY a JSON object in this format:\n{example}\n\n"
        "Return an empty object {} if the conversation does not state it clearly."
    )
    return ExtractionPrompt(system=system + _JSON_ONLY, user=user)
