"""
Style taxonomies.

Every tag the onboarding extraction or the photo analysis may produce is
listed here; anything else is dropped or rejected.
"""

from __future__ import annotations

from dataclasses import dataclass

EMOTIONS: tuple[str, ...] = (
    "Confident",
    "Powerful",
    "Relaxed",
    "Chic",
    "Romantic",
    "Playful",
    "Effortless",
    "Feminine",
    "Bold",
    "Grounded",
    "Comfortable",
    "Polished",
    "Creative",
    "Cool",
    "Sensual",
)

ARCHETYPE: tuple[str, ...] = (
    "The Innocent",
    "The Everyman",
    "The Hero",
    "The Outlaw",
    "The Explorer",
    "The Creator",
    "The Ruler",
    "The Magician",
    "The Lover",
    "The Caregiver",
    "The Jester",
    "The Sage",
)

ESSENCE: tuple[str, ...] = (
    "Classic",
    "Dramatic",
    "Ethereal",
    "Gamine",
    "Ingenue",
    "Natural",
    "Romantic",
)

LIFESTYLE: tuple[str, ...] = (
    "Professional",
    "Social",
    "Casual",
    "Fitness",
    "Leisure",
)

VALUES: tuple[str, ...] = (
    "Sustainable",
    "Vegan",
    "Secondhand / Vintage",
    "Luxury",
    "Minimal Quantity",
    "High Quality",
    "Artistic / Experimental",
    "Trend-Driven",
    "Timeless / Classic",
    "Cultural / Heritage",
    "Local / Independent",
    "Comfort-First",
    "Identity-Aligned",
    "Modest",
    "Collectibles",
)

SILHOUETTE: tuple[str, ...] = (
    "middle_balance",
    "lower_balance",
    "waist_balance",
    "upper_balance",
    "equal_balance",
)

COLOR_PALETTE: tuple[str, ...] = (
    "True Spring",
    "Light Spring",
    "Deep Spring",
    "True Summer",
    "Light Summer",
    "Soft Summer",
    "True Autumn",
    "Soft Autumn",
    "Deep Autumn",
    "True Winter",
    "Bright Winter",
    "Deep Winter",
)


@dataclass(frozen=True)
class SchemaInfo:
    """Description of one taxonomy, used when prompting the model."""

    name: str
    description: str
    tags: tuple[str, ...]
    examples: tuple[str, ...]


SCHEMA_METADATA: dict[str, SchemaInfo] = {
    "emotions": SchemaInfo(
        "Emotions",
        "How users want to feel in their clothes",
        EMOTIONS,
        ("Confident", "Relaxed", "Powerful", "Chic"),
    ),
    "archetype": SchemaInfo(
        "Personality Archetype",
        "Personality-based style preferences",
        ARCHETYPE,
        ("The Hero", "The Creator", "The Sage", "The Lover"),
    ),
    "essence": SchemaInfo(
        "Style Essence",
        "Core style modes and aesthetics",
        ESSENCE,
        ("Classic", "Dramatic", "Natural", "Romantic"),
    ),
    "lifestyle": SchemaInfo(
        "Lifestyle",
        "Daily life patterns and activities",
        LIFESTYLE,
        ("Professional", "Casual", "Social", "Fitness"),
    ),
    "values": SchemaInfo(
        "Values",
        "Ideal style preferences and personal values",
        VALUES,
        ("Sustainable", "Luxury", "High Quality", "Timeless / Classic"),
    ),
    "silhouette": SchemaInfo(
        "Body Silhouette",
        "Body shape classifications for fit recommendations",
        SILHOUETTE,
        ("middle_balance", "upper_balance", "waist_balance"),
    ),
    "color_palette": SchemaInfo(
        "Color Palette",
        "Seasonal color analysis classifications",
        COLOR_PALETTE,
        ("True Spring", "Deep Winter", "Soft Autumn", "Light Summer"),
    ),
}


def get_schema_info(schema_type: str) -> SchemaInfo | None:
    return SCHEMA_METADATA.get(schema_type)


def find_similar_tags(text: str, schema_type: str) -> list[str]:
    """Return tags that contain, or are contained in, *text* (case-insensitive)."""
    schema = SCHEMA_METADATA.get(schema_type)
    if schema is None:
        return []
    needle = text.lower()
    return [tag for tag in schema.tags if tag.lower() in needle or needle in tag.lower()]
