"""
Seasonal color palette analysis from a portrait photo.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stylist_ai.analysis.base import PhotoAnalyzer
from stylist_ai.types import ColorPaletteAnalysis, ColorPaletteReport, ColorRecommendations

COLOR_PALETTE_RESOURCE = "bedrock-vision-color-palette"

COLOR_CONFIDENCE_THRESHOLD = 0.60


@dataclass(frozen=True)
class PaletteProfile:
    season: str
    characteristics: str
    colors: tuple[str, ...]
    avoid: tuple[str, ...]
    tips: tuple[str, ...]


PALETTE_PROFILES: dict[str, PaletteProfile] = {
    "True Spring": PaletteProfile(
        "Spring",
        "Warm, clear, bright colors",
        ("coral", "peach", "golden yellow", "warm red", "turquoise", "bright green", "ivory", "camel"),
        ("black", "pure white", "burgundy", "navy"),
        (
            "Wear colors close to your face for maximum impact",
            "Combine warm colors for a harmonious look",
            "Use coral or peach as your signature color",
            "Avoid black near your face - use warm navy instead",
        ),
    ),
    "Light Spring": PaletteProfile(
        "Spring",
        "Light, warm, delicate colors",
        ("light peach", "soft coral", "cream", "light golden yellow", "aqua", "mint green", "buff", "light camel"),
        ("black", "dark colors", "heavy colors", "burgundy"),
        (
            "Choose light, delicate colors that won't overpower you",
            "Layer different light warm tones together",
            "Use cream instead of pure white",
            "Add warmth with golden accessories",
        ),
    ),
    "Deep Spring": PaletteProfile(
        "Spring",
        "Deep, warm, vibrant colors",
        ("bright orange", "warm red", "golden yellow", "emerald green", "teal", "chocolate brown", "warm navy", "ivory"),
        ("pastels", "muted colors", "icy colors", "black"),
        (
            "Embrace bold, vibrant colors with confidence",
            "Mix warm jewel tones for sophisticated looks",
            "Use ivory or cream instead of pure white",
            "Balance bright colors with warm neutrals",
        ),
    ),
    "True Summer": PaletteProfile(
        "Summer",
        "Cool, soft, muted colors",
        ("rose pink", "lavender", "powder blue", "soft white", "plum", "sage green", "cocoa", "navy"),
        ("orange", "bright yellow", "warm colors", "black"),
        (
            "Stick to cool, soft colors that complement your gentle coloring",
            "Layer different shades of blue and pink",
            "Use soft white instead of bright white",
            "Add depth with navy or charcoal",
        ),
    ),
    "Light Summer": PaletteProfile(
        "Summer",
        "Light, cool, soft colors",
        ("baby pink", "sky blue", "lavender", "soft white", "light gray", "mint", "rose beige", "periwinkle"),
        ("dark colors", "bright colors", "orange", "gold"),
        (
            "Choose light, cool colors with soft intensity",
            "Combine pastels for a fresh, airy look",
            "Use powder blue as a versatile neutral",
            "Avoid colors that are too dark or bright",
        ),
    ),
    "Soft Summer": PaletteProfile(
        "Summer",
        "Muted, cool, gentle colors",
        ("dusty rose", "sage green", "soft teal", "mauve", "pewter", "soft white", "rose brown", "blue gray"),
        ("bright colors", "orange", "black", "pure white"),
        (
            "Embrace muted, gentle colors that won't clash",
            "Mix cool tones in similar intensities",
            "Use rose beige as your perfect neutral",
            "Add interest with soft patterns and textures",
        ),
    ),
    "True Autumn": PaletteProfile(
        "Autumn",
        "Warm, rich, earthy colors",
        ("rust", "golden brown", "olive green", "burnt orange", "deep gold", "brick red", "cream", "chocolate"),
        ("icy colors", "pastels", "black", "pure white"),
        (
            "Wear rich, warm earth tones with confidence",
            "Combine different warm colors for depth",
            "Use golden brown as your signature neutral",
            "Add warmth with copper or gold accessories",
        ),
    ),
    "Soft Autumn": PaletteProfile(
        "Autumn",
        "Muted, warm, earthy colors",
        ("salmon", "sage green", "mushroom", "soft white", "oyster", "stone", "khaki", "pewter"),
        ("bright colors", "black", "pure white", "neon colors"),
        (
            "Choose muted, warm colors that harmonize beautifully",
            "Layer earth tones in similar intensities",
            "Use mushroom or sage as versatile neutrals",
            "Avoid colors that are too bright or cool",
        ),
    ),
    "Deep Autumn": PaletteProfile(
        "Autumn",
        "Deep, warm, rich colors",
        ("burgundy", "forest green", "chocolate brown", "burnt orange", "deep gold", "brick red", "cream", "charcoal"),
        ("pastels", "icy colors", "light colors", "neon colors"),
        (
            "Embrace deep, rich colors that match your intensity",
            "Mix warm jewel tones for dramatic looks",
            "Use chocolate brown as your power neutral",
            "Balance deep colors with warm metallics",
        ),
    ),
    "True Winter": PaletteProfile(
        "Winter",
        "Cool, clear, contrasting colors",
        ("true red", "royal blue", "emerald green", "pure white", "black", "hot pink", "lemon yellow", "purple"),
        ("orange", "yellow-green", "warm colors", "muted colors"),
        (
            "Wear clear, contrasting colors with confidence",
            "Combine cool colors for striking combinations",
            "Use pure white and black as your signature neutrals",
            "Add drama with jewel-toned accessories",
        ),
    ),
    "Bright Winter": PaletteProfile(
        "Winter",
        "Bright, cool, clear colors",
        ("bright red", "electric blue", "hot pink", "pure white", "black", "bright green", "magenta", "royal purple"),
        ("muted colors", "dusty colors", "orange", "yellow-green"),
        (
            "Embrace bright, clear colors that match your vibrancy",
            "Mix cool, bright colors for energetic looks",
            "Use pure white as your perfect neutral",
            "Balance bright colors with black or navy",
        ),
    ),
    "Deep Winter": PaletteProfile(
        "Winter",
        "Deep, cool, dramatic colors",
        ("burgundy", "navy", "forest green", "pure white", "black", "deep purple", "charcoal", "icy blue"),
        ("light colors", "pastels", "orange", "yellow-green"),
        (
            "Choose deep, cool colors that complement your dramatic coloring",
            "Layer dark jewel tones for sophisticated looks",
            "Use charcoal or navy as versatile neutrals",
            "Add contrast with icy accents",
        ),
    ),
}

COLOR_PALETTE_SYSTEM_PROMPT = (
    "You are a professional color analyst specializing in seasonal color analysis. "
    "Return only valid JSON."
)


def color_palette_prompt() -> str:
    seasons: dict[str, list[str]] = {}
    for name, profile in PALETTE_PROFILES.items():
        seasons.setdefault(profile.season, []).append(f"- {name}: {profile.characteristics}")
    families = "\n\n".join(
        f"{season} Types ({'Warm' if season in ('Spring', 'Autumn') else 'Cool'}):\n" + "\n".join(lines)
        for season, lines in seasons.items()
    )
    return f"""\
Analyze this portrait photo to determine the person's seasonal color palette.

Please analyze the following features:
1. Skin tone (warm/cool undertones, depth, clarity)
2. Hair color (natural color, undertones, depth)
3. Eye color (hue, depth, clarity)

Based on your analysis, determine which of these 12 seasonal color palettes best suits this person:

{families}

Provide your response in this exact JSON format:
{{
  "colorPalette": "exact palette name from the list above",
  "skinTone": "description of skin undertones and characteristics",
  "hairColor": "description of hair color and undertones",
  "eyeColor": "description of eye color and characteristics",
  "confidence": number between 0.0 and 1.0,
  "reasoning": "detailed explanation of why this palette was chosen"
}}

Be very specific about the palette name - use exactly one of the 12 names listed above."""


class ColorPaletteAnalyzer(PhotoAnalyzer[ColorPaletteAnalysis, ColorPaletteReport]):
    """Determines the seasonal color palette and its recommended colors."""

    resource_name = COLOR_PALETTE_RESOURCE
    analysis_type = "color-palette"
    result_model = ColorPaletteAnalysis
    default_min_confidence = COLOR_CONFIDENCE_THRESHOLD

    def prompt(self) -> str:
        return color_palette_prompt()

    def system_prompt(self) -> str:
        return COLOR_PALETTE_SYSTEM_PROMPT

    def build_report(self, analysis: ColorPaletteAnalysis, analysis_id: str) -> ColorPaletteReport:
        profile = PALETTE_PROFILES[analysis.color_palette]
        return ColorPaletteReport(
            analysis_id=analysis_id,
            season=analysis.color_palette,
            seasonal_family=profile.season,
            characteristics=profile.characteristics,
            colors=list(profile.colors),
            skin_tone=analysis.skin_tone,
            hair_color=analysis.hair_color,
            eye_color=analysis.eye_color,
            confidence=analysis.confidence,
            reasoning=analysis.reasoning,
            requires_additional_photo=analysis.confidence < self.min_confidence,
            recommendations=ColorRecommendations(
                best_colors=list(profile.colors[:4]),
                avoid_colors=list(profile.avoid),
                tips=list(profile.tips),
            ),
        )

    def record_results(self, analysis: ColorPaletteAnalysis) -> dict[str, Any]:
        profile = PALETTE_PROFILES[analysis.color_palette]
        return {
            "colorPalette": {
                "season": analysis.color_palette,
                "colors": list(profile.colors),
                "skinTone": analysis.skin_tone,
                "hairColor": analysis.hair_color,
                "eyeColor": analysis.eye_color,
            },
            "confidence": analysis.confidence,
        }
