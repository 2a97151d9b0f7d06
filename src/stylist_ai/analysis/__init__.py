"""
Photo analysis flows for stylist-ai.
"""

from stylist_ai.analysis.base import PhotoAnalyzer
from stylist_ai.analysis.body_shape import (
    BODY_SHAPE_RESOURCE,
    CONFIDENCE_THRESHOLD,
    BodyShapeAnalyzer,
    body_shape_prompt,
    requires_additional_photo,
)
from stylist_ai.analysis.color_palette import (
    COLOR_CONFIDENCE_THRESHOLD,
    COLOR_PALETTE_RESOURCE,
    PALETTE_PROFILES,
    ColorPaletteAnalyzer,
    PaletteProfile,
    color_palette_prompt,
)

__all__ = [
    "BODY_SHAPE_RESOURCE",
    "COLOR_CONFIDENCE_THRESHOLD",
    "COLOR_PALETTE_RESOURCE",
    "CONFIDENCE_THRESHOLD",
    "PALETTE_PROFILES",
    "BodyShapeAnalyzer",
    "ColorPaletteAnalyzer",
    "PaletteProfile",
    "PhotoAnalyzer",
    "body_shape_prompt",
    "color_palette_prompt",
    "requires_additional_photo",
]
