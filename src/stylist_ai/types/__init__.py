"""
Type definitions for stylist-ai.

Provides the style taxonomies, session model and photo analysis models.
"""

from stylist_ai.types.analysis import (
    AnalysisRecord,
    BodyShapeAnalysis,
    BodyShapeReport,
    ColorPaletteAnalysis,
    ColorPaletteReport,
    ColorRecommendations,
)
from stylist_ai.types.base import WireModel
from stylist_ai.types.schemas import (
    ARCHETYPE,
    COLOR_PALETTE,
    EMOTIONS,
    ESSENCE,
    LIFESTYLE,
    SCHEMA_METADATA,
    SILHOUETTE,
    VALUES,
    SchemaInfo,
    find_similar_tags,
    get_schema_info,
)
from stylist_ai.types.session import (
    REQUIRED_FIELDS,
    STEP_REQUIRED_FIELDS,
    ConversationMessage,
    ConversationSession,
    ExtractedData,
    OnboardingStep,
)

__all__ = [
    # Analysis
    "AnalysisRecord",
    "BodyShapeAnalysis",
    "BodyShapeReport",
    "ColorPaletteAnalysis",
    "ColorPaletteReport",
    "ColorRecommendations",
    # Base
    "WireModel",
    # Taxonomies
    "ARCHETYPE",
    "COLOR_PALETTE",
    "EMOTIONS",
    "ESSENCE",
    "LIFESTYLE",
    "SCHEMA_METADATA",
    "SILHOUETTE",
    "VALUES",
    "SchemaInfo",
    "find_similar_tags",
    "get_schema_info",
    # Session
    "REQUIRED_FIELDS",
    "STEP_REQUIRED_FIELDS",
    "ConversationMessage",
    "ConversationSession",
    "ExtractedData",
    "OnboardingStep",
]
