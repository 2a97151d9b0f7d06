"""
Photo analysis models.

``BodyShapeAnalysis`` and ``ColorPaletteAnalysis`` validate the raw model
output; the ``*Report`` models are what the HTTP layer returns.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import Field, field_validator

from stylist_ai.types.base import WireModel
from stylist_ai.types.schemas import COLOR_PALETTE, SILHOUETTE


class BodyShapeAnalysis(WireModel):
    """Model output for a full-body photo."""

    body_shape: str
    confidence: float = Field(ge=0.0, le=1.0, strict=True)
    reasoning: str = Field(min_length=1)

    @field_validator("body_shape")
    @classmethod
    def _known_shape(cls, value: str) -> str:
        if value not in SILHOUETTE:
            raise ValueError(f"Invalid body shape category: {value!r}")
        return value

    @field_validator("reasoning")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Missing or invalid reasoning")
        return value


class ColorPaletteAnalysis(WireModel):
    """Model output for a portrait photo."""

    color_palette: str
    confidence: float = Field(ge=0.0, le=1.0, strict=True)
    skin_tone: str = ""
    hair_color: str = ""
    eye_color: str = ""
    reasoning: str = ""

    @field_validator("color_palette")
    @classmethod
    def _known_palette(cls, value: str) -> str:
        if value not in COLOR_PALETTE:
            raise ValueError(f"Unknown color palette: {value!r}")
        return value


class BodyShapeReport(WireModel):
    """Body shape result as returned to the client."""

    body_shape: str
    confidence: float
    reasoning: str
    analysis_id: str
    requires_additional_photo: bool


class ColorRecommendations(WireModel):
    best_colors: list[str]
    avoid_colors: list[str]
    tips: list[str]


class ColorPaletteReport(WireModel):
    """Color palette result as returned to the client."""

    analysis_id: str
    season: str
    seasonal_family: str
    characteristics: str
    colors: list[str]
    skin_tone: str
    hair_color: str
    eye_color: str
    confidence: float
    reasoning: str
    requires_additional_photo: bool
    recommendations: ColorRecommendations


class AnalysisRecord(WireModel):
    """Stored analysis, pending user confirmation."""

    user_id: str
    analysis_id: str
    type: Literal["body-shape", "color-palette"]
    image_url: str
    results: dict[str, Any]
    user_confirmed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
