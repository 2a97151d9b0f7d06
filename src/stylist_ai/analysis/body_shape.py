"""
Body shape analysis from a full-body photo.
"""

from __future__ import annotations

from typing import Any

from stylist_ai.analysis.base import PhotoAnalyzer
from stylist_ai.types import SILHOUETTE, BodyShapeAnalysis, BodyShapeReport

BODY_SHAPE_RESOURCE = "bedrock-vision-body-shape"
CONFIDENCE_THRESHOLD = 0.70

BODY_SHAPE_SYSTEM_PROMPT = """\
You are a professional body shape analyst. Analyze the full-body photo to determine the \
person's body silhouette according to these specific categories:

- middle_balance: Weight/volume concentrated in the torso/middle section
- lower_balance: Weight/volume concentrated in hips, thighs, and lower body
- waist_balance: Defined waist with balanced proportions between upper and lower body
- upper_balance: Weight/volume concentrated in shoulders, bust, and upper body
- equal_balance: Even weight/volume distribution throughout the body

Focus on silhouette and proportions, not body size. Be objective and professional. Provide \
accurate confidence scores based on photo clarity and how clearly the body shape can be \
determined."""


def requires_additional_photo(confidence: float, threshold: float = CONFIDENCE_THRESHOLD) -> bool:
    return confidence < threshold


def body_shape_prompt() -> str:
    return f"""\
Analyze this full-body photo to determine the body shape category. Provide your analysis in \
this exact JSON format:

{{
  "bodyShape": "category_name",
  "confidence": 0.85,
  "reasoning": "Brief explanation of your analysis focusing on proportions and silhouette"
}}

The bodyShape must be one of: {", ".join(SILHOUETTE)}
Confidence should be between 0.0 and 1.0

Focus on:
- Overall silhouette and proportions
- Where the person carries most of their weight/volume
- Balance between upper body, waist, and lower body
- Be objective and professional in your assessment"""


class BodyShapeAnalyzer(PhotoAnalyzer[BodyShapeAnalysis, BodyShapeReport]):
    """Classifies body silhouette; below 0.70 confidence another photo is requested.

    Example:
        >>> analyzer = BodyShapeAnalyzer(client, orchestrator, storage, analysis_store)
        >>> result = await analyzer.analyze(image_url, "user-1")
        >>> if result.is_soft_fail:
        ...     assert result.data.requires_additional_photo
    """

    resource_name = BODY_SHAPE_RESOURCE
    analysis_type = "body-shape"
    result_model = BodyShapeAnalysis
    default_min_confidence = CONFIDENCE_THRESHOLD

    def prompt(self) -> str:
        return body_shape_prompt()

    def system_prompt(self) -> str:
        return BODY_SHAPE_SYSTEM_PROMPT

    def build_report(self, analysis: BodyShapeAnalysis, analysis_id: str) -> BodyShapeReport:
        return BodyShapeReport(
            body_shape=analysis.body_shape,
            confidence=analysis.confidence,
            reasoning=analysis.reasoning,
            analysis_id=analysis_id,
            requires_additional_photo=requires_additional_photo(
                analysis.confidence, self.min_confidence
            ),
        )

    def record_results(self, analysis: BodyShapeAnalysis) -> dict[str, Any]:
        return {
            "bodyShape": analysis.body_shape,
            "confidence": analysis.confidence,
            "reasoning": analysis.reasoning,
        }
