"""
Confidence gate for structured model results.

A model response can parse cleanly and still be too uncertain to act on.
The gate first validates the result against a Pydantic model, then compares
its self-reported ``confidence`` with the caller's threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import pydantic

from stylist_ai.errors import ValidationError

T = TypeVar("T", bound=pydantic.BaseModel)

DEFAULT_MIN_CONFIDENCE = 0.70


@dataclass(frozen=True)
class GateDecision(Generic[T]):
    """Outcome of a confidence evaluation.

    Attributes:
        accept: True when confidence meets the threshold
        data: The validated result, present for accept and soft-fail alike
        requires_followup: True when another input is recommended
    """

    accept: bool
    data: T
    requires_followup: bool

    @property
    def confidence(self) -> float:
        return float(getattr(self.data, "confidence"))


class ConfidenceGate(Generic[T]):
    """Validates a result and classifies it as accept or soft-fail.

    Malformed results raise ``ValidationError`` (hard-fail).

    Example:
        >>> gate = ConfidenceGate(BodyShapeAnalysis)
        >>> decision = gate.evaluate(
        ...     {"bodyShape": "waist_balance", "confidence": 0.69, "reasoning": "..."},
        ...     0.70,
        ... )
        >>> decision.requires_followup
        True
    """

    def __init__(self, model: type[T]) -> None:
        if "confidence" not in model.model_fields:
            raise TypeError(f"{model.__name__} has no 'confidence' field")
        self._model = model

    @property
    def model(self) -> type[T]:
        return self._model

    def validate(self, result: Any) -> T:
        """Validate *result* against the gate's model.

        Raises:
            ValidationError: If required fields are missing or out of domain
        """
        if isinstance(result, self._model):
            return result
        if not isinstance(result, dict):
            raise ValidationError("Invalid analysis result format")
        try:
            return self._model.model_validate(result)
        except pydantic.ValidationError as e:
            errors = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            raise ValidationError(
                f"Invalid {self._model.__name__}: {errors[0]['message'] if errors else e}",
                details={"errors": errors},
            ) from e

    def evaluate(self, result: Any, min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> GateDecision[T]:
        """Evaluate a result against a minimum confidence.

        Args:
            result: Parsed result (dict or model instance)
            min_confidence: Inclusive threshold in [0, 1]

        Returns:
            GateDecision; a confidence equal to the threshold is accepted

        Raises:
            ValueError: If min_confidence is outside [0, 1]
            ValidationError: If the result is malformed
        """
        if not 0.0 <= min_confidence <= 1.0:
            raise ValueError("min_confidence must be between 0 and 1")

        data = self.validate(result)
        accept = data.confidence >= min_confidence  # type: ignore[attr-defined]
        return GateDecision(accept=accept, data=data, requires_followup=not accept)
