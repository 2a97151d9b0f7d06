"""
Configuration for stylist-ai.

Settings are read from ``STYLIST_*`` environment variables; malformed values
fall back to the defaults.
"""

from __future__ import annotations

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stylist_ai.analysis import BodyShapeAnalyzer, ColorPaletteAnalyzer
from stylist_ai.resilience import (
    AIResilienceOrchestrator,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    RetryManager,
    RetryPolicy,
)
from stylist_ai.telemetry import LogLevel, StylistLogger

if TYPE_CHECKING:
    from stylist_ai.inference import ModelClient
    from stylist_ai.storage import AnalysisStore, ObjectStorage


def _env_int(name: str, default: int) -> int:
    with suppress(ValueError):
        return int(os.getenv(name, str(default)))
    return default


def _env_float(name: str, default: float) -> float:
    with suppress(ValueError):
        return float(os.getenv(name, str(default)))
    return default


@dataclass(frozen=True)
class RetrySettings:
    """Retry settings for model and storage calls.

    Attributes:
        max_retries: Retries after the first attempt
        base_delay: First backoff delay in seconds
        max_delay: Backoff cap in seconds
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0

    @classmethod
    def from_env(cls) -> RetrySettings:
        """Create settings from environment variables."""
        return cls(
            max_retries=max(0, _env_int("STYLIST_RETRY_MAX_RETRIES", 3)),
            base_delay=max(0.0, _env_float("STYLIST_RETRY_BASE_DELAY_SECS", 1.0)),
            max_delay=max(0.0, _env_float("STYLIST_RETRY_MAX_DELAY_SECS", 10.0)),
        )

    def policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )


@dataclass(frozen=True)
class AnalysisSettings:
    """Confidence thresholds for photo analysis."""

    min_confidence: float = 0.70
    color_min_confidence: float = 0.60

    @classmethod
    def from_env(cls) -> AnalysisSettings:
        """Create settings from environment variables."""
        min_confidence = _env_float("STYLIST_MIN_CONFIDENCE", 0.70)
        color_min_confidence = _env_float("STYLIST_COLOR_MIN_CONFIDENCE", 0.60)
        if not 0.0 <= min_confidence <= 1.0:
            min_confidence = 0.70
        if not 0.0 <= color_min_confidence <= 1.0:
            color_min_confidence = 0.60
        return cls(min_confidence=min_confidence, color_min_confidence=color_min_confidence)


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and output format ('json' or 'text')."""

    level: LogLevel = LogLevel.INFO
    format: str = "json"

    @classmethod
    def from_env(cls) -> LoggingSettings:
        """Create settings from environment variables."""
        level = LogLevel.INFO
        with suppress(ValueError):
            level = LogLevel(os.getenv("STYLIST_LOG_LEVEL", "INFO").upper())
        log_format = os.getenv("STYLIST_LOG_FORMAT", "json").lower()
        if log_format not in ("json", "text"):
            log_format = "json"
        return cls(level=level, format=log_format)


@dataclass(frozen=True)
class StylistConfig:
    """Combined configuration.

    Example:
        >>> config = StylistConfig.from_env()
        >>> configure_logging(config)
        >>> orchestrator = config.build_orchestrator()
        >>> analyzer = config.build_body_shape_analyzer(client, orchestrator, storage)
    """

    retry: RetrySettings = field(default_factory=RetrySettings)
    breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def default(cls) -> StylistConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> StylistConfig:
        """Create configuration from environment variables."""
        return cls(
            retry=RetrySettings.from_env(),
            breaker=CircuitBreakerConfig.from_env(),
            analysis=AnalysisSettings.from_env(),
            logging=LoggingSettings.from_env(),
        )

    def build_registry(self) -> CircuitBreakerRegistry:
        """Create the process-wide circuit breaker registry."""
        return CircuitBreakerRegistry(self.breaker)

    def build_orchestrator(
        self,
        registry: CircuitBreakerRegistry | None = None,
        retry_manager: RetryManager | None = None,
    ) -> AIResilienceOrchestrator:
        """Create an orchestrator using these settings."""
        return AIResilienceOrchestrator(
            registry or self.build_registry(),
            retry_manager=retry_manager,
            policy=self.retry.policy(),
        )

    def build_body_shape_analyzer(
        self,
        client: ModelClient,
        orchestrator: AIResilienceOrchestrator,
        storage: ObjectStorage,
        analysis_store: AnalysisStore | None = None,
        *,
        retry_manager: RetryManager | None = None,
    ) -> BodyShapeAnalyzer:
        """Create a body shape analyzer gated at ``analysis.min_confidence``."""
        return BodyShapeAnalyzer(
            client,
            orchestrator,
            storage,
            analysis_store,
            retry_manager=retry_manager,
            min_confidence=self.analysis.min_confidence,
        )

    def build_color_palette_analyzer(
        self,
        client: ModelClient,
        orchestrator: AIResilienceOrchestrator,
        storage: ObjectStorage,
        analysis_store: AnalysisStore | None = None,
        *,
        retry_manager: RetryManager | None = None,
    ) -> ColorPaletteAnalyzer:
        """Create a color palette analyzer gated at ``analysis.color_min_confidence``."""
        return ColorPaletteAnalyzer(
            client,
            orchestrator,
            storage,
            analysis_store,
            retry_manager=retry_manager,
            min_confidence=self.analysis.color_min_confidence,
        )


def configure_logging(config: StylistConfig) -> None:
    """Apply the logging settings of *config* globally."""
    StylistLogger.configure(level=config.logging.level, format=config.logging.format)
