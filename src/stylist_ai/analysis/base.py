"""
Shared photo analysis flow.

download image -> gated vision call -> report -> best-effort record write.
Subclasses supply the prompts, the result model and the report shape.
"""

from __future__ import annotations

import base64
import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Literal, TypeVar

from pydantic import BaseModel

from stylist_ai.errors import AppError, StorageError, ValidationError, classify_exception
from stylist_ai.resilience import AnalysisResult, ConfidenceGate, RetryManager, RetryPolicy
from stylist_ai.structured import extract_json_object
from stylist_ai.telemetry import get_logger, log_context
from stylist_ai.types import AnalysisRecord

if TYPE_CHECKING:
    from stylist_ai.inference import ModelClient
    from stylist_ai.resilience import AIResilienceOrchestrator
    from stylist_ai.storage import AnalysisStore, ObjectStorage

A = TypeVar("A", bound=BaseModel)
R = TypeVar("R", bound=BaseModel)

logger = get_logger("stylist_ai.analysis")


class PhotoAnalyzer(ABC, Generic[A, R]):
    """Base class for confidence-gated photo analysis."""

    resource_name: ClassVar[str]
    analysis_type: ClassVar[Literal["body-shape", "color-palette"]]
    result_model: ClassVar[type[BaseModel]]
    default_min_confidence: ClassVar[float] = 0.70

    def __init__(
        self,
        client: ModelClient,
        orchestrator: AIResilienceOrchestrator,
        storage: ObjectStorage,
        analysis_store: AnalysisStore | None = None,
        *,
        retry_manager: RetryManager | None = None,
        storage_policy: RetryPolicy | None = None,
        min_confidence: float | None = None,
    ) -> None:
        """Initialize analyzer.

        Args:
            client: Vision-capable model client
            orchestrator: Shared orchestrator
            storage: Object storage for image downloads
            analysis_store: Optional store for analysis records
            retry_manager: Retry manager for downloads and record writes
            storage_policy: Retry policy for downloads and record writes
            min_confidence: Acceptance threshold (class default if None)
        """
        self._client = client
        self._orchestrator = orchestrator
        self._storage = storage
        self._analysis_store = analysis_store
        self._retry = retry_manager or RetryManager()
        self._storage_policy = storage_policy or orchestrator.policy
        self._min_confidence = (
            self.default_min_confidence if min_confidence is None else min_confidence
        )
        if not 0.0 <= self._min_confidence <= 1.0:
            raise ValueError("min_confidence must be between 0 and 1")
        self._gate: ConfidenceGate[Any] = ConfidenceGate(self.result_model)

    @property
    def min_confidence(self) -> float:
        return self._min_confidence

    @abstractmethod
    def prompt(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def system_prompt(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def build_report(self, analysis: A, analysis_id: str) -> R:
        raise NotImplementedError

    @abstractmethod
    def record_results(self, analysis: A) -> dict[str, Any]:
        """Results stored with the analysis record."""
        raise NotImplementedError

    async def analyze(self, image_url: str, user_id: str) -> AnalysisResult[R]:
        """Analyze the image at *image_url* for *user_id*.

        Returns:
            Success with the report; low confidence as failure with the
            report and a PhotoAnalysisError; other failures without data

        Raises:
            ValidationError: If ``image_url`` or ``user_id`` is empty
        """
        if not image_url or not image_url.strip():
            raise ValidationError("Missing required field: imageUrl", field="imageUrl")
        if not user_id or not user_id.strip():
            raise ValidationError("Missing required field: userId", field="userId")

        with log_context(user_id=user_id):
            try:
                image = await self._retry.with_retry(
                    lambda: self._download(image_url), self._storage_policy
                )
            except AppError as e:
                logger.warning("Image download failed", code=e.code, kind=e.kind.value)
                return AnalysisResult.fail(e)

            image_base64 = base64.b64encode(image).decode("ascii")
            prompt = self.prompt()
            system_prompt = self.system_prompt()

            async def call() -> str:
                return await self._client.send_message_with_image(image_base64, prompt, system_prompt)

            result = await self._orchestrator.run_gated_call(
                call,
                self.resource_name,
                self._min_confidence,
                self._gate,
                parse=extract_json_object,
            )
            if result.data is None:
                return AnalysisResult.fail(result.error)  # type: ignore[arg-type]

            analysis: A = result.data
            analysis_id = str(uuid.uuid4())
            report = self.build_report(analysis, analysis_id)
            await self._store_record(user_id, analysis_id, image_url, analysis)

            if result.success:
                return AnalysisResult.ok(report)
            return AnalysisResult.fail(result.error, data=report)  # type: ignore[arg-type]

    async def _download(self, image_url: str) -> bytes:
        """Download one image, reporting foreign failures as ``StorageError``."""
        try:
            return await self._storage.download(image_url)
        except AppError:
            raise
        except Exception as e:
            raise StorageError("Failed to download image", kind=classify_exception(e)) from e

    async def _store_record(
        self,
        user_id: str,
        analysis_id: str,
        image_url: str,
        analysis: A,
    ) -> None:
        if self._analysis_store is None:
            return

        record = AnalysisRecord(
            user_id=user_id,
            analysis_id=analysis_id,
            type=self.analysis_type,
            image_url=image_url,
            results=self.record_results(analysis),
        )
        store = self._analysis_store
        try:
            await self._retry.with_retry(lambda: store.put_analysis(record), self._storage_policy)
        except Exception as e:
            logger.warning(
                "Failed to store analysis results",
                analysis_id=analysis_id,
                error_type=type(e).__name__,
            )
