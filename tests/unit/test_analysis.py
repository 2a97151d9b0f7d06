"""Tests for photo analysis flows."""

import base64
import json

import pytest

from stylist_ai.analysis import (
    BODY_SHAPE_RESOURCE,
    COLOR_PALETTE_RESOURCE,
    PALETTE_PROFILES,
    BodyShapeAnalyzer,
    ColorPaletteAnalyzer,
    body_shape_prompt,
    color_palette_prompt,
    requires_additional_photo,
)
from stylist_ai.errors import (
    AIServiceError,
    ErrorKind,
    PhotoAnalysisError,
    StorageError,
    ValidationError,
)
from stylist_ai.storage import MemoryAnalysisStore
from stylist_ai.types import (
    COLOR_PALETTE,
    SILHOUETTE,
    BodyShapeReport,
    ColorPaletteAnalysis,
    ColorPaletteReport,
)

IMAGE_URL = "https://images.example.com/user-1/full-body.jpg"
USER = "user-1"


def _body_shape(confidence: float, shape: str = "waist_balance") -> str:
    return json.dumps(
        {"bodyShape": shape, "confidence": confidence, "reasoning": "Defined waist, balanced frame"}
    )


def _palette(confidence: float, palette: str = "True Autumn") -> str:
    return json.dumps(
        {
            "colorPalette": palette,
            "skinTone": "warm golden undertones",
            "hairColor": "auburn",
            "eyeColor": "hazel",
            "confidence": confidence,
            "reasoning": "Warm, rich coloring throughout",
        }
    )


class BrokenAnalysisStore(MemoryAnalysisStore):
    async def put_analysis(self, record) -> None:
        raise StorageError("table unavailable", kind=ErrorKind.VALIDATION)


class TestPrompts:
    """Tests for analysis prompts."""

    def test_body_shape_prompt_lists_categories(self) -> None:
        """Test every silhouette is offered to the model."""
        prompt = body_shape_prompt()
        assert all(shape in prompt for shape in SILHOUETTE)
        assert '"bodyShape"' in prompt

    def test_color_palette_prompt_lists_palettes(self) -> None:
        """Test every palette is offered, grouped by season."""
        prompt = color_palette_prompt()
        assert all(name in prompt for name in COLOR_PALETTE)
        assert "Spring Types (Warm):" in prompt
        assert "Winter Types (Cool):" in prompt

    def test_palette_profiles_cover_taxonomy(self) -> None:
        """Test each palette has a profile."""
        assert set(PALETTE_PROFILES) == set(COLOR_PALETTE)
        assert all(len(p.colors) >= 4 for p in PALETTE_PROFILES.values())

    def test_requires_additional_photo(self) -> None:
        """Test the follow-up threshold."""
        assert requires_additional_photo(0.69)
        assert not requires_additional_photo(0.70)
        assert requires_additional_photo(0.75, threshold=0.8)


class TestBodyShapeAnalyzer:
    """Tests for BodyShapeAnalyzer."""

    @pytest.fixture
    def analyzer(self, fake_client, orchestrator, fake_storage, analysis_store, retry_manager):
        return BodyShapeAnalyzer(
            fake_client, orchestrator, fake_storage, analysis_store, retry_manager=retry_manager
        )

    @pytest.mark.asyncio
    async def test_confident_result(self, analyzer, fake_client, fake_storage, analysis_store) -> None:
        """Test a confident analysis succeeds and is stored."""
        fake_client.queue(_body_shape(0.85))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.success
        report = result.data
        assert isinstance(report, BodyShapeReport)
        assert report.body_shape == "waist_balance"
        assert not report.requires_additional_photo

        call = fake_client.calls[0]
        assert call.kind == "image"
        assert call.image_base64 == base64.b64encode(fake_storage.content).decode("ascii")
        assert fake_storage.downloads == [IMAGE_URL]

        record = await analysis_store.get_analysis(USER, report.analysis_id)
        assert record.type == "body-shape"
        assert record.results == {
            "bodyShape": "waist_balance",
            "confidence": 0.85,
            "reasoning": "Defined waist, balanced frame",
        }
        assert not record.user_confirmed

    @pytest.mark.asyncio
    async def test_low_confidence_is_soft_fail(self, analyzer, fake_client, analysis_store) -> None:
        """Test a 0.65 confidence result asks for another photo."""
        fake_client.queue(_body_shape(0.65))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert not result.success
        assert result.is_soft_fail
        assert result.data.requires_additional_photo
        assert result.data.confidence == 0.65
        assert isinstance(result.error, PhotoAnalysisError)
        assert result.error.kind == ErrorKind.LOW_CONFIDENCE
        assert len(await analysis_store.list_analyses(USER)) == 1

    @pytest.mark.asyncio
    async def test_malformed_result(self, analyzer, fake_client, analysis_store) -> None:
        """Test an unknown category is a hard failure with nothing stored."""
        fake_client.queue(_body_shape(0.9, shape="hourglass"))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.data is None
        assert isinstance(result.error, PhotoAnalysisError)
        assert await analysis_store.list_analyses(USER) == []

    @pytest.mark.asyncio
    async def test_missing_image_is_not_retried(
        self, fake_client, orchestrator, make_storage, retry_manager
    ) -> None:
        """Test a 404 download fails at once without a model call."""
        storage = make_storage(b"", StorageError("not found", kind=ErrorKind.NOT_FOUND))
        analyzer = BodyShapeAnalyzer(fake_client, orchestrator, storage, retry_manager=retry_manager)

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert isinstance(result.error, StorageError)
        assert result.error.kind == ErrorKind.NOT_FOUND
        assert len(storage.downloads) == 1
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_transient_download_is_retried(
        self, fake_client, orchestrator, make_storage, retry_manager
    ) -> None:
        """Test a 500 download is retried before analysis proceeds."""
        storage = make_storage(b"image", StorageError("server error", kind=ErrorKind.SERVER_ERROR))
        analyzer = BodyShapeAnalyzer(fake_client, orchestrator, storage, retry_manager=retry_manager)
        fake_client.queue(_body_shape(0.8))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.success
        assert len(storage.downloads) == 2

    @pytest.mark.asyncio
    async def test_foreign_download_error_becomes_storage_error(
        self, fake_client, orchestrator, make_storage, retry_manager
    ) -> None:
        """Test an adapter raising a plain exception yields a StorageError result."""
        storage = make_storage(b"", RuntimeError("bucket client misconfigured"))
        analyzer = BodyShapeAnalyzer(fake_client, orchestrator, storage, retry_manager=retry_manager)

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert not result.success
        assert result.data is None
        assert isinstance(result.error, StorageError)
        assert result.error.kind == ErrorKind.INTERNAL
        assert isinstance(result.error.__cause__, RuntimeError)
        assert len(storage.downloads) == 1
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_foreign_connection_error_is_retried(
        self, fake_client, orchestrator, make_storage, retry_manager
    ) -> None:
        """Test a connection-level adapter failure is retried like a network error."""
        storage = make_storage(b"image", ConnectionResetError("reset by peer"))
        analyzer = BodyShapeAnalyzer(fake_client, orchestrator, storage, retry_manager=retry_manager)
        fake_client.queue(_body_shape(0.8))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.success
        assert len(storage.downloads) == 2

    @pytest.mark.asyncio
    async def test_model_failure(self, analyzer, fake_client, orchestrator) -> None:
        """Test exhausted model retries surface the service error."""
        fake_client.queue(*[AIServiceError("overloaded", kind=ErrorKind.OVERLOADED) for _ in range(4)])

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert isinstance(result.error, AIServiceError)
        assert len(fake_client.calls) == 4
        assert BODY_SHAPE_RESOURCE in orchestrator.registry.names()

    @pytest.mark.asyncio
    async def test_record_write_failure_is_not_fatal(
        self, fake_client, orchestrator, fake_storage, retry_manager
    ) -> None:
        """Test the analysis is returned even if storing the record fails."""
        analyzer = BodyShapeAnalyzer(
            fake_client, orchestrator, fake_storage, BrokenAnalysisStore(), retry_manager=retry_manager
        )
        fake_client.queue(_body_shape(0.9))

        result = await analyzer.analyze(IMAGE_URL, USER)
        assert result.success

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("image_url", "user_id"), [("", USER), (IMAGE_URL, ""), ("  ", USER)])
    async def test_missing_fields(self, analyzer, image_url, user_id) -> None:
        """Test required request fields."""
        with pytest.raises(ValidationError):
            await analyzer.analyze(image_url, user_id)

    def test_invalid_threshold(self, fake_client, orchestrator, fake_storage) -> None:
        """Test analyzers reject thresholds outside [0, 1]."""
        with pytest.raises(ValueError):
            BodyShapeAnalyzer(fake_client, orchestrator, fake_storage, min_confidence=1.2)

    def test_default_threshold(self, analyzer) -> None:
        """Test body shape accepts from 0.70."""
        assert analyzer.min_confidence == 0.70


class TestColorPaletteAnalyzer:
    """Tests for ColorPaletteAnalyzer."""

    @pytest.fixture
    def analyzer(self, fake_client, orchestrator, fake_storage, analysis_store, retry_manager):
        return ColorPaletteAnalyzer(
            fake_client, orchestrator, fake_storage, analysis_store, retry_manager=retry_manager
        )

    def test_default_threshold(self, analyzer) -> None:
        """Test color palette accepts from 0.60."""
        assert analyzer.min_confidence == 0.60

    @pytest.mark.asyncio
    async def test_report(self, analyzer, fake_client, analysis_store, orchestrator) -> None:
        """Test the report carries profile colors and recommendations."""
        fake_client.queue(_palette(0.8))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.success
        report = result.data
        assert isinstance(report, ColorPaletteReport)
        assert report.season == "True Autumn"
        assert report.seasonal_family == "Autumn"
        assert report.colors == list(PALETTE_PROFILES["True Autumn"].colors)
        assert report.recommendations.best_colors == report.colors[:4]
        assert "pastels" in report.recommendations.avoid_colors
        assert report.hair_color == "auburn"
        assert not report.requires_additional_photo

        record = await analysis_store.get_analysis(USER, report.analysis_id)
        assert record.type == "color-palette"
        assert record.results["colorPalette"]["season"] == "True Autumn"
        assert record.results["confidence"] == 0.8

        assert fake_client.calls[0].system_prompt.startswith("You are a professional color analyst")
        assert COLOR_PALETTE_RESOURCE in orchestrator.registry.names()

    @pytest.mark.asyncio
    async def test_low_confidence(self, analyzer, fake_client) -> None:
        """Test a result below 0.60 is a soft failure."""
        fake_client.queue(_palette(0.55, palette="Soft Summer"))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.is_soft_fail
        assert result.data.requires_additional_photo
        assert result.data.season == "Soft Summer"

    @pytest.mark.asyncio
    async def test_unknown_palette(self, analyzer, fake_client) -> None:
        """Test a palette outside the taxonomy is rejected."""
        fake_client.queue(_palette(0.9, palette="Warm Spring"))

        result = await analyzer.analyze(IMAGE_URL, USER)

        assert result.data is None
        assert result.error.message == "AI returned invalid response format"

    def test_wire_format(self, analyzer) -> None:
        """Test report serialisation keys."""
        report = analyzer.build_report(
            ColorPaletteAnalysis(color_palette="Deep Winter", confidence=0.9), "a-1"
        )
        wire = report.to_wire()
        assert wire["analysisId"] == "a-1"
        assert wire["seasonalFamily"] == "Winter"
        assert set(wire["recommendations"]) == {"bestColors", "avoidColors", "tips"}
