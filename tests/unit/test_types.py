"""Tests for type definitions."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from stylist_ai.types import (
    ARCHETYPE,
    COLOR_PALETTE,
    EMOTIONS,
    REQUIRED_FIELDS,
    SCHEMA_METADATA,
    SILHOUETTE,
    AnalysisRecord,
    BodyShapeAnalysis,
    ColorPaletteAnalysis,
    ConversationSession,
    ExtractedData,
    OnboardingStep,
    find_similar_tags,
    get_schema_info,
)


def _complete_data() -> ExtractedData:
    return ExtractedData(
        emotions=["Confident"],
        archetype=["The Hero"],
        essence=["Classic"],
        lifestyle=["Professional"],
        values=["Sustainable"],
        zip_code="10001",
        max_budget=500,
    )


class TestOnboardingStep:
    """Tests for OnboardingStep ordering."""

    def test_declaration_order(self) -> None:
        """Test the fixed step order."""
        assert [step.value for step in OnboardingStep] == [
            "greeting",
            "emotions",
            "archetype",
            "essence",
            "lifestyle",
            "values",
            "location",
            "budget",
            "complete",
        ]

    def test_ordering_follows_declaration(self) -> None:
        """Test comparison uses position, not string order."""
        assert OnboardingStep.GREETING < OnboardingStep.EMOTIONS
        assert OnboardingStep.VALUES < OnboardingStep.LOCATION
        assert OnboardingStep.BUDGET <= OnboardingStep.BUDGET
        assert OnboardingStep.COMPLETE > OnboardingStep.ARCHETYPE
        assert max(OnboardingStep) is OnboardingStep.COMPLETE

    def test_next(self) -> None:
        """Test stepping forward one at a time."""
        assert OnboardingStep.GREETING.next() is OnboardingStep.EMOTIONS
        assert OnboardingStep.VALUES.next() is OnboardingStep.LOCATION
        assert OnboardingStep.BUDGET.next() is OnboardingStep.COMPLETE
        assert OnboardingStep.COMPLETE.next() is OnboardingStep.COMPLETE

    def test_required_fields(self) -> None:
        """Test step to field mapping."""
        assert OnboardingStep.GREETING.required_fields == ()
        assert OnboardingStep.EMOTIONS.required_fields == ("emotions",)
        assert OnboardingStep.LOCATION.required_fields == ("zip_code",)
        assert OnboardingStep.BUDGET.required_fields == ("max_budget",)
        assert OnboardingStep.COMPLETE.required_fields == ()
        assert len(REQUIRED_FIELDS) == 7

    def test_terminal(self) -> None:
        """Test only COMPLETE is terminal."""
        assert OnboardingStep.COMPLETE.is_terminal
        assert not OnboardingStep.BUDGET.is_terminal


class TestExtractedData:
    """Tests for ExtractedData."""

    def test_empty(self) -> None:
        """Test nothing collected."""
        data = ExtractedData()
        assert data.collected() == []
        assert data.missing() == list(REQUIRED_FIELDS)
        assert not data.is_complete

    def test_empty_list_is_not_collected(self) -> None:
        """Test an empty tag list does not satisfy a step."""
        assert not ExtractedData(emotions=[]).has("emotions")
        assert ExtractedData(emotions=["Bold"]).has("emotions")

    def test_complete(self) -> None:
        """Test all fields present."""
        assert _complete_data().is_complete

    def test_merged_is_a_copy(self) -> None:
        """Test merging returns a new object and ignores unknown keys."""
        data = ExtractedData(emotions=["Bold"])
        merged = data.merged({"archetype": ["The Sage"], "favorite_color": "red"})

        assert merged.archetype == ["The Sage"]
        assert merged.emotions == ["Bold"]
        assert data.archetype is None

    def test_wire_format(self) -> None:
        """Test camelCase serialisation without unset fields."""
        data = ExtractedData(zip_code="94110", max_budget=250)
        assert data.to_wire() == {"zipCode": "94110", "maxBudget": 250}
        assert ExtractedData.model_validate({"zipCode": "94110"}).zip_code == "94110"


class TestConversationSession:
    """Tests for ConversationSession."""

    def test_defaults(self) -> None:
        """Test a new session."""
        session = ConversationSession(user_id="u-1")
        assert session.current_step is OnboardingStep.GREETING
        assert not session.is_complete
        assert session.version == 0
        assert session.conversation_history == []
        assert session.session_id

    def test_session_ids_are_unique(self) -> None:
        """Test each session gets its own id."""
        assert ConversationSession(user_id="u").session_id != ConversationSession(user_id="u").session_id

    def test_complete_requires_complete_step(self) -> None:
        """Test is_complete and COMPLETE step must agree."""
        with pytest.raises(PydanticValidationError):
            ConversationSession(user_id="u", is_complete=True, extracted_data=_complete_data())
        with pytest.raises(PydanticValidationError):
            ConversationSession(user_id="u", current_step=OnboardingStep.COMPLETE)

    def test_complete_requires_all_fields(self) -> None:
        """Test a complete session needs every field."""
        with pytest.raises(PydanticValidationError):
            ConversationSession(
                user_id="u",
                current_step=OnboardingStep.COMPLETE,
                is_complete=True,
                extracted_data=ExtractedData(emotions=["Bold"]),
            )

        session = ConversationSession(
            user_id="u",
            current_step=OnboardingStep.COMPLETE,
            is_complete=True,
            extracted_data=_complete_data(),
        )
        assert session.is_complete

    def test_add_message(self) -> None:
        """Test appending to the history."""
        session = ConversationSession(user_id="u")
        session.add_message("user", "Hi")
        session.add_message("assistant", "Hello!")
        assert [m.role for m in session.conversation_history] == ["user", "assistant"]

    def test_wire_format(self) -> None:
        """Test camelCase keys."""
        wire = ConversationSession(user_id="u").to_wire()
        assert wire["currentStep"] == "greeting"
        assert wire["isComplete"] is False
        assert "sessionId" in wire
        assert "conversationHistory" in wire


class TestSchemas:
    """Tests for style taxonomies."""

    def test_sizes(self) -> None:
        """Test taxonomy sizes."""
        assert len(EMOTIONS) == 15
        assert len(ARCHETYPE) == 12
        assert len(SILHOUETTE) == 5
        assert len(COLOR_PALETTE) == 12

    def test_metadata(self) -> None:
        """Test schema metadata lookup."""
        info = get_schema_info("archetype")
        assert info is not None
        assert info.tags == ARCHETYPE
        assert set(info.examples) <= set(ARCHETYPE)
        assert get_schema_info("unknown") is None
        assert set(SCHEMA_METADATA) >= {"emotions", "values", "silhouette", "color_palette"}

    def test_find_similar_tags(self) -> None:
        """Test substring tag search."""
        assert find_similar_tags("sustainable", "values") == ["Sustainable"]
        assert "Secondhand / Vintage" in find_similar_tags("vintage", "values")
        assert find_similar_tags("anything", "nope") == []


class TestAnalysisModels:
    """Tests for photo analysis models."""

    def test_body_shape_from_wire(self) -> None:
        """Test camelCase model output is accepted."""
        analysis = BodyShapeAnalysis.model_validate(
            {"bodyShape": "upper_balance", "confidence": 0.7, "reasoning": "Broad shoulders"}
        )
        assert analysis.body_shape == "upper_balance"

    def test_body_shape_rejects_blank_reasoning(self) -> None:
        """Test blank reasoning is rejected."""
        with pytest.raises(PydanticValidationError):
            BodyShapeAnalysis(body_shape="upper_balance", confidence=0.7, reasoning="   ")

    def test_color_palette_rejects_unknown(self) -> None:
        """Test palette names must be exact."""
        with pytest.raises(PydanticValidationError):
            ColorPaletteAnalysis(color_palette="Warm Spring", confidence=0.9)
        assert ColorPaletteAnalysis(color_palette="Deep Winter", confidence=0.9).skin_tone == ""

    def test_analysis_record(self) -> None:
        """Test stored record defaults."""
        record = AnalysisRecord(
            user_id="u",
            analysis_id="a-1",
            type="body-shape",
            image_url="https://images.example.com/u/body.jpg",
            results={"bodyShape": "equal_balance"},
        )
        assert not record.user_confirmed
        assert record.to_wire()["imageUrl"] == "https://images.example.com/u/body.jpg"
