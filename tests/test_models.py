# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the API models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - camelCase client fields map onto snake_case attributes
# - Default values work as expected
#
# Run with: poetry run pytest tests/test_models.py -v
# =============================================================================

from datetime import datetime
from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.models import (
    ActivityGroup,
    AnswerCreate,
    ChallengeCreate,
    ChallengeResponse,
    ChallengeStatus,
    CoupleLevelResponse,
    DailyChallengeCreate,
    MarkSeenRequest,
    MessageCreate,
    QuestionCreate,
    RewardCreate,
    RewardList,
    RewardUpdate,
)


# =============================================================================
# Feed Model Tests
# =============================================================================

class TestActivityGroup:
    """Tests for ActivityGroup model."""

    def test_valid_group(self):
        """Test creating a rendered feed line."""
        group = ActivityGroup(
            ids=["e1", "e2"],
            actor_id="user-a",
            actor_name="Ana",
            action="create_message",
            count=2,
            text="Ana envio 2 mensajes nuevos",
            created_at="2026-01-15T10:30:00Z",
            seen=False,
        )

        assert group.count == 2
        assert isinstance(group.created_at, datetime)

    def test_count_must_be_positive(self):
        """An empty group is never rendered."""
        with pytest.raises(ValidationError):
            ActivityGroup(actor_name="Ana", action="x", count=0, text="", seen=True)

    def test_mark_seen_ids_optional(self):
        """Omitting ids means 'mark everything'."""
        assert MarkSeenRequest().ids is None
        event_id = uuid4()
        assert MarkSeenRequest(ids=[str(event_id)]).ids == [event_id]

    def test_mark_seen_rejects_non_uuid_ids(self):
        with pytest.raises(ValidationError):
            MarkSeenRequest(ids=["e1"])


# =============================================================================
# Challenge Model Tests
# =============================================================================

class TestChallengeModels:
    """Tests for challenge schemas."""

    def test_create_defaults(self):
        """Stars are optional; the service clamps them."""
        # Arrange & Act
        request = ChallengeCreate(title="Cocinar juntos")

        # Assert
        assert request.stars is None
        assert request.description is None

    def test_create_requires_title(self):
        """Empty titles are rejected."""
        with pytest.raises(ValidationError):
            ChallengeCreate(title="")

    def test_status_values(self):
        """Status values match the stored strings."""
        assert [s.value for s in ChallengeStatus] == [
            "pending", "accepted", "reported_accomplishment", "completed",
        ]

    def test_response_parses_row(self):
        """A store row parses into ChallengeResponse."""
        row = {
            "id": "c1",
            "couple_id": "couple-1",
            "created_by": "user-a",
            "title": "Cocinar",
            "stars": 3,
            "status": "accepted",
            "accepted_by": "user-b",
            "created_at": "2026-01-15T10:30:00+00:00",
        }

        response = ChallengeResponse(**row)

        assert response.status == ChallengeStatus.ACCEPTED
        assert response.reported_at is None


# =============================================================================
# Daily Challenge Model Tests
# =============================================================================

class TestDailyChallengeCreate:
    """Tests for DailyChallengeCreate model."""

    def test_stars_required(self):
        """Daily challenges must say how many stars they are worth."""
        with pytest.raises(ValidationError):
            DailyChallengeCreate(title="Abrazo")

    def test_fractional_stars_accepted(self):
        """Truncation happens in the service, not the model."""
        assert DailyChallengeCreate(title="Abrazo", stars=2.5).stars == 2.5


# =============================================================================
# Reward Model Tests
# =============================================================================

class TestRewardModels:
    """Tests for reward schemas."""

    def test_camel_case_alias(self):
        """The mobile client sends starsRequired."""
        request = RewardCreate.model_validate({"title": "Masaje", "starsRequired": 5})

        assert request.stars_required == 5

    def test_snake_case_accepted(self):
        """populate_by_name allows the attribute name too."""
        request = RewardCreate.model_validate({"title": "Masaje", "stars_required": 3})

        assert request.stars_required == 3

    def test_update_tracks_sent_fields(self):
        """Only fields present in the body count as changes."""
        request = RewardUpdate.model_validate({"starsRequired": 2})

        assert request.model_dump(include=request.model_fields_set) == {"stars_required": 2}

    def test_list_requires_balance(self):
        """The rewards list always carries the caller's balance."""
        with pytest.raises(ValidationError):
            RewardList(items=[])


# =============================================================================
# Level and Message Model Tests
# =============================================================================

class TestLevelAndMessage:
    """Tests for CoupleLevelResponse and MessageCreate."""

    def test_level_defaults_are_valid(self):
        """A new couple reads as level 1 with 0 XP."""
        level = CoupleLevelResponse(level=1, xp=0, threshold=20)
        assert level.model_dump() == {"level": 1, "xp": 0, "threshold": 20}

    def test_level_rejects_negative_xp(self):
        with pytest.raises(ValidationError):
            CoupleLevelResponse(level=1, xp=-1, threshold=20)

    def test_message_text_required(self):
        with pytest.raises(ValidationError):
            MessageCreate(text="")


# =============================================================================
# Question Model Tests
# =============================================================================

class TestQuestionModels:
    """Tests for QuestionCreate and AnswerCreate."""

    def test_answer_text_alias(self):
        """Clients send answerText; snake_case also works."""
        assert AnswerCreate.model_validate({"answerText": "Bien"}).answer_text == "Bien"
        assert AnswerCreate(answer_text="Bien").answer_text == "Bien"

    def test_answer_text_required(self):
        with pytest.raises(ValidationError):
            AnswerCreate.model_validate({"answerText": ""})

    def test_question_source_optional(self):
        assert QuestionCreate(question="Que cenamos?").source is None
