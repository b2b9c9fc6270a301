# =============================================================================
# tests/test_exceptions.py - Error Envelope and Compensation Tests
# =============================================================================
# Run with: pytest tests/test_exceptions.py -v
# =============================================================================

import pytest

from app.exceptions import (
    ChallengeNotFoundError,
    CompensationFailedError,
    ConflictError,
    ContentionError,
    CoupleRequiredError,
    DailyQuestionNotFoundError,
    DailyStarBudgetError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    QuestionNotFoundError,
    RewardOwnershipError,
    StoreError,
    UpstreamError,
    ValidationError,
)
from core.services.compensation import compensate
from lib.supabase_client import SupabaseClientError


class TestErrorFamilies:
    """Each concrete error maps to one HTTP status."""

    @pytest.mark.parametrize("error, family, status", [
        (ValidationError("bad"), ValidationError, 400),
        (RewardOwnershipError("r1", "No"), ForbiddenError, 403),
        (ChallengeNotFoundError("c1"), NotFoundError, 404),
        (DailyQuestionNotFoundError(), NotFoundError, 404),
        (QuestionNotFoundError("q1"), NotFoundError, 404),
        (InvalidTransitionError("c1", "accept", "accepted", "pending"), ConflictError, 409),
        (CoupleRequiredError("u1"), ConflictError, 409),
        (ContentionError("couple_level", 5), ConflictError, 409),
        (StoreError(SupabaseClientError("down")), UpstreamError, 500),
    ])
    def test_status(self, error, family, status):
        assert isinstance(error, family)
        assert error.status_code == status

    def test_to_dict(self):
        error = DailyStarBudgetError(budget=5, used=4, requested=2)

        body = error.to_dict()

        assert body["detail"] == "Solo tienes 5 estrellas para repartir."
        assert body["code"] == "DAILY_STAR_BUDGET_EXCEEDED"
        assert body["suggestion"] == "Use at most 1 stars for this challenge"
        assert body["details"]["used"] == 4

    def test_transition_messages(self):
        assert InvalidTransitionError("c1", "report", "pending", "accepted").message == "El reto no esta aceptado."
        assert InvalidTransitionError("c1", "approve", "accepted", "reported_accomplishment").message == (
            "El reto no esta reportado."
        )

    def test_store_error_keeps_code(self):
        error = StoreError(SupabaseClientError("timeout", code="QUERY_FAILED", details={"table": "x"}))

        assert error.code == "QUERY_FAILED"
        assert error.message == "timeout"
        assert error.details == {"table": "x"}


class TestCompensate:
    """Tests for compensate()."""

    def test_undo_steps_run_in_order(self):
        ran = []

        with pytest.raises(StoreError):
            compensate("op", SupabaseClientError("boom"), [
                ("first", lambda: ran.append("first")),
                ("second", lambda: ran.append("second")),
            ])

        assert ran == ["first", "second"]

    def test_domain_error_is_reraised(self):
        original = ChallengeNotFoundError("c1")

        with pytest.raises(ChallengeNotFoundError) as exc_info:
            compensate("op", original, [("noop", lambda: None)])

        assert exc_info.value is original

    def test_failed_undo(self):
        def broken():
            raise RuntimeError("still down")

        ran = []

        with pytest.raises(CompensationFailedError) as exc_info:
            compensate("op", SupabaseClientError("boom"), [
                ("broken", broken),
                ("after", lambda: ran.append("after")),
            ])

        assert ran == ["after"]
        assert exc_info.value.details["compensation_error"] == "broken: still down"
        assert exc_info.value.status_code == 500
