# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every error maps to one of five families, each with a fixed HTTP status:
#   ValidationError (400), ForbiddenError (403), NotFoundError (404),
#   ConflictError (409), UpstreamError (500)
# Concrete errors below pick a family and a machine-readable code.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class LuckyLoveException(Exception):
    """
    Base exception for the Lucky Love API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "LUCKY_LOVE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Error Families
# =============================================================================

class ValidationError(LuckyLoveException):
    """Missing or malformed input."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR", **kwargs: Any):
        super().__init__(message, code=code, status_code=400, **kwargs)


class ForbiddenError(LuckyLoveException):
    """The caller is not the right actor for the attempted operation."""

    def __init__(self, message: str, code: str = "FORBIDDEN", **kwargs: Any):
        super().__init__(message, code=code, status_code=403, **kwargs)


class NotFoundError(LuckyLoveException):
    """Referenced entity is absent or belongs to another couple."""

    def __init__(self, message: str, code: str = "NOT_FOUND", **kwargs: Any):
        super().__init__(message, code=code, status_code=404, **kwargs)


class ConflictError(LuckyLoveException):
    """State precondition violated, budget exceeded or race lost."""

    def __init__(self, message: str, code: str = "CONFLICT", **kwargs: Any):
        super().__init__(message, code=code, status_code=409, **kwargs)


class UpstreamError(LuckyLoveException):
    """The record store or another provider failed."""

    def __init__(self, message: str, code: str = "UPSTREAM_ERROR", **kwargs: Any):
        kwargs.setdefault("suggestion", "Try again later or contact support if the issue persists")
        super().__init__(message, code=code, status_code=500, **kwargs)


# =============================================================================
# Couple Exceptions
# =============================================================================

class CoupleRequiredError(ConflictError):
    """Raised when the caller has not been paired with a partner yet."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Usuario sin pareja.",
            code="COUPLE_REQUIRED",
            suggestion="Connect with your partner using their invite code first",
            details={"user_id": user_id}
        )


# =============================================================================
# Challenge Exceptions
# =============================================================================

class ChallengeNotFoundError(NotFoundError):
    """Raised when a challenge ID doesn't exist for the caller's couple."""

    def __init__(self, challenge_id: str):
        super().__init__(
            message="Reto no encontrado.",
            code="CHALLENGE_NOT_FOUND",
            details={"challenge_id": challenge_id}
        )


class InvalidTransitionError(ConflictError):
    """Raised when a challenge is not in the state a transition starts from."""

    MESSAGES = {
        "accept": "Este reto ya fue actualizado.",
        "report": "El reto no esta aceptado.",
        "approve": "El reto no esta reportado.",
        "reject": "El reto no esta reportado.",
    }

    def __init__(self, challenge_id: str, transition: str, current: str | None, expected: str):
        super().__init__(
            message=self.MESSAGES.get(transition, "Este reto ya fue actualizado."),
            code="INVALID_TRANSITION",
            suggestion=f"Only a challenge in status '{expected}' allows '{transition}'",
            details={
                "challenge_id": challenge_id,
                "transition": transition,
                "current_status": current,
                "expected_status": expected,
            }
        )


class ChallengeActorForbiddenError(ForbiddenError):
    """Raised when the caller may not perform the requested transition."""

    def __init__(self, challenge_id: str, transition: str, reason: str):
        super().__init__(
            message=reason,
            code="CHALLENGE_ACTOR_FORBIDDEN",
            details={"challenge_id": challenge_id, "transition": transition}
        )


# =============================================================================
# Daily Challenge Exceptions
# =============================================================================

class DailyChallengeNotFoundError(NotFoundError):
    """Raised when a daily challenge is missing or not from today."""

    def __init__(self, challenge_id: str):
        super().__init__(
            message="Reto diario no encontrado.",
            code="DAILY_CHALLENGE_NOT_FOUND",
            suggestion="Only today's daily challenges can be completed",
            details={"challenge_id": challenge_id}
        )


class DailyChallengeLimitError(ConflictError):
    """Raised when the couple already has the maximum daily challenges."""

    def __init__(self, max_items: int):
        super().__init__(
            message=f"Maximo {max_items} retos diarios.",
            code="DAILY_CHALLENGE_LIMIT",
            details={"max_items": max_items}
        )


class DailyStarBudgetError(ConflictError):
    """Raised when a new daily challenge would exceed the day's star budget."""

    def __init__(self, budget: int, used: int, requested: int):
        super().__init__(
            message=f"Solo tienes {budget} estrellas para repartir.",
            code="DAILY_STAR_BUDGET_EXCEEDED",
            suggestion=f"Use at most {max(budget - used, 0)} stars for this challenge",
            details={"budget": budget, "used": used, "requested": requested}
        )


class DailyChallengeAlreadyCompletedError(ConflictError):
    """Raised when completing a daily challenge twice."""

    def __init__(self, challenge_id: str):
        super().__init__(
            message="Este reto ya fue cumplido.",
            code="DAILY_CHALLENGE_ALREADY_COMPLETED",
            details={"challenge_id": challenge_id}
        )


# =============================================================================
# Reward Exceptions
# =============================================================================

class RewardNotFoundError(NotFoundError):
    """Raised when a reward ID doesn't exist for the caller's couple."""

    def __init__(self, reward_id: str):
        super().__init__(
            message="Beneficio no encontrado.",
            code="REWARD_NOT_FOUND",
            details={"reward_id": reward_id}
        )


class RewardOwnershipError(ForbiddenError):
    """Raised when redeeming one's own reward or editing a partner's."""

    def __init__(self, reward_id: str, message: str):
        super().__init__(
            message=message,
            code="REWARD_OWNERSHIP",
            details={"reward_id": reward_id}
        )


class RewardAlreadyRedeemedError(ConflictError):
    """Raised when a reward has already been redeemed."""

    def __init__(self, reward_id: str, message: str = "Este beneficio ya fue canjeado."):
        super().__init__(
            message=message,
            code="REWARD_ALREADY_REDEEMED",
            details={"reward_id": reward_id}
        )


class InsufficientStarsError(ConflictError):
    """Raised when the caller's star balance can't cover a reward."""

    def __init__(self, reward_id: str, balance: int, required: int):
        super().__init__(
            message="No tienes suficientes estrellas.",
            code="INSUFFICIENT_STARS",
            suggestion="Complete more challenges to earn stars",
            details={"reward_id": reward_id, "balance": balance, "required": required}
        )


# =============================================================================
# Message and Question Exceptions
# =============================================================================

class MessageNotFoundError(NotFoundError):
    """Raised when a couple has no messages to pick from."""

    def __init__(self):
        super().__init__(
            message="No hay mensajes disponibles.",
            code="NO_MESSAGES",
            suggestion="Send a message to your partner first",
        )


class DailyQuestionNotFoundError(NotFoundError):
    """Raised when nothing has been asked today yet."""

    def __init__(self):
        super().__init__(
            message="No hay pregunta diaria para hoy.",
            code="NO_DAILY_QUESTION",
            suggestion="Open GET /home/daily-question first",
        )


class QuestionNotFoundError(NotFoundError):
    """Raised when a question doesn't exist for the caller's couple."""

    def __init__(self, question_id: str):
        super().__init__(
            message="Pregunta no encontrada.",
            code="QUESTION_NOT_FOUND",
            details={"question_id": question_id},
        )


# =============================================================================
# Upstream Exceptions
# =============================================================================

class StoreError(UpstreamError):
    """
    Raised when the record store could not serve a request.

    Wraps lib.supabase_client.SupabaseClientError so the API reports the
    store's code and context in the standard envelope.
    """

    def __init__(self, error: Exception):
        code = getattr(error, "code", None) or "STORE_ERROR"
        details = getattr(error, "details", None) or {}
        super().__init__(
            message=getattr(error, "message", None) or str(error),
            code=code,
            details=details,
        )


class ContentionError(ConflictError):
    """Raised when a compare-and-swap write kept losing to concurrent writers."""

    def __init__(self, resource: str, attempts: int):
        super().__init__(
            message="El recurso esta siendo actualizado. Intenta de nuevo.",
            code="WRITE_CONTENTION",
            suggestion="Retry the request",
            details={"resource": resource, "attempts": attempts}
        )


class CompensationFailedError(UpstreamError):
    """Raised when both a write and the write undoing earlier steps failed."""

    def __init__(self, operation: str, error: str, compensation_error: str):
        super().__init__(
            message=f"{operation} failed and could not be rolled back: {error}; {compensation_error}",
            code="COMPENSATION_FAILED",
            suggestion="Contact support: manual reconciliation may be required",
            details={
                "operation": operation,
                "error": error,
                "compensation_error": compensation_error,
            }
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def lucky_love_exception_handler(
    request: Request,
    exc: LuckyLoveException
) -> JSONResponse:
    """
    Convert LuckyLoveException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic request validation errors.

    Reported as 400 with one entry per offending field.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        }
    )
