# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        couple_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        couple_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================
# "Today" is always the UTC calendar day at request time.

def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def today_key_utc(now: datetime | None = None) -> str:
    """
    Return today's UTC date as YYYY-MM-DD.

    Args:
        now: Override the clock (tests)
    """
    return (now or utc_now()).astimezone(timezone.utc).date().isoformat()


def today_range_utc(now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Return [start, end) of today's UTC day as aware datetimes.

    Example:
        start, end = today_range_utc()
        # 2026-01-01T00:00:00+00:00, 2026-01-02T00:00:00+00:00
    """
    day = (now or utc_now()).astimezone(timezone.utc).date()
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def normalize_date_key(value: str | date | None, now: datetime | None = None) -> str:
    """
    Coerce a client supplied day into YYYY-MM-DD.

    Anything that is not already a well-formed date falls back to today (UTC).
    """
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and _DATE_KEY_RE.match(value):
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError:
            pass
    return today_key_utc(now)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a PostgREST timestamp into an aware datetime.

    Naive values are assumed to be UTC. Returns None for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for library-level errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
