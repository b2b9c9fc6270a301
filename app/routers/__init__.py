# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - notifications.py: Activity feed and seen state
# - challenges.py: Challenge creation and state transitions
# - daily_challenges.py: Per-day, star-budgeted challenges
# - goals.py: Couple level, rewards and star balance
# - messages.py: Partner messages and message of the day
# - questions.py: Daily question and answers
#
# Each router is mounted in main.py.
# =============================================================================

from . import health
from . import notifications
from . import challenges
from . import daily_challenges
from . import goals
from . import messages
from . import questions

__all__ = [
    "health",
    "notifications",
    "challenges",
    "daily_challenges",
    "goals",
    "messages",
    "questions",
]
