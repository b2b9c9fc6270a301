# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - feed.py: Activity feed groups and mark-seen payloads
# - level.py: Couple level/XP
# - challenge.py: Challenge state machine schemas
# - daily_challenge.py: Daily (budget-capped) challenge schemas
# - reward.py: Reward and star balance schemas
# - message.py: Partner message schemas
# - question.py: Daily question and answer schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Feed Models - Activity feed aggregation
# -----------------------------------------------------------------------------
from .feed import (
    ActivityGroup,
    MarkSeenRequest,
    MarkSeenResponse,
    NotificationFeed,
)

# -----------------------------------------------------------------------------
# Ledger Models - Challenges, rewards and levels
# -----------------------------------------------------------------------------
from .level import CoupleLevelResponse
from .challenge import (
    ChallengeCreate,
    ChallengeEnvelope,
    ChallengeList,
    ChallengeResponse,
    ChallengeStatus,
)
from .daily_challenge import (
    DailyChallengeCreate,
    DailyChallengeEnvelope,
    DailyChallengeList,
    DailyChallengeResponse,
)
from .reward import (
    RewardCreate,
    RewardEnvelope,
    RewardList,
    RewardResponse,
    RewardUpdate,
)

# -----------------------------------------------------------------------------
# Message and Question Models
# -----------------------------------------------------------------------------
from .message import (
    MessageCreate,
    MessageEnvelope,
    MessageList,
    MessageResponse,
)
from .question import (
    AnswerCreate,
    AnswerEnvelope,
    AnswerResponse,
    DailyQuestionAnswers,
    QuestionCreate,
    QuestionEnvelope,
    QuestionList,
    QuestionResponse,
)

# -----------------------------------------------------------------------------
# __all__ - Explicit public API
# -----------------------------------------------------------------------------
__all__ = [
    # Feed
    "ActivityGroup",
    "MarkSeenRequest",
    "MarkSeenResponse",
    "NotificationFeed",
    # Level
    "CoupleLevelResponse",
    # Challenge
    "ChallengeCreate",
    "ChallengeEnvelope",
    "ChallengeList",
    "ChallengeResponse",
    "ChallengeStatus",
    # Daily challenge
    "DailyChallengeCreate",
    "DailyChallengeEnvelope",
    "DailyChallengeList",
    "DailyChallengeResponse",
    # Reward
    "RewardCreate",
    "RewardEnvelope",
    "RewardList",
    "RewardResponse",
    "RewardUpdate",
    # Message
    "MessageCreate",
    "MessageEnvelope",
    "MessageList",
    "MessageResponse",
    # Question
    "AnswerCreate",
    "AnswerEnvelope",
    "AnswerResponse",
    "DailyQuestionAnswers",
    "QuestionCreate",
    "QuestionEnvelope",
    "QuestionList",
    "QuestionResponse",
]
