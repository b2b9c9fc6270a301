# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .feed_service import ActivityFeedService
from .level_service import LevelService, apply_xp
from .challenge_service import ChallengeService, clamp_challenge_stars
from .reward_service import RewardService, balance_through, compute_balance
from .daily_challenge_service import DailyChallengeService, clamp_daily_stars
from .message_service import MessageService
from .question_service import QuestionService
from .push_service import PushService

__all__ = [
    "ActivityFeedService",
    "LevelService",
    "apply_xp",
    "ChallengeService",
    "clamp_challenge_stars",
    "RewardService",
    "compute_balance",
    "balance_through",
    "DailyChallengeService",
    "clamp_daily_stars",
    "MessageService",
    "QuestionService",
    "PushService",
]
