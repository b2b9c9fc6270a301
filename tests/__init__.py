# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Lucky Love API:
# - test_models.py: Pydantic model validation
# - test_feed_service.py: Activity feed grouping, rendering, seen state
# - test_level_service.py: XP and level-up rules
# - test_challenge_service.py: Challenge state machine
# - test_reward_service.py: Star ledger and redemption
# - test_daily_challenge_service.py: Daily caps and completion
# - test_messages_and_push.py: Messages, message of the day, push delivery
# - test_question_service.py: Question of the day and answers
# - test_cache.py / test_exceptions.py / test_supabase_client.py: Library pieces
# - test_auth.py / test_api.py: HTTP surface
#
# Run tests with: pytest
# =============================================================================
