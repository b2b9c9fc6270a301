# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Swaps SupabaseClient for an in-memory store in every module using it
# - Captures push notifications instead of enqueueing Celery tasks
# - Provides a TestClient with the couple member overridable per test
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from contextlib import ExitStack
from unittest.mock import MagicMock, patch

import pytest

from tests.fakes import InMemoryStore

# Modules that do `from lib.supabase_client import SupabaseClient`
STORE_MODULES = [
    "core.services.feed_service",
    "core.services.level_service",
    "core.services.challenge_service",
    "core.services.reward_service",
    "core.services.daily_challenge_service",
    "core.services.message_service",
    "core.services.question_service",
    "core.services.push_service",
    "app.auth.dependencies",
    "app.auth.routes",
]

COUPLE_ID = "couple-1"
USER_A = "user-a"
USER_B = "user-b"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    """In-memory store patched in place of SupabaseClient."""
    fake = InMemoryStore()
    with ExitStack() as stack:
        for module in STORE_MODULES:
            stack.enter_context(patch(f"{module}.SupabaseClient", fake))
        yield fake


@pytest.fixture(autouse=True)
def push_queue():
    """Celery task stub; nothing reaches a broker during tests."""
    with patch("core.services.push_service.send_push_notification") as task:
        task.delay = MagicMock()
        yield task


@pytest.fixture
def couple(store):
    """Two paired users, A (Ana) and B (Bruno), with Expo tokens."""
    store.add_profile(USER_A, COUPLE_ID, alias="Ana", email="ana@example.com",
                      expo_push_token="ExponentPushToken[aaa]")
    store.add_profile(USER_B, COUPLE_ID, alias=None, email="bruno@example.com",
                      expo_push_token="ExpoPushToken[bbb]")
    return {"couple_id": COUPLE_ID, "a": USER_A, "b": USER_B}


@pytest.fixture
def api(store):
    """
    TestClient whose caller can be switched with api.login(user_id).

    Authentication itself is covered in test_auth.py; here the couple
    member dependency is overridden directly.
    """
    from fastapi.testclient import TestClient

    from app.auth import CoupleMember, get_couple_member
    from app.dependencies import get_daily_message_cache
    from app.main import app
    from lib.cache import TTLCache

    client = TestClient(app)
    daily_cache = TTLCache()
    app.dependency_overrides[get_daily_message_cache] = lambda: daily_cache

    def login(user_id: str, couple_id: str = COUPLE_ID):
        member = CoupleMember(id=user_id, email=f"{user_id}@example.com", couple_id=couple_id)
        app.dependency_overrides[get_couple_member] = lambda: member
        return client

    client.login = login
    yield client
    app.dependency_overrides.clear()
