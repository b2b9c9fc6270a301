# =============================================================================
# tests/test_auth.py - Authentication Tests
# =============================================================================
# Tests for Supabase JWT verification and the couple membership check.
# Tokens are signed with the HS256 test secret from conftest.py.
#
# Run with: pytest tests/test_auth.py -v
# =============================================================================

import base64
import json
import time
from unittest.mock import MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.auth.dependencies import _fetch_jwks, _get_signing_key
from app.config import settings
from app.main import app
from lib.cache import TTLCache


def make_token(user_id: str, expires_in: int = 3600, **claims) -> str:
    payload = {
        "sub": user_id,
        "email": "ana@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
        **claims,
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def unsigned_token(header: dict) -> str:
    """A token whose header can be read but whose signature is garbage."""
    def b64(data: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()
    return f"{b64(header)}.{b64({'sub': 'x'})}.c2ln"


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def user_id():
    return str(uuid4())


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Token verification
# =============================================================================

class TestTokenVerification:
    """Tests for get_current_user through /auth/verify."""

    def test_valid_token(self, client, user_id):
        response = client.get("/auth/verify", headers=_auth(make_token(user_id)))

        assert response.status_code == 200
        assert response.json() == {"valid": True, "user_id": user_id, "email": "ana@example.com"}

    def test_expired_token(self, client, user_id):
        response = client.get("/auth/verify", headers=_auth(make_token(user_id, expires_in=-60)))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_wrong_secret(self, client, user_id):
        token = jwt.encode(
            {"sub": user_id, "aud": "authenticated", "exp": int(time.time()) + 60},
            "another-secret",
            algorithm="HS256",
        )

        response = client.get("/auth/verify", headers=_auth(token))

        assert response.status_code == 401

    def test_malformed_subject(self, client):
        response = client.get("/auth/verify", headers=_auth(make_token("not-a-uuid")))

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token: malformed user ID"

    def test_missing_header(self, client):
        response = client.get("/auth/verify")

        assert response.status_code in (401, 403)


# =============================================================================
# Couple membership
# =============================================================================

class TestCoupleMember:
    """Tests for get_couple_member on a couple-scoped route."""

    def test_paired_user(self, client, store, user_id):
        store.add_profile(user_id, "couple-1", alias="Ana")

        response = client.get("/home/notifications", headers=_auth(make_token(user_id)))

        assert response.status_code == 200
        assert response.json() == {"items": []}

    def test_missing_profile(self, client, user_id):
        response = client.get("/home/notifications", headers=_auth(make_token(user_id)))

        assert response.status_code == 401
        assert response.json()["detail"] == "Perfil no encontrado."

    def test_unpaired_user(self, client, store, user_id):
        store.add_profile(user_id, None)

        response = client.get("/home/notifications", headers=_auth(make_token(user_id)))

        assert response.status_code == 409
        assert response.json()["code"] == "COUPLE_REQUIRED"
        assert response.json()["detail"] == "Usuario sin pareja."

    def test_profile_lookup_failure(self, client, store, user_id):
        store.fail("fetch_profile")

        response = client.get("/home/notifications", headers=_auth(make_token(user_id)))

        assert response.status_code == 500
        assert response.json()["code"] == "TEST_FAILURE"

    def test_me_without_profile(self, client, user_id):
        response = client.get("/auth/me", headers=_auth(make_token(user_id)))

        assert response.status_code == 200
        assert response.json()["couple_id"] is None


# =============================================================================
# Signing keys
# =============================================================================

class TestSigningKeys:
    """Tests for _get_signing_key and the JWKS cache."""

    def test_hs256_uses_secret(self):
        key, alg = _get_signing_key(unsigned_token({"alg": "HS256"}), TTLCache())

        assert (key, alg) == (settings.SUPABASE_JWT_SECRET, "HS256")

    def test_es256_uses_matching_jwk(self):
        jwk = {"kid": "k1", "kty": "EC"}
        response = MagicMock()
        response.json.return_value = {"keys": [{"kid": "k0"}, jwk]}

        with patch("app.auth.dependencies.httpx.get", return_value=response):
            key, alg = _get_signing_key(unsigned_token({"alg": "ES256", "kid": "k1"}), TTLCache())

        assert (key, alg) == (jwk, "ES256")

    def test_unknown_kid_falls_back_to_secret(self):
        response = MagicMock()
        response.json.return_value = {"keys": []}

        with patch("app.auth.dependencies.httpx.get", return_value=response):
            key, alg = _get_signing_key(unsigned_token({"alg": "ES256", "kid": "k9"}), TTLCache())

        assert alg == "HS256"

    def test_jwks_is_cached(self):
        response = MagicMock()
        response.json.return_value = {"keys": [{"kid": "k1"}]}
        cache = TTLCache()

        with patch("app.auth.dependencies.httpx.get", return_value=response) as mock_get:
            _fetch_jwks(cache)
            _fetch_jwks(cache)

        assert mock_get.call_count == 1

    def test_stale_jwks_on_fetch_failure(self):
        clock_now = [0.0]
        cache = TTLCache(default_ttl_seconds=10, clock=lambda: clock_now[0])
        response = MagicMock()
        response.json.return_value = {"keys": [{"kid": "k1"}]}

        with patch("app.auth.dependencies.httpx.get", return_value=response):
            _fetch_jwks(cache)

        clock_now[0] = 100.0
        with patch("app.auth.dependencies.httpx.get", side_effect=httpx.ConnectError("down")):
            jwks = _fetch_jwks(cache)

        assert jwks == {"keys": [{"kid": "k1"}]}
