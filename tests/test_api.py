# =============================================================================
# tests/test_api.py - HTTP API Tests
# =============================================================================
# End-to-end tests through the FastAPI app with the in-memory store.
# The caller is picked with api.login(user_id); see conftest.py.
#
# Run with: pytest tests/test_api.py -v
# =============================================================================

from uuid import uuid4

from app.dependencies import get_supabase_client
from app.main import app
from tests.conftest import USER_A, USER_B


# =============================================================================
# Challenges
# =============================================================================

class TestChallengeEndpoints:
    """Tests for /home/challenges."""

    def test_full_flow_awards_stars_and_xp(self, api, couple):
        created = api.login(USER_A).post("/home/challenges", json={"title": "Cocinar", "stars": 3})
        assert created.status_code == 201
        challenge_id = created.json()["challenge"]["id"]

        assert api.login(USER_B).post(f"/home/challenges/{challenge_id}/accept").status_code == 200
        assert api.login(USER_B).post(f"/home/challenges/{challenge_id}/report").status_code == 200

        approved = api.login(USER_A).post(f"/home/challenges/{challenge_id}/approve")
        assert approved.status_code == 200
        assert approved.json()["challenge"]["status"] == "completed"

        rewards = api.login(USER_B).get("/goals/rewards").json()
        assert rewards["balance"] == 3
        assert api.get("/goals/level").json() == {"level": 1, "xp": 5, "threshold": 20}

    def test_list(self, api, couple):
        api.login(USER_A).post("/home/challenges", json={"title": "Uno"})

        response = api.get("/home/challenges")

        assert response.status_code == 200
        assert [c["title"] for c in response.json()["items"]] == ["Uno"]
        assert response.json()["items"][0]["stars"] == 1

    def test_accept_own_challenge_is_forbidden(self, api, couple):
        challenge_id = api.login(USER_A).post("/home/challenges", json={"title": "Uno"}).json()["challenge"]["id"]

        response = api.post(f"/home/challenges/{challenge_id}/accept")

        assert response.status_code == 403
        assert response.json()["detail"] == "No puedes aceptar tu propio reto."

    def test_approve_pending_conflicts(self, api, couple):
        challenge_id = api.login(USER_A).post("/home/challenges", json={"title": "Uno"}).json()["challenge"]["id"]

        response = api.post(f"/home/challenges/{challenge_id}/approve")

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_unknown_challenge(self, api, couple):
        response = api.login(USER_B).post(f"/home/challenges/{uuid4()}/accept")

        assert response.status_code == 404
        assert response.json()["code"] == "CHALLENGE_NOT_FOUND"

    def test_malformed_challenge_id_is_400(self, api, couple):
        """Ids that are not UUIDs never reach the store."""
        response = api.login(USER_B).post("/home/challenges/nope/accept")

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["field"] == "path.challenge_id"

    def test_missing_title_is_400(self, api, couple):
        response = api.login(USER_A).post("/home/challenges", json={"stars": 2})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["field"] == "title"


# =============================================================================
# Daily challenges
# =============================================================================

class TestDailyChallengeEndpoints:
    """Tests for /home/daily-challenges."""

    def test_budget(self, api, couple):
        api.login(USER_A)
        assert api.post("/home/daily-challenges", json={"title": "a", "stars": 4}).status_code == 201

        over = api.post("/home/daily-challenges", json={"title": "b", "stars": 2})
        assert over.status_code == 409
        assert over.json()["code"] == "DAILY_STAR_BUDGET_EXCEEDED"

        assert api.post("/home/daily-challenges", json={"title": "c", "stars": 1}).status_code == 201
        assert len(api.get("/home/daily-challenges").json()["items"]) == 2

    def test_complete(self, api, couple):
        created = api.login(USER_A).post("/home/daily-challenges", json={"title": "a", "stars": 2})
        challenge_id = created.json()["challenge"]["id"]

        done = api.login(USER_B).post(f"/home/daily-challenges/{challenge_id}/complete")
        again = api.post(f"/home/daily-challenges/{challenge_id}/complete")

        assert done.status_code == 200
        assert done.json()["challenge"]["completed_by"] == USER_B
        assert again.status_code == 409
        assert api.get("/goals/level").json()["xp"] == 1

    def test_other_day(self, api, couple):
        response = api.login(USER_A).get("/home/daily-challenges", params={"date": "2020-01-01"})

        assert response.status_code == 200
        assert response.json() == {"items": []}


# =============================================================================
# Rewards
# =============================================================================

class TestRewardEndpoints:
    """Tests for /goals/rewards."""

    def test_create_accepts_camel_case(self, api, couple):
        response = api.login(USER_A).post(
            "/goals/rewards", json={"title": "Masaje", "starsRequired": 2.9}
        )

        assert response.status_code == 201
        assert response.json()["reward"]["stars_required"] == 2

    def test_redeem_without_stars(self, api, couple):
        reward_id = api.login(USER_A).post(
            "/goals/rewards", json={"title": "Masaje", "starsRequired": 2}
        ).json()["reward"]["id"]

        response = api.login(USER_B).post(f"/goals/rewards/{reward_id}/redeem")

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_STARS"

    def test_redeem(self, api, store, couple):
        store.insert_star_event({"couple_id": couple["couple_id"], "awarded_to": USER_B, "stars": 2})
        reward_id = api.login(USER_A).post(
            "/goals/rewards", json={"title": "Masaje", "starsRequired": 2}
        ).json()["reward"]["id"]

        response = api.login(USER_B).post(f"/goals/rewards/{reward_id}/redeem")

        assert response.status_code == 200
        assert response.json()["reward"]["redeemed_by"] == USER_B
        assert api.get("/goals/rewards").json()["balance"] == 0

    def test_patch_only_sent_fields(self, api, couple):
        reward = api.login(USER_A).post(
            "/goals/rewards", json={"title": "Masaje", "description": "Largo", "starsRequired": 2}
        ).json()["reward"]

        response = api.patch(f"/goals/rewards/{reward['id']}", json={"starsRequired": 4})

        assert response.status_code == 200
        assert response.json()["reward"]["stars_required"] == 4
        assert response.json()["reward"]["description"] == "Largo"

    def test_malformed_reward_id_is_400(self, api, couple):
        api.login(USER_B)

        assert api.post("/goals/rewards/abc/redeem").status_code == 400
        assert api.patch("/goals/rewards/abc", json={"title": "x"}).status_code == 400

    def test_missing_stars_required_is_400(self, api, couple):
        response = api.login(USER_A).post("/goals/rewards", json={"title": "Masaje"})

        assert response.status_code == 400


# =============================================================================
# Feed and messages
# =============================================================================

class TestFeedEndpoints:
    """Tests for /home/notifications and /home/messages."""

    def test_partner_sees_grouped_messages(self, api, couple):
        api.login(USER_A)
        api.post("/home/messages", json={"text": "Hola"})
        api.post("/home/messages", json={"text": "Te extrano"})

        feed = api.login(USER_B).get("/home/notifications").json()["items"]

        assert len(feed) == 1
        assert feed[0]["text"] == "Ana envio 2 mensajes nuevos"
        assert feed[0]["seen"] is False

    def test_mark_all_seen(self, api, couple):
        api.login(USER_A).post("/home/messages", json={"text": "Hola"})

        marked = api.login(USER_B).post("/home/notifications/seen")
        feed = api.get("/home/notifications").json()["items"]

        assert marked.json() == {"updated": 1}
        assert feed[0]["seen"] is True

    def test_mark_specific_ids_twice(self, api, couple):
        api.login(USER_A).post("/home/messages", json={"text": "Hola"})
        ids = api.login(USER_B).get("/home/notifications").json()["items"][0]["ids"]

        first = api.post("/home/notifications/seen", json={"ids": ids})
        second = api.post("/home/notifications/seen", json={"ids": ids})

        assert first.json() == {"updated": 1}
        assert second.json() == {"updated": 0}

    def test_mark_seen_malformed_ids_is_400(self, api, couple):
        response = api.login(USER_B).post("/home/notifications/seen", json={"ids": ["abc"]})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_daily_message(self, api, couple):
        api.login(USER_A)
        assert api.get("/home/daily-message").status_code == 404

        api.post("/home/messages", json={"text": "Hola"})
        response = api.get("/home/daily-message")

        assert response.status_code == 200
        assert response.json()["message"]["text"] == "Hola"


# =============================================================================
# Daily questions
# =============================================================================

class TestQuestionEndpoints:
    """Tests for /home/daily-question and /home/questions."""

    def test_both_partners_answer_todays_question(self, api, couple):
        question = api.login(USER_A).get("/home/daily-question").json()["question"]

        first = api.post("/home/daily-question/answer", json={"answerText": "Bien"})
        second = api.login(USER_B).post("/home/daily-question/answer", json={"answerText": "Genial"})
        listing = api.get("/home/daily-question/answers").json()

        assert first.status_code == 201
        assert second.json()["question"]["id"] == question["id"]
        assert listing["question"]["id"] == question["id"]
        assert [a["answer_text"] for a in listing["answers"]] == ["Bien", "Genial"]

    def test_partner_sees_answer_in_feed(self, api, couple):
        api.login(USER_A).get("/home/daily-question")
        api.post("/home/daily-question/answer", json={"answerText": "Bien"})

        feed = api.login(USER_B).get("/home/notifications").json()["items"]

        assert feed[0]["text"] == "Ana respondio 1 pregunta diaria"

    def test_no_question_today_is_404(self, api, couple):
        api.login(USER_A)

        assert api.get("/home/daily-question/answers").status_code == 404
        response = api.post("/home/daily-question/answer", json={"answerText": "Bien"})
        assert response.status_code == 404
        assert response.json()["code"] == "NO_DAILY_QUESTION"

    def test_missing_answer_text_is_400(self, api, couple):
        api.login(USER_A).get("/home/daily-question")

        response = api.post("/home/daily-question/answer", json={})

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "answerText"

    def test_ask_and_answer_question(self, api, couple):
        created = api.login(USER_A).post("/home/questions", json={"question": "Que cenamos?"})
        assert created.status_code == 201
        question_id = created.json()["question"]["id"]

        answered = api.login(USER_B).post(
            f"/home/questions/{question_id}/answers", json={"answerText": "Pizza"}
        )
        today = api.get("/home/daily-question").json()["question"]
        items = api.get("/home/questions").json()["items"]

        assert answered.status_code == 201
        assert answered.json()["answer"]["question_id"] == question_id
        assert answered.json()["question"] is None
        assert today["id"] == question_id
        assert [q["id"] for q in items] == [question_id]

    def test_missing_question_is_400(self, api, couple):
        response = api.login(USER_A).post("/home/questions", json={})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_answer_unknown_or_malformed_question(self, api, couple):
        api.login(USER_B)

        unknown = api.post(f"/home/questions/{uuid4()}/answers", json={"answerText": "x"})
        malformed = api.post("/home/questions/abc/answers", json={"answerText": "x"})

        assert unknown.status_code == 404
        assert unknown.json()["code"] == "QUESTION_NOT_FOUND"
        assert malformed.status_code == 400


# =============================================================================
# Health
# =============================================================================

class TestHealthEndpoints:
    """Tests for /health."""

    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, api, store):
        app.dependency_overrides[get_supabase_client] = lambda: store

        response = api.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_ready_degraded(self, api, store):
        store.client.storage.get_bucket.side_effect = RuntimeError("no bucket")
        app.dependency_overrides[get_supabase_client] = lambda: store

        response = api.get("/health/ready")

        assert response.json()["status"] == "degraded"
        assert response.json()["checks"]["database"] == "healthy"

    def test_live(self, api):
        assert api.get("/health/live").json()["status"] == "alive"

    def test_unauthenticated(self, api):
        assert api.get("/home/notifications").status_code in (401, 403)
