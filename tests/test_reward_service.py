# =============================================================================
# tests/test_reward_service.py - Rewards and Star Ledger Tests
# =============================================================================
# Tests for balance derivation, reward creation/editing and redemption,
# including double redeems and concurrent spends.
#
# Run with: pytest tests/test_reward_service.py -v
# =============================================================================

import threading

import pytest

from app.exceptions import (
    CompensationFailedError,
    InsufficientStarsError,
    RewardAlreadyRedeemedError,
    RewardNotFoundError,
    RewardOwnershipError,
    UpstreamError,
    ValidationError,
)
from core.services.reward_service import (
    RewardService,
    balance_through,
    compute_balance,
    normalize_stars_required,
)
from tests.conftest import COUPLE_ID, USER_A, USER_B


def _grant(store, user_id, stars):
    return store.insert_star_event({"couple_id": COUPLE_ID, "awarded_to": user_id, "stars": stars})


def _reward(store, stars_required=5, created_by=USER_A):
    return RewardService.create_reward(COUPLE_ID, created_by, "Masaje", stars_required)


# =============================================================================
# Balance
# =============================================================================

class TestBalance:
    """The balance is always the sum of the ledger."""

    def test_compute_balance(self):
        assert compute_balance([{"stars": 3}, {"stars": 2}, {"stars": -5}]) == 0
        assert compute_balance([]) == 0

    def test_balance_through_stops_at_entry(self):
        events = [
            {"id": "grant", "stars": 5},
            {"id": "d1", "stars": -5},
            {"id": "d2", "stars": -5},
        ]

        assert balance_through(events, "grant") == 5
        assert balance_through(events, "d1") == 0
        assert balance_through(events, "d2") == -5
        assert balance_through(events, "missing") == -5

    def test_balance_per_user(self, store, couple):
        _grant(store, USER_B, 3)
        _grant(store, USER_B, 4)
        _grant(store, USER_A, 1)

        assert RewardService.get_balance(COUPLE_ID, USER_B) == 7
        assert RewardService.get_balance(COUPLE_ID, USER_A) == 1

    def test_list_includes_callers_balance(self, store, couple):
        _grant(store, USER_B, 2)
        first = _reward(store)
        second = _reward(store, stars_required=1)

        result = RewardService.list_rewards(COUPLE_ID, USER_B)

        assert [r["id"] for r in result["items"]] == [second["id"], first["id"]]
        assert result["balance"] == 2


# =============================================================================
# Creation and editing
# =============================================================================

class TestCreateReward:
    """Tests for RewardService.create_reward."""

    @pytest.mark.parametrize("value, expected", [
        (0, 0), (5, 5), (4.8, 4), ("7", 7), (-2, 0),
    ])
    def test_normalize_stars_required(self, value, expected):
        assert normalize_stars_required(value) == expected

    @pytest.mark.parametrize("value", [None, "abc", float("nan"), float("inf")])
    def test_rejects_non_finite(self, value):
        with pytest.raises(ValidationError):
            normalize_stars_required(value)

    def test_create_records_event(self, store, couple):
        reward = _reward(store, stars_required=3.7)

        assert reward["stars_required"] == 3
        assert reward["redeemed_at"] is None
        events = store.tables["home_notifications"]
        assert [e["action"] for e in events] == ["create_reward"]
        assert events[0]["entity_id"] == reward["id"]


class TestUpdateReward:
    """Tests for RewardService.update_reward."""

    def test_creator_edits_fields(self, store, couple):
        reward = _reward(store)

        updated = RewardService.update_reward(
            COUPLE_ID, reward["id"], USER_A, {"title": "Cena", "stars_required": 2.5}
        )

        assert updated["title"] == "Cena"
        assert updated["stars_required"] == 2
        assert updated["description"] is None

    def test_partner_cannot_edit(self, store, couple):
        reward = _reward(store)

        with pytest.raises(RewardOwnershipError):
            RewardService.update_reward(COUPLE_ID, reward["id"], USER_B, {"title": "Otro"})

    def test_cannot_edit_redeemed(self, store, couple):
        reward = _reward(store, stars_required=1)
        _grant(store, USER_B, 1)
        RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        with pytest.raises(RewardAlreadyRedeemedError) as exc_info:
            RewardService.update_reward(COUPLE_ID, reward["id"], USER_A, {"title": "Otro"})

        assert exc_info.value.message == "No se puede editar un beneficio canjeado."

    def test_invalid_price(self, store, couple):
        reward = _reward(store)

        with pytest.raises(ValidationError):
            RewardService.update_reward(COUPLE_ID, reward["id"], USER_A, {"stars_required": "x"})

    def test_unknown_reward(self, store, couple):
        with pytest.raises(RewardNotFoundError):
            RewardService.update_reward(COUPLE_ID, "missing", USER_A, {"title": "x"})


# =============================================================================
# Redemption
# =============================================================================

class TestRedeemReward:
    """Tests for RewardService.redeem_reward."""

    def test_redeem_spends_exact_balance(self, store, couple):
        _grant(store, USER_B, 5)
        reward = _reward(store, stars_required=5)

        redeemed = RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert redeemed["redeemed_at"]
        assert redeemed["redeemed_by"] == USER_B
        assert RewardService.get_balance(COUPLE_ID, USER_B) == 0

    def test_second_redeem_conflicts(self, store, couple):
        _grant(store, USER_B, 10)
        reward = _reward(store, stars_required=5)
        RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        with pytest.raises(RewardAlreadyRedeemedError):
            RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert RewardService.get_balance(COUPLE_ID, USER_B) == 5

    def test_insufficient_stars(self, store, couple):
        _grant(store, USER_B, 4)
        reward = _reward(store, stars_required=5)

        with pytest.raises(InsufficientStarsError) as exc_info:
            RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert exc_info.value.status_code == 409
        assert RewardService.get_balance(COUPLE_ID, USER_B) == 4
        assert store.fetch_reward(COUPLE_ID, reward["id"])["redeemed_at"] is None

    def test_cannot_redeem_own_reward(self, store, couple):
        _grant(store, USER_A, 10)
        reward = _reward(store, created_by=USER_A)

        with pytest.raises(RewardOwnershipError):
            RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_A)

    def test_free_reward(self, store, couple):
        reward = _reward(store, stars_required=0)

        redeemed = RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert redeemed["redeemed_by"] == USER_B
        assert RewardService.get_balance(COUPLE_ID, USER_B) == 0

    def test_concurrent_redeem_loses_and_refunds(self, store, couple):
        """The other request marks the reward between our debit and update."""
        _grant(store, USER_B, 10)
        reward = _reward(store, stars_required=5)

        def winner_redeems():
            _grant(store, USER_B, -5)
            store.tables["couple_rewards"][0]["redeemed_at"] = "2026-01-01T12:00:00+00:00"

        store.before("update_reward_if_unredeemed", winner_redeems)

        with pytest.raises(RewardAlreadyRedeemedError):
            RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert RewardService.get_balance(COUPLE_ID, USER_B) == 5

    def test_concurrent_spend_cannot_overdraw(self, store, couple):
        """Two rewards paid from one balance: the later debit is undone."""
        _grant(store, USER_B, 5)
        first = _reward(store, stars_required=5)
        second = _reward(store, stars_required=5)

        store.before("insert_star_event", lambda: _grant(store, USER_B, -5))

        with pytest.raises(InsufficientStarsError):
            RewardService.redeem_reward(COUPLE_ID, second["id"], USER_B)

        assert RewardService.get_balance(COUPLE_ID, USER_B) == 0
        assert store.fetch_reward(COUPLE_ID, second["id"])["redeemed_at"] is None
        assert store.fetch_reward(COUPLE_ID, first["id"])["redeemed_at"] is None

    def test_mark_failure_deletes_debit(self, store, couple):
        _grant(store, USER_B, 5)
        reward = _reward(store, stars_required=5)
        store.fail("update_reward_if_unredeemed")

        with pytest.raises(UpstreamError):
            RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert RewardService.get_balance(COUPLE_ID, USER_B) == 5

    def test_failed_refund_is_reported(self, store, couple):
        _grant(store, USER_B, 5)
        reward = _reward(store, stars_required=5)
        store.fail("update_reward_if_unredeemed")
        store.fail("delete_star_event")

        with pytest.raises(CompensationFailedError):
            RewardService.redeem_reward(COUPLE_ID, reward["id"], USER_B)

        assert RewardService.get_balance(COUPLE_ID, USER_B) == 0

    def test_interleaved_redeems_one_succeeds(self, store, couple):
        """
        Two requests spend the same 5 stars in lockstep: both pass the
        first balance check, both insert their debit, both recheck. The
        debit that sorts first in the ledger keeps its stars.
        """
        _grant(store, USER_B, 5)
        first = _reward(store, stars_required=5)
        second = _reward(store, stars_required=5)

        barrier = threading.Barrier(2, timeout=5)
        local = threading.local()
        fetch_events = store.fetch_star_events
        insert_event = store.insert_star_event

        def fetch_in_step(couple_id, user_id):
            rows = fetch_events(couple_id, user_id)
            local.fetches = getattr(local, "fetches", 0) + 1
            if local.fetches <= 2:
                barrier.wait()
            return rows

        def insert_in_step(data):
            row = insert_event(data)
            barrier.wait()
            return row

        store.fetch_star_events = fetch_in_step
        store.insert_star_event = insert_in_step

        results = {}

        def redeem(reward_id):
            try:
                RewardService.redeem_reward(COUPLE_ID, reward_id, USER_B)
                results[reward_id] = "ok"
            except InsufficientStarsError as e:
                results[reward_id] = e

        threads = [threading.Thread(target=redeem, args=(r["id"],)) for r in (first, second)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        store.fetch_star_events = fetch_events
        store.insert_star_event = insert_event

        assert list(results.values()).count("ok") == 1
        loser = next(v for v in results.values() if v != "ok")
        assert loser.status_code == 409
        assert RewardService.get_balance(COUPLE_ID, USER_B) == 0

        winner_id = next(k for k, v in results.items() if v == "ok")
        assert store.fetch_reward(COUPLE_ID, winner_id)["redeemed_by"] == USER_B
        other_id = next(k for k in results if k != winner_id)
        assert store.fetch_reward(COUPLE_ID, other_id)["redeemed_at"] is None
