# =============================================================================
# core/services/challenge_service.py - Challenge State Machine
# =============================================================================
# Handles challenge creation and the four lifecycle transitions:
#
#   accept   pending                 -> accepted                 (not the creator)
#   report   accepted                -> reported_accomplishment  (the acceptor)
#   approve  reported_accomplishment -> completed                (the creator)
#   reject   reported_accomplishment -> accepted                 (the creator)
#
# Checks run existence (404), then state (409), then actor (403). The write
# itself is conditional on the expected prior status, so of two concurrent
# callers exactly one gets the row and the other gets a 409 with no side
# effects. Approval awards stars and XP only after it has won the status
# update, and undoes everything it wrote if a later step fails.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now
from app.config import settings
from app.exceptions import (
    ChallengeActorForbiddenError,
    ChallengeNotFoundError,
    InvalidTransitionError,
    LuckyLoveException,
)
from core.models.challenge import ChallengeStatus
from core.services.compensation import compensate
from core.services.feed_service import ActivityFeedService
from core.services.level_service import LevelService
from core.services.push_service import PushService

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


def clamp_challenge_stars(value: float | int | None) -> int:
    """
    Clamp requested stars to 1..5.

    Missing, zero or non-finite values fall back to 1.

    Example:
        clamp_challenge_stars(None)  # 1
        clamp_challenge_stars(9)     # 5
        clamp_challenge_stars(2.7)   # 2
    """
    try:
        stars = int(value or MIN_STARS)
    except (TypeError, ValueError, OverflowError):
        stars = MIN_STARS
    return min(max(stars, MIN_STARS), MAX_STARS)


class ChallengeService:
    """
    Service for challenges between partners.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def create_challenge(
        couple_id: str | UUID,
        user_id: str,
        title: str,
        description: str | None = None,
        stars: float | int | None = None,
    ) -> dict[str, Any]:
        """
        Propose a new challenge to the partner.

        Records a create_challenge event and pushes "Nuevo reto".

        Returns:
            Created challenge dict (status pending)
        """
        challenge = SupabaseClient.insert_challenge({
            "couple_id": str(couple_id),
            "created_by": user_id,
            "title": title,
            "description": description,
            "stars": clamp_challenge_stars(stars),
            "status": ChallengeStatus.PENDING.value,
        })
        logger.info(f"Created challenge: {challenge['id']} for couple: {couple_id}")

        ActivityFeedService.record_event(
            couple_id,
            actor_id=user_id,
            action="create_challenge",
            entity_type="challenge",
            entity_id=challenge["id"],
            message=f"Creo un reto: {title}.",
        )
        PushService.notify_partner(
            couple_id,
            actor_id=user_id,
            title="Nuevo reto",
            body=f"Tu pareja creo el reto: {title}.",
            data={"type": "challenge", "id": challenge["id"]},
        )

        return challenge

    @staticmethod
    def list_challenges(couple_id: str | UUID) -> list[dict[str, Any]]:
        """List the couple's challenges, newest first."""
        return SupabaseClient.list_challenges(couple_id)

    # -------------------------------------------------------------------------
    # Transition helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _load(
        couple_id: str | UUID,
        challenge_id: str,
        transition: str,
        expected: ChallengeStatus,
    ) -> dict[str, Any]:
        """Fetch a challenge and check it is in the transition's source state."""
        challenge = SupabaseClient.fetch_challenge(couple_id, challenge_id)
        if not challenge:
            raise ChallengeNotFoundError(str(challenge_id))

        if challenge.get("status") != expected.value:
            raise InvalidTransitionError(
                str(challenge_id), transition, challenge.get("status"), expected.value
            )

        return challenge

    @staticmethod
    def _gate(
        couple_id: str | UUID,
        challenge_id: str,
        transition: str,
        expected: ChallengeStatus,
        updates: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Apply a transition's status update if the status is still expected.

        Raises:
            InvalidTransitionError: If a concurrent request moved it first
        """
        updated = SupabaseClient.update_challenge_if_status(
            couple_id, challenge_id, expected.value, updates
        )
        if updated is None:
            current = SupabaseClient.fetch_challenge(couple_id, challenge_id)
            logger.info(f"Lost {transition} race on challenge {challenge_id}")
            raise InvalidTransitionError(
                str(challenge_id),
                transition,
                (current or {}).get("status"),
                expected.value,
            )

        logger.info(f"Challenge {challenge_id}: {transition} -> {updated.get('status')}")
        return updated

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    @staticmethod
    def accept(couple_id: str | UUID, challenge_id: str, user_id: str) -> dict[str, Any]:
        """
        Accept a pending challenge.

        Raises:
            ChallengeNotFoundError: 404
            InvalidTransitionError: 409 if not pending
            ChallengeActorForbiddenError: 403 if the caller created it
        """
        challenge = ChallengeService._load(couple_id, challenge_id, "accept", ChallengeStatus.PENDING)

        if challenge.get("created_by") == user_id:
            raise ChallengeActorForbiddenError(
                str(challenge_id), "accept", "No puedes aceptar tu propio reto."
            )

        return ChallengeService._gate(
            couple_id, challenge_id, "accept", ChallengeStatus.PENDING,
            {"status": ChallengeStatus.ACCEPTED.value, "accepted_by": user_id},
        )

    @staticmethod
    def report(couple_id: str | UUID, challenge_id: str, user_id: str) -> dict[str, Any]:
        """Report an accepted challenge as accomplished (acceptor only)."""
        challenge = ChallengeService._load(couple_id, challenge_id, "report", ChallengeStatus.ACCEPTED)

        if challenge.get("accepted_by") != user_id:
            raise ChallengeActorForbiddenError(
                str(challenge_id), "report", "Solo quien acepta puede reportar."
            )

        return ChallengeService._gate(
            couple_id, challenge_id, "report", ChallengeStatus.ACCEPTED,
            {
                "status": ChallengeStatus.REPORTED_ACCOMPLISHMENT.value,
                "reported_by": user_id,
                "reported_at": utc_now().isoformat(),
            },
        )

    @staticmethod
    def reject(couple_id: str | UUID, challenge_id: str, user_id: str) -> dict[str, Any]:
        """Send a reported challenge back to accepted (creator only)."""
        challenge = ChallengeService._load(
            couple_id, challenge_id, "reject", ChallengeStatus.REPORTED_ACCOMPLISHMENT
        )

        if challenge.get("created_by") != user_id:
            raise ChallengeActorForbiddenError(
                str(challenge_id), "reject", "Solo el creador puede rechazar."
            )

        return ChallengeService._gate(
            couple_id, challenge_id, "reject", ChallengeStatus.REPORTED_ACCOMPLISHMENT,
            {
                "status": ChallengeStatus.ACCEPTED.value,
                "reported_by": None,
                "reported_at": None,
            },
        )

    @staticmethod
    def approve(couple_id: str | UUID, challenge_id: str, user_id: str) -> dict[str, Any]:
        """
        Approve a reported challenge (creator only).

        Steps, in order:
        1. Conditional status update reported_accomplishment -> completed
        2. Star event (+stars) for the reporter (acceptor if none recorded)
        3. CHALLENGE_XP_REWARD XP for the couple

        If step 2 or 3 fails, the earlier steps are undone and the failure
        is raised as an UpstreamError.

        Returns:
            The completed challenge dict

        Raises:
            ChallengeNotFoundError: 404
            InvalidTransitionError: 409 if not reported, or lost a race
            ChallengeActorForbiddenError: 403 if the caller isn't the creator
            UpstreamError: If a reward step failed (everything undone)
            CompensationFailedError: If undoing also failed
        """
        challenge = ChallengeService._load(
            couple_id, challenge_id, "approve", ChallengeStatus.REPORTED_ACCOMPLISHMENT
        )

        if challenge.get("created_by") != user_id:
            raise ChallengeActorForbiddenError(
                str(challenge_id), "approve", "Solo el creador puede aprobar."
            )

        completed = ChallengeService._gate(
            couple_id, challenge_id, "approve", ChallengeStatus.REPORTED_ACCOMPLISHMENT,
            {"status": ChallengeStatus.COMPLETED.value, "completed_at": utc_now().isoformat()},
        )

        def revert_status() -> None:
            reverted = SupabaseClient.update_challenge_if_status(
                couple_id,
                challenge_id,
                ChallengeStatus.COMPLETED.value,
                {
                    "status": ChallengeStatus.REPORTED_ACCOMPLISHMENT.value,
                    "completed_at": None,
                },
            )
            if reverted is None:
                raise RuntimeError("challenge is no longer completed")

        awarded_to = challenge.get("reported_by") or challenge.get("accepted_by")
        stars = int(challenge.get("stars") or 0)

        try:
            star_event = SupabaseClient.insert_star_event({
                "couple_id": str(couple_id),
                "challenge_id": str(challenge_id),
                "awarded_to": awarded_to,
                "stars": stars,
            })
        except SupabaseClientError as e:
            compensate("approve_challenge", e, [("revert status", revert_status)])

        try:
            LevelService.add_xp(couple_id, settings.CHALLENGE_XP_REWARD)
        except (SupabaseClientError, LuckyLoveException) as e:
            compensate("approve_challenge", e, [
                ("delete star event", lambda: SupabaseClient.delete_star_event(star_event["id"])),
                ("revert status", revert_status),
            ])

        logger.info(f"Approved challenge {challenge_id}: {stars} stars to {awarded_to}")
        return completed
