# =============================================================================
# core/services/question_service.py - Daily Questions
# =============================================================================
# Each UTC day a couple has one "question of the day": the latest question
# asked within the day. The first read of a day with nothing asked yet picks
# one of the built-in prompts and stores it as source="mock". A partner
# asking a question with POST /home/questions replaces today's question.
#
# Answers hang off a question; answering logs an answer_daily_question event
# in the activity feed.
# =============================================================================

import logging
import random
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import today_range_utc
from app.config import settings
from app.exceptions import DailyQuestionNotFoundError, QuestionNotFoundError
from core.services.feed_service import ActivityFeedService

logger = logging.getLogger(__name__)

MOCK_QUESTIONS = (
    "Que fue lo mejor de tu dia hoy?",
    "Cual fue el momento mas bonito que viviste con tu pareja esta semana?",
    "Que te gustaria hacer juntos este fin de semana?",
    "Que detalle pequeno te haria sentir mas querido hoy?",
    "Si pudieran viajar ahora, a donde irian y por que?",
)


class QuestionService:
    """
    Service for daily questions and answers.
    """

    @staticmethod
    def _todays_question(couple_id: str | UUID) -> dict[str, Any] | None:
        start, end = today_range_utc()
        return SupabaseClient.fetch_daily_question(couple_id, start, end)

    @staticmethod
    def get_daily_question(
        couple_id: str | UUID,
        rng: random.Random | None = None,
    ) -> dict[str, Any]:
        """
        Get today's question, asking a built-in one if none exists yet.

        Two first reads racing may each store a prompt; the store is read
        again afterwards so both return the same (latest) question.

        Args:
            couple_id: The couple UUID
            rng: Random source (tests)

        Returns:
            Question dict
        """
        existing = QuestionService._todays_question(couple_id)
        if existing:
            return existing

        asked = SupabaseClient.insert_question({
            "couple_id": str(couple_id),
            "question": (rng or random).choice(MOCK_QUESTIONS),
            "source": "mock",
            "asked_by": None,
        })
        logger.info(f"Asked mock question {asked['id']} for couple: {couple_id}")

        return QuestionService._todays_question(couple_id) or asked

    @staticmethod
    def list_daily_answers(couple_id: str | UUID) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        """
        Get today's question and its answers, oldest first.

        Raises:
            DailyQuestionNotFoundError: If nothing was asked today
        """
        question = QuestionService._todays_question(couple_id)
        if not question:
            raise DailyQuestionNotFoundError()
        return question, SupabaseClient.list_answers(question["id"])

    @staticmethod
    def create_question(
        couple_id: str | UUID,
        user_id: str,
        text: str,
        source: str | None = None,
    ) -> dict[str, Any]:
        """Ask the couple a question; it becomes today's question."""
        question = SupabaseClient.insert_question({
            "couple_id": str(couple_id),
            "question": text,
            "source": source or "user",
            "asked_by": user_id,
        })
        logger.info(f"Created question: {question['id']} for couple: {couple_id}")
        return question

    @staticmethod
    def list_questions(couple_id: str | UUID) -> list[dict[str, Any]]:
        """List the couple's recent questions, most recently asked first."""
        return SupabaseClient.list_questions(couple_id, limit=settings.QUESTION_HISTORY_LIMIT)

    @staticmethod
    def _insert_answer(
        couple_id: str | UUID,
        question_id: str,
        user_id: str,
        answer_text: str,
    ) -> dict[str, Any]:
        answer = SupabaseClient.insert_answer({
            "question_id": question_id,
            "user_id": user_id,
            "answer_text": answer_text,
        })
        logger.info(f"User {user_id} answered question {question_id}")

        ActivityFeedService.record_event(
            couple_id,
            actor_id=user_id,
            action="answer_daily_question",
            entity_type="daily_answer",
            entity_id=answer["id"],
            message="Respondio la pregunta diaria.",
        )
        return answer

    @staticmethod
    def answer_question(
        couple_id: str | UUID,
        question_id: str,
        user_id: str,
        answer_text: str,
    ) -> dict[str, Any]:
        """
        Answer a specific question of the couple.

        Raises:
            QuestionNotFoundError: If the question belongs to no one or to
                another couple
        """
        question = SupabaseClient.fetch_question(couple_id, question_id)
        if not question:
            raise QuestionNotFoundError(str(question_id))
        return QuestionService._insert_answer(couple_id, question["id"], user_id, answer_text)

    @staticmethod
    def answer_daily_question(
        couple_id: str | UUID,
        user_id: str,
        answer_text: str,
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """
        Answer today's question.

        Returns:
            (answer, question)

        Raises:
            DailyQuestionNotFoundError: If nothing was asked today
        """
        question = QuestionService._todays_question(couple_id)
        if not question:
            raise DailyQuestionNotFoundError()
        answer = QuestionService._insert_answer(couple_id, question["id"], user_id, answer_text)
        return answer, question
