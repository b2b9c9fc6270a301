# =============================================================================
# app/routers/questions.py - Daily Question Endpoints
# =============================================================================
# The question of the day and answers to it:
#   GET  /home/daily-question            today's question (asks one if needed)
#   GET  /home/daily-question/answers    today's question with its answers
#   POST /home/daily-question/answer     answer today's question
#   GET  /home/questions                 recent questions
#   POST /home/questions                 ask a question
#   POST /home/questions/{id}/answers    answer a specific question
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from app.auth import get_couple_member, CoupleMember
from core.models.question import (
    AnswerCreate,
    AnswerEnvelope,
    DailyQuestionAnswers,
    QuestionCreate,
    QuestionEnvelope,
    QuestionList,
)
from core.services.question_service import QuestionService

router = APIRouter(prefix="/home")


@router.get("/daily-question", response_model=QuestionEnvelope)
async def get_daily_question(
    member: CoupleMember = Depends(get_couple_member),
) -> QuestionEnvelope:
    """
    Get today's question.

    The latest question asked within the UTC day; if there is none yet, a
    built-in prompt is asked.
    """
    return QuestionEnvelope(question=QuestionService.get_daily_question(member.couple_id))


@router.get("/daily-question/answers", response_model=DailyQuestionAnswers)
async def get_daily_answers(
    member: CoupleMember = Depends(get_couple_member),
) -> DailyQuestionAnswers:
    """Today's question and its answers, oldest first. 404 if none was asked."""
    question, answers = QuestionService.list_daily_answers(member.couple_id)
    return DailyQuestionAnswers(question=question, answers=answers)


@router.post(
    "/daily-question/answer",
    response_model=AnswerEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def answer_daily_question(
    request: AnswerCreate,
    member: CoupleMember = Depends(get_couple_member),
) -> AnswerEnvelope:
    """Answer today's question. 404 if none was asked."""
    answer, question = QuestionService.answer_daily_question(
        member.couple_id, member.id, request.answer_text
    )
    return AnswerEnvelope(answer=answer, question=question)


@router.get("/questions", response_model=QuestionList)
async def list_questions(
    member: CoupleMember = Depends(get_couple_member),
) -> QuestionList:
    """List recent questions, most recently asked first."""
    return QuestionList(items=QuestionService.list_questions(member.couple_id))


@router.post("/questions", response_model=QuestionEnvelope, status_code=status.HTTP_201_CREATED)
async def create_question(
    request: QuestionCreate,
    member: CoupleMember = Depends(get_couple_member),
) -> QuestionEnvelope:
    """Ask the couple a question. It becomes today's question."""
    question = QuestionService.create_question(
        member.couple_id, member.id, request.question, request.source
    )
    return QuestionEnvelope(question=question)


@router.post(
    "/questions/{question_id}/answers",
    response_model=AnswerEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def answer_question(
    request: AnswerCreate,
    question_id: Annotated[UUID, Path(description="Question ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> AnswerEnvelope:
    """Answer a specific question of the couple."""
    answer = QuestionService.answer_question(
        member.couple_id, str(question_id), member.id, request.answer_text
    )
    return AnswerEnvelope(answer=answer)
