# =============================================================================
# core/models/question.py - Daily Question Schemas
# =============================================================================
# One question per couple per UTC day (a mock pick, or the latest question a
# partner asked), plus both partners' answers to it.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class QuestionCreate(BaseModel):
    """
    Body for POST /home/questions.

    The new question becomes today's question, since the latest question
    asked within the UTC day wins.
    """

    question: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Question for the couple"
    )
    source: str | None = Field(
        default=None,
        max_length=20,
        description="Where the question came from (defaults to 'user')"
    )


class AnswerCreate(BaseModel):
    """
    Body for answering a question.

    Example:
        {
            "answerText": "Cocinar juntos"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    answer_text: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        alias="answerText",
    )


class QuestionResponse(BaseModel):
    """A stored question."""

    id: str
    question: str
    source: str | None = None
    asked_by: str | None = None
    asked_at: datetime | None = None


class AnswerResponse(BaseModel):
    """A stored answer."""

    id: str
    question_id: str | None = None
    user_id: str | None = None
    answer_text: str
    created_at: datetime | None = None


class QuestionEnvelope(BaseModel):
    question: QuestionResponse


class QuestionList(BaseModel):
    items: list[QuestionResponse] = Field(default_factory=list)


class AnswerEnvelope(BaseModel):
    """Response for answering; answering today's question also echoes it."""

    answer: AnswerResponse
    question: QuestionResponse | None = None


class DailyQuestionAnswers(BaseModel):
    """Today's question with every answer so far, oldest first."""

    question: QuestionResponse
    answers: list[AnswerResponse] = Field(default_factory=list)
