"""Attempt-related Pydantic models."""
from pydantic import AliasChoices, BaseModel, Field

from examprep.engine.questions import QuestionType

AnswerValue = bool | int | list[int] | str | None


class QuestionPayload(BaseModel):
    """Question as supplied by the exam fetch."""

    id: str | int | None = None
    type: QuestionType = QuestionType.SINGLE
    prompt: str = Field(..., validation_alias=AliasChoices("prompt", "text"))
    options: list[str] = Field(default_factory=list)
    correctAnswer: AnswerValue = Field(
        None, validation_alias=AliasChoices("correctAnswer", "answer")
    )


class AttemptStartRequest(BaseModel):
    """Model for starting an attempt."""

    examId: str = Field(..., min_length=1)
    examTitle: str = ""
    category: str = "General"
    examType: str | None = None
    durationMinutes: int | None = Field(None, ge=0)
    marksPerQuestion: float | None = Field(None, gt=0)
    negativeMarking: float | None = Field(None, ge=0, le=1)
    userId: str = Field(..., min_length=1)
    userName: str | None = None
    questions: list[QuestionPayload] = Field(..., min_length=1)


class NavigateRequest(BaseModel):
    index: int


class AnswerRequest(BaseModel):
    value: AnswerValue = None


class AttemptMutationResponse(BaseModel):
    """Model for the response to a navigation or answer action."""

    changed: bool
    attempt: dict[str, object]


class AttemptSubmitResponse(BaseModel):
    """Model for attempt submission response."""

    status: str
    result: dict[str, object]
