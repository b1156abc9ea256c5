"""Pydantic models."""
from examprep.models.attempts import (
    AnswerRequest,
    AttemptMutationResponse,
    AttemptStartRequest,
    AttemptSubmitResponse,
    NavigateRequest,
    QuestionPayload,
)

__all__ = [
    "AnswerRequest",
    "AttemptMutationResponse",
    "AttemptStartRequest",
    "AttemptSubmitResponse",
    "NavigateRequest",
    "QuestionPayload",
]
