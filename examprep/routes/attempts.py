"""Attempt endpoints: start, navigate, answer, submit, review."""
from fastapi import APIRouter

from examprep.engine import AttemptController
from examprep.models import (
    AnswerRequest,
    AttemptMutationResponse,
    AttemptStartRequest,
    AttemptSubmitResponse,
    NavigateRequest,
)
from examprep.serialization import serialize_attempt_result, serialize_attempt_state
from examprep.services import attempt_service
from examprep.utils import validate_id

router = APIRouter(prefix="/api/attempts", tags=["attempts"])


def _load(attempt_id: str) -> AttemptController:
    return attempt_service.get_attempt(validate_id("attemptId", attempt_id))


def _mutation(controller: AttemptController, changed: bool) -> dict[str, object]:
    return {"changed": changed, "attempt": serialize_attempt_state(controller)}


@router.post("", status_code=201)
def start_attempt(payload: AttemptStartRequest) -> dict[str, object]:
    """Start a timed attempt over the supplied questions."""
    exam_id = validate_id("examId", payload.examId)
    user_id = validate_id("userId", payload.userId)
    settings = attempt_service.build_exam_settings(
        exam_id,
        title=payload.examTitle,
        category=payload.category,
        exam_type=payload.examType,
        duration_minutes=payload.durationMinutes,
        marks_per_question=payload.marksPerQuestion,
        negative_marking=payload.negativeMarking,
    )
    controller = attempt_service.start_attempt(
        settings,
        [question.model_dump() for question in payload.questions],
        user_id,
        payload.userName,
    )
    return serialize_attempt_state(controller)


@router.get("/{attempt_id}")
def get_attempt(attempt_id: str) -> dict[str, object]:
    """Current state of an attempt."""
    return serialize_attempt_state(_load(attempt_id))


@router.post("/{attempt_id}/navigate", response_model=AttemptMutationResponse)
def navigate(attempt_id: str, payload: NavigateRequest) -> dict[str, object]:
    controller = _load(attempt_id)
    return _mutation(controller, controller.navigate(payload.index))


@router.post("/{attempt_id}/next", response_model=AttemptMutationResponse)
def next_question(attempt_id: str) -> dict[str, object]:
    controller = _load(attempt_id)
    return _mutation(controller, controller.next())


@router.post("/{attempt_id}/previous", response_model=AttemptMutationResponse)
def previous_question(attempt_id: str) -> dict[str, object]:
    controller = _load(attempt_id)
    return _mutation(controller, controller.previous())


@router.put("/{attempt_id}/answers/{index}", response_model=AttemptMutationResponse)
def set_answer(attempt_id: str, index: int, payload: AnswerRequest) -> dict[str, object]:
    """Set or overwrite the answer to one question."""
    controller = _load(attempt_id)
    return _mutation(controller, controller.set_answer(index, payload.value))


@router.delete("/{attempt_id}/answers/{index}", response_model=AttemptMutationResponse)
def clear_answer(attempt_id: str, index: int) -> dict[str, object]:
    controller = _load(attempt_id)
    return _mutation(controller, controller.clear_answer(index))


@router.post(
    "/{attempt_id}/answers/{index}/options/{option}",
    response_model=AttemptMutationResponse,
)
def toggle_option(attempt_id: str, index: int, option: int) -> dict[str, object]:
    """Select or deselect one option of a multiple-answer question."""
    controller = _load(attempt_id)
    return _mutation(controller, controller.toggle_multi_option(index, option))


@router.post("/{attempt_id}/marks/{index}", response_model=AttemptMutationResponse)
def toggle_mark(attempt_id: str, index: int) -> dict[str, object]:
    """Flag or unflag a question for review."""
    controller = _load(attempt_id)
    return _mutation(controller, controller.toggle_marked(index))


@router.post("/{attempt_id}/submit", response_model=AttemptSubmitResponse)
def submit_attempt(attempt_id: str) -> dict[str, object]:
    """Submit an attempt. Repeated submits report the first result."""
    attempt_id = validate_id("attemptId", attempt_id)
    submitted, result = attempt_service.submit_attempt(attempt_id)
    return {
        "status": "submitted" if submitted else "duplicate",
        "result": serialize_attempt_result(result),
    }


@router.get("/{attempt_id}/review")
def review_attempt(attempt_id: str) -> dict[str, object]:
    """Submitted attempt with questions, answer keys and per-question outcomes."""
    attempt_id = validate_id("attemptId", attempt_id)
    result = attempt_service.get_review(attempt_id)
    return serialize_attempt_result(result, include_review=True)
