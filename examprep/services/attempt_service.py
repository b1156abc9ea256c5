"""Service layer for in-progress attempts held in process memory."""
import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from fastapi import HTTPException

from examprep.config import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_MARKS_PER_QUESTION,
    NEGATIVE_MARKING_FRACTIONS,
    TIMER_TICK_SECONDS,
)
from examprep.database import session_scope
from examprep.engine import AttemptController, AttemptResult, ExamSettings
from examprep.serialization import build_question_bank
from examprep.services import result_service

logger = logging.getLogger(__name__)


@dataclass
class AttemptEntry:
    """Registry entry: the controller plus who is taking the attempt."""

    controller: AttemptController
    user_id: str
    user_name: str | None = None
    created_at: float = field(default_factory=time.monotonic)
    submitted_at: float | None = None
    result_id: str | None = None


_attempts: dict[str, AttemptEntry] = {}
_lock = Lock()


def negative_marking_for(exam_type: str | None) -> float:
    """Default negative-marking fraction for an exam type."""
    if not exam_type:
        return 0.0
    return NEGATIVE_MARKING_FRACTIONS.get(exam_type.strip().upper(), 0.0)


def build_exam_settings(
    exam_id: str,
    title: str = "",
    category: str = "General",
    exam_type: str | None = None,
    duration_minutes: int | None = None,
    marks_per_question: float | None = None,
    negative_marking: float | None = None,
) -> ExamSettings:
    """Resolve exam settings, filling gaps from configuration."""
    if duration_minutes is None:
        duration_minutes = DEFAULT_DURATION_MINUTES
    if marks_per_question is None:
        marks_per_question = DEFAULT_MARKS_PER_QUESTION
    if negative_marking is None:
        negative_marking = negative_marking_for(exam_type)
    return ExamSettings(
        exam_id=exam_id,
        duration_seconds=duration_minutes * 60,
        negative_marking_fraction=negative_marking,
        marks_per_question=marks_per_question,
        title=title,
        category=category or "General",
        exam_type=exam_type,
    )


def _persist_result(entry: AttemptEntry, result: AttemptResult) -> None:
    """Submit listener: store the result outside any request session."""
    entry.submitted_at = time.monotonic()
    try:
        with session_scope() as db:
            row = result_service.save_exam_result(
                db,
                result,
                entry.controller.settings,
                entry.user_id,
                entry.user_name,
            )
            entry.result_id = row.id
    except Exception as e:
        logger.error(f"Failed to save result for attempt {result.attempt_id}: {e}")


def start_attempt(
    settings: ExamSettings,
    questions: list[dict[str, Any]],
    user_id: str,
    user_name: str | None = None,
    run_timer_thread: bool = True,
) -> AttemptController:
    """
    Create, register and start an attempt.

    Args:
        settings: Exam metadata and marking scheme
        questions: Question payloads, in display order
        user_id: Identifier of the user taking the attempt
        user_name: Display name used on the leaderboard
        run_timer_thread: Count down on a background thread

    Returns:
        The started controller
    """
    try:
        bank = build_question_bank(questions)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    controller = AttemptController(
        bank,
        settings,
        tick_interval=TIMER_TICK_SECONDS,
        run_timer_thread=run_timer_thread,
    )
    entry = AttemptEntry(controller=controller, user_id=user_id, user_name=user_name)
    controller.add_submit_listener(lambda result: _persist_result(entry, result))

    with _lock:
        _attempts[controller.attempt_id] = entry
    controller.start()
    return controller


def get_attempt_entry(attempt_id: str) -> AttemptEntry:
    with _lock:
        entry = _attempts.get(attempt_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Attempt not found")
    return entry


def get_attempt(attempt_id: str) -> AttemptController:
    return get_attempt_entry(attempt_id).controller


def submit_attempt(attempt_id: str) -> tuple[bool, AttemptResult]:
    """
    Submit an attempt. Returns (submitted_now, result); a duplicate submit
    returns False with the result produced earlier.
    """
    controller = get_attempt(attempt_id)
    result = controller.submit()
    if result is not None:
        return True, result
    if controller.result is None:
        raise HTTPException(status_code=409, detail="Attempt is not in progress")
    return False, controller.result


def get_review(attempt_id: str) -> AttemptResult:
    controller = get_attempt(attempt_id)
    if controller.result is None:
        raise HTTPException(status_code=409, detail="Attempt has not been submitted")
    return controller.result


def discard_submitted_attempts(older_than_seconds: float) -> int:
    """Drop submitted attempts from memory once their retention has passed."""
    cutoff = time.monotonic() - older_than_seconds
    with _lock:
        stale = [
            attempt_id
            for attempt_id, entry in _attempts.items()
            if entry.submitted_at is not None and entry.submitted_at <= cutoff
        ]
        for attempt_id in stale:
            del _attempts[attempt_id]
    return len(stale)


def active_attempt_count() -> int:
    with _lock:
        return sum(1 for entry in _attempts.values() if entry.controller.in_progress)
