"""
Attempt controller: drives one user through one timed exam attempt.

Lifecycle is ``not_started -> in_progress -> submitted``. Every mutator checks
the status first and is a no-op outside ``in_progress``. ``submit()`` flips
the status under a lock so a timer expiry racing a manual submit scores the
attempt exactly once.
"""

from __future__ import annotations

import enum
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from examprep.engine.answers import AnswerStore, QuestionStatus
from examprep.engine.questions import Question, QuestionBank
from examprep.engine.scorer import (
    DEFAULT_MARKS_PER_QUESTION,
    QuestionOutcome,
    score_attempt,
)
from examprep.engine.timer import CountdownTimer

logger = logging.getLogger(__name__)


class AttemptStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class SubmitReason(str, enum.Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"


class Completion(str, enum.Enum):
    """Whether every question was answered at submit time."""

    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class ExamSettings:
    """Exam metadata needed to run and score an attempt."""

    exam_id: str
    duration_seconds: int
    negative_marking_fraction: float = 0.0
    marks_per_question: float = DEFAULT_MARKS_PER_QUESTION
    title: str = ""
    category: str = "General"
    exam_type: str | None = None


@dataclass(frozen=True)
class AttemptState:
    """Point-in-time view of an attempt."""

    status: AttemptStatus
    current_index: int
    remaining_seconds: int
    answers: tuple[Any, ...]
    visited: frozenset[int]
    marked: frozenset[int]
    statuses: tuple[QuestionStatus, ...]
    counts: dict[QuestionStatus, int]


@dataclass(frozen=True)
class AttemptResult:
    attempt_id: str
    exam_id: str
    score: float
    correct_count: int
    wrong_count: int
    unattempted_count: int
    total_questions: int
    time_taken_seconds: int
    completion: Completion
    submitted_by: SubmitReason
    questions: tuple[Question, ...]
    answers: tuple[Any, ...]
    outcomes: tuple[QuestionOutcome, ...]
    started_at: datetime | None
    submitted_at: datetime

    @property
    def attempted_count(self) -> int:
        return self.correct_count + self.wrong_count

    @property
    def percent_correct(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return (self.correct_count / self.total_questions) * 100


SubmitListener = Callable[[AttemptResult], None]


class AttemptController:
    """Owns the state of a single attempt."""

    def __init__(
        self,
        bank: QuestionBank,
        settings: ExamSettings,
        on_submit: SubmitListener | None = None,
        *,
        attempt_id: str | None = None,
        tick_interval: float = 1.0,
        run_timer_thread: bool = True,
    ) -> None:
        self.attempt_id = attempt_id or uuid.uuid4().hex
        self.bank = bank
        self.settings = settings
        self._store = AnswerStore(bank)
        self._status = AttemptStatus.NOT_STARTED
        self._current_index = 0
        self._result: AttemptResult | None = None
        self._started_at: datetime | None = None
        self._listeners: list[SubmitListener] = [on_submit] if on_submit else []
        self._run_timer_thread = run_timer_thread
        self._lock = threading.RLock()
        self._timer = CountdownTimer(
            settings.duration_seconds,
            on_expire=self._on_timer_expired,
            interval=tick_interval,
        )

    @property
    def status(self) -> AttemptStatus:
        return self._status

    @property
    def in_progress(self) -> bool:
        return self._status == AttemptStatus.IN_PROGRESS

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def remaining_seconds(self) -> int:
        return self._timer.remaining_seconds

    @property
    def result(self) -> AttemptResult | None:
        return self._result

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def answers(self) -> AnswerStore:
        return self._store

    def add_submit_listener(self, listener: SubmitListener) -> None:
        self._listeners.append(listener)

    def state(self) -> AttemptState:
        with self._lock:
            return AttemptState(
                status=self._status,
                current_index=self._current_index,
                remaining_seconds=self._timer.remaining_seconds,
                answers=self._store.snapshot(),
                visited=self._store.visited(),
                marked=self._store.marked(),
                statuses=tuple(self._store.statuses()),
                counts=self._store.status_counts(),
            )

    # Lifecycle

    def start(self) -> bool:
        with self._lock:
            if self._status != AttemptStatus.NOT_STARTED:
                return False
            self._status = AttemptStatus.IN_PROGRESS
            self._started_at = datetime.now(timezone.utc)
            self._current_index = 0
            self._store.mark_visited(0)
            logger.info(
                "Started attempt %s for exam %s (%d questions, %ds)",
                self.attempt_id,
                self.settings.exam_id,
                len(self.bank),
                self.settings.duration_seconds,
            )
        # zero-length exams expire (and submit) inside this call
        self._timer.start(run_thread=self._run_timer_thread)
        return True

    def tick(self) -> int:
        """Advance the countdown by one second (for externally driven loops)."""
        return self._timer.tick()

    def submit(self, reason: SubmitReason = SubmitReason.MANUAL) -> AttemptResult | None:
        """
        Score and close the attempt.
        Returns the result, or None when the attempt was not in progress
        (including a second submit).
        """
        with self._lock:
            if self._status != AttemptStatus.IN_PROGRESS:
                logger.debug(
                    "Ignoring %s submit for attempt %s in state %s",
                    reason.value,
                    self.attempt_id,
                    self._status.value,
                )
                return None
            result = self._build_result(reason)
            self._status = AttemptStatus.SUBMITTED
            self._timer.stop()
            self._store.freeze()
            self._result = result

        logger.info(
            "Attempt %s submitted (%s): score=%.2f correct=%d wrong=%d",
            self.attempt_id,
            reason.value,
            result.score,
            result.correct_count,
            result.wrong_count,
        )
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Submit listener failed for attempt {self.attempt_id}: {e}")
        return result

    def _on_timer_expired(self) -> None:
        self.submit(SubmitReason.TIMEOUT)

    def _build_result(self, reason: SubmitReason) -> AttemptResult:
        answers = self._store.snapshot()
        summary = score_attempt(
            self.bank.questions,
            answers,
            self.settings.negative_marking_fraction,
            self.settings.marks_per_question,
        )
        total = len(self.bank)
        completion = (
            Completion.COMPLETED
            if self._store.answered_count() == total
            else Completion.INCOMPLETE
        )
        return AttemptResult(
            attempt_id=self.attempt_id,
            exam_id=self.settings.exam_id,
            score=summary.score,
            correct_count=summary.correct_count,
            wrong_count=summary.wrong_count,
            unattempted_count=summary.unattempted_count,
            total_questions=total,
            time_taken_seconds=self.settings.duration_seconds
            - self._timer.remaining_seconds,
            completion=completion,
            submitted_by=reason,
            questions=self.bank.questions,
            answers=answers,
            outcomes=summary.outcomes,
            started_at=self._started_at,
            submitted_at=datetime.now(timezone.utc),
        )

    # Navigation

    def navigate(self, index: int) -> bool:
        with self._lock:
            if not self.in_progress or not self.bank.contains_index(index):
                return False
            self._store.mark_visited(self._current_index)
            self._store.mark_visited(index)
            changed = index != self._current_index
            self._current_index = index
            return changed

    def next(self) -> bool:
        return self.navigate(self._current_index + 1)

    def previous(self) -> bool:
        if self._current_index == 0:
            return False
        return self.navigate(self._current_index - 1)

    # Answer actions

    def set_answer(self, index: int, value: Any) -> bool:
        with self._lock:
            return self.in_progress and self._store.set_answer(index, value)

    def toggle_multi_option(self, index: int, option: int) -> bool:
        with self._lock:
            return self.in_progress and self._store.toggle_multi_option(index, option)

    def clear_answer(self, index: int) -> bool:
        with self._lock:
            return self.in_progress and self._store.clear(index)

    def mark_visited(self, index: int) -> bool:
        with self._lock:
            return self.in_progress and self._store.mark_visited(index)

    def toggle_marked(self, index: int) -> bool:
        with self._lock:
            return self.in_progress and self._store.toggle_marked(index)
