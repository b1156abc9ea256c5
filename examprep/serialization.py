from __future__ import annotations

from typing import Any, Callable, Iterable

from examprep.engine import (
    AttemptController,
    AttemptResult,
    MultiChoiceQuestion,
    Question,
    QuestionBank,
    QuestionType,
    SingleChoiceQuestion,
)
from examprep.engine.questions import QUESTION_CLASSES
from examprep.models.db import ExamResult
from examprep.utils.time_utils import format_time_taken


def _as_index(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _as_index_set(value: Any) -> frozenset[int] | None:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return None
    indices = [_as_index(item) for item in value]
    if any(idx is None for idx in indices):
        return None
    return frozenset(indices)


def _as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _as_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


# Answer-key parsers per question type
KEY_PARSERS: dict[QuestionType, Callable[[Any], Any]] = {
    QuestionType.SINGLE: _as_index,
    QuestionType.MULTI: _as_index_set,
    QuestionType.TRUE_FALSE: _as_bool,
    QuestionType.SHORT_ANSWER: _as_text,
}
CHOICE_TYPES = (QuestionType.SINGLE, QuestionType.MULTI)


def question_from_payload(data: dict[str, Any], index: int) -> Question:
    """
    Build a question from its JSON form.

    Accepts ``prompt``/``text`` and ``correctAnswer``/``answer``. A missing or
    wrongly shaped answer key is kept as None; the scorer skips such records.
    """
    raw_type = data.get("type") or QuestionType.SINGLE.value
    try:
        question_type = QuestionType(raw_type)
    except ValueError:
        raise ValueError(f"Unknown question type: {raw_type!r}") from None

    question_id = data.get("id")
    question_id = str(question_id) if question_id not in (None, "") else f"q-{index}"
    prompt = data.get("prompt")
    if prompt is None:
        prompt = data.get("text", "")
    key = data.get("correctAnswer")
    if key is None:
        key = data.get("answer")

    fields: dict[str, Any] = {
        "id": question_id,
        "prompt": prompt,
        "correct_answer": KEY_PARSERS[question_type](key),
    }
    if question_type in CHOICE_TYPES:
        fields["options"] = tuple(str(option) for option in data.get("options") or [])
    return QUESTION_CLASSES[question_type](**fields)


def build_question_bank(payloads: Iterable[dict[str, Any]]) -> QuestionBank:
    return QuestionBank.of(
        [question_from_payload(payload, index) for index, payload in enumerate(payloads)]
    )


def serialize_answer(value: Any) -> Any:
    if isinstance(value, frozenset):
        return sorted(value)
    return value


def serialize_question(question: Question, include_key: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": question.id,
        "type": question.type.value,
        "prompt": question.prompt,
    }
    if isinstance(question, (SingleChoiceQuestion, MultiChoiceQuestion)):
        payload["options"] = list(question.options)
    if include_key:
        payload["correctAnswer"] = serialize_answer(question.correct_answer)
    return payload


def serialize_attempt_state(controller: AttemptController) -> dict[str, Any]:
    state = controller.state()
    settings = controller.settings
    return {
        "attemptId": controller.attempt_id,
        "examId": settings.exam_id,
        "examTitle": settings.title,
        "status": state.status.value,
        "currentIndex": state.current_index,
        "remainingSeconds": state.remaining_seconds,
        "totalQuestions": len(controller.bank),
        "questions": [serialize_question(question) for question in controller.bank],
        "answers": [serialize_answer(answer) for answer in state.answers],
        "questionStatuses": [status.value for status in state.statuses],
        "counts": {status.value: count for status, count in state.counts.items()},
        "markedForReview": sorted(state.marked),
    }


def result_answer_records(result: AttemptResult) -> list[dict[str, Any]]:
    """Per-question answers in the exam-result record shape."""
    return [
        {
            "questionId": outcome.question_id,
            "selectedAnswer": serialize_answer(result.answers[outcome.index]),
            "isCorrect": outcome.is_correct,
            "outcome": outcome.outcome.value,
            "marks": outcome.marks,
        }
        for outcome in result.outcomes
    ]


def serialize_attempt_result(
    result: AttemptResult,
    include_review: bool = False,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "attemptId": result.attempt_id,
        "examId": result.exam_id,
        "score": result.score,
        "correctAnswers": result.correct_count,
        "wrongAnswers": result.wrong_count,
        "unattempted": result.unattempted_count,
        "totalQuestions": result.total_questions,
        "percentCorrect": round(result.percent_correct, 2),
        "timeTaken": format_time_taken(result.time_taken_seconds),
        "timeTakenSeconds": result.time_taken_seconds,
        "status": result.completion.value,
        "submittedBy": result.submitted_by.value,
        "submittedAt": result.submitted_at.isoformat(),
        "answers": result_answer_records(result),
    }
    if include_review:
        payload["questions"] = [
            serialize_question(question, include_key=True) for question in result.questions
        ]
    return payload


def serialize_exam_result(row: ExamResult) -> dict[str, Any]:
    return {
        "id": row.id,
        "userId": row.user_id,
        "userName": row.user_name,
        "examId": row.exam_id,
        "examTitle": row.exam_title,
        "category": row.category,
        "examType": row.exam_type,
        "score": row.score,
        "totalQuestions": row.total_questions,
        "correctAnswers": row.correct_answers,
        "wrongAnswers": row.wrong_answers,
        "percentCorrect": round(row.percent_correct, 2),
        "timeTaken": row.time_taken,
        "timeTakenSeconds": row.time_taken_seconds,
        "duration": row.duration,
        "status": row.status,
        "submittedBy": row.submitted_by,
        "answers": row.answers,
        "startedAt": row.started_at.isoformat() if row.started_at else None,
        "completedAt": row.completed_at.isoformat() if row.completed_at else None,
        "createdAt": row.created_at.isoformat() if row.created_at else None,
    }
