"""Service layer for stored exam results."""
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session as DBSession

from examprep.config import LEADERBOARD_LIMIT
from examprep.engine import AttemptResult, Completion, ExamSettings
from examprep.models.db import ExamResult, ExamResultStatus
from examprep.serialization import result_answer_records
from examprep.utils import format_time_taken

PERIOD_DAYS = {"week": 7, "month": 30}
TOP_SUBJECTS = 5


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def save_exam_result(
    db: DBSession,
    result: AttemptResult,
    settings: ExamSettings,
    user_id: str,
    user_name: str | None = None,
) -> ExamResult:
    """
    Store the result of a submitted attempt.
    Saving the same attempt twice returns the existing row.
    """
    existing = db.get(ExamResult, result.attempt_id)
    if existing:
        return existing

    status = (
        ExamResultStatus.COMPLETED
        if result.completion == Completion.COMPLETED
        else ExamResultStatus.INCOMPLETE
    )
    row = ExamResult(
        id=result.attempt_id,
        user_id=user_id,
        user_name=user_name,
        exam_id=result.exam_id,
        exam_title=settings.title or result.exam_id,
        category=settings.category or "General",
        exam_type=settings.exam_type,
        score=result.score,
        total_questions=result.total_questions,
        correct_answers=result.correct_count,
        wrong_answers=result.wrong_count,
        status=status.value,
        submitted_by=result.submitted_by.value,
        time_taken=format_time_taken(result.time_taken_seconds),
        time_taken_seconds=result.time_taken_seconds,
        duration=round(settings.duration_seconds / 60),
        started_at=result.started_at,
        completed_at=result.submitted_at if status == ExamResultStatus.COMPLETED else None,
        created_at=result.submitted_at,
    )
    row.answers = result_answer_records(result)

    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_exam_result(db: DBSession, result_id: str) -> ExamResult:
    result = db.get(ExamResult, result_id)
    if not result:
        raise HTTPException(status_code=404, detail="Exam result not found")
    return result


def get_user_exam_results(
    db: DBSession,
    user_id: str,
    exam_id: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[ExamResult]:
    """
    Get results for a user, newest first, optionally filtered by exam and date.
    """
    query = select(ExamResult).where(ExamResult.user_id == user_id)

    if exam_id:
        query = query.where(ExamResult.exam_id == exam_id)
    if since:
        query = query.where(ExamResult.created_at >= since)
    if until:
        query = query.where(ExamResult.created_at <= until)

    query = query.order_by(ExamResult.created_at.desc()).limit(limit).offset(offset)

    return list(db.execute(query).scalars().all())


def delete_exam_result(db: DBSession, result_id: str) -> bool:
    result = db.get(ExamResult, result_id)
    if not result:
        return False

    db.delete(result)
    db.commit()
    return True


def get_leaderboard(
    db: DBSession,
    exam_id: str | None = None,
    period: str = "all",
    limit: int = LEADERBOARD_LIMIT,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """
    Rank users by average score over their completed results.

    Ties on average go to the user with more exams. ``period`` is one of
    ``all``, ``week`` (last 7 days) or ``month`` (last 30 days).
    """
    average = func.avg(ExamResult.score)
    exam_count = func.count(ExamResult.id)
    query = (
        select(
            ExamResult.user_id,
            func.max(ExamResult.user_name),
            func.sum(ExamResult.score),
            average,
            exam_count,
            func.max(ExamResult.score),
        )
        .where(ExamResult.status == ExamResultStatus.COMPLETED.value)
        .group_by(ExamResult.user_id)
        .order_by(average.desc(), exam_count.desc())
        .limit(limit)
    )

    if exam_id:
        query = query.where(ExamResult.exam_id == exam_id)
    days = PERIOD_DAYS.get(period)
    if days:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        query = query.where(ExamResult.created_at >= cutoff)

    leaderboard = []
    for rank, row in enumerate(db.execute(query).all(), start=1):
        user_id, user_name, total, avg, count, best = row
        leaderboard.append(
            {
                "rank": rank,
                "userId": user_id,
                "name": user_name or user_id,
                "totalScore": total,
                "averageScore": round(avg, 2),
                "totalExams": count,
                "bestScore": best,
            }
        )
    return leaderboard


def get_user_progress(db: DBSession, user_id: str) -> list[dict[str, Any]]:
    """
    Per-category progress: results counted as done when completed with a
    positive score.
    """
    results = db.execute(
        select(ExamResult).where(ExamResult.user_id == user_id)
    ).scalars().all()

    categories: dict[str, dict[str, int]] = {}
    for result in results:
        entry = categories.setdefault(result.category or "General", {"completed": 0, "total": 0})
        if result.is_completed and result.score > 0:
            entry["completed"] += 1
        entry["total"] += 1

    progress = [
        {
            "subject": subject,
            "completed": data["completed"],
            "total": data["total"],
            "percent": (
                _round_half_up(data["completed"] * 100 / data["total"]) if data["total"] else 0
            ),
        }
        for subject, data in categories.items()
    ]
    progress.sort(key=lambda item: item["percent"], reverse=True)
    return progress


def get_user_performance_stats(db: DBSession, user_id: str) -> dict[str, Any]:
    """
    Summary over a user's completed results: average score, best and worst
    subject by percent correct, test count, hours spent and the top subjects.
    """
    results = db.execute(
        select(ExamResult).where(
            ExamResult.user_id == user_id,
            ExamResult.status == ExamResultStatus.COMPLETED.value,
        )
    ).scalars().all()

    if not results:
        return {
            "averageScore": 0,
            "bestSubject": "N/A",
            "worstSubject": "N/A",
            "totalTests": 0,
            "totalHours": 0,
            "subjects": [],
        }

    categories: dict[str, dict[str, int]] = {}
    for result in results:
        entry = categories.setdefault(
            result.category or "General", {"total": 0, "correct": 0, "count": 0}
        )
        entry["total"] += result.total_questions or 0
        entry["correct"] += result.correct_answers or 0
        entry["count"] += 1

    subjects = [
        {
            "name": name,
            "progress": (
                _round_half_up(data["correct"] * 100 / data["total"]) if data["total"] else 0
            ),
            "count": data["count"],
        }
        for name, data in categories.items()
    ]
    subjects.sort(key=lambda item: item["progress"], reverse=True)

    total_minutes = sum(result.duration or 0 for result in results)
    return {
        "averageScore": _round_half_up(sum(result.score or 0 for result in results) / len(results)),
        "bestSubject": subjects[0]["name"],
        "worstSubject": subjects[-1]["name"],
        "totalTests": len(results),
        "totalHours": _round_half_up(total_minutes / 60),
        "subjects": subjects[:TOP_SUBJECTS],
    }
