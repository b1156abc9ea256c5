from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from examprep.engine import AttemptController, ExamSettings
from examprep.models.db import ExamResult, ExamResultStatus
from examprep.services import result_service

from conftest import build_settings, build_single_bank


def _submitted(answers: list[int | None], keys: list[int], settings: ExamSettings | None = None):
    attempt = AttemptController(
        build_single_bank(keys),
        settings or build_settings(duration_seconds=600),
        run_timer_thread=False,
    )
    attempt.start()
    for index, answer in enumerate(answers):
        attempt.set_answer(index, answer)
    return attempt.submit(), attempt.settings


def _row(db, result_id: str, user_id: str, score: float, **overrides) -> ExamResult:
    values = {
        "id": result_id,
        "user_id": user_id,
        "user_name": f"User {user_id}",
        "exam_id": "exam-1",
        "exam_title": "Mock",
        "category": "History",
        "score": score,
        "total_questions": 4,
        "correct_answers": 2,
        "status": ExamResultStatus.COMPLETED.value,
    }
    values.update(overrides)
    row = ExamResult(**values)
    db.add(row)
    db.commit()
    return row


def test_save_exam_result_stores_record_shape(db_session) -> None:
    result, settings = _submitted([0, 3, None, 3], [0, 1, 2, 3])

    row = result_service.save_exam_result(db_session, result, settings, "student-1", "Asha")

    assert row.id == result.attempt_id
    assert row.score == pytest.approx(3.3333333)
    assert row.correct_answers == 2
    assert row.wrong_answers == 1
    assert row.total_questions == 4
    assert row.status == ExamResultStatus.INCOMPLETE.value
    assert row.completed_at is None
    assert row.time_taken == "0h 0m"
    assert row.duration == 10
    assert [a["isCorrect"] for a in row.answers] == [True, False, None, True]
    assert row.answers[2]["selectedAnswer"] is None


def test_save_exam_result_is_idempotent(db_session) -> None:
    result, settings = _submitted([0, 1], [0, 1])

    first = result_service.save_exam_result(db_session, result, settings, "student-1")
    second = result_service.save_exam_result(db_session, result, settings, "student-1")

    assert first.id == second.id
    assert first.status == ExamResultStatus.COMPLETED.value
    assert first.completed_at is not None
    assert len(result_service.get_user_exam_results(db_session, "student-1")) == 1


def test_get_exam_result_missing(db_session) -> None:
    with pytest.raises(HTTPException) as exc_info:
        result_service.get_exam_result(db_session, "nope")
    assert exc_info.value.status_code == 404


def test_user_results_newest_first(db_session) -> None:
    now = datetime.now(timezone.utc)
    _row(db_session, "r1", "u1", 4, created_at=now - timedelta(days=2))
    _row(db_session, "r2", "u1", 6, created_at=now)
    _row(db_session, "r3", "u2", 8, created_at=now)

    results = result_service.get_user_exam_results(db_session, "u1")
    assert [r.id for r in results] == ["r2", "r1"]

    recent = result_service.get_user_exam_results(
        db_session, "u1", since=now - timedelta(days=1)
    )
    assert [r.id for r in recent] == ["r2"]


def test_delete_exam_result(db_session) -> None:
    _row(db_session, "r1", "u1", 4)
    assert result_service.delete_exam_result(db_session, "r1")
    assert not result_service.delete_exam_result(db_session, "r1")


def test_leaderboard_ranks_by_average_then_exam_count(db_session) -> None:
    _row(db_session, "a1", "alice", 10)
    _row(db_session, "a2", "alice", 6)
    _row(db_session, "b1", "bob", 8)
    _row(db_session, "c1", "chandra", 12)
    _row(db_session, "c2", "chandra", 0, status=ExamResultStatus.INCOMPLETE.value)

    board = result_service.get_leaderboard(db_session)

    assert [entry["userId"] for entry in board] == ["chandra", "alice", "bob"]
    assert [entry["rank"] for entry in board] == [1, 2, 3]
    alice = board[1]
    assert alice["averageScore"] == 8
    assert alice["totalScore"] == 16
    assert alice["bestScore"] == 10
    assert alice["totalExams"] == 2
    assert alice["name"] == "User alice"


def test_leaderboard_filters_by_exam_and_period(db_session) -> None:
    now = datetime.now(timezone.utc)
    _row(db_session, "a1", "alice", 10, created_at=now - timedelta(days=20))
    _row(db_session, "b1", "bob", 4, created_at=now - timedelta(days=2))
    _row(db_session, "c1", "chandra", 9, exam_id="exam-2", created_at=now)

    weekly = result_service.get_leaderboard(db_session, period="week", now=now)
    assert [entry["userId"] for entry in weekly] == ["chandra", "bob"]

    monthly = result_service.get_leaderboard(db_session, exam_id="exam-1", period="month", now=now)
    assert [entry["userId"] for entry in monthly] == ["alice", "bob"]


def test_user_progress_by_category(db_session) -> None:
    _row(db_session, "r1", "u1", 6, category="History")
    _row(db_session, "r2", "u1", 0, category="History")
    _row(db_session, "r3", "u1", 4, category="Polity")
    _row(db_session, "r4", "u1", 4, category="Polity", status=ExamResultStatus.INCOMPLETE.value)
    _row(db_session, "r5", "u1", 5, category="Geography")

    progress = result_service.get_user_progress(db_session, "u1")

    assert progress[0] == {"subject": "Geography", "completed": 1, "total": 1, "percent": 100}
    by_subject = {item["subject"]: item for item in progress}
    assert by_subject["History"]["percent"] == 50
    assert by_subject["Polity"]["completed"] == 1
    assert by_subject["Polity"]["total"] == 2


def test_user_progress_rounds_half_up(db_session) -> None:
    _row(db_session, "r0", "u1", 2)
    for idx in range(1, 8):
        _row(db_session, f"r{idx}", "u1", 0)

    progress = result_service.get_user_progress(db_session, "u1")

    assert progress == [{"subject": "History", "completed": 1, "total": 8, "percent": 13}]


def test_performance_stats_without_completed_results(db_session) -> None:
    _row(db_session, "r1", "u1", 4, status=ExamResultStatus.INCOMPLETE.value)

    stats = result_service.get_user_performance_stats(db_session, "u1")

    assert stats == {
        "averageScore": 0,
        "bestSubject": "N/A",
        "worstSubject": "N/A",
        "totalTests": 0,
        "totalHours": 0,
        "subjects": [],
    }


def test_performance_stats_by_subject(db_session) -> None:
    _row(db_session, "r1", "u1", 6, category="History", correct_answers=3, duration=60)
    _row(db_session, "r2", "u1", 3, category="History", correct_answers=1, duration=30)
    _row(db_session, "r3", "u1", 8, category="Polity", correct_answers=4, duration=60)
    _row(db_session, "r4", "u1", 0, category="Economy", correct_answers=0, duration=30)
    _row(db_session, "r5", "u1", 9, category="Economy", status=ExamResultStatus.INCOMPLETE.value)
    _row(db_session, "r6", "u2", 8, category="Geography", correct_answers=4)

    stats = result_service.get_user_performance_stats(db_session, "u1")

    # (6 + 3 + 8 + 0) / 4 = 4.25; 180 minutes
    assert stats["averageScore"] == 4
    assert stats["totalTests"] == 4
    assert stats["totalHours"] == 3
    assert stats["bestSubject"] == "Polity"
    assert stats["worstSubject"] == "Economy"
    assert stats["subjects"] == [
        {"name": "Polity", "progress": 100, "count": 1},
        {"name": "History", "progress": 50, "count": 2},
        {"name": "Economy", "progress": 0, "count": 1},
    ]


def test_performance_stats_keeps_top_five_subjects(db_session) -> None:
    for idx in range(7):
        _row(db_session, f"r{idx}", "u1", 2, category=f"Subject {idx}", correct_answers=idx % 5)

    stats = result_service.get_user_performance_stats(db_session, "u1")

    assert len(stats["subjects"]) == 5
    assert stats["subjects"][0]["progress"] == 100
    assert stats["totalTests"] == 7
