"""Exam result endpoints: history, progress and leaderboard."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session as DbSession

from examprep.config import LEADERBOARD_LIMIT
from examprep.database import get_db
from examprep.serialization import serialize_exam_result
from examprep.services import result_service
from examprep.utils import parse_iso_timestamp, validate_id, validate_period

router = APIRouter(prefix="/api/exam-results", tags=["exam-results"])


@router.get("")
def list_exam_results(
    user_id: str = Query(..., alias="userId"),
    exam_id: str | None = Query(None, alias="examId"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: DbSession = Depends(get_db),
) -> dict[str, object]:
    """List a user's results, newest first.

    Args:
        user_id: The user to list results for (required)
        exam_id: Optional exam ID to filter by
        start_date: Optional start date filter (ISO format)
        end_date: Optional end date filter (ISO format)
        limit: Maximum number of results
        offset: Number of results to skip (for pagination)

    Returns:
        Dictionary with results list and pagination info
    """
    user_id = validate_id("userId", user_id)
    if exam_id:
        exam_id = validate_id("examId", exam_id)
    since = parse_iso_timestamp(start_date)
    until = parse_iso_timestamp(end_date)
    if start_date and since is None:
        raise HTTPException(status_code=400, detail="Invalid startDate")
    if end_date and until is None:
        raise HTTPException(status_code=400, detail="Invalid endDate")

    results = result_service.get_user_exam_results(
        db, user_id, exam_id=exam_id, since=since, until=until, limit=limit, offset=offset
    )
    return {
        "results": [serialize_exam_result(result) for result in results],
        "limit": limit,
        "offset": offset,
    }


@router.get("/leaderboard")
def leaderboard(
    exam_id: str | None = Query(None, alias="examId"),
    period: str = Query("all"),
    limit: int = Query(LEADERBOARD_LIMIT, ge=1, le=500),
    db: DbSession = Depends(get_db),
) -> list[dict[str, object]]:
    """Top performers by average score over completed results."""
    if exam_id:
        exam_id = validate_id("examId", exam_id)
    period = validate_period(period)
    return result_service.get_leaderboard(db, exam_id=exam_id, period=period, limit=limit)


@router.get("/progress")
def user_progress(
    user_id: str = Query(..., alias="userId"),
    db: DbSession = Depends(get_db),
) -> list[dict[str, object]]:
    """Per-category progress for a user."""
    user_id = validate_id("userId", user_id)
    return result_service.get_user_progress(db, user_id)


@router.get("/stats/performance")
def user_performance(
    user_id: str = Query(..., alias="userId"),
    db: DbSession = Depends(get_db),
) -> dict[str, object]:
    """Average score, strongest and weakest subjects over completed results."""
    user_id = validate_id("userId", user_id)
    return result_service.get_user_performance_stats(db, user_id)


@router.get("/{result_id}")
def get_exam_result(result_id: str, db: DbSession = Depends(get_db)) -> dict[str, object]:
    result_id = validate_id("resultId", result_id)
    return serialize_exam_result(result_service.get_exam_result(db, result_id))


@router.delete("/{result_id}")
def delete_exam_result(result_id: str, db: DbSession = Depends(get_db)) -> dict[str, object]:
    result_id = validate_id("resultId", result_id)
    if not result_service.delete_exam_result(db, result_id):
        raise HTTPException(status_code=404, detail="Exam result not found")
    return {"status": "deleted", "id": result_id}
