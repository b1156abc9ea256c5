"""Database models."""
from examprep.models.db.exam_result import ExamResult, ExamResultStatus

__all__ = [
    "ExamResult",
    "ExamResultStatus",
]
