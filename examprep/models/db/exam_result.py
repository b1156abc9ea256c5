"""
ExamResult database model: one row per submitted attempt.
"""

from __future__ import annotations

import enum
import json
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from examprep.database import Base


class ExamResultStatus(str, enum.Enum):
    """Status of a stored exam result."""

    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    ABANDONED = "abandoned"


class ExamResult(Base):
    """
    Exam result record.
    Stores the score of a single attempt with an answer snapshot for review.
    """

    __tablename__ = "exam_results"

    # Primary key - the attempt id
    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    # References
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    user_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    exam_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    exam_title: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="General", nullable=False)
    exam_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Results
    score: Mapped[float] = mapped_column(default=0.0, nullable=False)
    total_questions: Mapped[int] = mapped_column(nullable=False)
    correct_answers: Mapped[int] = mapped_column(default=0, nullable=False)
    wrong_answers: Mapped[int] = mapped_column(default=0, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=ExamResultStatus.INCOMPLETE.value, nullable=False
    )
    submitted_by: Mapped[str] = mapped_column(String(20), default="manual", nullable=False)

    # Timing
    time_taken: Mapped[str] = mapped_column(String(20), default="0h 0m", nullable=False)
    time_taken_seconds: Mapped[int] = mapped_column(default=0, nullable=False)
    duration: Mapped[int] = mapped_column(default=0, nullable=False)  # minutes
    started_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Answer snapshot (stored as JSON)
    answers_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_exam_results_user_created", "user_id", "created_at"),
    )

    @property
    def answers(self) -> list[dict[str, Any]]:
        """Parse answer snapshot from JSON."""
        if not self.answers_json:
            return []
        try:
            return json.loads(self.answers_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @answers.setter
    def answers(self, value: list[dict[str, Any]] | None) -> None:
        """Serialize answer snapshot to JSON."""
        self.answers_json = json.dumps(value) if value else None

    @property
    def is_completed(self) -> bool:
        return self.status == ExamResultStatus.COMPLETED.value

    @property
    def percent_correct(self) -> float:
        """Calculate percentage of correct answers."""
        if self.total_questions == 0:
            return 0.0
        return (self.correct_answers / self.total_questions) * 100
