from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Point the database at a scratch directory before examprep.config is imported
_DB_DIR = Path(tempfile.mkdtemp(prefix="examprep-tests-"))
os.environ["DB_DIR"] = str(_DB_DIR)
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"

import pytest  # noqa: E402
from sqlalchemy import delete  # noqa: E402

from examprep.database import SessionLocal, init_db  # noqa: E402
from examprep.engine import (  # noqa: E402
    AttemptController,
    ExamSettings,
    MultiChoiceQuestion,
    QuestionBank,
    ShortAnswerQuestion,
    SingleChoiceQuestion,
    TrueFalseQuestion,
)
from examprep.models.db import ExamResult  # noqa: E402


def build_single_bank(keys: list[int], options: int = 4) -> QuestionBank:
    """Bank of single-choice questions with the given correct indices."""
    return QuestionBank.of(
        [
            SingleChoiceQuestion(
                id=f"q{idx}",
                prompt=f"Question {idx}",
                options=tuple(f"Option {opt}" for opt in range(options)),
                correct_answer=key,
            )
            for idx, key in enumerate(keys)
        ]
    )


def build_mixed_bank() -> QuestionBank:
    return QuestionBank.of(
        [
            SingleChoiceQuestion(
                id="capital",
                prompt="Capital of Maharashtra?",
                options=("Pune", "Mumbai", "Nagpur"),
                correct_answer=1,
            ),
            MultiChoiceQuestion(
                id="rivers",
                prompt="Which of these are rivers?",
                options=("Ganga", "Aravalli", "Godavari", "Thar"),
                correct_answer=frozenset({0, 2}),
            ),
            TrueFalseQuestion(
                id="monsoon",
                prompt="The south-west monsoon reaches Kerala first.",
                correct_answer=True,
            ),
            ShortAnswerQuestion(
                id="holy-river",
                prompt="Longest river in India?",
                correct_answer="Ganga",
            ),
        ]
    )


def build_settings(duration_seconds: int = 600, fraction: float = 1 / 3) -> ExamSettings:
    return ExamSettings(
        exam_id="upsc-prelims-1",
        duration_seconds=duration_seconds,
        negative_marking_fraction=fraction,
        marks_per_question=2,
        title="UPSC Prelims Mock 1",
        category="History",
        exam_type="UPSC",
    )


@pytest.fixture
def mixed_bank() -> QuestionBank:
    return build_mixed_bank()


@pytest.fixture
def controller(mixed_bank: QuestionBank) -> AttemptController:
    """Started attempt whose timer is driven by tick() calls."""
    attempt = AttemptController(
        mixed_bank, build_settings(duration_seconds=5), run_timer_thread=False
    )
    attempt.start()
    return attempt


@pytest.fixture
def db_session():
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.execute(delete(ExamResult))
        db.commit()
        db.close()
