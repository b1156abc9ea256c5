"""Scoring with negative marking."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from examprep.engine.questions import Question

logger = logging.getLogger(__name__)

DEFAULT_MARKS_PER_QUESTION = 2.0


class Outcome(str, enum.Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    UNATTEMPTED = "unattempted"


@dataclass(frozen=True)
class QuestionOutcome:
    index: int
    question_id: str
    outcome: Outcome
    marks: float

    @property
    def is_correct(self) -> bool | None:
        if self.outcome == Outcome.UNATTEMPTED:
            return None
        return self.outcome == Outcome.CORRECT


@dataclass(frozen=True)
class ScoreSummary:
    score: float
    correct_count: int
    wrong_count: int
    unattempted_count: int
    outcomes: tuple[QuestionOutcome, ...]


def score_question(
    question: Question,
    answer: Any,
    negative_marking_fraction: float,
    marks_per_question: float,
) -> tuple[Outcome, float]:
    """Judge one answer. Malformed questions score like unattempted ones."""
    if question.is_empty(answer):
        return Outcome.UNATTEMPTED, 0.0
    if not question.has_answer_key():
        logger.warning(
            "Question %s (%s) has no usable answer key; skipping",
            question.id,
            question.type.value,
        )
        return Outcome.UNATTEMPTED, 0.0
    if question.is_correct(answer):
        return Outcome.CORRECT, marks_per_question
    return Outcome.WRONG, 0.0 - marks_per_question * negative_marking_fraction


def score_attempt(
    questions: Sequence[Question],
    answers: Sequence[Any],
    negative_marking_fraction: float,
    marks_per_question: float = DEFAULT_MARKS_PER_QUESTION,
) -> ScoreSummary:
    """
    Score answers against questions, position by position.

    Args:
        questions: Ordered questions of the attempt
        answers: Answers in the same order; missing trailing entries count
            as unattempted
        negative_marking_fraction: Share of ``marks_per_question`` deducted
            for each wrong answer
        marks_per_question: Marks awarded for a correct answer

    Returns:
        ScoreSummary with the total score (may be negative) and counts
    """
    score = 0.0
    correct = wrong = unattempted = 0
    outcomes: list[QuestionOutcome] = []

    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        outcome, marks = score_question(
            question, answer, negative_marking_fraction, marks_per_question
        )
        if outcome == Outcome.CORRECT:
            correct += 1
        elif outcome == Outcome.WRONG:
            wrong += 1
        else:
            unattempted += 1
        score += marks
        outcomes.append(QuestionOutcome(index, question.id, outcome, marks))

    return ScoreSummary(
        score=score,
        correct_count=correct,
        wrong_count=wrong,
        unattempted_count=unattempted,
        outcomes=tuple(outcomes),
    )
