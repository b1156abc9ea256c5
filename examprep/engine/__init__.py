"""Exam attempt engine: question bank, answer store, timer, scorer, controller."""
from examprep.engine.answers import AnswerStore, QuestionStatus
from examprep.engine.controller import (
    AttemptController,
    AttemptResult,
    AttemptState,
    AttemptStatus,
    Completion,
    ExamSettings,
    SubmitReason,
)
from examprep.engine.questions import (
    MultiChoiceQuestion,
    Question,
    QuestionBank,
    QuestionType,
    ShortAnswerQuestion,
    SingleChoiceQuestion,
    TrueFalseQuestion,
)
from examprep.engine.scorer import (
    DEFAULT_MARKS_PER_QUESTION,
    Outcome,
    QuestionOutcome,
    ScoreSummary,
    score_attempt,
)
from examprep.engine.timer import CountdownTimer, TimerState

__all__ = [
    "AnswerStore",
    "QuestionStatus",
    "AttemptController",
    "AttemptResult",
    "AttemptState",
    "AttemptStatus",
    "Completion",
    "ExamSettings",
    "SubmitReason",
    "MultiChoiceQuestion",
    "Question",
    "QuestionBank",
    "QuestionType",
    "ShortAnswerQuestion",
    "SingleChoiceQuestion",
    "TrueFalseQuestion",
    "DEFAULT_MARKS_PER_QUESTION",
    "Outcome",
    "QuestionOutcome",
    "ScoreSummary",
    "score_attempt",
    "CountdownTimer",
    "TimerState",
]
