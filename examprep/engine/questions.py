"""
Question records and the read-only question bank for one attempt.

Each question type is its own frozen dataclass. A variant knows what an
empty answer looks like for it, how to normalize a raw answer value and how
to judge an answer against its key.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, Sequence


class QuestionType(str, enum.Enum):
    """Supported question types."""

    SINGLE = "single"
    MULTI = "multi"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"


def _is_index(value: object) -> bool:
    # bool is a subclass of int, but True is not an option index
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Question:
    """Base record shared by every question type."""

    type: ClassVar[QuestionType]

    id: str
    prompt: str

    def empty_answer(self) -> Any:
        return None

    def is_empty(self, answer: Any) -> bool:
        return answer is None

    def has_answer_key(self) -> bool:
        """Whether the record carries a usable correct answer."""
        raise NotImplementedError

    def normalize_answer(self, value: Any) -> Any:
        """Return the stored form of ``value`` or raise ValueError."""
        raise NotImplementedError

    def is_correct(self, answer: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class SingleChoiceQuestion(Question):
    type: ClassVar[QuestionType] = QuestionType.SINGLE

    options: tuple[str, ...] = ()
    correct_answer: int | None = None

    def has_answer_key(self) -> bool:
        return _is_index(self.correct_answer) and 0 <= self.correct_answer < len(self.options)

    def normalize_answer(self, value: Any) -> int | None:
        if value is None:
            return None
        if not _is_index(value) or not 0 <= value < len(self.options):
            raise ValueError(f"Invalid option {value!r} for question {self.id}")
        return value

    def is_correct(self, answer: Any) -> bool:
        return answer == self.correct_answer


@dataclass(frozen=True)
class MultiChoiceQuestion(Question):
    type: ClassVar[QuestionType] = QuestionType.MULTI

    options: tuple[str, ...] = ()
    correct_answer: frozenset[int] | None = None

    def empty_answer(self) -> frozenset[int]:
        return frozenset()

    def is_empty(self, answer: Any) -> bool:
        return not answer

    def has_answer_key(self) -> bool:
        if not isinstance(self.correct_answer, frozenset) or not self.correct_answer:
            return False
        return all(
            _is_index(idx) and 0 <= idx < len(self.options) for idx in self.correct_answer
        )

    def normalize_answer(self, value: Any) -> frozenset[int]:
        if value is None:
            return frozenset()
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise ValueError(f"Expected a set of options for question {self.id}")
        selected = frozenset(value)
        for idx in selected:
            if not _is_index(idx) or not 0 <= idx < len(self.options):
                raise ValueError(f"Invalid option {idx!r} for question {self.id}")
        return selected

    def is_correct(self, answer: Any) -> bool:
        if not isinstance(answer, (set, frozenset, list, tuple)):
            return False
        # All or nothing: no partial credit for subsets
        return frozenset(answer) == self.correct_answer


@dataclass(frozen=True)
class TrueFalseQuestion(Question):
    type: ClassVar[QuestionType] = QuestionType.TRUE_FALSE

    correct_answer: bool | None = None

    def has_answer_key(self) -> bool:
        return isinstance(self.correct_answer, bool)

    def normalize_answer(self, value: Any) -> bool | None:
        if value is None:
            return None
        if not isinstance(value, bool):
            raise ValueError(f"Expected true or false for question {self.id}")
        return value

    def is_correct(self, answer: Any) -> bool:
        return answer is self.correct_answer


def normalize_text(value: str) -> str:
    """Trim and case-fold free text for comparison."""
    return value.strip().casefold()


@dataclass(frozen=True)
class ShortAnswerQuestion(Question):
    type: ClassVar[QuestionType] = QuestionType.SHORT_ANSWER

    correct_answer: str | None = None

    def is_empty(self, answer: Any) -> bool:
        return answer is None or not str(answer).strip()

    def has_answer_key(self) -> bool:
        return isinstance(self.correct_answer, str) and bool(self.correct_answer.strip())

    def normalize_answer(self, value: Any) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"Expected text for question {self.id}")
        return value

    def is_correct(self, answer: Any) -> bool:
        if not isinstance(answer, str):
            return False
        return normalize_text(answer) == normalize_text(self.correct_answer)


QUESTION_CLASSES: dict[QuestionType, type[Question]] = {
    QuestionType.SINGLE: SingleChoiceQuestion,
    QuestionType.MULTI: MultiChoiceQuestion,
    QuestionType.TRUE_FALSE: TrueFalseQuestion,
    QuestionType.SHORT_ANSWER: ShortAnswerQuestion,
}


@dataclass(frozen=True)
class QuestionBank:
    """Ordered, fixed-length sequence of questions for one attempt."""

    questions: tuple[Question, ...]

    def __post_init__(self) -> None:
        if not self.questions:
            raise ValueError("Question bank is empty")
        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"Duplicate question id: {question.id}")
            seen.add(question.id)

    @classmethod
    def of(cls, questions: Sequence[Question]) -> "QuestionBank":
        return cls(tuple(questions))

    def __len__(self) -> int:
        return len(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]

    def __iter__(self) -> Iterator[Question]:
        return iter(self.questions)

    def contains_index(self, index: object) -> bool:
        return _is_index(index) and 0 <= index < len(self.questions)
