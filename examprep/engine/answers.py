"""Per-question answer, visited and marked-for-review tracking."""

from __future__ import annotations

import enum
import logging
from typing import Any

from examprep.engine.questions import MultiChoiceQuestion, QuestionBank

logger = logging.getLogger(__name__)


class QuestionStatus(str, enum.Enum):
    """Navigator status of a question."""

    NOT_VISITED = "not_visited"
    MARKED = "marked"
    ANSWERED_AND_MARKED = "answered_and_marked"
    NOT_ANSWERED = "not_answered"
    ANSWERED = "answered"


class AnswerStore:
    """
    Mutable answer state for one attempt.
    Every mutator returns True when it changed something and False for a
    no-op (frozen store, out-of-range index or a value that does not fit).
    """

    def __init__(self, bank: QuestionBank) -> None:
        self._bank = bank
        self._answers: dict[int, Any] = {
            index: question.empty_answer() for index, question in enumerate(bank)
        }
        self._visited: set[int] = set()
        self._marked: set[int] = set()
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject all further mutation."""
        self._frozen = True

    def _writable(self, index: int) -> bool:
        return not self._frozen and self._bank.contains_index(index)

    def set_answer(self, index: int, value: Any) -> bool:
        if not self._writable(index):
            return False
        question = self._bank[index]
        try:
            normalized = question.normalize_answer(value)
        except ValueError as exc:
            logger.debug("Ignoring answer for question %s: %s", question.id, exc)
            return False
        if normalized is None:
            normalized = question.empty_answer()
        if self._answers[index] == normalized:
            return False
        self._answers[index] = normalized
        return True

    def toggle_multi_option(self, index: int, option: int) -> bool:
        if not self._writable(index):
            return False
        question = self._bank[index]
        if not isinstance(question, MultiChoiceQuestion):
            return False
        current = self._answers[index] or frozenset()
        if option in current:
            selected = current - {option}
        else:
            selected = current | {option}
        return self.set_answer(index, selected)

    def clear(self, index: int) -> bool:
        if not self._writable(index):
            return False
        empty = self._bank[index].empty_answer()
        if self._answers[index] == empty:
            return False
        self._answers[index] = empty
        return True

    def mark_visited(self, index: int) -> bool:
        if not self._writable(index) or index in self._visited:
            return False
        self._visited.add(index)
        return True

    def toggle_marked(self, index: int) -> bool:
        if not self._writable(index):
            return False
        if index in self._marked:
            self._marked.discard(index)
        else:
            self._marked.add(index)
        return True

    def answer(self, index: int) -> Any:
        return self._answers[index]

    def is_answered(self, index: int) -> bool:
        return not self._bank[index].is_empty(self._answers[index])

    def is_visited(self, index: int) -> bool:
        return index in self._visited

    def is_marked(self, index: int) -> bool:
        return index in self._marked

    def status_of(self, index: int) -> QuestionStatus:
        if index not in self._visited:
            return QuestionStatus.NOT_VISITED
        answered = self.is_answered(index)
        if index in self._marked:
            if answered:
                return QuestionStatus.ANSWERED_AND_MARKED
            return QuestionStatus.MARKED
        if not answered:
            return QuestionStatus.NOT_ANSWERED
        return QuestionStatus.ANSWERED

    def statuses(self) -> list[QuestionStatus]:
        return [self.status_of(index) for index in range(len(self._bank))]

    def status_counts(self) -> dict[QuestionStatus, int]:
        counts = {status: 0 for status in QuestionStatus}
        for status in self.statuses():
            counts[status] += 1
        return counts

    def answered_count(self) -> int:
        return sum(1 for index in range(len(self._bank)) if self.is_answered(index))

    def snapshot(self) -> tuple[Any, ...]:
        """Answers in bank order."""
        return tuple(self._answers[index] for index in range(len(self._bank)))

    def visited(self) -> frozenset[int]:
        return frozenset(self._visited)

    def marked(self) -> frozenset[int]:
        return frozenset(self._marked)
