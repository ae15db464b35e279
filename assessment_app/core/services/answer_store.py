"""Service holding the learner's in-progress answers for one session."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


class AnswerStore:
    """Key-value store from question id to the current answer string."""

    def __init__(self) -> None:
        self._answers: dict[int, str] = {}

    def set(self, question_id: int, answer: str) -> None:
        self._answers[question_id] = answer

    def get(self, question_id: int) -> str | None:
        return self._answers.get(question_id)

    def is_answered(self, question_id: int) -> bool:
        answer = self._answers.get(question_id)
        return bool(answer and answer.strip())

    def count(self) -> int:
        """Return the number of questions with a non-empty answer."""
        return sum(1 for question_id in self._answers if self.is_answered(question_id))

    def snapshot(self) -> Mapping[int, str]:
        """Return a read-only copy that later mutations do not affect."""
        return MappingProxyType(dict(self._answers))

    def clear(self) -> None:
        self._answers.clear()
