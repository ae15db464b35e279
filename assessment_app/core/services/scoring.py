"""Scoring engine comparing collected answers against known-correct answers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping

from assessment_app.core.models import (
    AssignmentDefinition,
    Question,
    QuestionOutcome,
    QuestionType,
    ScoringResult,
)


class ComparatorKind(Enum):
    OPTION_TEXT = auto()
    NORMALIZED_TEXT = auto()
    MANUAL = auto()


def normalize_answer(value: object) -> str | None:
    """Trim and case-fold an answer; anything that is not a string has no value."""
    if not isinstance(value, str):
        return None
    return value.strip().casefold()


@dataclass(slots=True, frozen=True)
class AnswerComparator:
    """How one question's answer is judged.

    ``OPTION_TEXT`` accepts the text of any option flagged correct,
    ``NORMALIZED_TEXT`` accepts the known answer of a free-text question and
    ``MANUAL`` leaves the question for a human grader.
    """

    kind: ComparatorKind
    accepted: frozenset[str] = frozenset()

    @classmethod
    def for_question(cls, question: Question) -> "AnswerComparator":
        if question.question_type is QuestionType.MULTIPLE_CHOICE:
            accepted = {normalize_answer(text) for text in question.correct_option_texts()}
            return cls(ComparatorKind.OPTION_TEXT, frozenset(accepted))
        if question.correct_answer is not None and question.correct_answer.strip():
            return cls(
                ComparatorKind.NORMALIZED_TEXT,
                frozenset({normalize_answer(question.correct_answer)}),
            )
        return cls(ComparatorKind.MANUAL)

    @property
    def is_auto_gradable(self) -> bool:
        return self.kind is not ComparatorKind.MANUAL

    def matches(self, answer: object) -> bool | None:
        if not self.is_auto_gradable:
            return None
        normalized = normalize_answer(answer)
        if not normalized:
            return False
        return normalized in self.accepted


def score(definition: AssignmentDefinition, answers: Mapping[int, str]) -> ScoringResult:
    """Score ``answers`` against ``definition``. Deterministic for equal inputs."""
    outcomes: list[QuestionOutcome] = []
    correct_count = 0
    total = 0
    for question in definition.questions:
        comparator = AnswerComparator.for_question(question)
        is_correct = comparator.matches(answers.get(question.id))
        outcomes.append(QuestionOutcome(question_id=question.id, is_correct=is_correct))
        if is_correct is None:
            continue
        total += 1
        if is_correct:
            correct_count += 1

    if total == 0:
        return ScoringResult(
            correct_count=0,
            total=0,
            per_question=tuple(outcomes),
            raw_score=0.0,
            not_applicable=True,
        )

    raw_score = round((correct_count / total) * definition.max_score, 2)
    return ScoringResult(
        correct_count=correct_count,
        total=total,
        per_question=tuple(outcomes),
        raw_score=raw_score,
    )
