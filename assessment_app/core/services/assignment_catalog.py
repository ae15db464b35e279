"""Service holding the assignments available to the learner."""

from __future__ import annotations

from dataclasses import replace
import logging

from assessment_app.constants.assessment_constants import (
    DEFAULT_MAX_SCORE,
    DEFAULT_TIME_LIMIT_MINUTES,
)
from assessment_app.core.collaborators import AssignmentCatalog
from assessment_app.core.errors import AssignmentNotFoundError, InvalidAssignmentError
from assessment_app.core.models import AssignmentDefinition, Question, QuestionType
from assessment_app.core.services.eligibility import as_local_time

logger = logging.getLogger(__name__)


def prepare_assignment(definition: AssignmentDefinition) -> AssignmentDefinition:
    """Validate a definition and fill in defaults.

    Rejects what cannot be repaired (no questions, negative time limit,
    malformed multiple-choice questions) before defaulting a missing or zero
    time limit and max score.
    """
    if not definition.assignment_id.strip():
        raise InvalidAssignmentError("Assignment id must not be empty.")
    if not definition.questions:
        raise InvalidAssignmentError("Assignment must contain at least one question.")
    if definition.time_limit_minutes is not None and definition.time_limit_minutes < 0:
        raise InvalidAssignmentError("Time limit must not be negative.")
    if definition.max_score is not None and definition.max_score < 0:
        raise InvalidAssignmentError("Max score must not be negative.")
    if definition.submission_limit is not None and definition.submission_limit <= 0:
        raise InvalidAssignmentError("Submission limit must be a positive integer.")

    seen_ids: set[int] = set()
    for question in definition.questions:
        if question.id in seen_ids:
            raise InvalidAssignmentError(f"Duplicate question id {question.id}.")
        seen_ids.add(question.id)
        _validate_question(question)

    return replace(
        definition,
        title=definition.title.strip() or definition.assignment_id,
        due_date=as_local_time(definition.due_date),
        time_limit_minutes=definition.time_limit_minutes or DEFAULT_TIME_LIMIT_MINUTES,
        max_score=definition.max_score or DEFAULT_MAX_SCORE,
    )


def _validate_question(question: Question) -> None:
    if not question.question_text.strip():
        raise InvalidAssignmentError(f"Question {question.id} has no text.")
    if question.question_type is not QuestionType.MULTIPLE_CHOICE:
        return
    if len(question.options) < 2:
        raise InvalidAssignmentError(
            f"Multiple-choice question {question.id} needs at least two options."
        )
    if any(not option.text.strip() for option in question.options):
        raise InvalidAssignmentError(f"Question {question.id} has an empty option.")
    if not question.correct_option_texts():
        raise InvalidAssignmentError(
            f"Multiple-choice question {question.id} has no correct option."
        )
    texts = [option.text.strip().casefold() for option in question.options]
    if len(set(texts)) != len(texts):
        # Answers are matched by option text, so duplicates cannot be told apart.
        logger.warning("Question %s has options with identical text.", question.id)


class InMemoryAssignmentCatalog(AssignmentCatalog):
    """Keeps validated assignment definitions keyed by id."""

    def __init__(self) -> None:
        self._assignments: dict[str, AssignmentDefinition] = {}

    def add_assignment(self, definition: AssignmentDefinition) -> AssignmentDefinition:
        """Validate and store a definition, replacing one with the same id."""
        prepared = prepare_assignment(definition)
        self._assignments[prepared.assignment_id] = prepared
        return prepared

    def fetch_assignment(self, assignment_id: str) -> AssignmentDefinition:
        try:
            return self._assignments[assignment_id]
        except KeyError:
            raise AssignmentNotFoundError(f"Unknown assignment '{assignment_id}'.") from None

    def list_assignments(self) -> list[AssignmentDefinition]:
        return list(self._assignments.values())

    def has_assignments(self) -> bool:
        return bool(self._assignments)

    def clear(self) -> None:
        self._assignments.clear()
