"""Contracts for the remote services an assessment session talks to.

Transport and serialization are up to the implementation; the session only
relies on these calls and the exceptions documented on them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from assessment_app.core.models import (
    AssignmentDefinition,
    EvaluationResult,
    ScoringResult,
    SubmissionAttempt,
    SubmissionReceipt,
)


class AssignmentCatalog(ABC):
    """Source of assignment definitions."""

    @abstractmethod
    def fetch_assignment(self, assignment_id: str) -> AssignmentDefinition:
        """Return the definition or raise ``AssignmentNotFoundError``."""

    @abstractmethod
    def list_assignments(self) -> list[AssignmentDefinition]:
        pass


class SubmissionStore(ABC):
    """Persists completed attempts."""

    @abstractmethod
    def fetch_prior_attempts(self, learner_id: str, assignment_id: str) -> list[SubmissionAttempt]:
        pass

    @abstractmethod
    def create_submission(self, attempt: SubmissionAttempt) -> SubmissionReceipt:
        """Persist ``attempt`` or raise ``SubmissionTransportError``."""


class Evaluator(ABC):
    """Enriches a locally computed score with feedback."""

    @abstractmethod
    def evaluate(self, stored_id: str, scoring: ScoringResult) -> EvaluationResult:
        """Return feedback or raise ``EvaluationError``."""
