"""Exceptions raised by the assessment core and its collaborators."""

from __future__ import annotations


class AssessmentError(Exception):
    """Base class for assessment failures."""


class InvalidAssignmentError(AssessmentError, ValueError):
    """Raised when an assignment definition is malformed."""


class AssignmentNotFoundError(AssessmentError, LookupError):
    """Raised when the catalog does not know an assignment id."""


class SubmissionTransportError(AssessmentError):
    """Raised when the submission store cannot persist an attempt."""


class EvaluationError(AssessmentError):
    """Raised when the evaluation collaborator fails."""


class SessionStateError(AssessmentError, RuntimeError):
    """Raised for lifecycle calls that are illegal in the current state."""
