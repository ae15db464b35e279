"""Eligibility policy deciding whether a new attempt may be started.

All functions here are pure: identical inputs always give identical results,
so views can call them as often as they like for display purposes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Sequence

from assessment_app.core.models import (
    AssignmentDefinition,
    BlockReason,
    Eligibility,
    SubmissionAttempt,
)


class AttemptAllowance(Enum):
    UNLIMITED = "UNLIMITED"


UNLIMITED = AttemptAllowance.UNLIMITED


def as_local_time(value: datetime) -> datetime:
    """Convert an offset-aware time to naive local time; naive times pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def is_overdue(definition: AssignmentDefinition, now: datetime) -> bool:
    return as_local_time(now) > as_local_time(definition.due_date)


def can_attempt(
    definition: AssignmentDefinition,
    prior_attempts: Sequence[SubmissionAttempt],
    now: datetime,
) -> Eligibility:
    """Check due date, late policy and attempt count."""
    due_date_ok = not is_overdue(definition, now) or definition.allow_late_submission
    limit = definition.submission_limit
    attempts_ok = limit is None or len(prior_attempts) < limit

    if due_date_ok and attempts_ok:
        return Eligibility(allowed=True)
    if not due_date_ok:
        return Eligibility(allowed=False, reason=BlockReason.OVERDUE)
    return Eligibility(allowed=False, reason=BlockReason.ATTEMPTS_EXHAUSTED)


def remaining_attempts(
    definition: AssignmentDefinition,
    prior_attempts: Sequence[SubmissionAttempt],
) -> int | AttemptAllowance:
    if definition.submission_limit is None:
        return UNLIMITED
    return max(definition.submission_limit - len(prior_attempts), 0)


def describe_remaining_attempts(remaining: int | AttemptAllowance) -> str:
    if remaining is UNLIMITED:
        return "Unlimited"
    return str(remaining)
