"""In-process submission store keeping every completed attempt."""

from __future__ import annotations

from dataclasses import replace
from uuid import uuid4

from assessment_app.core.collaborators import SubmissionStore
from assessment_app.core.errors import SubmissionTransportError
from assessment_app.core.models import SubmissionAttempt, SubmissionReceipt


class InMemorySubmissionStore(SubmissionStore):
    """Stores attempts in memory and hands out opaque stored ids."""

    def __init__(self) -> None:
        self._attempts: dict[str, SubmissionAttempt] = {}

    def fetch_prior_attempts(self, learner_id: str, assignment_id: str) -> list[SubmissionAttempt]:
        matches = [
            attempt
            for attempt in self._attempts.values()
            if attempt.learner_id == learner_id and attempt.assignment_id == assignment_id
        ]
        return sorted(matches, key=lambda a: (a.attempt_number, a.submitted_at))

    def create_submission(self, attempt: SubmissionAttempt) -> SubmissionReceipt:
        if not attempt.learner_id or not attempt.assignment_id:
            raise SubmissionTransportError("Submission is missing learner or assignment id.")
        stored_id = uuid4().hex
        self._attempts[stored_id] = replace(attempt, stored_id=stored_id, answers=dict(attempt.answers))
        return SubmissionReceipt(success=True, stored_id=stored_id)

    def get_submission(self, stored_id: str) -> SubmissionAttempt:
        try:
            return self._attempts[stored_id]
        except KeyError:
            raise LookupError(f"Unknown submission '{stored_id}'.") from None

    def get_submission_count(self) -> int:
        return len(self._attempts)
