"""Business logic for the active assessment, shared between UI and API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from threading import RLock
from typing import Callable

from assessment_app.core.collaborators import Evaluator, SubmissionStore
from assessment_app.core.models import (
    AssignmentDefinition,
    BlockReason,
    Eligibility,
    Question,
    SessionErrorKind,
    SessionResult,
    SessionState,
)
from assessment_app.core.services.assignment_catalog import InMemoryAssignmentCatalog
from assessment_app.core.services.eligibility import (
    AttemptAllowance,
    can_attempt,
    remaining_attempts,
)
from assessment_app.core.services.session_clock import (
    Ticker,
    duration_from_minutes,
    format_countdown,
)
from assessment_app.core.services.session_controller import SessionController

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NavigatorEntry:
    """One button of the per-question navigator."""

    index: int
    question_id: int
    answered: bool


@dataclass(slots=True)
class SessionStatus:
    """Snapshot of the active session returned to views."""

    assignment_id: str
    title: str
    state: SessionState
    remaining_seconds: int
    countdown: str
    answered_count: int
    total_questions: int
    navigator: list[NavigatorEntry]
    block_reason: BlockReason | None = None
    last_error: SessionErrorKind | None = None
    error_message: str | None = None
    time_expired: bool = False
    result: SessionResult | None = None


class _LockedTicker(Ticker):
    """Runs tick callbacks under the manager lock."""

    def __init__(self, inner: Ticker, lock: RLock) -> None:
        self._inner = inner
        self._lock = lock

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        def locked_callback() -> None:
            with self._lock:
                callback()

        self._inner.start(interval_ms, locked_callback)

    def stop(self) -> None:
        self._inner.stop()

    def is_active(self) -> bool:
        return self._inner.is_active()


class AssessmentManager:
    """Facade over the catalog, submission store, evaluator and active session."""

    def __init__(
        self,
        catalog: InMemoryAssignmentCatalog,
        submission_store: SubmissionStore,
        evaluator: Evaluator,
        ticker_factory: Callable[[], Ticker],
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._lock = RLock()
        self._catalog = catalog
        self._submission_store = submission_store
        self._evaluator = evaluator
        self._ticker_factory = ticker_factory
        self._now = now
        self._session: SessionController | None = None

    # --- Catalog ---

    def load_assignment(self, definition: AssignmentDefinition) -> AssignmentDefinition:
        """Validate and register a definition, returning the stored copy."""
        with self._lock:
            return self._catalog.add_assignment(definition)

    def has_assignments(self) -> bool:
        with self._lock:
            return self._catalog.has_assignments()

    def list_assignments(self) -> list[AssignmentDefinition]:
        with self._lock:
            return self._catalog.list_assignments()

    def get_assignment(self, assignment_id: str) -> AssignmentDefinition:
        with self._lock:
            return self._catalog.fetch_assignment(assignment_id)

    def check_eligibility(self, learner_id: str, assignment_id: str) -> Eligibility:
        with self._lock:
            definition = self._catalog.fetch_assignment(assignment_id)
            prior = self._submission_store.fetch_prior_attempts(learner_id, assignment_id)
            return can_attempt(definition, prior, self._now())

    def get_remaining_attempts(self, learner_id: str, assignment_id: str) -> int | AttemptAllowance:
        with self._lock:
            definition = self._catalog.fetch_assignment(assignment_id)
            prior = self._submission_store.fetch_prior_attempts(learner_id, assignment_id)
            return remaining_attempts(definition, prior)

    # --- Session lifecycle ---

    def open_session(self, learner_id: str, assignment_id: str) -> Eligibility:
        """Discard any current session and start a new one for the learner."""
        with self._lock:
            self._discard_session()
            definition = self._catalog.fetch_assignment(assignment_id)
            prior = self._submission_store.fetch_prior_attempts(learner_id, assignment_id)
            session = SessionController(
                definition,
                learner_id=learner_id,
                prior_attempts=prior,
                submission_store=self._submission_store,
                evaluator=self._evaluator,
                ticker_factory=self._make_ticker,
                now=self._now,
            )
            self._session = session
            eligibility = session.open()
            logger.info(
                "Opened assignment %s for %s (%s)",
                assignment_id,
                learner_id,
                "allowed" if eligibility.allowed else eligibility.reason.value,
            )
            return eligibility

    def leave_session(self) -> None:
        with self._lock:
            self._discard_session()

    def has_active_session(self) -> bool:
        with self._lock:
            return self._session is not None

    def _discard_session(self) -> None:
        if self._session is not None:
            self._session.dispose()
            self._session = None

    def _make_ticker(self) -> Ticker:
        return _LockedTicker(self._ticker_factory(), self._lock)

    def _require_session(self) -> SessionController:
        if self._session is None:
            raise LookupError("No assessment session is open.")
        return self._session

    # --- Session delegation ---

    def get_questions(self) -> list[Question]:
        with self._lock:
            return list(self._require_session().definition.questions)

    def get_answer(self, question_id: int) -> str | None:
        with self._lock:
            return self._require_session().get_answer(question_id)

    def record_answer(self, question_id: int, answer: str) -> bool:
        with self._lock:
            return self._require_session().record_answer(question_id, answer)

    def needs_submit_confirmation(self) -> bool:
        with self._lock:
            return self._require_session().needs_submit_confirmation()

    def request_submit(self) -> bool:
        with self._lock:
            return self._require_session().request_submit()

    def resume_session(self) -> bool:
        with self._lock:
            return self._require_session().resume()

    def get_result(self) -> SessionResult | None:
        with self._lock:
            return self._require_session().result

    def get_status(self) -> SessionStatus:
        with self._lock:
            session = self._require_session()
            definition = session.definition
            navigator = [
                NavigatorEntry(index=idx, question_id=question.id, answered=session.is_answered(question.id))
                for idx, question in enumerate(definition.questions)
            ]
            return SessionStatus(
                assignment_id=definition.assignment_id,
                title=definition.title,
                state=session.state,
                remaining_seconds=session.remaining_seconds,
                countdown=session.countdown_text,
                answered_count=session.answered_count,
                total_questions=session.total_questions,
                navigator=navigator,
                block_reason=session.block_reason,
                last_error=session.last_error,
                error_message=session.error_message,
                time_expired=session.time_expired,
                result=session.result,
            )


def describe_time_limit(definition: AssignmentDefinition) -> str:
    return format_countdown(duration_from_minutes(definition.time_limit_minutes))
