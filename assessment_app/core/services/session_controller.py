"""State machine owning one learner's timed assessment session."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
import logging
from typing import Callable, Sequence

from assessment_app.core.collaborators import Evaluator, SubmissionStore
from assessment_app.core.errors import (
    EvaluationError,
    SessionStateError,
    SubmissionTransportError,
)
from assessment_app.core.models import (
    AssignmentDefinition,
    BlockReason,
    Eligibility,
    SessionErrorKind,
    SessionResult,
    SessionState,
    SubmissionAttempt,
)
from assessment_app.core.services.answer_store import AnswerStore
from assessment_app.core.services.assignment_catalog import prepare_assignment
from assessment_app.core.services.eligibility import (
    AttemptAllowance,
    can_attempt,
    is_overdue,
    remaining_attempts,
)
from assessment_app.core.services.scoring import score
from assessment_app.core.services.session_clock import (
    SessionClock,
    Ticker,
    duration_from_minutes,
    format_countdown,
)

logger = logging.getLogger(__name__)


class SessionController:
    """Drives a session from eligibility check to submission.

    Manual submission and clock expiry both go through ``_submit``, which is
    only reachable from ``IN_PROGRESS`` (or a manual retry from
    ``SUBMIT_FAILED``). Expiry closes the session to new answers at once but
    submits on the next ticker turn, so a manual submit requested in the same
    turn as the last tick still wins. Once one trigger has submitted, the
    other finds the session in another state and does nothing.
    """

    def __init__(
        self,
        definition: AssignmentDefinition,
        learner_id: str,
        prior_attempts: Sequence[SubmissionAttempt],
        submission_store: SubmissionStore,
        evaluator: Evaluator,
        ticker_factory: Callable[[], Ticker],
        now: Callable[[], datetime] = datetime.now,
        on_state_changed: Callable[[SessionState], None] | None = None,
        on_tick: Callable[[int], None] | None = None,
        on_result: Callable[[SessionResult], None] | None = None,
    ) -> None:
        self._definition = prepare_assignment(definition)
        self._learner_id = learner_id
        self._prior_attempts = list(prior_attempts)
        self._submission_store = submission_store
        self._evaluator = evaluator
        self._ticker_factory = ticker_factory
        self._now = now
        self._on_state_changed = on_state_changed
        self._on_tick = on_tick
        self._on_result = on_result

        self._state = SessionState.IDLE
        self._alive: bool = True
        self._eligibility: Eligibility | None = None
        self._answers: AnswerStore | None = None
        self._clock: SessionClock | None = None
        self._expiry_ticker: Ticker | None = None
        self._failed_at: datetime | None = None
        self._auto_submitted: bool = False
        self._last_error: SessionErrorKind | None = None
        self._error_message: str | None = None
        self._result: SessionResult | None = None

    # --- Lifecycle ---

    def open(self) -> Eligibility:
        """Check eligibility and, when allowed, start the countdown."""
        if not self._alive:
            raise SessionStateError("Session has been disposed.")
        if self._state is not SessionState.IDLE:
            raise SessionStateError(f"Session cannot be opened from {self._state.name}.")

        self._set_state(SessionState.ELIGIBLE_CHECK)
        eligibility = can_attempt(self._definition, self._prior_attempts, self._now())
        self._eligibility = eligibility
        if not eligibility.allowed:
            self._last_error = SessionErrorKind.BLOCKED
            self._error_message = eligibility.reason.value if eligibility.reason else None
            logger.warning(
                "Learner %s blocked from assignment %s: %s",
                self._learner_id,
                self._definition.assignment_id,
                self._error_message,
            )
            self._set_state(SessionState.BLOCKED)
            return eligibility

        self._answers = AnswerStore()
        self._clock = SessionClock(
            duration_from_minutes(self._definition.time_limit_minutes),
            on_expire=self._handle_clock_expired,
            ticker=self._ticker_factory(),
            on_tick=self._publish_tick,
        )
        self._set_state(SessionState.IN_PROGRESS)
        self._clock.start()
        return eligibility

    def dispose(self) -> None:
        """Release the clock and stop notifying listeners.

        A submission already in flight is left to finish so the attempt is
        not lost; its outcome is stored but no listener is called.
        """
        if self._clock is not None:
            self._clock.stop()
        self._cancel_pending_expiry()
        self._alive = False
        logger.info("Session for assignment %s disposed in state %s", self._definition.assignment_id, self._state.name)

    def resume(self) -> bool:
        """Return from a failed submission to answering, if time remains.

        Time spent on the failure screen is taken off the countdown. If it
        used up the rest of the time limit the session stays failed and the
        next retry counts as an automatic submission.
        """
        if self._state is not SessionState.SUBMIT_FAILED or not self._alive:
            return False
        if self._clock is None or self._clock.has_expired():
            return False
        if self._failed_at is not None:
            elapsed = int((self._now() - self._failed_at).total_seconds())
            self._failed_at = None
            self._clock.elapse(elapsed)
            if self._clock.has_expired():
                self._auto_submitted = True
                logger.info(
                    "Time ran out for assignment %s while the submission was failing",
                    self._definition.assignment_id,
                )
                return False
        self._clear_error()
        self._set_state(SessionState.IN_PROGRESS)
        self._clock.start()
        return True

    # --- Answers ---

    def record_answer(self, question_id: int, answer: str) -> bool:
        """Store an answer; ignored unless the session is in progress."""
        self._definition.get_question(question_id)
        if not self._accepts_answers():
            logger.debug("Ignoring answer for question %s in state %s", question_id, self._state.name)
            return False
        self._answers.set(question_id, answer)
        return True

    def get_answer(self, question_id: int) -> str | None:
        if self._answers is None:
            return None
        return self._answers.get(question_id)

    def is_answered(self, question_id: int) -> bool:
        return self._answers is not None and self._answers.is_answered(question_id)

    # --- Submission ---

    def request_submit(self) -> bool:
        """Learner-initiated submission. Returns False when it was a no-op."""
        if self._state is SessionState.IN_PROGRESS:
            self._submit(auto=False)
            return True
        if self._state is SessionState.SUBMIT_FAILED:
            # A retry keeps the original trigger so a timed-out session stays auto-submitted.
            self._submit(auto=self._auto_submitted)
            return True
        if self._state in (SessionState.SUBMITTING, SessionState.SUBMITTED):
            logger.debug("%s: manual submit ignored in state %s", SessionErrorKind.CLOCK_EXPIRY_RACE.value, self._state.name)
        return False

    def _accepts_answers(self) -> bool:
        return (
            self._state is SessionState.IN_PROGRESS
            and self._answers is not None
            and self._expiry_ticker is None
        )

    def _handle_clock_expired(self) -> None:
        if self._state is not SessionState.IN_PROGRESS or self._expiry_ticker is not None:
            logger.debug("%s: expiry ignored in state %s", SessionErrorKind.CLOCK_EXPIRY_RACE.value, self._state.name)
            return
        logger.info("Time expired for assignment %s; submitting automatically", self._definition.assignment_id)
        self._expiry_ticker = self._ticker_factory()
        self._expiry_ticker.start(0, self._submit_after_expiry)

    def _submit_after_expiry(self) -> None:
        if self._expiry_ticker is None:
            return
        self._cancel_pending_expiry()
        if self._state is not SessionState.IN_PROGRESS:
            logger.debug("%s: expiry ignored in state %s", SessionErrorKind.CLOCK_EXPIRY_RACE.value, self._state.name)
            return
        self._submit(auto=True)

    def _cancel_pending_expiry(self) -> None:
        if self._expiry_ticker is not None:
            self._expiry_ticker.stop()
            self._expiry_ticker = None

    def _submit(self, auto: bool) -> None:
        if self._answers is None or self._clock is None:
            raise SessionStateError("Session was never opened.")
        if self._expiry_ticker is not None:
            logger.debug("%s: manual submit overtakes pending expiry", SessionErrorKind.CLOCK_EXPIRY_RACE.value)
            self._cancel_pending_expiry()
        self._auto_submitted = auto
        self._failed_at = None
        self._clear_error()
        self._set_state(SessionState.SUBMITTING)
        self._clock.stop()

        answers = self._answers.snapshot()
        scoring = score(self._definition, answers)
        submitted_at = self._now()
        attempt = SubmissionAttempt(
            learner_id=self._learner_id,
            assignment_id=self._definition.assignment_id,
            attempt_number=len(self._prior_attempts) + 1,
            submitted_at=submitted_at,
            answers=dict(answers),
            score=scoring.raw_score,
            is_late=is_overdue(self._definition, submitted_at),
            is_auto_submitted=auto,
        )

        try:
            receipt = self._submission_store.create_submission(attempt)
        except (SubmissionTransportError, OSError) as exc:
            self._fail_submission(str(exc))
            return
        if not receipt.success or not receipt.stored_id:
            self._fail_submission("Submission was rejected by the server.")
            return
        attempt = replace(attempt, stored_id=receipt.stored_id)

        evaluation = None
        try:
            evaluation = self._evaluator.evaluate(receipt.stored_id, scoring)
        except Exception as exc:  # Evaluator failures never undo a stored attempt.
            self._last_error = SessionErrorKind.EVALUATION_ERROR
            self._error_message = str(exc)
            if isinstance(exc, (EvaluationError, OSError)):
                logger.warning("Evaluation failed for submission %s: %s", receipt.stored_id, exc)
            else:
                logger.warning("Evaluator crashed for submission %s", receipt.stored_id, exc_info=True)

        self._result = SessionResult(attempt=attempt, scoring=scoring, evaluation=evaluation)
        self._prior_attempts.append(attempt)
        self._set_state(SessionState.SUBMITTED)
        logger.info(
            "Submitted assignment %s attempt %s: %s/%s correct, score %s%s",
            attempt.assignment_id,
            attempt.attempt_number,
            scoring.correct_count,
            scoring.total,
            scoring.raw_score,
            " (auto)" if auto else "",
        )
        if self._alive and self._on_result is not None:
            self._on_result(self._result)

    def _fail_submission(self, message: str) -> None:
        self._last_error = SessionErrorKind.SUBMIT_TRANSPORT_ERROR
        self._error_message = message
        self._failed_at = self._now()
        logger.warning("Submission for assignment %s failed: %s", self._definition.assignment_id, message)
        self._set_state(SessionState.SUBMIT_FAILED)

    # --- Read-only state ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def definition(self) -> AssignmentDefinition:
        return self._definition

    @property
    def learner_id(self) -> str:
        return self._learner_id

    @property
    def eligibility(self) -> Eligibility | None:
        return self._eligibility

    @property
    def block_reason(self) -> BlockReason | None:
        return self._eligibility.reason if self._eligibility else None

    @property
    def last_error(self) -> SessionErrorKind | None:
        return self._last_error

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def result(self) -> SessionResult | None:
        return self._result

    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def remaining_seconds(self) -> int:
        if self._clock is None:
            return duration_from_minutes(self._definition.time_limit_minutes)
        return self._clock.remaining_seconds

    @property
    def countdown_text(self) -> str:
        return format_countdown(self.remaining_seconds)

    @property
    def time_expired(self) -> bool:
        return self._clock is not None and self._clock.has_expired()

    @property
    def answered_count(self) -> int:
        return self._answers.count() if self._answers is not None else 0

    @property
    def total_questions(self) -> int:
        return len(self._definition.questions)

    def needs_submit_confirmation(self) -> bool:
        """True when unanswered questions remain."""
        return self.answered_count < self.total_questions

    def remaining_attempts(self) -> int | AttemptAllowance:
        return remaining_attempts(self._definition, self._prior_attempts)

    # --- Notifications ---

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        logger.debug("Session %s -> %s", self._definition.assignment_id, state.name)
        if self._alive and self._on_state_changed is not None:
            self._on_state_changed(state)

    def _publish_tick(self, remaining_seconds: int) -> None:
        if self._alive and self._on_tick is not None:
            self._on_tick(remaining_seconds)

    def _clear_error(self) -> None:
        self._last_error = None
        self._error_message = None
