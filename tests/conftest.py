from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

import pytest

from assessment_app.core.collaborators import Evaluator, SubmissionStore
from assessment_app.core.errors import EvaluationError, SubmissionTransportError
from assessment_app.core.models import (
    AnswerOption,
    AssignmentDefinition,
    EvaluationResult,
    Question,
    QuestionType,
    ScoringResult,
    SubmissionAttempt,
    SubmissionReceipt,
)
from assessment_app.core.services.session_clock import Ticker

NOW = datetime(2026, 3, 1, 12, 0, 0)


class ManualTicker(Ticker):
    """Ticker driven by the test instead of an event loop."""

    def __init__(self) -> None:
        self.callback: Callable[[], None] | None = None
        self.interval_ms: int | None = None
        self.active = False
        self.start_calls = 0
        self.stop_calls = 0

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self.active = True
        self.start_calls += 1

    def stop(self) -> None:
        self.active = False
        self.stop_calls += 1

    def is_active(self) -> bool:
        return self.active

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if not self.active or self.callback is None:
                return
            self.callback()


class TickerFactory:
    """Hands out ManualTickers and remembers them."""

    def __init__(self) -> None:
        self.created: list[ManualTicker] = []

    def __call__(self) -> ManualTicker:
        ticker = ManualTicker()
        self.created.append(ticker)
        return ticker

    @property
    def last(self) -> ManualTicker:
        return self.created[-1]

    def run_pending(self) -> None:
        """Fire every active zero-interval ticker, as the next event loop turn would."""
        for ticker in list(self.created):
            if ticker.interval_ms == 0:
                ticker.fire()


class SteppingClock:
    """Wall clock the test moves forward by hand."""

    def __init__(self, start: datetime = NOW) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += timedelta(seconds=seconds)


class FakeSubmissionStore(SubmissionStore):
    def __init__(self, prior: list[SubmissionAttempt] | None = None) -> None:
        self.prior = list(prior or [])
        self.created: list[SubmissionAttempt] = []
        self.create_calls = 0
        self.failures_remaining = 0
        self.reject_next = False
        self.on_create: Callable[[SubmissionAttempt], None] | None = None

    def fetch_prior_attempts(self, learner_id: str, assignment_id: str) -> list[SubmissionAttempt]:
        return [
            attempt
            for attempt in self.prior + self.created
            if attempt.learner_id == learner_id and attempt.assignment_id == assignment_id
        ]

    def create_submission(self, attempt: SubmissionAttempt) -> SubmissionReceipt:
        self.create_calls += 1
        if self.on_create is not None:
            self.on_create(attempt)
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise SubmissionTransportError("network down")
        if self.reject_next:
            self.reject_next = False
            return SubmissionReceipt(success=False)
        stored_id = f"sub-{self.create_calls}"
        self.created.append(attempt)
        return SubmissionReceipt(success=True, stored_id=stored_id)


class FakeEvaluator(Evaluator):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, ScoringResult]] = []

    def evaluate(self, stored_id: str, scoring: ScoringResult) -> EvaluationResult:
        self.calls.append((stored_id, scoring))
        if self.fail:
            raise EvaluationError("evaluator offline")
        return EvaluationResult(summary=f"{scoring.correct_count}/{scoring.total}")


def make_mc_question(question_id: int, correct: str = "B", topic: str | None = None) -> Question:
    return Question(
        id=question_id,
        question_text=f"Question {question_id}?",
        options=tuple(AnswerOption(text=letter, is_correct=letter == correct) for letter in "ABCD"),
        topic=topic,
    )


def make_definition(
    question_count: int = 4,
    *,
    assignment_id: str = "hw-1",
    due_date: datetime | None = None,
    time_limit_minutes: int | None = 1,
    max_score: float = 10.0,
    allow_late_submission: bool = False,
    submission_limit: int | None = None,
    questions: tuple[Question, ...] | None = None,
) -> AssignmentDefinition:
    return AssignmentDefinition(
        assignment_id=assignment_id,
        title="Homework 1",
        questions=questions or tuple(make_mc_question(idx + 1) for idx in range(question_count)),
        due_date=due_date or NOW + timedelta(days=1),
        time_limit_minutes=time_limit_minutes,
        max_score=max_score,
        allow_late_submission=allow_late_submission,
        submission_limit=submission_limit,
    )


def make_attempt(number: int, learner_id: str = "ada", assignment_id: str = "hw-1") -> SubmissionAttempt:
    return SubmissionAttempt(
        learner_id=learner_id,
        assignment_id=assignment_id,
        attempt_number=number,
        submitted_at=NOW - timedelta(hours=number),
        answers={},
        score=0.0,
    )


@pytest.fixture
def now() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def tickers() -> TickerFactory:
    return TickerFactory()


@pytest.fixture
def store() -> FakeSubmissionStore:
    return FakeSubmissionStore()


@pytest.fixture
def evaluator() -> FakeEvaluator:
    return FakeEvaluator()


@pytest.fixture
def free_text_questions() -> tuple[Question, ...]:
    return (
        Question(id=1, question_text="Capital of France?", question_type=QuestionType.SHORT_ANSWER, correct_answer="Paris"),
        Question(id=2, question_text="Discuss.", question_type=QuestionType.ESSAY),
    )
