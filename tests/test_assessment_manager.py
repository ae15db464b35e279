from datetime import timedelta

import pytest

from assessment_app.core.assessment_manager import AssessmentManager, describe_time_limit
from assessment_app.core.errors import AssignmentNotFoundError, InvalidAssignmentError
from assessment_app.core.models import BlockReason, SessionState
from assessment_app.core.services.assignment_catalog import InMemoryAssignmentCatalog
from assessment_app.core.services.eligibility import UNLIMITED
from assessment_app.core.services.evaluator import RuleBasedEvaluator
from assessment_app.core.services.submission_store import InMemorySubmissionStore

from conftest import NOW, make_definition


@pytest.fixture
def manager(tickers, now) -> AssessmentManager:
    catalog = InMemoryAssignmentCatalog()
    store = InMemorySubmissionStore()
    manager = AssessmentManager(
        catalog=catalog,
        submission_store=store,
        evaluator=RuleBasedEvaluator(store, catalog),
        ticker_factory=tickers,
        now=now,
    )
    manager.load_assignment(make_definition(3, submission_limit=2))
    return manager


def test_full_session_flow(manager, tickers):
    assert manager.has_assignments()
    assert manager.get_remaining_attempts("ada", "hw-1") == 2

    eligibility = manager.open_session("ada", "hw-1")
    assert eligibility.allowed
    assert manager.has_active_session()
    assert [question.id for question in manager.get_questions()] == [1, 2, 3]

    assert manager.record_answer(1, "B")
    assert manager.record_answer(2, "A")
    status = manager.get_status()
    assert status.state is SessionState.IN_PROGRESS
    assert status.answered_count == 2
    assert status.total_questions == 3
    assert [entry.answered for entry in status.navigator] == [True, True, False]
    assert status.countdown == "01:00"
    assert manager.needs_submit_confirmation()

    tickers.last.fire(5)
    assert manager.get_status().remaining_seconds == 55

    assert manager.request_submit()
    result = manager.get_result()
    assert result.scoring.correct_count == 1
    assert result.scoring.raw_score == 3.33
    assert result.evaluation is not None
    assert manager.get_status().result is result
    assert manager.get_remaining_attempts("ada", "hw-1") == 1


def test_attempts_exhaust_across_sessions(manager):
    for _ in range(2):
        manager.open_session("ada", "hw-1")
        manager.request_submit()
    eligibility = manager.open_session("ada", "hw-1")
    assert not eligibility.allowed
    assert eligibility.reason is BlockReason.ATTEMPTS_EXHAUSTED
    assert manager.get_status().state is SessionState.BLOCKED
    assert manager.check_eligibility("bob", "hw-1").allowed


def test_opening_again_disposes_previous_session(manager, tickers):
    manager.open_session("ada", "hw-1")
    first_ticker = tickers.last
    manager.open_session("ada", "hw-1")
    assert not first_ticker.is_active()
    assert len(tickers.created) == 2


def test_clock_expiry_submits_under_lock(manager, tickers):
    manager.open_session("ada", "hw-1")
    manager.record_answer(3, "B")
    tickers.last.fire(60)
    assert manager.get_status().state is SessionState.IN_PROGRESS
    tickers.run_pending()
    status = manager.get_status()
    assert status.state is SessionState.SUBMITTED
    assert status.time_expired
    assert status.result.is_auto_submitted


def test_leave_session(manager):
    manager.open_session("ada", "hw-1")
    manager.leave_session()
    assert not manager.has_active_session()
    with pytest.raises(LookupError):
        manager.get_status()


def test_overdue_assignment_blocks(manager):
    manager.load_assignment(make_definition(assignment_id="old", due_date=NOW - timedelta(days=1)))
    eligibility = manager.open_session("ada", "old")
    assert eligibility.reason is BlockReason.OVERDUE
    assert manager.get_remaining_attempts("ada", "old") is UNLIMITED


def test_unknown_assignment(manager):
    with pytest.raises(AssignmentNotFoundError):
        manager.open_session("ada", "nope")


def test_invalid_assignment_is_rejected(manager):
    with pytest.raises(InvalidAssignmentError):
        manager.load_assignment(make_definition(time_limit_minutes=-1, assignment_id="bad"))
    assert [definition.assignment_id for definition in manager.list_assignments()] == ["hw-1"]


def test_describe_time_limit(manager):
    assert describe_time_limit(manager.get_assignment("hw-1")) == "01:00"
