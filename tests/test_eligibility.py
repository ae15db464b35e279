from datetime import timedelta, timezone

from assessment_app.core.models import BlockReason
from assessment_app.core.services.eligibility import (
    UNLIMITED,
    as_local_time,
    can_attempt,
    describe_remaining_attempts,
    is_overdue,
    remaining_attempts,
)

from conftest import NOW, make_attempt, make_definition


def test_open_assignment_is_allowed():
    eligibility = can_attempt(make_definition(), [], NOW)
    assert eligibility.allowed
    assert eligibility.reason is None


def test_overdue_without_late_policy_is_blocked():
    definition = make_definition(due_date=NOW - timedelta(minutes=1))
    eligibility = can_attempt(definition, [], NOW)
    assert not eligibility.allowed
    assert eligibility.reason is BlockReason.OVERDUE


def test_overdue_with_late_policy_is_allowed():
    definition = make_definition(due_date=NOW - timedelta(days=3), allow_late_submission=True)
    assert can_attempt(definition, [], NOW).allowed


def test_due_date_itself_is_not_overdue():
    definition = make_definition(due_date=NOW)
    assert not is_overdue(definition, NOW)
    assert can_attempt(definition, [], NOW).allowed


def test_attempt_limit_reached_is_blocked():
    definition = make_definition(submission_limit=2)
    eligibility = can_attempt(definition, [make_attempt(1), make_attempt(2)], NOW)
    assert not eligibility.allowed
    assert eligibility.reason is BlockReason.ATTEMPTS_EXHAUSTED


def test_overdue_reported_before_exhausted_attempts():
    definition = make_definition(due_date=NOW - timedelta(days=1), submission_limit=1)
    eligibility = can_attempt(definition, [make_attempt(1)], NOW)
    assert eligibility.reason is BlockReason.OVERDUE


def test_unlimited_attempts():
    definition = make_definition(submission_limit=None)
    prior = [make_attempt(n) for n in range(1, 20)]
    assert can_attempt(definition, prior, NOW).allowed
    assert remaining_attempts(definition, prior) is UNLIMITED
    assert describe_remaining_attempts(UNLIMITED) == "Unlimited"


def test_remaining_attempts_never_negative():
    definition = make_definition(submission_limit=1)
    assert remaining_attempts(definition, []) == 1
    assert remaining_attempts(definition, [make_attempt(1), make_attempt(2)]) == 0
    assert describe_remaining_attempts(0) == "0"


def test_eligibility_is_repeatable():
    definition = make_definition(submission_limit=3)
    prior = [make_attempt(1)]
    assert can_attempt(definition, prior, NOW) == can_attempt(definition, prior, NOW)


def test_due_date_with_offset_compares_against_local_now():
    past = make_definition(due_date=(NOW - timedelta(hours=1)).astimezone(timezone.utc))
    future = make_definition(due_date=(NOW + timedelta(hours=1)).astimezone(timezone(timedelta(hours=2))))
    assert can_attempt(past, [], NOW).reason is BlockReason.OVERDUE
    assert can_attempt(future, [], NOW).allowed
    assert not is_overdue(future, NOW)


def test_now_with_offset_compares_against_naive_due_date():
    definition = make_definition(due_date=NOW)
    assert is_overdue(definition, (NOW + timedelta(minutes=1)).astimezone())
    assert not is_overdue(definition, NOW.astimezone())


def test_as_local_time():
    assert as_local_time(NOW) is NOW
    assert as_local_time(NOW.astimezone(timezone.utc)) == NOW
