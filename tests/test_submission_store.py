from dataclasses import replace

import pytest

from assessment_app.core.errors import SubmissionTransportError
from assessment_app.core.services.submission_store import InMemorySubmissionStore

from conftest import make_attempt


def test_create_and_fetch():
    store = InMemorySubmissionStore()
    receipt = store.create_submission(make_attempt(1))
    assert receipt.success
    stored = store.get_submission(receipt.stored_id)
    assert stored.stored_id == receipt.stored_id
    assert store.fetch_prior_attempts("ada", "hw-1") == [stored]
    assert store.fetch_prior_attempts("bob", "hw-1") == []


def test_attempts_are_sorted_by_number():
    store = InMemorySubmissionStore()
    store.create_submission(make_attempt(2))
    store.create_submission(make_attempt(1))
    numbers = [attempt.attempt_number for attempt in store.fetch_prior_attempts("ada", "hw-1")]
    assert numbers == [1, 2]
    assert store.get_submission_count() == 2


def test_stored_answers_are_copied():
    store = InMemorySubmissionStore()
    answers = {1: "A"}
    receipt = store.create_submission(replace(make_attempt(1), answers=answers))
    answers[1] = "B"
    assert store.get_submission(receipt.stored_id).answers == {1: "A"}


def test_missing_learner_is_a_transport_error():
    store = InMemorySubmissionStore()
    with pytest.raises(SubmissionTransportError):
        store.create_submission(make_attempt(1, learner_id=""))


def test_unknown_submission():
    with pytest.raises(LookupError):
        InMemorySubmissionStore().get_submission("nope")
