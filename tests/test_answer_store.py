import pytest

from assessment_app.core.services.answer_store import AnswerStore


def test_set_and_overwrite():
    store = AnswerStore()
    store.set(1, "A")
    store.set(1, "B")
    assert store.get(1) == "B"
    assert store.get(2) is None


def test_whitespace_answer_is_unanswered():
    store = AnswerStore()
    store.set(1, "   ")
    store.set(2, "text")
    assert not store.is_answered(1)
    assert store.is_answered(2)
    assert store.count() == 1


def test_snapshot_is_isolated_and_read_only():
    store = AnswerStore()
    store.set(1, "A")
    snapshot = store.snapshot()
    store.set(1, "C")
    store.set(2, "D")
    assert dict(snapshot) == {1: "A"}
    with pytest.raises(TypeError):
        snapshot[3] = "x"  # type: ignore[index]


def test_clear():
    store = AnswerStore()
    store.set(1, "A")
    store.clear()
    assert store.count() == 0
