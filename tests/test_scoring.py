from dataclasses import replace

from assessment_app.core.models import AnswerOption
from assessment_app.core.services.scoring import (
    AnswerComparator,
    ComparatorKind,
    normalize_answer,
    score,
)

from conftest import make_definition, make_mc_question


def test_three_of_four_correct_scales_to_max_score():
    definition = make_definition(4, max_score=10)
    result = score(definition, {1: "B", 2: "B", 3: "B", 4: "A"})
    assert result.correct_count == 3
    assert result.total == 4
    assert result.raw_score == 7.5
    assert [outcome.is_correct for outcome in result.per_question] == [True, True, True, False]


def test_unanswered_questions_count_as_incorrect():
    result = score(make_definition(4), {1: "B"})
    assert result.correct_count == 1
    assert result.raw_score == 2.5


def test_answers_are_trimmed_and_case_insensitive():
    definition = make_definition(questions=(make_mc_question(1, correct="B"),))
    assert score(definition, {1: "  b "}).correct_count == 1


def test_empty_answer_never_matches():
    comparator = AnswerComparator(ComparatorKind.NORMALIZED_TEXT, frozenset({""}))
    assert comparator.matches("   ") is False
    assert comparator.matches(None) is False


def test_non_string_answers_normalize_to_none():
    assert normalize_answer(3) is None
    assert normalize_answer(" Paris ") == "paris"


def test_multiple_correct_options_all_accepted():
    question = replace(
        make_mc_question(1),
        options=(AnswerOption("A", True), AnswerOption("B", True), AnswerOption("C")),
    )
    comparator = AnswerComparator.for_question(question)
    assert comparator.kind is ComparatorKind.OPTION_TEXT
    assert comparator.matches("A") and comparator.matches("b")
    assert not comparator.matches("C")


def test_free_text_questions(free_text_questions):
    definition = make_definition(questions=free_text_questions)
    result = score(definition, {1: "paris", 2: "A long essay"})
    assert result.total == 1
    assert result.correct_count == 1
    assert result.raw_score == 10.0
    assert result.per_question[1].is_correct is None


def test_only_manual_questions_is_not_applicable(free_text_questions):
    definition = make_definition(questions=free_text_questions[1:])
    result = score(definition, {2: "anything"})
    assert result.not_applicable
    assert result.total == 0
    assert result.raw_score == 0.0


def test_score_is_rounded_to_two_decimals():
    definition = make_definition(3, max_score=10)
    assert score(definition, {1: "B"}).raw_score == 3.33


def test_scoring_is_deterministic():
    definition = make_definition(4)
    answers = {1: "B", 3: "C"}
    assert score(definition, answers) == score(definition, answers)
