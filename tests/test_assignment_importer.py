from datetime import datetime, timezone
from pathlib import Path

import pytest

from assessment_app.core.assignment_importer import (
    AssignmentImportError,
    load_assignment_from_file,
    parse_assignment_text,
)
from assessment_app.core.models import QuestionType
from assessment_app.core.services.eligibility import can_attempt

SAMPLE = """
TITLE: Radians warm-up
ID: radians-1
SUBJECT: Mathematics
TIMELIMIT: 10
DUE: 2030-12-01 23:59
MAXSCORE: 20
LATE: yes
LIMIT: 2

Q: What is $30^\\circ$ in radians?
A: $\\frac{\\pi}{2}$
B: $\\frac{\\pi}{6}$
CORRECT: B
TOPIC: Angles

---
Q: Name the unit of angle
used in calculus.
ANSWER: radian

Q: Explain why.
TYPE: ESSAY
"""


def test_parses_header_and_questions():
    definition = parse_assignment_text(SAMPLE)
    assert definition.assignment_id == "radians-1"
    assert definition.title == "Radians warm-up"
    assert definition.subject == "Mathematics"
    assert definition.time_limit_minutes == 10
    assert definition.due_date == datetime(2030, 12, 1, 23, 59)
    assert definition.max_score == 20.0
    assert definition.allow_late_submission is True
    assert definition.submission_limit == 2
    assert definition.question_ids() == [1, 2, 3]


def test_question_types_are_inferred():
    first, second, third = parse_assignment_text(SAMPLE).questions
    assert first.question_type is QuestionType.MULTIPLE_CHOICE
    assert first.correct_option_texts() == ["$\\frac{\\pi}{6}$"]
    assert first.topic == "Angles"
    assert second.question_type is QuestionType.SHORT_ANSWER
    assert second.question_text == "Name the unit of angle\nused in calculus."
    assert second.correct_answer == "radian"
    assert third.question_type is QuestionType.ESSAY
    assert third.correct_answer is None


def test_optional_header_fields():
    text = "DUE: 2030-01-01\n\nQ: One?\nA: x\nB: y\nCORRECT: A, B\n"
    definition = parse_assignment_text(text, default_id="week-3")
    assert definition.assignment_id == "week-3"
    assert definition.title == "week-3"
    assert definition.time_limit_minutes is None
    assert definition.submission_limit is None
    assert definition.allow_late_submission is False
    assert len(definition.questions[0].correct_option_texts()) == 2


@pytest.mark.parametrize(
    "text",
    [
        "",
        "TITLE: Only header\nDUE: 2030-01-01\n",
        "TITLE: No due\n\nQ: One?\nANSWER: x\n",
        "DUE: tomorrow\n\nQ: One?\nANSWER: x\n",
        "DUE: 2030-01-01\nLATE: maybe\n\nQ: One?\nANSWER: x\n",
        "DUE: 2030-01-01\nLIMIT: two\n\nQ: One?\nANSWER: x\n",
        "DUE: 2030-01-01\n\nQ: One?\nA: x\nB: y\n",
        "DUE: 2030-01-01\n\nQ: One?\nA: x\nC: y\nCORRECT: A\n",
        "DUE: 2030-01-01\n\nQ: One?\nA: x\nCORRECT: A\n",
        "DUE: 2030-01-01\n\nQ: One?\nA: x\nB: y\nCORRECT: D\n",
        "DUE: 2030-01-01\n\nQ: One?\nTYPE: ESSAY\nA: x\nB: y\n",
        "DUE: 2030-01-01\n\nQ: One?\nTYPE: TRUE_FALSE\n",
        "DUE: 2030-01-01\n\nANSWER: x\n",
        "Q: Header missing?\nANSWER: x\n",
    ],
)
def test_malformed_files_are_rejected(text):
    with pytest.raises(AssignmentImportError):
        parse_assignment_text(text)


def test_load_from_file_uses_stem_as_default_id(tmp_path: Path):
    path = tmp_path / "chapter-2.txt"
    path.write_text("DUE: 2030-01-01\n\nQ: One?\nANSWER: x\n", encoding="utf-8")
    imported = load_assignment_from_file(path)
    assert imported.source_path == path
    assert imported.definition.assignment_id == "chapter-2"


def test_bundled_sample_assignment_loads():
    path = Path(__file__).resolve().parents[1] / "sample_assignment.txt"
    definition = load_assignment_from_file(path).definition
    assert definition.assignment_id == "radians-1"
    assert len(definition.questions) == 4


def test_due_date_with_offset_becomes_local_time():
    text = "DUE: 2099-12-01T23:59+02:00\n\nQ: One?\nANSWER: x\n"
    definition = parse_assignment_text(text)
    expected = datetime(2099, 12, 1, 21, 59, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert definition.due_date.tzinfo is None
    assert definition.due_date == expected
    assert can_attempt(definition, [], datetime(2099, 11, 30, 12, 0)).allowed
