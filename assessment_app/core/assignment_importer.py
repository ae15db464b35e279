"""Utilities for importing assignments from a human-friendly text file.

File format: a header block followed by question blocks. Blocks are separated
by blank lines or '---'.

    TITLE: Assignment title
    ID: stable-assignment-id        (optional, derived from the file name)
    SUBJECT: Subject name           (optional)
    TIMELIMIT: minutes              (optional, defaults to 15)
    DUE: 2026-12-01 23:59           (ISO date or date-time, offsets become local time)
    MAXSCORE: 10                    (optional)
    LATE: yes|no                    (optional, default no)
    LIMIT: attempts                 (optional, omit for unlimited)

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question.
    TYPE: MULTIPLE_CHOICE | SHORT_ANSWER | ESSAY   (optional, inferred)
    A: First option text
    B: Second option text
    ...                             (up to H)
    CORRECT: B                      (one or more letters, comma separated)
    ANSWER: known answer            (free-text questions only)
    TOPIC: topic name               (optional)

A question with options is multiple choice, one with ANSWER is a short answer
question, and one with neither is an essay left for manual grading.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from assessment_app.core.models import (
    AnswerOption,
    AssignmentDefinition,
    Question,
    QuestionType,
)
from assessment_app.core.services.eligibility import as_local_time


class AssignmentImportError(Exception):
    """Raised when an assignment file cannot be parsed."""


@dataclass(slots=True)
class ImportedAssignment:
    """Container for the imported definition and where it came from."""

    source_path: Path
    definition: AssignmentDefinition


_OPTION_ORDER = ["A", "B", "C", "D", "E", "F", "G", "H"]
_HEADER_KEYS = {"TITLE", "ID", "SUBJECT", "TIMELIMIT", "DUE", "MAXSCORE", "LATE", "LIMIT"}
_TRUE_WORDS = {"yes", "y", "true", "1"}
_FALSE_WORDS = {"no", "n", "false", "0"}


def load_assignment_from_file(file_path: Path) -> ImportedAssignment:
    text = file_path.read_text(encoding="utf-8")
    definition = parse_assignment_text(text, default_id=file_path.stem)
    return ImportedAssignment(source_path=file_path, definition=definition)


def parse_assignment_text(text: str, default_id: str = "assignment") -> AssignmentDefinition:
    blocks = _split_blocks(text)
    if not blocks:
        raise AssignmentImportError("Assignment file is empty.")

    header = _parse_header(blocks[0])
    questions = [_parse_question_block(block, question_id=idx + 1) for idx, block in enumerate(blocks[1:])]
    if not questions:
        raise AssignmentImportError("Assignment file did not contain any questions.")

    if "DUE" not in header:
        raise AssignmentImportError("DUE is required in the assignment header.")

    return AssignmentDefinition(
        assignment_id=header.get("ID", default_id),
        title=header.get("TITLE", default_id),
        questions=tuple(questions),
        due_date=_parse_due_date(header["DUE"]),
        time_limit_minutes=_parse_int(header, "TIMELIMIT"),
        max_score=_parse_float(header, "MAXSCORE"),
        allow_late_submission=_parse_bool(header.get("LATE", "no")),
        submission_limit=_parse_int(header, "LIMIT"),
        subject=header.get("SUBJECT"),
    )


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _parse_header(block: str) -> dict[str, str]:
    header: dict[str, str] = {}
    for raw_line in block.splitlines():
        line = raw_line.strip()
        key, sep, value = line.partition(":")
        key = key.strip().upper()
        if not sep or key not in _HEADER_KEYS:
            raise AssignmentImportError(
                f"The first block must be the assignment header; found '{line}'."
            )
        value = value.strip()
        if not value:
            raise AssignmentImportError(f"{key} must have a value.")
        header[key] = value
    return header


def _parse_question_block(block: str, question_id: int) -> Question:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letters: list[str] = []
    declared_type: QuestionType | None = None
    known_answer: str | None = None
    topic: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            raw_letters = line.split(":", 1)[1]
            correct_letters = [part.strip().upper() for part in raw_letters.split(",") if part.strip()]
            current_section = None
            continue

        if upper.startswith("ANSWER:"):
            known_answer = line.split(":", 1)[1].strip()
            current_section = None
            continue

        if upper.startswith("TOPIC:"):
            topic = line.split(":", 1)[1].strip() or None
            current_section = None
            continue

        if upper.startswith("TYPE:"):
            raw_type = line.split(":", 1)[1].strip().upper()
            try:
                declared_type = QuestionType(raw_type)
            except ValueError:
                raise AssignmentImportError(f"Unknown question TYPE '{raw_type}'.") from None
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in _OPTION_ORDER and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in _OPTION_ORDER:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise AssignmentImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise AssignmentImportError(f"Question {question_id}: text missing (Q: ...)")

    question_type = declared_type or _infer_type(options, known_answer)
    if question_type is QuestionType.MULTIPLE_CHOICE:
        option_tuple = _build_options(options, correct_letters, question_id)
    else:
        if options or correct_letters:
            raise AssignmentImportError(
                f"Question {question_id}: only multiple-choice questions can list options."
            )
        option_tuple = ()

    return Question(
        id=question_id,
        question_text=question_text,
        question_type=question_type,
        options=option_tuple,
        correct_answer=known_answer or None,
        topic=topic,
    )


def _infer_type(options: dict[str, str], known_answer: str | None) -> QuestionType:
    if options:
        return QuestionType.MULTIPLE_CHOICE
    if known_answer:
        return QuestionType.SHORT_ANSWER
    return QuestionType.ESSAY


def _build_options(
    options: dict[str, str], correct_letters: list[str], question_id: int
) -> tuple[AnswerOption, ...]:
    letters = [letter for letter in _OPTION_ORDER if letter in options]
    if letters != _OPTION_ORDER[: len(letters)]:
        raise AssignmentImportError(f"Question {question_id}: options must be consecutive from A.")
    if len(letters) < 2:
        raise AssignmentImportError(f"Question {question_id}: at least two options (A, B) are required.")
    if not correct_letters:
        raise AssignmentImportError(f"Question {question_id}: CORRECT is required for options.")
    unknown = [letter for letter in correct_letters if letter not in letters]
    if unknown:
        raise AssignmentImportError(
            f"Question {question_id}: CORRECT refers to missing option(s) {', '.join(unknown)}."
        )

    built = []
    for letter in letters:
        text = options[letter].strip()
        if not text:
            raise AssignmentImportError(f"Question {question_id}: option {letter} is empty.")
        built.append(AnswerOption(text=text, is_correct=letter in correct_letters))
    return tuple(built)


def _parse_due_date(raw_value: str) -> datetime:
    try:
        due_date = datetime.fromisoformat(raw_value)
    except ValueError as exc:
        raise AssignmentImportError(f"DUE must be an ISO date, got '{raw_value}'.") from exc
    return as_local_time(due_date)


def _parse_int(header: dict[str, str], key: str) -> int | None:
    raw_value = header.get(key)
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except ValueError as exc:
        raise AssignmentImportError(f"{key} must be an integer.") from exc


def _parse_float(header: dict[str, str], key: str) -> float:
    raw_value = header.get(key)
    if raw_value is None:
        return 0.0  # Replaced with the default max score when the assignment is loaded
    try:
        return float(raw_value)
    except ValueError as exc:
        raise AssignmentImportError(f"{key} must be a number.") from exc


def _parse_bool(raw_value: str) -> bool:
    lowered = raw_value.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise AssignmentImportError(f"LATE must be yes or no, got '{raw_value}'.")
