"""Domain models for timed assessments."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto


class QuestionType(Enum):
    """Kinds of questions an assignment can contain."""

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    SHORT_ANSWER = "SHORT_ANSWER"
    ESSAY = "ESSAY"


class SessionState(Enum):
    """Lifecycle of a single assessment session."""

    IDLE = auto()
    ELIGIBLE_CHECK = auto()
    BLOCKED = auto()
    IN_PROGRESS = auto()
    SUBMITTING = auto()
    SUBMIT_FAILED = auto()
    SUBMITTED = auto()


class BlockReason(Enum):
    """Why a new attempt may not be started."""

    OVERDUE = "OVERDUE"
    ATTEMPTS_EXHAUSTED = "ATTEMPTS_EXHAUSTED"


class SessionErrorKind(Enum):
    """Errors a session can report to its views."""

    BLOCKED = "BLOCKED"
    SUBMIT_TRANSPORT_ERROR = "SUBMIT_TRANSPORT_ERROR"
    EVALUATION_ERROR = "EVALUATION_ERROR"
    CLOCK_EXPIRY_RACE = "CLOCK_EXPIRY_RACE"


@dataclass(slots=True, frozen=True)
class AnswerOption:
    """One selectable option of a multiple-choice question."""

    text: str
    is_correct: bool = False


@dataclass(slots=True, frozen=True)
class Question:
    """A question as delivered to the learner."""

    id: int
    question_text: str
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: tuple[AnswerOption, ...] = ()
    correct_answer: str | None = None  # Known answer for auto-gradable free text
    topic: str | None = None

    def correct_option_texts(self) -> list[str]:
        return [option.text for option in self.options if option.is_correct]


@dataclass(slots=True, frozen=True)
class AssignmentDefinition:
    """Immutable description of an assessment for the duration of a session."""

    assignment_id: str
    title: str
    questions: tuple[Question, ...]
    due_date: datetime
    time_limit_minutes: int | None = None
    max_score: float = 10.0
    allow_late_submission: bool = False
    submission_limit: int | None = None
    subject: str | None = None

    def question_ids(self) -> list[int]:
        return [question.id for question in self.questions]

    def get_question(self, question_id: int) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise KeyError(f"Unknown question id {question_id}")


@dataclass(slots=True, frozen=True)
class SubmissionAttempt:
    """A completed, persisted submission. Never modified after creation."""

    learner_id: str
    assignment_id: str
    attempt_number: int
    submitted_at: datetime
    answers: dict[int, str]
    score: float
    is_late: bool = False
    is_auto_submitted: bool = False
    stored_id: str | None = None


@dataclass(slots=True, frozen=True)
class Eligibility:
    """Outcome of the eligibility policy."""

    allowed: bool
    reason: BlockReason | None = None


@dataclass(slots=True, frozen=True)
class QuestionOutcome:
    """Correctness of a single question. ``None`` means manual grading."""

    question_id: int
    is_correct: bool | None


@dataclass(slots=True, frozen=True)
class ScoringResult:
    correct_count: int
    total: int
    per_question: tuple[QuestionOutcome, ...]
    raw_score: float
    not_applicable: bool = False


@dataclass(slots=True, frozen=True)
class SubmissionReceipt:
    """Reply of the submission store to ``create_submission``."""

    success: bool
    stored_id: str | None = None


@dataclass(slots=True, frozen=True)
class EvaluationResult:
    """Feedback produced by the evaluation collaborator."""

    summary: str
    per_question_feedback: dict[int, str] = field(default_factory=dict)
    recommendations: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class SessionResult:
    """Everything the result view needs after a successful submission."""

    attempt: SubmissionAttempt
    scoring: ScoringResult
    evaluation: EvaluationResult | None = None

    @property
    def is_auto_submitted(self) -> bool:
        return self.attempt.is_auto_submitted

    @property
    def message(self) -> str:
        if self.attempt.is_auto_submitted:
            return "Time expired: your answers were submitted automatically."
        return "Your answers were submitted."
