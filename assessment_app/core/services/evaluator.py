"""Local evaluator producing feedback for a submitted attempt."""

from __future__ import annotations

from assessment_app.core.collaborators import AssignmentCatalog, Evaluator
from assessment_app.core.errors import AssessmentError, EvaluationError
from assessment_app.core.models import EvaluationResult, ScoringResult
from assessment_app.core.services.submission_store import InMemorySubmissionStore


class RuleBasedEvaluator(Evaluator):
    """Explains a score with fixed rules instead of a remote model.

    The stored attempt is looked up to find the assignment, so feedback can
    point the learner at the topics of the questions they missed.
    """

    def __init__(self, submission_store: InMemorySubmissionStore, catalog: AssignmentCatalog) -> None:
        self._submission_store = submission_store
        self._catalog = catalog

    def evaluate(self, stored_id: str, scoring: ScoringResult) -> EvaluationResult:
        try:
            attempt = self._submission_store.get_submission(stored_id)
            definition = self._catalog.fetch_assignment(attempt.assignment_id)
            questions = {
                outcome.question_id: definition.get_question(outcome.question_id)
                for outcome in scoring.per_question
            }
        except (LookupError, AssessmentError) as exc:
            raise EvaluationError(f"Cannot evaluate submission '{stored_id}': {exc}") from exc

        feedback: dict[int, str] = {}
        missed_topics: list[str] = []
        for outcome in scoring.per_question:
            question = questions[outcome.question_id]
            if outcome.is_correct is None:
                feedback[outcome.question_id] = "Awaiting review by your teacher."
            elif outcome.is_correct:
                feedback[outcome.question_id] = "Correct."
            else:
                expected = ", ".join(question.correct_option_texts()) or question.correct_answer
                feedback[outcome.question_id] = f"Incorrect. Expected: {expected}"
                if question.topic and question.topic not in missed_topics:
                    missed_topics.append(question.topic)

        return EvaluationResult(
            summary=_summarize(scoring),
            per_question_feedback=feedback,
            recommendations=tuple(f"Review the topic '{topic}'." for topic in missed_topics),
        )


def _summarize(scoring: ScoringResult) -> str:
    if scoring.not_applicable:
        return "All answers will be reviewed by your teacher."
    ratio = scoring.correct_count / scoring.total
    if ratio == 1:
        verdict = "Excellent work, every answer is correct."
    elif ratio >= 0.8:
        verdict = "Great result, only a few answers need another look."
    elif ratio >= 0.5:
        verdict = "Solid start, keep practising the questions you missed."
    else:
        verdict = "Revisit the material before your next attempt."
    return f"{scoring.correct_count}/{scoring.total} correct. {verdict}"
