"""Component presenting the outcome of a submitted session."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from assessment_app.constants.ui_constants import BUTTON_DONE, EVALUATION_UNAVAILABLE_MESSAGE
from assessment_app.core.models import AssignmentDefinition, SessionResult
from assessment_app.styling.color_palette import Theme
from assessment_app.styling.styles import Styles


def describe_outcome(is_correct: bool | None) -> str:
    if is_correct is None:
        return "Awaiting review"
    return "Correct" if is_correct else "Incorrect"


class ResultPanel(QWidget):
    """Shows score, per-question breakdown and evaluator feedback."""

    def __init__(self, on_done: callable, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_done = on_done
        self._theme = Theme.LIGHT
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.message_label = QLabel("", self)
        self.message_label.setWordWrap(True)
        layout.addWidget(self.message_label)

        self.score_label = QLabel("", self)
        self.score_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.score_label)

        self.late_label = QLabel("Submitted after the due date.", self)
        self.late_label.setVisible(False)
        layout.addWidget(self.late_label)

        self.breakdown_list = QListWidget(self)
        self.breakdown_list.setAlternatingRowColors(True)
        layout.addWidget(self.breakdown_list, stretch=1)

        self.evaluation_label = QLabel("", self)
        self.evaluation_label.setWordWrap(True)
        layout.addWidget(self.evaluation_label)

        self.done_button = QPushButton(BUTTON_DONE, self)
        self.done_button.clicked.connect(self.on_done)
        layout.addWidget(self.done_button)

    def show_result(self, definition: AssignmentDefinition, result: SessionResult) -> None:
        scoring = result.scoring
        self.message_label.setText(result.message)
        self.message_label.setStyleSheet(
            Styles.get_status_message_style(self._theme, is_error=False) if result.is_auto_submitted else ""
        )
        if scoring.not_applicable:
            self.score_label.setText("Score: awaiting review")
        else:
            self.score_label.setText(
                f"Score: {scoring.raw_score:g} / {definition.max_score:g} "
                f"({scoring.correct_count}/{scoring.total} correct)"
            )
        self.late_label.setVisible(result.attempt.is_late)

        feedback = result.evaluation.per_question_feedback if result.evaluation else {}
        self.breakdown_list.clear()
        for number, outcome in enumerate(scoring.per_question, start=1):
            text = f"Question {number}: {describe_outcome(outcome.is_correct)}"
            if outcome.question_id in feedback:
                text += f" - {feedback[outcome.question_id]}"
            QListWidgetItem(text, self.breakdown_list)

        if result.evaluation is None:
            self.evaluation_label.setText(EVALUATION_UNAVAILABLE_MESSAGE)
        else:
            lines = [result.evaluation.summary, *result.evaluation.recommendations]
            self.evaluation_label.setText("\n".join(lines))

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme

    def apply_font_size(self, font_size: int) -> None:
        self.breakdown_list.setStyleSheet(f"font-size: {font_size}pt;")
        self.evaluation_label.setStyleSheet(f"font-size: {font_size}pt;")
        self.done_button.setStyleSheet(f"font-size: {font_size}pt;")
