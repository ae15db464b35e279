"""Component describing the loaded assignment before a session starts."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFormLayout,
    QGroupBox,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from assessment_app.constants.ui_constants import (
    BLOCKED_ATTEMPTS_MESSAGE,
    BLOCKED_OVERDUE_MESSAGE,
    BUTTON_START,
    NO_ASSIGNMENT_LOADED_MESSAGE,
)
from assessment_app.core.assessment_manager import AssessmentManager, describe_time_limit
from assessment_app.core.models import AssignmentDefinition, BlockReason
from assessment_app.core.services.eligibility import describe_remaining_attempts
from assessment_app.styling.color_palette import Theme
from assessment_app.styling.styles import Styles

_BLOCK_MESSAGES = {
    BlockReason.OVERDUE: BLOCKED_OVERDUE_MESSAGE,
    BlockReason.ATTEMPTS_EXHAUSTED: BLOCKED_ATTEMPTS_MESSAGE,
}


class OverviewPanel(QWidget):
    """Shows assignment details and the start button."""

    def __init__(
        self,
        manager: AssessmentManager,
        on_start: callable,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.manager = manager
        self.on_start = on_start
        self._assignment_id: str | None = None
        self._theme = Theme.LIGHT

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel(NO_ASSIGNMENT_LOADED_MESSAGE, self)
        self.title_label.setWordWrap(True)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.details_group = QGroupBox("Details", self)
        details_layout = QFormLayout()
        self.details_group.setLayout(details_layout)
        self.subject_value = QLabel("-", self)
        self.due_value = QLabel("-", self)
        self.time_limit_value = QLabel("-", self)
        self.questions_value = QLabel("-", self)
        self.attempts_value = QLabel("-", self)
        self.late_value = QLabel("-", self)
        details_layout.addRow("Subject:", self.subject_value)
        details_layout.addRow("Due:", self.due_value)
        details_layout.addRow("Time limit:", self.time_limit_value)
        details_layout.addRow("Questions:", self.questions_value)
        details_layout.addRow("Attempts left:", self.attempts_value)
        details_layout.addRow("Late submissions:", self.late_value)
        layout.addWidget(self.details_group)

        self.blocked_label = QLabel("", self)
        self.blocked_label.setWordWrap(True)
        self.blocked_label.setAlignment(Qt.AlignCenter)
        self.blocked_label.setVisible(False)
        layout.addWidget(self.blocked_label)

        layout.addStretch()

        self.start_button = QPushButton(BUTTON_START, self)
        self.start_button.setEnabled(False)
        self.start_button.clicked.connect(self._handle_start_click)
        layout.addWidget(self.start_button)

    def _handle_start_click(self) -> None:
        if self._assignment_id is None:
            return
        self.on_start(self._assignment_id)

    def show_assignment(self, definition: AssignmentDefinition | None, learner_id: str) -> None:
        """Fill in the details for ``definition`` and evaluate eligibility."""
        self.blocked_label.setVisible(False)
        if definition is None:
            self._assignment_id = None
            self.title_label.setText(NO_ASSIGNMENT_LOADED_MESSAGE)
            for label in (
                self.subject_value,
                self.due_value,
                self.time_limit_value,
                self.questions_value,
                self.attempts_value,
                self.late_value,
            ):
                label.setText("-")
            self.start_button.setEnabled(False)
            return

        self._assignment_id = definition.assignment_id
        self.title_label.setText(definition.title)
        self.subject_value.setText(definition.subject or "-")
        self.due_value.setText(definition.due_date.strftime("%Y-%m-%d %H:%M"))
        self.time_limit_value.setText(describe_time_limit(definition))
        self.questions_value.setText(str(len(definition.questions)))
        self.late_value.setText("Accepted" if definition.allow_late_submission else "Not accepted")

        remaining = self.manager.get_remaining_attempts(learner_id, definition.assignment_id)
        self.attempts_value.setText(describe_remaining_attempts(remaining))

        eligibility = self.manager.check_eligibility(learner_id, definition.assignment_id)
        self.start_button.setEnabled(eligibility.allowed)
        if not eligibility.allowed and eligibility.reason is not None:
            self.show_blocked(eligibility.reason)

    def show_blocked(self, reason: BlockReason) -> None:
        self.blocked_label.setText(_BLOCK_MESSAGES[reason])
        self.blocked_label.setStyleSheet(Styles.get_status_message_style(self._theme, is_error=True))
        self.blocked_label.setVisible(True)
        self.start_button.setEnabled(False)

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme

    def apply_font_size(self, font_size: int) -> None:
        self.start_button.setStyleSheet(f"font-size: {font_size}pt;")
        self.details_group.setStyleSheet(f"font-size: {font_size}pt;")
