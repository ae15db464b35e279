"""Component for answering questions while the countdown runs."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from assessment_app.constants.assessment_constants import COUNTDOWN_WARNING_WINDOW_SECONDS
from assessment_app.constants.ui_constants import (
    BUTTON_LEAVE,
    BUTTON_NEXT,
    BUTTON_PREV,
    BUTTON_RESUME,
    BUTTON_RETRY,
    BUTTON_SUBMIT,
    FREE_TEXT_PLACEHOLDER,
    PROGRESS_TEMPLATE,
    SUBMIT_FAILED_MESSAGE,
)
from assessment_app.core.assessment_manager import AssessmentManager, SessionStatus
from assessment_app.core.models import Question, QuestionType, SessionState
from assessment_app.styling.color_palette import Theme
from assessment_app.styling.styles import Styles
from assessment_app.ui.dialog_helpers import confirm_leave_session, confirm_submit
from assessment_app.ui.question_renderer import render_option_html, render_question_html


class SessionPanel(QWidget):
    """UI component for an in-progress assessment session."""

    def __init__(
        self,
        manager: AssessmentManager,
        on_leave: callable,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.manager = manager
        self.on_leave = on_leave

        self._questions: list[Question] = []
        self._current_index: int = 0
        self._question_font_size: int = 14
        self._theme = Theme.LIGHT
        self._navigator_buttons: list[QPushButton] = []
        self._option_buttons: list[QRadioButton] = []
        self._accepting_answers: bool = False

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.title_label = QLabel("", self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        header_row.addWidget(self.title_label, stretch=1)
        self.countdown_label = QLabel("--:--", self)
        self.countdown_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        header_row.addWidget(self.countdown_label)
        layout.addLayout(header_row)

        progress_row = QHBoxLayout()
        self.progress_label = QLabel(PROGRESS_TEMPLATE.format(answered=0, total=0), self)
        progress_row.addWidget(self.progress_label)
        self.progress_bar = QProgressBar(self)
        self.progress_bar.setTextVisible(False)
        progress_row.addWidget(self.progress_bar, stretch=1)
        layout.addLayout(progress_row)

        self.navigator_row = QHBoxLayout()
        self.navigator_row.addStretch()
        layout.addLayout(self.navigator_row)

        self.question_label = QLabel("", self)
        self.question_label.setTextFormat(Qt.RichText)
        self.question_label.setWordWrap(True)
        self.question_label.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        layout.addWidget(self.question_label)

        self.options_layout = QVBoxLayout()
        layout.addLayout(self.options_layout)
        self.option_group = QButtonGroup(self)
        self.option_group.setExclusive(True)
        self.option_group.idClicked.connect(self._handle_option_clicked)

        self.free_text_edit = QPlainTextEdit(self)
        self.free_text_edit.setPlaceholderText(FREE_TEXT_PLACEHOLDER)
        self.free_text_edit.textChanged.connect(self._handle_free_text_changed)
        self.free_text_edit.setVisible(False)
        layout.addWidget(self.free_text_edit, stretch=1)

        layout.addStretch()

        self.status_label = QLabel("", self)
        self.status_label.setWordWrap(True)
        self.status_label.setVisible(False)
        layout.addWidget(self.status_label)

        button_row = QHBoxLayout()
        self.prev_button = QPushButton(BUTTON_PREV, self)
        self.prev_button.clicked.connect(lambda: self.show_question(self._current_index - 1))
        button_row.addWidget(self.prev_button)

        self.next_button = QPushButton(BUTTON_NEXT, self)
        self.next_button.clicked.connect(lambda: self.show_question(self._current_index + 1))
        button_row.addWidget(self.next_button)

        button_row.addStretch()

        self.leave_button = QPushButton(BUTTON_LEAVE, self)
        self.leave_button.clicked.connect(self._handle_leave_click)
        button_row.addWidget(self.leave_button)

        self.resume_button = QPushButton(BUTTON_RESUME, self)
        self.resume_button.clicked.connect(self._handle_resume_click)
        self.resume_button.setVisible(False)
        button_row.addWidget(self.resume_button)

        self.submit_button = QPushButton(BUTTON_SUBMIT, self)
        self.submit_button.clicked.connect(self._handle_submit_click)
        button_row.addWidget(self.submit_button)

        layout.addLayout(button_row)

    # --- Session setup ---

    def start_session(self) -> None:
        """Rebuild the navigator and show the first question of the open session."""
        self._questions = self.manager.get_questions()
        self._rebuild_navigator()
        self.progress_bar.setRange(0, len(self._questions))
        status = self.manager.get_status()
        self.title_label.setText(status.title)
        self.show_question(0)
        self.refresh(status)

    def _rebuild_navigator(self) -> None:
        for button in self._navigator_buttons:
            self.navigator_row.removeWidget(button)
            button.deleteLater()
        self._navigator_buttons = []
        for idx, _question in enumerate(self._questions):
            button = QPushButton(str(idx + 1), self)
            button.setCheckable(True)
            button.clicked.connect(lambda _checked=False, target=idx: self.show_question(target))
            self.navigator_row.insertWidget(idx, button)
            self._navigator_buttons.append(button)

    # --- Question display ---

    def show_question(self, index: int) -> None:
        if not self._questions:
            return
        index = max(0, min(index, len(self._questions) - 1))
        self._current_index = index
        question = self._questions[index]

        self.question_label.setText(
            render_question_html(question, index + 1, len(self._questions), self._question_font_size)
        )
        self._clear_options()
        current_answer = self.manager.get_answer(question.id)

        if question.question_type is QuestionType.MULTIPLE_CHOICE:
            self.free_text_edit.setVisible(False)
            for option_idx, option in enumerate(question.options):
                radio = QRadioButton(self)
                # Radio buttons show plain text only; the tooltip carries the rendered markdown
                radio.setText(option.text)
                radio.setToolTip(render_option_html(option.text))
                radio.setStyleSheet(f"font-size: {self._question_font_size}pt;")
                radio.setChecked(current_answer == option.text)
                self.option_group.addButton(radio, option_idx)
                self.options_layout.addWidget(radio)
                self._option_buttons.append(radio)
        else:
            self.free_text_edit.blockSignals(True)
            self.free_text_edit.setPlainText(current_answer or "")
            self.free_text_edit.blockSignals(False)
            self.free_text_edit.setVisible(True)

        for idx, button in enumerate(self._navigator_buttons):
            button.setChecked(idx == index)
        self.prev_button.setEnabled(index > 0)
        self.next_button.setEnabled(index < len(self._questions) - 1)
        self._set_inputs_enabled(self._accepting_answers)

    def _clear_options(self) -> None:
        for radio in self._option_buttons:
            self.option_group.removeButton(radio)
            self.options_layout.removeWidget(radio)
            radio.deleteLater()
        self._option_buttons = []

    def _set_inputs_enabled(self, enabled: bool) -> None:
        for radio in self._option_buttons:
            radio.setEnabled(enabled)
        self.free_text_edit.setReadOnly(not enabled)

    # --- Answer capture ---

    def _handle_option_clicked(self, option_idx: int) -> None:
        question = self._questions[self._current_index]
        self.manager.record_answer(question.id, question.options[option_idx].text)

    def _handle_free_text_changed(self) -> None:
        if not self._questions:
            return
        question = self._questions[self._current_index]
        if question.question_type is QuestionType.MULTIPLE_CHOICE:
            return
        self.manager.record_answer(question.id, self.free_text_edit.toPlainText())

    # --- Actions ---

    def _handle_submit_click(self) -> None:
        status = self.manager.get_status()
        if status.state is SessionState.IN_PROGRESS and self.manager.needs_submit_confirmation():
            if not confirm_submit(self, status.answered_count, status.total_questions):
                return
        self.manager.request_submit()
        self.refresh(self.manager.get_status())

    def _handle_resume_click(self) -> None:
        self.manager.resume_session()
        self.refresh(self.manager.get_status())

    def _handle_leave_click(self) -> None:
        if not confirm_leave_session(self):
            return
        self.on_leave()

    # --- Status updates ---

    def refresh(self, status: SessionStatus) -> None:
        """Apply a polled status snapshot to the widgets."""
        warning = status.remaining_seconds <= COUNTDOWN_WARNING_WINDOW_SECONDS
        self.countdown_label.setText(status.countdown)
        self.countdown_label.setStyleSheet(Styles.get_countdown_style(self._theme, warning))

        self.progress_label.setText(
            PROGRESS_TEMPLATE.format(answered=status.answered_count, total=status.total_questions)
        )
        self.progress_bar.setValue(status.answered_count)
        for entry in status.navigator:
            if entry.index < len(self._navigator_buttons):
                self._navigator_buttons[entry.index].setStyleSheet(
                    Styles.get_navigator_button_style(self._theme, entry.answered)
                )

        in_progress = status.state is SessionState.IN_PROGRESS
        failed = status.state is SessionState.SUBMIT_FAILED
        if in_progress != self._accepting_answers:
            self._accepting_answers = in_progress
            self._set_inputs_enabled(in_progress)

        self.submit_button.setText(BUTTON_RETRY if failed else BUTTON_SUBMIT)
        self.submit_button.setEnabled(in_progress or failed)
        self.resume_button.setVisible(failed and not status.time_expired)

        if failed:
            detail = f" ({status.error_message})" if status.error_message else ""
            self.status_label.setText(f"{SUBMIT_FAILED_MESSAGE}{detail}")
            self.status_label.setStyleSheet(Styles.get_status_message_style(self._theme, is_error=True))
            self.status_label.setVisible(True)
        else:
            self.status_label.setVisible(False)

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme

    def apply_font_size(self, ui_font_size: int, question_font_size: int) -> None:
        self._question_font_size = question_font_size
        for button in (self.prev_button, self.next_button, self.leave_button, self.resume_button, self.submit_button):
            button.setStyleSheet(f"font-size: {ui_font_size}pt;")
        self.free_text_edit.setStyleSheet(f"font-size: {question_font_size}pt;")
        if self._questions:
            self.show_question(self._current_index)
