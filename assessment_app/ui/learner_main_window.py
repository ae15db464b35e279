"""Qt main window guiding the learner from overview to result."""

from __future__ import annotations

from enum import Enum, auto
import logging
from pathlib import Path

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from assessment_app.constants.about import (
    APP_ABOUT_TEXT,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    HELP_TEXT,
)
from assessment_app.constants.ui_constants import (
    BUTTON_IMPORT,
    DEFAULT_ASSIGNMENT_FILE,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    STATUS_REFRESH_INTERVAL_MS,
    WINDOW_TITLE,
)
from assessment_app.core.assessment_manager import AssessmentManager
from assessment_app.core.assignment_importer import AssignmentImportError, load_assignment_from_file
from assessment_app.core.errors import InvalidAssignmentError
from assessment_app.core.models import SessionState
from assessment_app.styling.color_palette import Theme
from assessment_app.styling.styles import Styles
from assessment_app.ui.components.overview_panel import OverviewPanel
from assessment_app.ui.components.result_panel import ResultPanel
from assessment_app.ui.components.session_panel import SessionPanel
from assessment_app.ui.dialog_helpers import show_error, show_info
from assessment_app.ui.settings_dialog import SettingsDialog

logger = logging.getLogger(__name__)


class LearnerMode(Enum):
    """High-level UI mode for the learner window."""

    OVERVIEW = auto()
    SESSION = auto()
    RESULT = auto()


class LearnerMainWindow(QMainWindow):
    """Main Qt window switching between the overview, session and result pages."""

    def __init__(
        self,
        manager: AssessmentManager,
        learner_id: str,
        learner_url: str | None = None,
        assignment_file: Path | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.manager = manager
        self.learner_id = learner_id
        self.learner_url = learner_url
        self._current_assignment_id: str | None = None
        self._mode = LearnerMode.OVERVIEW

        self._ui_font_size: int = 10
        self._question_font_size: int = 14
        self._theme = Theme.LIGHT

        self._build_ui()
        self._configure_refresh_timer()
        self._apply_styles()
        self._auto_load_assignment(assignment_file or Path(DEFAULT_ASSIGNMENT_FILE))

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_toolbar_buttons(root_layout)

        self.url_label = QLabel(
            f"Learner page: {self.learner_url}" if self.learner_url else "Learner page disabled",
            self,
        )
        root_layout.addWidget(self.url_label)

        self.mode_stack = QStackedWidget(self)
        self.overview_panel = OverviewPanel(self.manager, on_start=self._start_session, parent=self)
        self.session_panel = SessionPanel(self.manager, on_leave=self._leave_session, parent=self)
        self.result_panel = ResultPanel(on_done=self._leave_session, parent=self)

        self.mode_stack.addWidget(self.overview_panel)
        self.mode_stack.addWidget(self.session_panel)
        self.mode_stack.addWidget(self.result_panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(LearnerMode.OVERVIEW)

    def _build_toolbar_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.import_button = QPushButton(BUTTON_IMPORT, self)
        self.import_button.clicked.connect(self._handle_import_assignment)
        button_row.addWidget(self.import_button)

        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        self.settings_button = QPushButton("Settings", self)
        self.settings_button.clicked.connect(self._handle_settings)
        button_row.addWidget(self.settings_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(STATUS_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_state)
        self.refresh_timer.start()

    def _refresh_state(self) -> None:
        if self._mode != LearnerMode.SESSION or not self.manager.has_active_session():
            return
        status = self.manager.get_status()
        if status.state is SessionState.SUBMITTED and status.result is not None:
            definition = self.manager.get_assignment(status.assignment_id)
            self.result_panel.show_result(definition, status.result)
            self._set_mode(LearnerMode.RESULT)
            return
        self.session_panel.refresh(status)

    def _set_mode(self, mode: LearnerMode) -> None:
        self._mode = mode
        self.import_button.setEnabled(mode == LearnerMode.OVERVIEW)
        self.settings_button.setEnabled(mode != LearnerMode.SESSION)
        index_map = {
            LearnerMode.OVERVIEW: 0,
            LearnerMode.SESSION: 1,
            LearnerMode.RESULT: 2,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])

    # --- Session flow ---

    def _start_session(self, assignment_id: str) -> None:
        eligibility = self.manager.open_session(self.learner_id, assignment_id)
        if not eligibility.allowed:
            self.manager.leave_session()
            if eligibility.reason is not None:
                self.overview_panel.show_blocked(eligibility.reason)
            return
        self.session_panel.start_session()
        self._set_mode(LearnerMode.SESSION)

    def _leave_session(self) -> None:
        self.manager.leave_session()
        self._show_overview()

    def _show_overview(self) -> None:
        definition = (
            self.manager.get_assignment(self._current_assignment_id)
            if self._current_assignment_id is not None
            else None
        )
        self.overview_panel.show_assignment(definition, self.learner_id)
        self._set_mode(LearnerMode.OVERVIEW)

    # --- Assignment loading ---

    def _handle_import_assignment(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            imported = load_assignment_from_file(Path(file_path))
        except (OSError, AssignmentImportError) as exc:
            show_error(self, "Import failed", str(exc))
            return

        try:
            definition = self.manager.load_assignment(imported.definition)
        except InvalidAssignmentError as exc:
            show_error(self, "Assignment rejected", str(exc))
            return

        self._current_assignment_id = definition.assignment_id
        self._show_overview()
        show_info(
            self,
            "Assignment loaded",
            f"Loaded '{definition.title}' with {len(definition.questions)} questions.",
        )

    def _auto_load_assignment(self, path: Path) -> None:
        if not path.exists():
            self._show_overview()
            return
        try:
            imported = load_assignment_from_file(path)
            definition = self.manager.load_assignment(imported.definition)
        except (OSError, AssignmentImportError, InvalidAssignmentError) as exc:
            logger.warning("Could not auto-load %s: %s", path, exc)
        else:
            self._current_assignment_id = definition.assignment_id
            logger.info("Auto-loaded %s (%s questions)", path, len(definition.questions))
        self._show_overview()

    # --- Dialogs ---

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def _handle_settings(self) -> None:
        dialog = SettingsDialog(
            self,
            self._ui_font_size,
            self._question_font_size,
            self._theme == Theme.DARK,
            self.learner_id,
        )
        if dialog.exec():
            self._ui_font_size = dialog.get_ui_font_size()
            self._question_font_size = dialog.get_question_font_size()
            self._theme = Theme.DARK if dialog.get_dark_theme() else Theme.LIGHT
            self.learner_id = dialog.get_learner_id()
            self._apply_styles()
            if self._mode == LearnerMode.OVERVIEW:
                self._show_overview()

    def _apply_styles(self) -> None:
        self.setStyleSheet(Styles.get_main_window_style(self._theme))

        ui_style = f"font-size: {self._ui_font_size}pt;"
        for button in (self.import_button, self.about_button, self.help_button, self.settings_button):
            button.setStyleSheet(ui_style)

        for panel in (self.overview_panel, self.session_panel, self.result_panel):
            panel.set_theme(self._theme)
        self.overview_panel.apply_font_size(self._ui_font_size)
        self.session_panel.apply_font_size(self._ui_font_size, self._question_font_size)
        self.result_panel.apply_font_size(self._question_font_size)
