"""Settings dialog for configuring AssessQt preferences."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QSpinBox,
    QPushButton,
    QGroupBox,
    QCheckBox,
)


class SettingsDialog(QDialog):
    """Dialog for configuring application settings."""

    def __init__(
        self,
        parent=None,
        ui_font_size: int = 10,
        question_font_size: int = 14,
        dark_theme: bool = False,
        learner_id: str = "",
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.setMinimumWidth(400)

        self._ui_font_size = ui_font_size
        self._question_font_size = question_font_size
        self._dark_theme = dark_theme
        self._learner_id = learner_id

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # Learner settings group
        learner_group = QGroupBox("Learner")
        learner_layout = QHBoxLayout()
        learner_group.setLayout(learner_layout)
        learner_label = QLabel("Learner ID:")
        learner_label.setToolTip("Identifies your attempts; changes apply to the next session you start")
        self.learner_edit = QLineEdit(self._learner_id)
        learner_layout.addWidget(learner_label)
        learner_layout.addWidget(self.learner_edit, stretch=1)
        layout.addWidget(learner_group)

        # Font settings group
        font_group = QGroupBox("Font Sizes")
        font_layout = QVBoxLayout()
        font_group.setLayout(font_layout)

        ui_font_row = QHBoxLayout()
        ui_font_label = QLabel("UI Font Size (buttons, labels):")
        self.ui_font_spinbox = QSpinBox()
        self.ui_font_spinbox.setRange(8, 24)
        self.ui_font_spinbox.setValue(self._ui_font_size)
        self.ui_font_spinbox.setSuffix(" pt")
        ui_font_row.addWidget(ui_font_label)
        ui_font_row.addStretch()
        ui_font_row.addWidget(self.ui_font_spinbox)
        font_layout.addLayout(ui_font_row)

        question_font_row = QHBoxLayout()
        question_font_label = QLabel("Question Font Size:")
        question_font_label.setToolTip("Font size for question text and answer options")
        self.question_font_spinbox = QSpinBox()
        self.question_font_spinbox.setRange(10, 32)
        self.question_font_spinbox.setValue(self._question_font_size)
        self.question_font_spinbox.setSuffix(" pt")
        question_font_row.addWidget(question_font_label)
        question_font_row.addStretch()
        question_font_row.addWidget(self.question_font_spinbox)
        font_layout.addLayout(question_font_row)

        layout.addWidget(font_group)

        display_group = QGroupBox("Display Settings")
        display_layout = QVBoxLayout()
        display_group.setLayout(display_layout)
        self.dark_theme_checkbox = QCheckBox("Use dark theme")
        self.dark_theme_checkbox.setChecked(self._dark_theme)
        display_layout.addWidget(self.dark_theme_checkbox)
        layout.addWidget(display_group)

        # Buttons
        button_row = QHBoxLayout()
        button_row.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.reject)  # type: ignore[arg-type]
        button_row.addWidget(self.cancel_button)

        self.apply_button = QPushButton("Apply")
        self.apply_button.clicked.connect(self.accept)  # type: ignore[arg-type]
        self.apply_button.setDefault(True)
        button_row.addWidget(self.apply_button)

        layout.addLayout(button_row)

    def get_ui_font_size(self) -> int:
        """Get the selected UI font size."""
        return self.ui_font_spinbox.value()

    def get_question_font_size(self) -> int:
        """Get the selected question font size."""
        return self.question_font_spinbox.value()

    def get_dark_theme(self) -> bool:
        return self.dark_theme_checkbox.isChecked()

    def get_learner_id(self) -> str:
        """Get the learner id, falling back to the previous one when blank."""
        return self.learner_edit.text().strip() or self._learner_id
