"""Qt UI components for the learner application."""

from .dialog_helpers import (
    confirm_leave_session,
    confirm_submit,
    show_error,
    show_info,
    show_warning,
)
from .learner_main_window import LearnerMainWindow
from .question_renderer import render_option_html, render_question_html

__all__ = [
    "LearnerMainWindow",
    "confirm_leave_session",
    "confirm_submit",
    "show_error",
    "show_info",
    "show_warning",
    "render_option_html",
    "render_question_html",
]
