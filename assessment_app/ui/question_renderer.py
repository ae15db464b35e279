"""Question rendering utilities for the Qt session view."""

from __future__ import annotations

from assessment_app.core.markdown_math_renderer import renderer
from assessment_app.core.models import Question


def render_question_html(question: Question, number: int, total: int, font_size: int = 14) -> str:
    """Render the question heading and text as rich text for a QLabel.

    Args:
        question: The question to show (text supports Markdown)
        number: 1-based position of the question
        total: Number of questions in the assignment
        font_size: Font size in points for the question text (default 14)

    Returns:
        HTML fragment suitable for ``Qt.RichText`` labels
    """
    body = renderer.render_fragment(question.question_text)
    topic = f" <i>({question.topic})</i>" if question.topic else ""
    return (
        f"<div style='font-size: {font_size}pt;'>"
        f"<b>Question {number} of {total}</b>{topic}"
        f"{body}"
        f"</div>"
    )


def render_option_html(option_text: str) -> str:
    return renderer.render_inline(option_text)
