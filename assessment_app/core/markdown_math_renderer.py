"""Markdown rendering shared by the Qt window and the learner web page.

Question text is authored as markdown with inline LaTeX. The browser page
typesets the math with MathJax after inserting the HTML; the Qt window shows
the same HTML in rich-text labels, where LaTeX stays as written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt

from assessment_app.core.models import Question, QuestionType


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single line (an option label) without a paragraph wrapper."""
        sanitized = markdown_text.strip()
        if not sanitized:
            return html.escape("(empty)")
        return self._markdown.renderInline(sanitized)

    def render_question(self, question: Question, number: int) -> dict[str, object]:
        """Render a question into the JSON shape used by the web page."""
        return {
            "id": question.id,
            "number": number,
            "type": question.question_type.value,
            "html": self.render_fragment(question.question_text),
            "topic": question.topic,
            "options": [
                {"text": option.text, "html": self.render_inline(option.text)}
                for option in question.options
            ]
            if question.question_type is QuestionType.MULTIPLE_CHOICE
            else [],
        }


renderer = MarkdownMathRenderer()
# Shared instance; MarkdownIt is safe for concurrent read-only renders, so the
# Qt thread and the API thread can both use it.
