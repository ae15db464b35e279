"""Static metadata describing AssessQt."""

APP_NAME = "AssessQt"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "AssessQt is a learner client for timed assessments built with Qt and FastAPI. "
    "Open an assignment, answer before the countdown runs out, and review your score."
)

HELP_TEXT = (
    "Assignments are loaded from a .txt file. The first block describes the assignment, "
    "every following block is a question:\n\n"
    "TITLE: Radians warm-up\nID: radians-1\nTIMELIMIT: 10\nDUE: 2026-12-01 23:59\n"
    "MAXSCORE: 10\nLATE: no\nLIMIT: 2\n\n"
    "Q: What is $30^o$ in radians?\n"
    "A: \\frac{\\pi}{2}\nB: \\frac{\\pi}{6}\nC: \\frac{\\pi}{3}\n"
    "CORRECT: B\n\n"
    "Q: Name the unit of angle used in calculus.\n"
    "ANSWER: radian"
)
