"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "AssessQt"
DEFAULT_ASSIGNMENT_FILE: str = "sample_assignment.txt"
DEFAULT_LEARNER_ID: str = "learner"
STATUS_REFRESH_INTERVAL_MS: int = 200

BUTTON_IMPORT: str = "Open Assignment"
BUTTON_START: str = "Start Assessment"
BUTTON_SUBMIT: str = "Submit"
BUTTON_RETRY: str = "Retry Submission"
BUTTON_RESUME: str = "Back to Questions"
BUTTON_PREV: str = "Previous"
BUTTON_NEXT: str = "Next"
BUTTON_LEAVE: str = "Leave"
BUTTON_DONE: str = "Back to Overview"

IMPORT_DIALOG_TITLE: str = "Select assignment file"
IMPORT_FILE_FILTER: str = "Assignment files (*.txt);;All files (*.*)"

FREE_TEXT_PLACEHOLDER: str = "Type your answer here..."
NO_ASSIGNMENT_LOADED_MESSAGE: str = "Please open an assignment file first."
BLOCKED_OVERDUE_MESSAGE: str = "The due date has passed and late submissions are not accepted."
BLOCKED_ATTEMPTS_MESSAGE: str = "You have used all submission attempts for this assignment."
SUBMIT_FAILED_MESSAGE: str = "Submitting failed. Your answers are kept, please try again."
EVALUATION_UNAVAILABLE_MESSAGE: str = "Detailed feedback is unavailable for this attempt."
PROGRESS_TEMPLATE: str = "Answered: {answered}/{total}"
