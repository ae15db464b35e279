"""Application entry point for AssessQt."""

from __future__ import annotations

import argparse
from pathlib import Path
import socket
import sys

from PySide6.QtWidgets import QApplication

from assessment_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from assessment_app.constants.ui_constants import DEFAULT_ASSIGNMENT_FILE, DEFAULT_LEARNER_ID
from assessment_app.core.assessment_manager import AssessmentManager
from assessment_app.core.services.assignment_catalog import InMemoryAssignmentCatalog
from assessment_app.core.services.evaluator import RuleBasedEvaluator
from assessment_app.core.services.submission_store import InMemorySubmissionStore
from assessment_app.server.api_server import start_api_server
from assessment_app.ui.learner_main_window import LearnerMainWindow
from assessment_app.utils.logging_config import configure_logging
from assessment_app.utils.qt_ticker import QtTicker


def _determine_learner_url(port: int) -> str:
    """Best-effort determination of the local IP for the learner-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def build_manager() -> AssessmentManager:
    """Wire the in-memory collaborators into a manager driven by Qt timers."""
    catalog = InMemoryAssignmentCatalog()
    submission_store = InMemorySubmissionStore()
    evaluator = RuleBasedEvaluator(submission_store, catalog)
    return AssessmentManager(
        catalog=catalog,
        submission_store=submission_store,
        evaluator=evaluator,
        ticker_factory=QtTicker,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take timed assessments.")
    parser.add_argument(
        "--assignment-file",
        type=Path,
        default=Path(DEFAULT_ASSIGNMENT_FILE),
        help="assignment file loaded at startup when it exists",
    )
    parser.add_argument("--learner", default=DEFAULT_LEARNER_ID, help="learner id used for attempts")
    parser.add_argument("--host", default=DEFAULT_HOST, help="interface for the learner web page")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port for the learner web page")
    parser.add_argument("--no-server", action="store_true", help="do not start the learner web page")
    return parser.parse_args(argv)


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt UI."""
    args = parse_args()
    logger = configure_logging()
    logger.info("Starting AssessQt...")

    manager = build_manager()
    learner_url: str | None = None
    if not args.no_server:
        start_api_server(manager=manager, host=args.host, port=args.port)
        learner_url = _determine_learner_url(args.port)
        logger.info("Learner page available at %s", learner_url)

    app = QApplication(sys.argv[:1])
    window = LearnerMainWindow(
        manager=manager,
        learner_id=args.learner,
        learner_url=learner_url,
        assignment_file=args.assignment_file,
    )
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
