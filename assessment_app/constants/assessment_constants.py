"""Assessment-related constants shared across UI and core layers."""

DEFAULT_TIME_LIMIT_MINUTES: int = 15
DEFAULT_MAX_SCORE: float = 10.0
TICK_INTERVAL_MS: int = 1000
COUNTDOWN_WARNING_WINDOW_SECONDS: int = 60
