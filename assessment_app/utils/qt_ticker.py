"""Ticker implementation backed by a Qt timer."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from assessment_app.core.services.session_clock import Ticker


class _TimerBridge(QObject):
    """Owns the QTimer; start/stop requests arrive as signals.

    Signals emitted from another thread are queued to the thread this object
    lives in, which is the only thread allowed to touch the timer.
    """

    start_requested = Signal(int)
    stop_requested = Signal()

    def __init__(self, on_timeout: Callable[[], None], parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.timeout.connect(on_timeout)
        self.start_requested.connect(self._start_timer)
        self.stop_requested.connect(self._stop_timer)

    @Slot(int)
    def _start_timer(self, interval_ms: int) -> None:
        self._timer.start(interval_ms)

    @Slot()
    def _stop_timer(self) -> None:
        self._timer.stop()

    def is_timer_active(self) -> bool:
        return self._timer.isActive()


class QtTicker(Ticker):
    """Fires a callback from the Qt event loop of the thread that created it.

    ``start`` and ``stop`` may be called from any thread; the API server
    submits from its own thread.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        self._bridge = _TimerBridge(self._handle_timeout, parent)
        self._callback: Callable[[], None] | None = None
        self._active: bool = False

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._active = True
        self._bridge.start_requested.emit(interval_ms)

    def stop(self) -> None:
        self._active = False
        self._bridge.stop_requested.emit()

    def is_active(self) -> bool:
        return self._active

    def _handle_timeout(self) -> None:
        # A timeout already queued when stop() was requested must not tick.
        if self._active and self._callback is not None:
            self._callback()
