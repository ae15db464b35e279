import pytest

from assessment_app.constants.assessment_constants import TICK_INTERVAL_MS
from assessment_app.core.services.session_clock import (
    SessionClock,
    duration_from_minutes,
    format_countdown,
)

from conftest import ManualTicker


def make_clock(duration: int = 3):
    ticker = ManualTicker()
    expiries: list[int] = []
    ticks: list[int] = []
    clock = SessionClock(duration, on_expire=lambda: expiries.append(1), ticker=ticker, on_tick=ticks.append)
    return clock, ticker, expiries, ticks


def test_counts_down_and_expires_once():
    clock, ticker, expiries, ticks = make_clock(3)
    clock.start()
    assert ticker.interval_ms == TICK_INTERVAL_MS
    ticker.fire(3)
    assert clock.remaining_seconds == 0
    assert clock.has_expired()
    assert expiries == [1]
    assert ticks == [3, 2, 1, 0]
    assert not ticker.is_active()


def test_ticks_after_expiry_are_ignored():
    clock, ticker, expiries, _ticks = make_clock(1)
    clock.start()
    ticker.fire()
    clock.tick()
    clock.tick()
    assert expiries == [1]
    assert clock.remaining_seconds == 0


def test_stop_pauses_countdown():
    clock, ticker, expiries, _ticks = make_clock(5)
    clock.start()
    ticker.fire(2)
    clock.stop()
    clock.tick()
    assert clock.remaining_seconds == 3
    assert not clock.is_running()
    assert expiries == []


def test_stop_is_idempotent():
    clock, ticker, _expiries, _ticks = make_clock(5)
    clock.start()
    clock.stop()
    clock.stop()
    assert ticker.stop_calls == 1


def test_start_twice_acquires_ticker_once():
    clock, ticker, _expiries, _ticks = make_clock(5)
    clock.start()
    clock.start()
    assert ticker.start_calls == 1


def test_expired_clock_cannot_restart():
    clock, ticker, _expiries, _ticks = make_clock(1)
    clock.start()
    ticker.fire()
    with pytest.raises(RuntimeError):
        clock.start()


def test_rejects_non_positive_duration():
    with pytest.raises(ValueError):
        SessionClock(0, on_expire=lambda: None, ticker=ManualTicker())


def test_duration_defaults_to_fifteen_minutes():
    assert duration_from_minutes(None) == 900
    assert duration_from_minutes(0) == 900
    assert duration_from_minutes(2) == 120


def test_format_countdown():
    assert format_countdown(125) == "02:05"
    assert format_countdown(0) == "00:00"
    assert format_countdown(-4) == "00:00"
    assert format_countdown(3600) == "60:00"


def test_elapse_takes_time_off_a_stopped_clock():
    clock, ticker, expiries, ticks = make_clock(10)
    clock.start()
    ticker.fire(2)
    clock.stop()
    clock.elapse(5)
    assert clock.remaining_seconds == 3
    assert ticks[-1] == 3
    assert expiries == []
    clock.start()
    ticker.fire(3)
    assert expiries == [1]


def test_elapse_past_zero_expires_once():
    clock, _ticker, expiries, _ticks = make_clock(5)
    clock.elapse(7)
    clock.elapse(1)
    assert clock.remaining_seconds == 0
    assert clock.has_expired()
    assert expiries == [1]
    with pytest.raises(RuntimeError):
        clock.start()


def test_elapse_on_running_clock_is_rejected():
    clock, _ticker, _expiries, _ticks = make_clock(5)
    clock.start()
    with pytest.raises(RuntimeError):
        clock.elapse(1)
