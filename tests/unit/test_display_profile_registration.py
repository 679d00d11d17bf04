from __future__ import annotations

from conftest import FakeClock

from gamma_tool.display_profile.registration import wait_for


def test_wait_for_returns_first_hit() -> None:
    clock = FakeClock()
    answers = iter([None, None, "found"])
    pumps: list[int] = []

    result = wait_for(lambda: next(answers), timeout_s=1.0, pump=lambda: pumps.append(1), sleep=clock.sleep, clock=clock)

    assert result == "found"
    assert len(pumps) == 2
    assert clock.sleeps == [0.01, 0.01]


def test_wait_for_times_out() -> None:
    clock = FakeClock()
    calls: list[int] = []

    def detect() -> None:
        calls.append(1)
        return None

    assert wait_for(detect, timeout_s=0.1, interval_s=0.02, sleep=clock.sleep, clock=clock) is None
    assert 4 <= len(calls) <= 6
    assert clock.now >= 0.1


def test_wait_for_zero_timeout_still_detects_once() -> None:
    clock = FakeClock()
    assert wait_for(lambda: "x", timeout_s=0.0, sleep=clock.sleep, clock=clock) == "x"
    assert clock.sleeps == []


def test_wait_for_zero_timeout_gives_up_after_one_attempt() -> None:
    clock = FakeClock()
    calls: list[int] = []

    def detect() -> None:
        calls.append(1)
        return None

    assert wait_for(detect, timeout_s=0.0, sleep=clock.sleep, clock=clock) is None
    assert calls == [1]
    assert clock.sleeps == []
