"""Unit tests for PacingTicker."""

import threading

import pytest

from gitfleet.dispatch import PacingTicker


class SteppingClock:
    """Clock that only moves when the ticker sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.unit
class TestPacingTicker:
    """Tests for PacingTicker."""

    def test_first_wait_is_one_interval(self) -> None:
        clock = SteppingClock()
        ticker = PacingTicker(2.0, sleep=clock.sleep, clock=clock.clock)

        assert ticker.wait() == 2.0
        assert clock.sleeps == [2.0]

    def test_back_to_back_waits_are_spaced(self) -> None:
        clock = SteppingClock()
        ticker = PacingTicker(1.5, sleep=clock.sleep, clock=clock.clock)

        for _ in range(3):
            ticker.wait()

        assert clock.sleeps == [1.5, 1.5, 1.5]
        assert clock.now == 4.5

    def test_idle_time_is_not_saved_up(self) -> None:
        """After a long pause one caller passes at once, the next waits a full interval."""
        clock = SteppingClock()
        ticker = PacingTicker(1.0, sleep=clock.sleep, clock=clock.clock)
        clock.now = 10.0

        assert ticker.wait() == 0
        assert ticker.wait() == 1.0

    @pytest.mark.parametrize("interval", [0, -3])
    def test_non_positive_interval_falls_back_to_one_second(self, interval: float) -> None:
        assert PacingTicker(interval).interval == 1.0

    def test_concurrent_waiters_get_distinct_slots(self) -> None:
        """Threads waiting together are released one interval apart."""
        sleeps: list[float] = []
        lock = threading.Lock()

        def record(seconds: float) -> None:
            with lock:
                sleeps.append(seconds)

        ticker = PacingTicker(1.0, sleep=record, clock=lambda: 0.0)
        threads = [threading.Thread(target=ticker.wait) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(sleeps) == [1.0, 2.0, 3.0, 4.0, 5.0]
