"""
Unit Tests for the Live Driver
===============================
Tick sources and the BallisticCalculator controller.
Run: python -m pytest tests/ -v
"""

import sys
import os
import logging
import math
import threading
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ballistic_calculator.driver import (
    BallisticCalculator, ManualTicker, FixedCadenceTicker,
)
from ballistic_calculator.projectile import BallisticParameters, Vector2


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


STABLE = BallisticParameters(wind=0.0, caliber=1.0, ballistic_coefficient=100.0)


class TestTickers:

    def test_manual_ticker_count(self):
        calls = []
        ticks = ManualTicker(7).run(lambda: calls.append(1))
        assert ticks == 7
        assert len(calls) == 7

    def test_manual_ticker_rejects_negative(self):
        with pytest.raises(ValueError):
            ManualTicker(-1)

    def test_fixed_cadence_max_ticks(self):
        clock = FakeClock()
        ticker = FixedCadenceTicker(interval=0.01, max_ticks=5,
                                    clock=clock, sleep=clock.sleep)
        times = []
        assert ticker.run(lambda: times.append(clock.now)) == 5
        assert times == pytest.approx([0.01, 0.02, 0.03, 0.04, 0.05])

    def test_fixed_cadence_stop_from_callback(self):
        clock = FakeClock()
        ticker = FixedCadenceTicker(interval=0.01, clock=clock, sleep=clock.sleep)

        def callback():
            if ticker.ticks == 2:
                ticker.stop()

        assert ticker.run(callback) == 3
        assert ticker.stopped

    def test_late_ticks_are_not_replayed(self):
        """A slow tick does not trigger a burst of catch-up ticks."""
        clock = FakeClock()
        ticker = FixedCadenceTicker(interval=0.01, max_ticks=4,
                                    clock=clock, sleep=clock.sleep)
        times = []

        def slow_callback():
            times.append(clock.now)
            clock.now += 0.035

        ticker.run(slow_callback)
        assert len(times) == 4
        gaps = [b - a for a, b in zip(times, times[1:])]
        assert all(gap > 0.0375 for gap in gaps)

    def test_stop_before_run_is_honoured(self):
        """Stopping a ticker before its thread reaches run() makes zero ticks."""
        clock = FakeClock()
        ticker = FixedCadenceTicker(interval=0.01, max_ticks=5,
                                    clock=clock, sleep=clock.sleep)
        calls = []
        ticker.stop()
        assert ticker.run(lambda: calls.append(1)) == 0
        assert calls == []

    def test_reset_allows_another_run(self):
        clock = FakeClock()
        ticker = FixedCadenceTicker(interval=0.01, max_ticks=2,
                                    clock=clock, sleep=clock.sleep)
        ticker.stop()
        ticker.reset()
        assert not ticker.stopped
        assert ticker.run(lambda: None) == 2

    def test_fixed_cadence_runs_twice(self):
        """max_ticks counts per run, so a second run fires again."""
        clock = FakeClock()
        ticker = FixedCadenceTicker(interval=0.01, max_ticks=5,
                                    clock=clock, sleep=clock.sleep)
        calls = []
        assert ticker.run(lambda: calls.append(1)) == 5
        assert ticker.run(lambda: calls.append(1)) == 5
        assert len(calls) == 10

    def test_manual_ticker_runs_twice(self):
        ticker = ManualTicker(3)
        calls = []
        assert ticker.run(lambda: calls.append(1)) == 3
        assert ticker.run(lambda: calls.append(1)) == 3
        assert len(calls) == 6

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            FixedCadenceTicker(interval=0.0)


class TestBallisticCalculator:

    def test_defaults(self):
        calc = BallisticCalculator()
        assert calc.params == BallisticParameters(0.0, 0.00762, 0.4)
        assert calc.elevation_deg == 0.0
        assert calc.dt == 0.01
        assert calc.position == Vector2(0.0, 0.0)

    def test_set_parameter_parses_text(self):
        calc = BallisticCalculator()
        assert calc.set_parameter('wind', '2.5')
        assert calc.set_parameter('elevation', '30')
        assert calc.set_parameter('caliber', '0.0091')
        assert calc.set_parameter('ballistic_coefficient', '0.55')
        assert calc.params == BallisticParameters(2.5, 0.0091, 0.55)
        assert calc.elevation_deg == 30.0

    @pytest.mark.parametrize("text", ['', 'abc', '1.2.3', None, '--'])
    def test_unparsable_input_keeps_previous(self, text):
        calc = BallisticCalculator()
        calc.set_parameter('wind', '1.5')
        assert calc.set_parameter('wind', text) is False
        assert calc.params.wind == 1.5

    def test_unknown_parameter(self):
        with pytest.raises(KeyError):
            BallisticCalculator().set_parameter('mass', '10')

    def test_ticks_before_fire_do_nothing(self):
        calc = BallisticCalculator()
        calc.run(ManualTicker(20))
        assert calc.ticks == 20
        assert calc.position == Vector2(0.0, 0.0)

    def test_fire_sets_launch_velocity(self):
        calc = BallisticCalculator()
        calc.set_parameter('elevation', '0')
        assert calc.fire() == Vector2(850.0, 0.0)

    def test_fire_resets_position(self):
        calc = BallisticCalculator(params=STABLE, elevation_deg=45.0)
        calc.fire()
        calc.run(ManualTicker(50))
        assert calc.position.x > 0.0
        calc.fire()
        assert calc.position == Vector2(0.0, 0.0)

    def test_tick_uses_current_parameters(self):
        calm = BallisticCalculator(params=STABLE, elevation_deg=30.0)
        windy = BallisticCalculator(params=STABLE, elevation_deg=30.0)
        windy.set_parameter('wind', '5')
        for calc in (calm, windy):
            calc.fire()
            calc.run(ManualTicker(100))
        assert windy.position.x > calm.position.x

    def test_readout(self):
        calc = BallisticCalculator()
        assert calc.readout() == "Position: (0.0, 0.0)"

    def test_divergence_logged_once(self, caplog):
        calc = BallisticCalculator(elevation_deg=45.0)
        calc.fire()
        with caplog.at_level(logging.WARNING, logger='ballistic_calculator.driver'):
            calc.run(ManualTicker(100))
        assert calc.diverged
        assert math.isnan(calc.position.x)
        assert calc.readout() == "Position: (NaN, NaN)"
        warnings = [r for r in caplog.records if 'diverged' in r.getMessage()]
        assert len(warnings) == 1

    def test_zero_caliber_raises_on_tick(self):
        calc = BallisticCalculator(elevation_deg=10.0)
        calc.set_parameter('caliber', '0')
        calc.fire()
        with pytest.raises(ValueError):
            calc.tick()

    def test_fire_while_ticking_on_thread(self):
        calc = BallisticCalculator(params=STABLE, elevation_deg=20.0)
        ticker = FixedCadenceTicker(interval=0.001, max_ticks=200)
        worker = threading.Thread(target=calc.run, args=(ticker,))
        worker.start()
        for _ in range(5):
            calc.fire()
        worker.join(timeout=10)
        assert not worker.is_alive()
        assert ticker.ticks == 200
        assert calc.projectile.is_finite()


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
