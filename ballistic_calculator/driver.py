"""
Live Driver
===========
Replaces the original form + interval timer with two pieces:

  - Tick sources: call a zero-argument callback repeatedly.
      ManualTicker        — N calls back to back (tests, batch runs)
      FixedCadenceTicker  — one call per wall-clock interval, no catch-up
  - BallisticCalculator: owns the single projectile and the current
    parameters, accepts text input the way the form did, and steps the
    integrator on every tick.

fire/tick/set_parameter share one lock, so a ticker running on a
background thread never races a fire trigger.
"""

import logging
import math
import threading
import time
from dataclasses import replace
from typing import Callable, Optional

from .integrator import DEFAULT_DT, TICK_INTERVAL_MS, step
from .projectile import (
    Projectile, Vector2, BallisticParameters, LaunchConditions, fire,
)

logger = logging.getLogger(__name__)


class ManualTicker:
    """Invoke the callback ``count`` times, immediately."""

    def __init__(self, count: int = 1):
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count!r}")
        self.count = count
        self.ticks = 0

    def run(self, callback: Callable[[], None]) -> int:
        """Returns the number of callbacks made by this run."""
        self.ticks = 0
        for _ in range(self.count):
            callback()
            self.ticks += 1
        return self.ticks


class FixedCadenceTicker:
    """
    Invoke the callback once per ``interval`` seconds of wall time.

    Deadlines advance by whole intervals from the start time; a tick
    that runs late is not replayed, it just fires late. ``stop()`` may
    be called from the callback or from another thread. A stopped
    ticker stays stopped until ``reset()``; ``max_ticks`` counts per run.
    """

    def __init__(self, interval: float = TICK_INTERVAL_MS / 1000.0,
                 max_ticks: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if not interval > 0.0:
            raise ValueError(f"interval must be > 0, got {interval!r}")
        self.interval = interval
        self.max_ticks = max_ticks
        self.ticks = 0
        self._clock = clock
        self._sleep = sleep
        self._stopped = threading.Event()

    def stop(self):
        """Stop the current run, or the next one if called before it starts."""
        self._stopped.set()

    def reset(self):
        """Clear a previous stop so the ticker can run again."""
        self._stopped.clear()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def run(self, callback: Callable[[], None]) -> int:
        """Returns the number of callbacks made by this run."""
        self.ticks = 0
        next_deadline = self._clock() + self.interval
        while not self._stopped.is_set():
            if self.max_ticks is not None and self.ticks >= self.max_ticks:
                break
            delay = next_deadline - self._clock()
            if delay > 0:
                self._sleep(delay)
            if self._stopped.is_set():
                break
            callback()
            self.ticks += 1
            now = self._clock()
            # skip deadlines already missed instead of bursting to catch up
            while next_deadline <= now:
                next_deadline += self.interval
        return self.ticks


class BallisticCalculator:
    """
    Interactive controller around one projectile.

    Parameters are entered as text; anything that fails to parse is
    ignored and the previous value kept.
    """

    PARAMETERS = ('wind', 'elevation', 'caliber', 'ballistic_coefficient')

    def __init__(self, params: BallisticParameters = BallisticParameters(),
                 elevation_deg: float = 0.0, dt: float = DEFAULT_DT):
        self.params = params
        self.elevation_deg = elevation_deg
        self.dt = dt
        self.projectile = Projectile()
        self.ticks = 0
        self._lock = threading.Lock()
        self._diverged = False

    # ── Parameter entry ──────────────────────────────────────────────────
    def set_parameter(self, name: str, text: str) -> bool:
        """
        Parse ``text`` as float and store it under ``name``.

        Returns False (and keeps the old value) when parsing fails.
        Unknown names raise KeyError.
        """
        if name not in self.PARAMETERS:
            raise KeyError(f"Unknown parameter '{name}'. Available: {list(self.PARAMETERS)}")
        try:
            value = float(text)
        except (TypeError, ValueError):
            return False

        with self._lock:
            if name == 'elevation':
                self.elevation_deg = value
            else:
                self.params = replace(self.params, **{name: value})
        return True

    @property
    def conditions(self) -> LaunchConditions:
        return LaunchConditions(elevation_deg=self.elevation_deg)

    # ── Fire / tick ──────────────────────────────────────────────────────
    def fire(self) -> Vector2:
        with self._lock:
            conditions = self.conditions
            fire(self.projectile, conditions)
            self._diverged = False
            velocity = self.projectile.velocity
        logger.info("Fired at %.2f deg, v0=(%.3f, %.3f) m/s",
                    conditions.elevation_deg, velocity.x, velocity.y)
        return velocity

    def tick(self) -> Vector2:
        with self._lock:
            step(self.projectile, self.dt, self.params)
            self.ticks += 1
            position = self.projectile.position
            newly_diverged = not self._diverged and not self.projectile.is_finite()
            if newly_diverged:
                self._diverged = True
        if newly_diverged:
            logger.warning("Trajectory diverged at tick %d (dt=%g, params=%s)",
                           self.ticks, self.dt, self.params)
        return position

    def run(self, ticker) -> int:
        """Drive ``tick`` from a tick source until it finishes."""
        return ticker.run(self.tick)

    # ── Output ───────────────────────────────────────────────────────────
    @property
    def position(self) -> Vector2:
        with self._lock:
            return self.projectile.position

    @property
    def diverged(self) -> bool:
        return self._diverged

    def readout(self) -> str:
        x, y = self.position
        return f"Position: ({_fmt(x)}, {_fmt(y)})"


def _fmt(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)
