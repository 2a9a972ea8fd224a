"""
Trajectory Integrator
=====================
Semi-implicit (symplectic) Euler stepping of a 2D point mass under
gravity, quadratic drag and an additive horizontal wind term:

    v_{n+1} = v_n + a(v_n) * dt
    x_{n+1} = x_n + v_{n+1} * dt

Velocity is always updated first (drag direction taken from the old
velocity), then position from the new velocity. Swapping the two calls
changes the numbers.

A projectile at exactly zero speed is left untouched by
``update_velocity``: no drag, no wind and no gravity for that step.

Output of a batch run: TrajectoryResult dataclass with full state history.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from .drag_model import drag_force
from .projectile import (
    Projectile, Vector2, BallisticParameters, LaunchConditions, fire,
)


# ── Integration constants ─────────────────────────────────────────────────
GRAVITY = 9.81           # m/s²
DEFAULT_DT = 0.01        # s per step
TICK_INTERVAL_MS = 10    # wall-clock cadence of the live driver


def update_velocity(projectile: Projectile, dt: float, wind: float,
                    caliber: float, ballistic_coefficient: float) -> None:
    """Advance velocity by one step of gravity + drag + wind."""
    vx, vy = projectile.velocity
    v = math.sqrt(vx * vx + vy * vy)
    if v == 0.0:
        return

    drag = drag_force(v, caliber, ballistic_coefficient)
    acceleration_x = wind + drag * vx / v
    acceleration_y = -GRAVITY + drag * vy / v

    projectile.velocity = Vector2(vx + acceleration_x * dt,
                                  vy + acceleration_y * dt)


def update_position(projectile: Projectile, dt: float) -> None:
    """Advance position using the (already updated) velocity."""
    projectile.position = Vector2(
        projectile.position.x + projectile.velocity.x * dt,
        projectile.position.y + projectile.velocity.y * dt,
    )


def step(projectile: Projectile, dt: float,
         params: BallisticParameters) -> Projectile:
    """One full step: velocity first, then position."""
    update_velocity(projectile, dt, params.wind, params.caliber,
                    params.ballistic_coefficient)
    update_position(projectile, dt)
    return projectile


@dataclass
class TrajectoryResult:
    """Complete trajectory output."""
    conditions: LaunchConditions
    parameters: BallisticParameters
    dt: float                 # timestep used

    # Arrays — each has shape (N,), index 0 is the launch state
    time: np.ndarray
    x: np.ndarray             # downrange
    y: np.ndarray             # altitude
    vx: np.ndarray
    vy: np.ndarray
    speed: np.ndarray

    @property
    def steps(self) -> int:
        return len(self.time) - 1

    @property
    def final_position(self) -> Tuple[float, float]:
        return float(self.x[-1]), float(self.y[-1])

    @property
    def final_velocity(self) -> Tuple[float, float]:
        return float(self.vx[-1]), float(self.vy[-1])

    @property
    def range_total(self) -> float:
        """Horizontal distance at the last recorded step (m)."""
        return float(self.x[-1])

    @property
    def max_altitude(self) -> float:
        """Maximum finite altitude reached (m)."""
        finite = self.y[np.isfinite(self.y)]
        return float(np.max(finite)) if finite.size else float('nan')

    @property
    def flight_time(self) -> float:
        return float(self.time[-1])

    @property
    def divergence_index(self) -> Optional[int]:
        """First recorded index with a non-finite component, or None."""
        bad = ~(np.isfinite(self.x) & np.isfinite(self.y)
                & np.isfinite(self.vx) & np.isfinite(self.vy))
        if not bad.any():
            return None
        return int(np.argmax(bad))

    @property
    def diverged(self) -> bool:
        return self.divergence_index is not None

    def summary(self) -> str:
        """Human-readable summary string."""
        x_f, y_f = self.final_position
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY{'':<35s}║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Elevation    : {self.conditions.elevation_deg:>10.2f} °{'':<25s}║",
            f"║  Muzzle vel   : {self.conditions.muzzle_velocity:>10.1f} m/s{'':<23s}║",
            f"║  Wind         : {self.parameters.wind:>10.3f} m/s²{'':<22s}║",
            f"║  Caliber      : {self.parameters.caliber:>10.5f} m{'':<25s}║",
            f"║  Ballistic C  : {self.parameters.ballistic_coefficient:>10.3f}{'':<27s}║",
            f"║  Timestep     : {self.dt:>10.4f} s  x {self.steps:<18d}║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Final x      : {x_f:>14.6g} m{'':<21s}║",
            f"║  Final y      : {y_f:>14.6g} m{'':<21s}║",
            f"║  Max altitude : {self.max_altitude:>14.6g} m{'':<21s}║",
            f"║  Elapsed      : {self.flight_time:>14.3f} s{'':<21s}║",
        ]
        idx = self.divergence_index
        if idx is not None:
            lines.append(f"║  DIVERGED at step {idx:<35d}║")
        lines.append(f"╚══════════════════════════════════════════════════════╝")
        return '\n'.join(lines)


def _record_state(t, projectile):
    """Helper to snapshot one state row."""
    vx, vy = projectile.velocity
    return (t, projectile.position.x, projectile.position.y,
            vx, vy, projectile.speed)


def simulate(conditions: LaunchConditions,
             params: BallisticParameters = BallisticParameters(),
             dt: float = DEFAULT_DT, steps: int = 100,
             stop_at_ground: bool = False) -> TrajectoryResult:
    """
    Fire a fresh projectile and advance it ``steps`` fixed steps.

    With ``stop_at_ground`` the run ends early once the projectile
    drops below launch height (checked after the first step).
    Non-finite states are recorded as they occur.
    """
    if not dt > 0.0:
        raise ValueError(f"dt must be > 0, got {dt!r}")
    if steps < 0:
        raise ValueError(f"steps must be >= 0, got {steps!r}")
    params.validate()

    projectile = fire(Projectile(), conditions)
    launch_height = projectile.position.y
    t = 0.0
    history = [_record_state(t, projectile)]

    for n in range(1, steps + 1):
        step(projectile, dt, params)
        t = n * dt
        history.append(_record_state(t, projectile))

        if stop_at_ground and n > 1 and projectile.position.y < launch_height:
            break

    return _build_result(history, conditions, params, dt)


def _build_result(history, conditions, params, dt):
    """Convert history list to TrajectoryResult."""
    times, xs, ys, vxs, vys, speeds = (np.array(col, dtype=float)
                                       for col in zip(*history))
    return TrajectoryResult(
        conditions=conditions,
        parameters=params,
        dt=dt,
        time=times,
        x=xs,
        y=ys,
        vx=vxs,
        vy=vys,
        speed=speeds,
    )
