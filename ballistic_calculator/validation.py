"""
Validation Against Reference Solutions
=======================================
Checks the fixed-step stepper against two references:
  - Closed-form constant-gravity kinematics (drag negligible)
  - A tight-tolerance scipy ``solve_ivp`` (DOP853) solution of the
    same ODE: same drag law, same wind term, same gravity

Reference cases use drag parameters that keep the explicit stepper
stable at dt = 0.01 s. The default 7.62 mm / 0.4 BC configuration is
far too stiff for that and diverges within a handful of steps.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import List, Tuple
from scipy.integrate import solve_ivp

from .drag_model import drag_force
from .integrator import GRAVITY, simulate
from .projectile import BallisticParameters, LaunchConditions


# ══════════════════════════════════════════════════════════════════════════
#  Reference cases
# ══════════════════════════════════════════════════════════════════════════

# (name, elevation_deg, wind, caliber, ballistic_coefficient, duration_s)
REFERENCE_CASES = [
    ('Near-vacuum 45°',    45.0,  0.0,    1e6,    1e6, 2.0),
    ('Near-vacuum 80°',    80.0,  0.0,    1e6,    1e6, 2.0),
    ('Light drag 30°',     30.0,  0.0,    1.0,  100.0, 1.0),
    ('Light drag 60°',     60.0,  0.0,    1.0,  100.0, 1.0),
    ('Headwind 30°',       30.0, -5.0,    1.0,  100.0, 1.0),
    ('Tailwind 30°',       30.0,  5.0,    1.0,  100.0, 1.0),
]


@dataclass
class ValidationResult:
    """Result of one validation comparison."""
    name: str
    elevation_deg: float
    dt: float
    ref_position: Tuple[float, float]
    sim_position: Tuple[float, float]
    position_error: float    # Euclidean distance (m)
    ref_speed: float
    sim_speed: float
    speed_error_pct: float


def vacuum_reference(conditions: LaunchConditions, t: float,
                     wind: float = 0.0) -> Tuple[float, float, float, float]:
    """Closed-form (x, y, vx, vy) under constant gravity and wind only."""
    v0 = conditions.initial_velocity_vector()
    x = v0.x * t + 0.5 * wind * t * t
    y = v0.y * t - 0.5 * GRAVITY * t * t
    return x, y, v0.x + wind * t, v0.y - GRAVITY * t


def _equations_of_motion(params: BallisticParameters):
    def rhs(t, state):
        _, _, vx, vy = state
        v = math.sqrt(vx * vx + vy * vy)
        if v == 0.0:
            return [vx, vy, 0.0, 0.0]
        drag = drag_force(v, params.caliber, params.ballistic_coefficient)
        return [vx, vy,
                params.wind + drag * vx / v,
                -GRAVITY + drag * vy / v]
    return rhs


def reference_solution(conditions: LaunchConditions,
                       params: BallisticParameters,
                       t_end: float, rtol: float = 1e-10,
                       atol: float = 1e-9) -> np.ndarray:
    """
    High-accuracy [x, y, vx, vy] at ``t_end``.

    Raises RuntimeError if the solver fails.
    """
    params.validate()
    v0 = conditions.initial_velocity_vector()
    y0 = [0.0, 0.0, v0.x, v0.y]
    sol = solve_ivp(_equations_of_motion(params), (0.0, t_end), y0,
                    method='DOP853', rtol=rtol, atol=atol)
    if not sol.success:
        raise RuntimeError(f"Reference integration failed: {sol.message}")
    return sol.y[:, -1]


def compare_with_reference(conditions: LaunchConditions,
                           params: BallisticParameters, duration: float,
                           dt: float = 0.01,
                           name: str = '') -> ValidationResult:
    """Run the stepper for ``duration`` seconds and compare end states."""
    steps = int(round(duration / dt))
    result = simulate(conditions, params, dt=dt, steps=steps)
    t_end = steps * dt
    ref = reference_solution(conditions, params, t_end)

    sim_x, sim_y = result.final_position
    ref_speed = float(np.hypot(ref[2], ref[3]))
    sim_speed = float(result.speed[-1])
    return ValidationResult(
        name=name,
        elevation_deg=conditions.elevation_deg,
        dt=dt,
        ref_position=(float(ref[0]), float(ref[1])),
        sim_position=(sim_x, sim_y),
        position_error=float(np.hypot(sim_x - ref[0], sim_y - ref[1])),
        ref_speed=ref_speed,
        sim_speed=sim_speed,
        speed_error_pct=(sim_speed - ref_speed) / ref_speed * 100
        if ref_speed > 0 else 0.0,
    )


def validate_against_reference(cases=REFERENCE_CASES, dt: float = 0.01,
                               verbose: bool = True) -> List[ValidationResult]:
    """
    Run each reference case through the stepper and the ODE reference.

    Returns list of ValidationResult, one per case.
    """
    results = []

    if verbose:
        print(f"\n{'='*80}")
        print(f"  VALIDATION: semi-implicit Euler vs DOP853 reference (dt={dt} s)")
        print(f"{'='*80}")
        print(f"{'Case':<18} {'Elev°':>6} {'Ref x':>10} {'Sim x':>10} "
              f"{'Ref y':>10} {'Sim y':>10} {'|Δpos| m':>10} {'Δv %':>8}")
        print("-" * 80)

    for name, elev, wind, caliber, bc, duration in cases:
        conditions = LaunchConditions(elevation_deg=elev)
        params = BallisticParameters(wind=wind, caliber=caliber,
                                     ballistic_coefficient=bc)
        r = compare_with_reference(conditions, params, duration, dt=dt, name=name)
        results.append(r)

        if verbose:
            print(f"{name:<18} {elev:>6.1f} {r.ref_position[0]:>10.2f} "
                  f"{r.sim_position[0]:>10.2f} {r.ref_position[1]:>10.2f} "
                  f"{r.sim_position[1]:>10.2f} {r.position_error:>10.4f} "
                  f"{r.speed_error_pct:>+8.3f}")

    if verbose:
        worst = max(r.position_error for r in results) if results else 0.0
        print("-" * 80)
        print(f"  Worst position error: {worst:.4f} m")

    return results


def run_all_validations(dt: float = 0.01, verbose: bool = True):
    """Run the reference cases; returns {case name: ValidationResult}."""
    return {r.name: r for r in validate_against_reference(dt=dt, verbose=verbose)}
