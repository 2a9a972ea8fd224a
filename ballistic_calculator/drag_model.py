"""
Aerodynamic Drag Model
======================
Quadratic drag scaled by caliber and ballistic coefficient.

    k      = 1 / (BC · d²)
    a_drag = -½ · k · ρ · |v|²

The result is a signed deceleration magnitude (≤ 0), which the integrator
projects onto the unit velocity vector. Air density is fixed at the
sea-level standard value.
"""

import numpy as np


# ── Constants ─────────────────────────────────────────────────────────────
AIR_DENSITY = 1.225    # kg/m³  (sea level, 15 °C)


def drag_coefficient(caliber: float, ballistic_coefficient: float) -> float:
    """
    k = 1 / (BC · d²).

    Raises ValueError when the denominator is exactly zero
    (zero caliber, zero coefficient, or caliber² underflowing).
    """
    denominator = ballistic_coefficient * (caliber * caliber)
    if denominator == 0.0:
        raise ValueError(
            f"Degenerate drag parameters: caliber={caliber!r}, "
            f"ballistic_coefficient={ballistic_coefficient!r}"
        )
    return 1.0 / denominator


def drag_force(speed: float, caliber: float,
               ballistic_coefficient: float) -> float:
    """
    Drag deceleration magnitude (m/s², signed, ≤ 0 for positive inputs).

    Parameters
    ----------
    speed : float
        |v| in m/s, ≥ 0
    caliber : float
        Projectile diameter (m), > 0
    ballistic_coefficient : float
        Dimensionless, > 0

    Squares are products rather than ``**`` so that overflow gives
    ``inf`` instead of raising OverflowError.
    """
    k = drag_coefficient(caliber, ballistic_coefficient)
    return -0.5 * k * AIR_DENSITY * (speed * speed)


def drag_curve(speeds: np.ndarray, caliber: float,
               ballistic_coefficient: float) -> np.ndarray:
    """Vectorized drag_force over an array of speeds."""
    speeds = np.asarray(speeds, dtype=float)
    k = drag_coefficient(caliber, ballistic_coefficient)
    return -0.5 * k * AIR_DENSITY * (speeds * speeds)
