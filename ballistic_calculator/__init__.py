"""
Ballistic Calculator
====================
A deterministic 2D point-mass trajectory stepper:
  - Gravity (9.81 m/s²)
  - Quadratic drag scaled by caliber and ballistic coefficient
  - Additive horizontal wind acceleration

Advanced with semi-implicit Euler on a fixed timestep (0.01 s), driven
either manually, in batch, or by a fixed-cadence real-time ticker.
Includes validation against closed-form and scipy ODE references and
matplotlib plotting / GIF animation of trajectories.
"""

from .projectile import (
    Vector2, Projectile, BallisticParameters, LaunchConditions, fire,
    MUZZLE_VELOCITY,
)
from .drag_model import drag_force, drag_coefficient, drag_curve, AIR_DENSITY
from .integrator import (
    update_velocity, update_position, step, simulate, TrajectoryResult,
    GRAVITY, DEFAULT_DT,
)
from .driver import BallisticCalculator, ManualTicker, FixedCadenceTicker
from .validation import (
    validate_against_reference, run_all_validations, reference_solution,
    vacuum_reference, REFERENCE_CASES,
)
from .visualization import (
    plot_trajectory, plot_velocity, plot_dt_comparison, plot_drag_curve,
    create_trajectory_animation,
)

__version__ = "1.0.0"
__all__ = [
    'Vector2', 'Projectile', 'BallisticParameters', 'LaunchConditions',
    'fire', 'MUZZLE_VELOCITY',
    'drag_force', 'drag_coefficient', 'drag_curve', 'AIR_DENSITY',
    'update_velocity', 'update_position', 'step', 'simulate',
    'TrajectoryResult', 'GRAVITY', 'DEFAULT_DT',
    'BallisticCalculator', 'ManualTicker', 'FixedCadenceTicker',
    'validate_against_reference', 'run_all_validations',
    'reference_solution', 'vacuum_reference', 'REFERENCE_CASES',
    'plot_trajectory', 'plot_velocity', 'plot_dt_comparison', 'plot_drag_curve',
    'create_trajectory_animation',
]
