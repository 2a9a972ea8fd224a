"""
Projectile State & Launch Parameters
=====================================
Defines the state carried between integration steps and the inputs
supplied to each step:
  - Vector2              (immutable 2D value: position or velocity)
  - Projectile           (point mass: position + velocity, mutated per step)
  - BallisticParameters  (wind, caliber, ballistic coefficient)
  - LaunchConditions     (elevation + muzzle velocity, used on "fire")

Coordinate system:
  x = downrange (horizontal)
  y = altitude  (vertical, up positive)
"""

import math
from dataclasses import dataclass, field


# ── Launch constants ──────────────────────────────────────────────────────
MUZZLE_VELOCITY = 850.0   # m/s

DEFAULT_WIND = 0.0
DEFAULT_CALIBER = 0.00762             # m  (7.62 mm)
DEFAULT_BALLISTIC_COEFFICIENT = 0.4


@dataclass(frozen=True)
class Vector2:
    """A pair of floats: position (m) or velocity (m/s)."""
    x: float = 0.0
    y: float = 0.0

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass
class Projectile:
    """
    Simulated point mass at a single instant.

    Starts at rest at the origin. The integrator replaces ``velocity``
    and ``position`` in place on every step; nothing here enforces
    non-negative altitude or finiteness.
    """
    position: Vector2 = field(default_factory=Vector2)
    velocity: Vector2 = field(default_factory=Vector2)

    @property
    def speed(self) -> float:
        return self.velocity.norm()

    def is_finite(self) -> bool:
        return self.position.is_finite() and self.velocity.is_finite()


@dataclass(frozen=True)
class BallisticParameters:
    """
    Environment/ballistic inputs read by each step.

    wind is added directly to the horizontal acceleration (m/s²).
    """
    wind: float = DEFAULT_WIND
    caliber: float = DEFAULT_CALIBER                              # m
    ballistic_coefficient: float = DEFAULT_BALLISTIC_COEFFICIENT  # dimensionless

    def validate(self) -> 'BallisticParameters':
        """Raise ValueError unless caliber and coefficient are positive and finite."""
        for name in ('wind', 'caliber', 'ballistic_coefficient'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
        if self.caliber <= 0.0:
            raise ValueError(f"caliber must be > 0, got {self.caliber!r}")
        if self.ballistic_coefficient <= 0.0:
            raise ValueError(
                f"ballistic_coefficient must be > 0, got {self.ballistic_coefficient!r}"
            )
        return self


@dataclass(frozen=True)
class LaunchConditions:
    """Launch angle and muzzle speed applied when the projectile is fired."""
    elevation_deg: float = 0.0
    muzzle_velocity: float = MUZZLE_VELOCITY   # m/s

    def initial_velocity_vector(self) -> Vector2:
        """Convert muzzle speed + elevation to (vx, vy)."""
        theta = self.elevation_deg * math.pi / 180.0
        return Vector2(self.muzzle_velocity * math.cos(theta),
                       self.muzzle_velocity * math.sin(theta))

    def initial_position(self) -> Vector2:
        return Vector2(0.0, 0.0)


def fire(projectile: Projectile, conditions: LaunchConditions) -> Projectile:
    """Reset ``projectile`` to the origin with the launch velocity."""
    projectile.position = conditions.initial_position()
    projectile.velocity = conditions.initial_velocity_vector()
    return projectile
