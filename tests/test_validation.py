"""
Validation Tests
================
Stepper accuracy against closed-form kinematics and the scipy reference,
plus a smoke test of the plotting pipeline.
Run: python -m pytest tests/ -v
"""

import sys
import os
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ballistic_calculator.projectile import BallisticParameters, LaunchConditions
from ballistic_calculator.integrator import simulate
from ballistic_calculator.validation import (
    vacuum_reference, reference_solution, compare_with_reference,
    validate_against_reference, run_all_validations, REFERENCE_CASES,
)


NEAR_VACUUM = BallisticParameters(wind=0.0, caliber=1e6, ballistic_coefficient=1e6)
LIGHT_DRAG = BallisticParameters(wind=0.0, caliber=1.0, ballistic_coefficient=100.0)


class TestReferences:

    def test_vacuum_reference_at_launch(self):
        x, y, vx, vy = vacuum_reference(LaunchConditions(elevation_deg=0.0), 0.0)
        assert (x, y, vx, vy) == (0.0, 0.0, 850.0, 0.0)

    def test_ode_reference_matches_vacuum(self):
        cond = LaunchConditions(elevation_deg=60.0)
        ref = reference_solution(cond, NEAR_VACUUM, 2.0)
        exact = vacuum_reference(cond, 2.0)
        assert np.allclose(ref, exact, atol=1e-4)

    def test_ode_reference_with_wind(self):
        cond = LaunchConditions(elevation_deg=30.0)
        params = BallisticParameters(wind=3.0, caliber=1e6, ballistic_coefficient=1e6)
        ref = reference_solution(cond, params, 1.0)
        exact = vacuum_reference(cond, 1.0, wind=3.0)
        assert np.allclose(ref, exact, atol=1e-4)

    def test_reference_rejects_degenerate_parameters(self):
        with pytest.raises(ValueError):
            reference_solution(LaunchConditions(), BallisticParameters(caliber=0.0), 1.0)


class TestStepperAccuracy:

    def test_vacuum_error_is_first_order(self):
        """Semi-implicit Euler drops ½·g·dt·t of altitude in vacuum."""
        cond = LaunchConditions(elevation_deg=45.0)
        r = simulate(cond, NEAR_VACUUM, dt=0.01, steps=200)
        x, y, _, _ = vacuum_reference(cond, 2.0)
        assert r.final_position[0] == pytest.approx(x, abs=1e-6)
        assert y - r.final_position[1] == pytest.approx(0.5 * 9.81 * 0.01 * 2.0, abs=1e-6)

    def test_error_shrinks_with_dt(self):
        cond = LaunchConditions(elevation_deg=30.0)
        coarse = compare_with_reference(cond, LIGHT_DRAG, 1.0, dt=0.01)
        fine = compare_with_reference(cond, LIGHT_DRAG, 1.0, dt=0.001)
        assert fine.position_error < coarse.position_error

    def test_validate_against_reference(self, capsys):
        results = validate_against_reference(dt=0.01, verbose=True)
        assert len(results) == len(REFERENCE_CASES)
        for r in results:
            assert np.isfinite(r.position_error)
            assert abs(r.speed_error_pct) < 10.0
        assert 'VALIDATION' in capsys.readouterr().out

    def test_run_all_validations_keyed_by_case(self):
        results = run_all_validations(dt=0.01, verbose=False)
        assert set(results) == {case[0] for case in REFERENCE_CASES}
        assert results['Near-vacuum 45°'].position_error < 0.2


class TestPlotting:

    def test_drag_curve_plot_written(self, tmp_path):
        from ballistic_calculator.visualization import plot_drag_curve
        import matplotlib.pyplot as plt

        path = tmp_path / 'drag.png'
        fig = plot_drag_curve({'default': BallisticParameters(),
                               'light': LIGHT_DRAG}, save_path=str(path))
        assert len(fig.axes[0].lines) == 3
        plt.close(fig)
        assert path.exists()

    def test_plots_written_for_diverged_run(self, tmp_path):
        from ballistic_calculator.visualization import plot_trajectory, plot_velocity
        import matplotlib.pyplot as plt

        r = simulate(LaunchConditions(elevation_deg=45.0), BallisticParameters(),
                     dt=0.01, steps=100)
        assert r.diverged
        for fn, name in ((plot_trajectory, 'traj.png'), (plot_velocity, 'vel.png')):
            fig = fn(r, save_path=str(tmp_path / name))
            plt.close(fig)
            assert (tmp_path / name).exists()


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
