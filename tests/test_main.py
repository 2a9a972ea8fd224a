"""
Runner Tests
============
Argument checks in main.py that must stop the run before any stepping.
Run: python -m pytest tests/ -v
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import main as runner


class TestRunnerArguments:

    @pytest.mark.parametrize("dt", ['0', '-0.01', 'nan'])
    def test_non_positive_dt_rejected(self, dt, tmp_path, capsys):
        code = runner.main(['--dt', dt, '--output', str(tmp_path), '--quick'])
        assert code == 1
        assert 'dt must be > 0' in capsys.readouterr().out
        assert not (tmp_path / '01_trajectory.png').exists()

    def test_negative_steps_rejected(self, tmp_path, capsys):
        code = runner.main(['--steps', '-5', '--output', str(tmp_path), '--quick'])
        assert code == 1
        assert 'steps must be >= 0' in capsys.readouterr().out

    def test_zero_caliber_rejected(self, tmp_path, capsys):
        code = runner.main(['--caliber', '0', '--output', str(tmp_path), '--quick'])
        assert code == 1
        assert 'caliber must be > 0' in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
