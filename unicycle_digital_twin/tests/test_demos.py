"""
Smoke test for the adaptation comparison demo.
"""

import matplotlib
matplotlib.use('Agg')

import pytest

from demos.compare_adaptation import compare_adaptation
from unicycle_digital_twin.core.trajectories.reference_trajectory import TrajectoryType


class TestCompareAdaptation:

    def test_figure_and_reported_mass(self, tmp_path, capsys):
        output = tmp_path / "overlay.png"
        results = compare_adaptation(TrajectoryType.CIRCLE, 2.0, str(output))
        out = capsys.readouterr().out

        assert output.exists()
        assert results['load_adaptive']['true_mass'] == 3.5
        assert "True mass with load: 3.5 kg" in out
        assert "INFO: Figure saved" in out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
