"""
Smoke tests for the headless scene and chart renderers.
"""

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

import numpy as np
import pytest

from unicycle_digital_twin.core.simulation.simulation_runner import (
    ControlConfig,
    SimulationConfig,
    UnicycleTwinRunner,
)
from unicycle_digital_twin.core.visualization import (
    PlotStyleConfig,
    SceneColors,
    TimelinePlotter,
    TrajectoryPlotter,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def runner():
    runner = UnicycleTwinRunner(SimulationConfig(verbose=False),
                                ControlConfig(adaptive=True, has_load=True))
    for _ in range(60 * 30):
        runner.tick()
    return runner


class TestPlotStyleConfig:

    def test_robot_radius_in_metres(self):
        assert PlotStyleConfig().robot_radius == pytest.approx(0.15)

    def test_unknown_layout_falls_back(self):
        assert PlotStyleConfig().get_figure_size('nope') == (8, 6)


class TestTrajectoryPlotter:

    def test_scene_from_snapshot(self, runner):
        fig, ax = TrajectoryPlotter().plot_snapshot(runner.snapshot())

        labels = [line.get_label() for line in ax.get_lines()]
        assert 'reference' in labels
        assert 'actual' in labels
        actual = next(line for line in ax.get_lines() if line.get_label() == 'actual')
        assert len(actual.get_xdata()) == 200
        assert ax.get_xlim() == pytest.approx((-3.0, 3.0))

    def test_empty_trails(self):
        runner = UnicycleTwinRunner(SimulationConfig(verbose=False))
        fig, ax = TrajectoryPlotter().plot_snapshot(runner.snapshot())
        reference = next(line for line in ax.get_lines() if line.get_label() == 'reference')
        assert len(reference.get_xdata()) == 0
        assert reference.get_color() == SceneColors.TRAIL_REFERENCE

    def test_existing_axes(self, runner):
        fig, ax = plt.subplots()
        out_fig, out_ax = TrajectoryPlotter().plot_snapshot(runner.snapshot(), ax=ax)
        assert out_ax is ax
        assert out_fig is fig


class TestTimelinePlotter:

    def test_error_chart_window(self, runner):
        fig, ax = TimelinePlotter().plot_error(runner.history.as_log_data())
        (line,) = ax.get_lines()
        assert len(line.get_xdata()) == 100
        assert line.get_xdata()[-1] == pytest.approx(30.0)

    def test_full_window(self, runner):
        fig, ax = TimelinePlotter().plot_error(runner.history.to_dataframe(), window=0)
        assert len(ax.get_lines()[0].get_xdata()) == 200

    def test_parameter_chart(self, runner):
        fig, ax = TimelinePlotter().plot_parameters(runner.history.as_log_data(), true_mass=3.5)
        labels = [line.get_label() for line in ax.get_lines()]
        assert labels == ['θ mass', 'θ inertia']
        theta_m = ax.get_lines()[0].get_ydata()
        assert np.all(np.diff(theta_m) >= 0.0)
        assert np.all(ax.get_lines()[1].get_ydata() == 1.0)

    def test_dashboard(self, runner):
        fig, axes = TimelinePlotter().plot_dashboard(runner.history.as_log_data(), true_mass=3.5)
        assert len(axes) == 2
        assert axes[0].get_title(loc='left') == 'DISTANCE ERROR [m]'

    def test_missing_time_rejected(self):
        with pytest.raises(ValueError):
            TimelinePlotter().plot_error({'position_error': [0.1, 0.2]})


class TestPlotResults:

    def test_saves_figures(self, tmp_path, capsys):
        base = tmp_path / "run.png"
        runner = UnicycleTwinRunner(SimulationConfig(verbose=False, enable_plotting=True,
                                                     plot_path=str(base)))
        runner.run_simulation(duration=2.0)

        assert (tmp_path / "run_scene.png").exists()
        assert (tmp_path / "run_charts.png").exists()
        assert "Figures saved" in capsys.readouterr().out

    def test_nothing_to_plot(self, capsys):
        runner = UnicycleTwinRunner(SimulationConfig(verbose=False))
        runner.plot_results()
        assert "No telemetry" in capsys.readouterr().out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
