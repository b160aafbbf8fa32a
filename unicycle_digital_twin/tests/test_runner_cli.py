"""
Tests for the command-line runner.
"""

import matplotlib
matplotlib.use('Agg')

import pytest

from unicycle_digital_twin import runner as cli
from unicycle_digital_twin.core.trajectories.reference_trajectory import TrajectoryType


class TestParser:

    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.trajectory == TrajectoryType.CIRCLE.value
        assert args.duration == 60.0
        assert not args.load
        assert not args.adaptive
        assert not args.compare
        assert args.plot is None

    def test_flags(self):
        args = cli.build_parser().parse_args(
            ['--trajectory', 'FIGURE_EIGHT', '--load', '--adaptive', '--duration', '5', '--quiet']
        )
        assert args.trajectory == 'FIGURE_EIGHT'
        assert args.load and args.adaptive and args.quiet
        assert args.duration == 5.0

    def test_unknown_trajectory(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(['--trajectory', 'SQUARE'])


class TestMain:

    def test_single_run_prints_report(self, capsys):
        cli.main(['--duration', '5', '--load', '--adaptive', '--quiet'])
        out = capsys.readouterr().out
        assert "Initializing Unicycle Digital Twin" in out
        assert "TRACKING PERFORMANCE REPORT" in out

    def test_short_run_skips_report(self, capsys):
        cli.main(['--duration', '0.05', '--quiet'])
        out = capsys.readouterr().out
        assert "no telemetry recorded" in out
        assert "TRACKING PERFORMANCE REPORT" not in out

    def test_compare(self, capsys):
        cli.main(['--compare', '--duration', '3', '--quiet'])
        out = capsys.readouterr().out
        assert "SCENARIO COMPARISON" in out
        for name in ('baseline', 'load_static', 'load_adaptive'):
            assert name in out

    def test_plot_output(self, tmp_path, capsys):
        base = tmp_path / "fig"
        cli.main(['--duration', '2', '--quiet', '--plot', str(base)])
        assert (tmp_path / "fig_scene.png").exists()
        assert (tmp_path / "fig_charts.png").exists()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
