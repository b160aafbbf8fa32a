"""
Visualization Module for the Unicycle Tracking Digital Twin

Headless matplotlib renderers standing in for the live UI collaborators.

Modules:
--------
- trajectory_plots: Scene view (grid, trails, robot glyph, reference point)
- time_series_plots: Distance error and parameter adaptation charts
- style_config: Shared colours and sizes
"""

from .style_config import (
    ChartColors,
    PlotStyleConfig,
    SceneColors,
    configure_matplotlib_defaults,
)
from .time_series_plots import TimelinePlotter
from .trajectory_plots import TrajectoryPlotter

configure_matplotlib_defaults()

__all__ = [
    'ChartColors',
    'PlotStyleConfig',
    'SceneColors',
    'configure_matplotlib_defaults',
    'TimelinePlotter',
    'TrajectoryPlotter',
]
