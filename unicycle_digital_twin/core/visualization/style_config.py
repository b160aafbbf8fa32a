"""
Matplotlib Style Configuration for the Tracking Twin Figures.

Centralises colours and sizes shared by the scene plot (trails, robot
glyph, grid) and the telemetry charts (distance error, parameter
adaptation), so both headless renderers share one look.

Usage
-----
```python
from unicycle_digital_twin.core.visualization.style_config import (
    SceneColors,
    PlotStyleConfig,
)

color = SceneColors.TRAIL_REFERENCE  # '#93c5fd'
```
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple
import matplotlib


class SceneColors:
    """Colour scheme of the simulation scene."""
    PRIMARY: str = '#2563eb'          # Reference point
    SECONDARY: str = '#dc2626'        # Error trace
    ROBOT: str = '#1e293b'            # Robot body
    WHEEL: str = '#334155'            # Wheels
    GRID: str = '#e2e8f0'             # Background grid
    TRAIL_REFERENCE: str = '#93c5fd'  # Reference path (dashed)
    TRAIL_ACTUAL: str = '#fca5a5'     # Driven path


class ChartColors:
    """Colour scheme of the telemetry charts."""
    ERROR: str = '#dc2626'
    THETA_MASS: str = '#2563eb'
    THETA_INERTIA: str = '#10b981'
    GRID: str = '#f1f5f9'


@dataclass
class PlotStyleConfig:
    """
    Shared plotting parameters.

    Attributes
    ----------
    figure_sizes : Dict[str, Tuple[float, float]]
        Named figure sizes for different layouts
    scale : float
        Scene scale in pixels per metre of the live canvas; used here to
        size the robot glyph in metres
    robot_radius_px : float
        Robot glyph radius in canvas pixels
    grid_spacing : float
        Scene grid spacing [m]
    chart_window : int
        Number of most recent samples shown in the charts
    """
    figure_sizes: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        'scene': (6, 4),
        'charts': (8, 6),
    })

    dpi: int = 150

    linewidth_primary: float = 2.0
    linewidth_secondary: float = 1.0
    grid_alpha: float = 0.8

    scale: float = 100.0
    robot_radius_px: float = 15.0
    grid_spacing: float = 0.5
    scene_extent: Tuple[float, float] = (3.0, 2.0)   # Half-width, half-height [m]

    chart_window: int = 100

    @property
    def robot_radius(self) -> float:
        return self.robot_radius_px / self.scale

    def get_figure_size(self, layout: str) -> Tuple[float, float]:
        """Get figure size for a named layout."""
        return self.figure_sizes.get(layout, (8, 6))


def configure_matplotlib_defaults() -> None:
    """Apply shared matplotlib defaults."""
    matplotlib.rcParams['font.size'] = 10
    matplotlib.rcParams['axes.titlesize'] = 11
    matplotlib.rcParams['xtick.labelsize'] = 9
    matplotlib.rcParams['ytick.labelsize'] = 9
    matplotlib.rcParams['legend.fontsize'] = 9
    matplotlib.rcParams['axes.axisbelow'] = True
