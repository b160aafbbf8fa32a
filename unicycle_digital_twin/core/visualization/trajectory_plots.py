"""
Scene Plot for the Unicycle Tracking Twin

Draws one simulation snapshot the way the live canvas does: background
grid, dashed reference trail, driven trail, robot body with heading mark
and wheels, and the current reference point.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Rectangle
from matplotlib.transforms import Affine2D
from typing import Optional, Tuple

from unicycle_digital_twin.core.simulation.simulation_runner import SimulationSnapshot
from unicycle_digital_twin.core.visualization.style_config import PlotStyleConfig, SceneColors


class TrajectoryPlotter:
    """
    Scene renderer for simulation snapshots.

    Usage:
    ------
    >>> fig, ax = TrajectoryPlotter().plot_snapshot(runner.snapshot())
    >>> fig.savefig('scene.png')
    """

    def __init__(self, style: Optional[PlotStyleConfig] = None):
        self.style = style or PlotStyleConfig()

    def plot_snapshot(
        self,
        snapshot: SimulationSnapshot,
        ax: Optional[plt.Axes] = None
    ) -> Tuple[plt.Figure, plt.Axes]:
        if ax is None:
            fig, ax = plt.subplots(figsize=self.style.get_figure_size('scene'))
        else:
            fig = ax.figure

        half_w, half_h = self.style.scene_extent
        self._draw_grid(ax, half_w, half_h)

        ref_trail = np.array(snapshot.reference_trail).reshape(-1, 2)
        act_trail = np.array(snapshot.actual_trail).reshape(-1, 2)
        ax.plot(ref_trail[:, 0], ref_trail[:, 1], linestyle=(0, (5, 5)),
                color=SceneColors.TRAIL_REFERENCE, linewidth=self.style.linewidth_primary,
                label='reference')
        ax.plot(act_trail[:, 0], act_trail[:, 1],
                color=SceneColors.TRAIL_ACTUAL, linewidth=self.style.linewidth_primary,
                label='actual')

        self._draw_robot(ax, snapshot.pose.x, snapshot.pose.y, snapshot.pose.theta)

        ax.add_patch(Circle(snapshot.reference.position, 5.0 / self.style.scale,
                            color=SceneColors.PRIMARY, zorder=5))

        ax.set_xlim(-half_w, half_w)
        ax.set_ylim(-half_h, half_h)
        ax.set_aspect('equal')
        ax.set_title(
            f"t={snapshot.time:.1f}s  x={snapshot.pose.x:.2f}m  "
            f"y={snapshot.pose.y:.2f}m  θ={snapshot.pose.theta:.2f}rad",
            fontsize=9, loc='left'
        )
        ax.legend(loc='upper right')
        return fig, ax

    def _draw_grid(self, ax: plt.Axes, half_w: float, half_h: float) -> None:
        spacing = self.style.grid_spacing
        for gx in np.arange(-np.floor(half_w / spacing), np.floor(half_w / spacing) + 1) * spacing:
            ax.axvline(gx, color=SceneColors.GRID, linewidth=1.0, zorder=0)
        for gy in np.arange(-np.floor(half_h / spacing), np.floor(half_h / spacing) + 1) * spacing:
            ax.axhline(gy, color=SceneColors.GRID, linewidth=1.0, zorder=0)

    def _draw_robot(self, ax: plt.Axes, x: float, y: float, theta: float) -> None:
        r = self.style.robot_radius
        px = 1.0 / self.style.scale
        pose_tf = Affine2D().rotate(theta).translate(x, y) + ax.transData

        ax.add_patch(Circle((0.0, 0.0), r, color=SceneColors.ROBOT, transform=pose_tf, zorder=4))
        # Wheels: 10 x 4 px blocks either side of the body
        ax.add_patch(Rectangle((-5 * px, r), 10 * px, 4 * px, color=SceneColors.WHEEL,
                               transform=pose_tf, zorder=4))
        ax.add_patch(Rectangle((-5 * px, -r - 4 * px), 10 * px, 4 * px, color=SceneColors.WHEEL,
                               transform=pose_tf, zorder=4))
        ax.plot([x, x + r * np.cos(theta)], [y, y + r * np.sin(theta)],
                color='white', linewidth=2.0, zorder=5)
