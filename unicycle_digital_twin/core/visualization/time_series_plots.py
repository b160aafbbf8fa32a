"""
Time-Series Plots for Adaptive Tracking Telemetry

Headless counterparts of the two live telemetry charts:

- Distance error [m] over time
- Parameter adaptation (θ mass, θ inertia) over time

Both charts show only the most recent samples (100 by default) of the
telemetry history, as the live widgets do.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Dict, List, Tuple, Union
import pandas as pd

from unicycle_digital_twin.core.visualization.style_config import ChartColors, PlotStyleConfig


class TimelinePlotter:
    """
    Time-series plotter for tracking error and parameter estimates.

    Usage:
    ------
    >>> plotter = TimelinePlotter()
    >>> fig, axes = plotter.plot_dashboard(history.as_log_data())
    >>> fig.savefig('charts.png')
    """

    def __init__(self, style: Optional[PlotStyleConfig] = None):
        self.style = style or PlotStyleConfig()

    def _to_dataframe(
        self,
        telemetry: Union[Dict[str, List[float]], pd.DataFrame],
        window: Optional[int]
    ) -> pd.DataFrame:
        df = telemetry if isinstance(telemetry, pd.DataFrame) else pd.DataFrame(telemetry)
        if 'time' not in df.columns:
            raise ValueError("Telemetry must contain 'time' key")
        window = self.style.chart_window if window is None else window
        return df.tail(window) if window > 0 else df

    def plot_error(
        self,
        telemetry: Union[Dict[str, List[float]], pd.DataFrame],
        window: Optional[int] = None,
        ax: Optional[plt.Axes] = None
    ) -> Tuple[plt.Figure, plt.Axes]:
        """
        Plot the distance error chart.

        Parameters
        ----------
        telemetry : dict or DataFrame
            Must contain 'time' and 'position_error'
        window : int, optional
            Number of trailing samples (0 = all)
        ax : plt.Axes, optional
            Existing axes
        """
        df = self._to_dataframe(telemetry, window)
        if ax is None:
            fig, ax = plt.subplots(figsize=self.style.get_figure_size('charts'))
        else:
            fig = ax.figure

        ax.plot(df['time'].values, df['position_error'].values,
                color=ChartColors.ERROR, linewidth=self.style.linewidth_primary)
        ax.set_title('DISTANCE ERROR [m]', loc='left')
        ax.set_ylim(bottom=0.0)
        ax.grid(True, linestyle='--', color=ChartColors.GRID, alpha=self.style.grid_alpha)
        ax.set_xlabel('Time (s)')
        return fig, ax

    def plot_parameters(
        self,
        telemetry: Union[Dict[str, List[float]], pd.DataFrame],
        window: Optional[int] = None,
        true_mass: Optional[float] = None,
        ax: Optional[plt.Axes] = None
    ) -> Tuple[plt.Figure, plt.Axes]:
        """
        Plot the parameter adaptation chart.

        Parameters
        ----------
        telemetry : dict or DataFrame
            Must contain 'time', 'theta_m' and 'theta_i'
        window : int, optional
            Number of trailing samples (0 = all)
        true_mass : float, optional
            Draw the true mass as a dashed reference line
        ax : plt.Axes, optional
            Existing axes
        """
        df = self._to_dataframe(telemetry, window)
        if ax is None:
            fig, ax = plt.subplots(figsize=self.style.get_figure_size('charts'))
        else:
            fig = ax.figure

        t = df['time'].values
        ax.plot(t, df['theta_m'].values, color=ChartColors.THETA_MASS,
                linewidth=self.style.linewidth_primary, label='θ mass')
        ax.plot(t, df['theta_i'].values, color=ChartColors.THETA_INERTIA,
                linewidth=self.style.linewidth_primary, label='θ inertia')
        if true_mass is not None and len(t) > 0:
            ax.hlines(true_mass, t[0], t[-1], colors='k', linestyles='--',
                      linewidth=self.style.linewidth_secondary, label='true mass')

        ax.set_title('PARAMETER ADAPTATION (θ)', loc='left')
        ax.grid(True, linestyle='--', color=ChartColors.GRID, alpha=self.style.grid_alpha)
        ax.set_xlabel('Time (s)')
        ax.legend(loc='best')
        return fig, ax

    def plot_dashboard(
        self,
        telemetry: Union[Dict[str, List[float]], pd.DataFrame],
        window: Optional[int] = None,
        true_mass: Optional[float] = None
    ) -> Tuple[plt.Figure, np.ndarray]:
        """Both charts stacked with a shared time axis."""
        fig, axes = plt.subplots(2, 1, figsize=self.style.get_figure_size('charts'), sharex=True)
        self.plot_error(telemetry, window=window, ax=axes[0])
        self.plot_parameters(telemetry, window=window, true_mass=true_mass, ax=axes[1])
        axes[0].set_xlabel('')
        fig.tight_layout()
        return fig, axes
