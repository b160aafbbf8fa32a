"""
Performance Analyzer for the Unicycle Tracking Digital Twin

This module computes tracking and adaptation metrics from downsampled
simulation telemetry, to quantify what the demo shows visually: a load
degrades tracking, and the sigma-modification estimator recovers it.

Key Metrics:
-----------
1. RMS / peak / mean position error [m]
2. Steady-state error (last 20% of the window) [m]
3. Error ripple: residual after removing a moving-average trend [m]
4. Parameter convergence: time for θ_m to enter a band around its
   final value, and final bias against the true mass
5. Pass/fail against configurable requirements
"""

import numpy as np
import pandas as pd
from scipy.ndimage import uniform_filter1d
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict
import warnings


@dataclass
class TrackingMetrics:
    """
    Container for computed tracking metrics.

    Distances in metres, times in seconds.
    """
    # Position error
    rms_position_error: float = 0.0
    peak_position_error: float = 0.0
    mean_position_error: float = 0.0
    std_position_error: float = 0.0
    steady_state_error: float = 0.0
    ripple_rms: float = 0.0

    # Parameter adaptation
    theta_m_initial: float = 0.0
    theta_m_final: float = 0.0
    theta_m_max: float = 0.0
    theta_m_bias: float = 0.0         # true_mass − θ_m at the end
    convergence_time: float = 0.0     # NaN if never within the band

    # Time-domain stats
    total_duration: float = 0.0
    sample_count: int = 0

    # Pass/fail flags
    meets_rms_requirement: bool = False
    meets_steady_state_requirement: bool = False
    estimate_bounded: bool = False

    metadata: Dict[str, Any] = field(default_factory=dict)


class PerformanceAnalyzer:
    """
    Tracking performance analysis from telemetry.

    Usage:
    ------
    >>> analyzer = PerformanceAnalyzer(rms_requirement=0.3, steady_state_requirement=0.2)
    >>> metrics = analyzer.analyze(results['log_data'], true_mass=3.5)
    >>> print(analyzer.generate_report(metrics))
    """

    def __init__(
        self,
        rms_requirement: float = 0.3,            # m
        steady_state_requirement: float = 0.2,   # m
        convergence_band: float = 0.05,          # fraction of final θ_m
        theta_bound: float = 100.0,              # |θ_m| bound considered sane
        ripple_window: float = 2.0,              # s, moving-average span
    ):
        """
        Parameters
        ----------
        rms_requirement : float
            Maximum allowed RMS position error [m]
        steady_state_requirement : float
            Maximum allowed steady-state error [m]
        convergence_band : float
            Relative band around the final estimate defining convergence
        theta_bound : float
            Magnitude above which the estimate is flagged as unbounded
        ripple_window : float
            Moving-average span used to separate trend from ripple [s]
        """
        self.rms_requirement = rms_requirement
        self.steady_state_requirement = steady_state_requirement
        self.convergence_band = convergence_band
        self.theta_bound = theta_bound
        self.ripple_window = ripple_window

    def analyze(
        self,
        telemetry: Dict[str, List[float]],
        true_mass: Optional[float] = None,
        start_time: float = 0.0,
        end_time: Optional[float] = None
    ) -> TrackingMetrics:
        """
        Compute tracking metrics from telemetry data.

        Parameters
        ----------
        telemetry : Dict[str, List[float]]
            Required keys: 'time', 'position_error'.
            Optional: 'theta_m', 'true_mass'.
        true_mass : float, optional
            True robot mass; falls back to the last 'true_mass' entry
        start_time : float
            Start of analysis window [s]
        end_time : Optional[float]
            End of analysis window [s] (None = use all data)

        Returns
        -------
        TrackingMetrics
        """
        metrics = TrackingMetrics()

        if 'time' not in telemetry:
            raise ValueError("Telemetry must contain 'time' key")

        time = np.asarray(telemetry['time'], dtype=float)
        if len(time) == 0:
            warnings.warn("Empty telemetry, returning zero metrics")
            return metrics

        if end_time is None:
            end_time = time[-1]

        mask = (time >= start_time) & (time <= end_time)
        time_window = time[mask]

        if len(time_window) == 0:
            warnings.warn("Empty time window, returning zero metrics")
            return metrics

        metrics.total_duration = float(time_window[-1] - time_window[0])
        metrics.sample_count = int(len(time_window))

        metrics = self._compute_error_metrics(telemetry, mask, time_window, metrics)

        if true_mass is None and 'true_mass' in telemetry and len(telemetry['true_mass']) > 0:
            true_mass = float(np.asarray(telemetry['true_mass'])[mask][-1])
        metrics = self._compute_adaptation_metrics(telemetry, mask, time_window, true_mass, metrics)

        metrics = self._assess_requirements(metrics)
        return metrics

    def _compute_error_metrics(
        self,
        telemetry: Dict,
        mask: np.ndarray,
        time_window: np.ndarray,
        metrics: TrackingMetrics
    ) -> TrackingMetrics:
        """Position error statistics."""
        if 'position_error' not in telemetry:
            warnings.warn("No position error data found")
            return metrics

        err = np.asarray(telemetry['position_error'], dtype=float)[mask]

        metrics.rms_position_error = float(np.sqrt(np.mean(err**2)))
        metrics.peak_position_error = float(np.max(err))
        metrics.mean_position_error = float(np.mean(err))
        metrics.std_position_error = float(np.std(err))

        # Steady state: last 20% of the window
        steady_idx = int(0.8 * len(err))
        metrics.steady_state_error = float(np.mean(err[steady_idx:]))

        if len(err) > 10:
            dt = float(np.median(np.diff(time_window)))
            window_size = int(self.ripple_window / dt) if dt > 0 else 3
            window_size = max(3, min(window_size, len(err) // 2))
            trend = uniform_filter1d(err, size=window_size, mode='nearest')
            metrics.ripple_rms = float(np.sqrt(np.mean((err - trend)**2)))

        return metrics

    def _compute_adaptation_metrics(
        self,
        telemetry: Dict,
        mask: np.ndarray,
        time_window: np.ndarray,
        true_mass: Optional[float],
        metrics: TrackingMetrics
    ) -> TrackingMetrics:
        """Mass estimate convergence and bias."""
        if 'theta_m' not in telemetry:
            return metrics

        theta = np.asarray(telemetry['theta_m'], dtype=float)[mask]
        metrics.theta_m_initial = float(theta[0])
        metrics.theta_m_final = float(theta[-1])
        metrics.theta_m_max = float(np.max(np.abs(theta)))

        if true_mass is not None:
            metrics.theta_m_bias = float(true_mass - theta[-1])
            metrics.metadata['true_mass'] = float(true_mass)

        # First time after which θ_m stays inside the band around its final value
        band = self.convergence_band * max(abs(theta[-1]), 1e-12)
        outside = np.abs(theta - theta[-1]) > band
        if not np.any(outside):
            metrics.convergence_time = 0.0
        else:
            last_outside = int(np.where(outside)[0][-1])
            if last_outside + 1 < len(theta):
                metrics.convergence_time = float(time_window[last_outside + 1] - time_window[0])
            else:
                metrics.convergence_time = float('nan')

        return metrics

    def _assess_requirements(self, metrics: TrackingMetrics) -> TrackingMetrics:
        """Evaluate pass/fail criteria against requirements."""
        metrics.meets_rms_requirement = metrics.rms_position_error <= self.rms_requirement
        metrics.meets_steady_state_requirement = metrics.steady_state_error <= self.steady_state_requirement
        metrics.estimate_bounded = bool(
            np.isfinite(metrics.theta_m_max) and metrics.theta_m_max <= self.theta_bound
        )
        return metrics

    def generate_report(self, metrics: TrackingMetrics) -> str:
        """
        Generate human-readable performance report.

        Parameters
        ----------
        metrics : TrackingMetrics
            Computed metrics

        Returns
        -------
        str
            Formatted report text
        """
        def verdict(ok: bool) -> str:
            return '✓ PASS' if ok else '✗ FAIL'

        report = []
        report.append("=" * 70)
        report.append("TRACKING PERFORMANCE REPORT")
        report.append("=" * 70)
        report.append("")

        report.append("POSITION ERROR:")
        report.append(f"  RMS Error:             {metrics.rms_position_error:8.4f} m  "
                      f"[Req: {self.rms_requirement:.3f}] {verdict(metrics.meets_rms_requirement)}")
        report.append(f"  Steady-State Error:    {metrics.steady_state_error:8.4f} m  "
                      f"[Req: {self.steady_state_requirement:.3f}] "
                      f"{verdict(metrics.meets_steady_state_requirement)}")
        report.append(f"  Peak Error:            {metrics.peak_position_error:8.4f} m")
        report.append(f"  Mean Error:            {metrics.mean_position_error:8.4f} m")
        report.append(f"  Std Dev:               {metrics.std_position_error:8.4f} m")
        report.append(f"  Ripple RMS:            {metrics.ripple_rms:8.4f} m")
        report.append("")

        report.append("PARAMETER ADAPTATION:")
        report.append(f"  θ_m initial:           {metrics.theta_m_initial:8.4f}")
        report.append(f"  θ_m final:             {metrics.theta_m_final:8.4f}")
        if 'true_mass' in metrics.metadata:
            report.append(f"  True mass:             {metrics.metadata['true_mass']:8.4f}")
            report.append(f"  Final bias:            {metrics.theta_m_bias:8.4f}")
        report.append(f"  Convergence Time:      {metrics.convergence_time:8.2f} s")
        report.append(f"  Estimate Bounded:      {verdict(metrics.estimate_bounded)}")
        report.append("")

        report.append(f"  Duration:              {metrics.total_duration:8.2f} s")
        report.append(f"  Samples:               {metrics.sample_count:8d}")
        report.append("=" * 70)

        return "\n".join(report)

    def to_dataframe(self, metrics: TrackingMetrics) -> pd.DataFrame:
        """
        Convert metrics to a single-row pandas DataFrame for batch analysis.
        """
        data = asdict(metrics)
        data.pop('metadata')
        return pd.DataFrame([data])
