"""
Reference Trajectory Generator for the Unicycle Tracking Twin

This module provides the time-parameterised reference paths that the
kinematic controller is asked to follow. Two curves are supported:

- CIRCLE: constant-radius orbit about the world origin
- FIGURE_EIGHT: lemniscate of Bernoulli centred on the world origin

Both curves share the same phase rate ω, so the reference advances by
ω·t radians of phase after t seconds of simulated time.

Parametric Forms:
----------------
Circle (radius R):
    x(t) = R cos(ωt)
    y(t) = R sin(ωt)

Lemniscate (scale a):
    x(t) = a cos(ωt) / (1 + sin²(ωt))
    y(t) = a cos(ωt) sin(ωt) / (1 + sin²(ωt))

The lemniscate satisfies the implicit equation
    (x² + y²)² = a² (x² − y²)
which is exposed as `lemniscate_residual` for verification.

Every function in this module is pure: the output depends only on the
arguments, and any real t ≥ 0 can be evaluated without discontinuity.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# Default curve geometry
CIRCLE_RADIUS = 0.8            # [m]
LEMNISCATE_SCALE = 1.0         # [m]
ANGULAR_RATE = 0.5             # Phase rate ω [rad/s]


class TrajectoryType(Enum):
    """Reference curve selector."""
    CIRCLE = 'CIRCLE'
    FIGURE_EIGHT = 'FIGURE_EIGHT'


@dataclass(frozen=True)
class ReferencePoint:
    """
    Reference position and its time derivative.

    The derivative is only used for display (heading arrow of the target);
    the control loop uses the position alone.
    """
    x: float
    y: float
    dx: float = 0.0
    dy: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


def reference_point(
    t: float,
    kind: TrajectoryType,
    radius: float = CIRCLE_RADIUS,
    scale: float = LEMNISCATE_SCALE,
    angular_rate: float = ANGULAR_RATE,
) -> ReferencePoint:
    """
    Evaluate the reference curve at simulated time t.

    Parameters
    ----------
    t : float
        Simulated time [s]
    kind : TrajectoryType
        Curve to evaluate
    radius : float
        Circle radius R [m]
    scale : float
        Lemniscate scale a [m]
    angular_rate : float
        Phase rate ω [rad/s]

    Returns
    -------
    ReferencePoint
        Position [m] and velocity [m/s] on the curve
    """
    phase = angular_rate * t
    sin_p = np.sin(phase)
    cos_p = np.cos(phase)

    if kind == TrajectoryType.CIRCLE:
        return ReferencePoint(
            x=float(radius * cos_p),
            y=float(radius * sin_p),
            dx=float(-radius * angular_rate * sin_p),
            dy=float(radius * angular_rate * cos_p),
        )

    if kind == TrajectoryType.FIGURE_EIGHT:
        den = 1.0 + sin_p * sin_p
        # d/dphase of the lemniscate, chained with dphase/dt = ω
        dx_dphase = -scale * sin_p * (3.0 - sin_p * sin_p) / (den * den)
        dy_dphase = scale * (1.0 - 3.0 * sin_p * sin_p) / (den * den)
        return ReferencePoint(
            x=float(scale * cos_p / den),
            y=float(scale * cos_p * sin_p / den),
            dx=float(dx_dphase * angular_rate),
            dy=float(dy_dphase * angular_rate),
        )

    raise ValueError(f"Unknown trajectory type: {kind}")


def lemniscate_residual(x: float, y: float, scale: float = LEMNISCATE_SCALE) -> float:
    """Residual of (x² + y²)² − a²(x² − y²); zero on the curve."""
    r2 = x * x + y * y
    return float(r2 * r2 - scale * scale * (x * x - y * y))


class ReferenceTrajectory:
    """
    Configured reference path generator.

    Wraps `reference_point` with a fixed curve kind and geometry so the
    simulation runner can evaluate it with a single argument.

    Usage:
    ------
    >>> traj = ReferenceTrajectory(TrajectoryType.CIRCLE)
    >>> ref = traj.evaluate(2.0)
    >>> print(f"Target: ({ref.x:.3f}, {ref.y:.3f}) m")
    """

    def __init__(self, kind: TrajectoryType, config: Optional[dict] = None):
        """
        Parameters
        ----------
        kind : TrajectoryType
            Curve to follow
        config : dict, optional
            Geometry overrides:
            - 'radius': Circle radius [m] (default 0.8)
            - 'scale': Lemniscate scale [m] (default 1.0)
            - 'angular_rate': Phase rate [rad/s] (default 0.5)
        """
        config = config or {}
        self.kind = TrajectoryType(kind)
        self.radius: float = float(config.get('radius', CIRCLE_RADIUS))
        self.scale: float = float(config.get('scale', LEMNISCATE_SCALE))
        self.angular_rate: float = float(config.get('angular_rate', ANGULAR_RATE))

    def evaluate(self, t: float) -> ReferencePoint:
        return reference_point(
            t,
            self.kind,
            radius=self.radius,
            scale=self.scale,
            angular_rate=self.angular_rate,
        )

    def period(self) -> float:
        """Time for one full traversal of the curve [s]."""
        return 2.0 * np.pi / self.angular_rate

    def sample(self, n_points: int = 200) -> np.ndarray:
        """
        Sample one full period of the curve.

        Returns
        -------
        np.ndarray
            Array of shape (n_points, 2) with (x, y) rows
        """
        times = np.linspace(0.0, self.period(), n_points)
        return np.array([self.evaluate(t).position for t in times])
