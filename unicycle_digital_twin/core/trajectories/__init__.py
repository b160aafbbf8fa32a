"""
Reference trajectory package for the unicycle tracking digital twin.

This package provides the time-parameterised reference curves followed by
the kinematic controller:
- Circle of radius 0.8 m
- Lemniscate of Bernoulli (figure-eight) of scale 1.0 m

All generators are pure functions of simulated time.
"""

from .reference_trajectory import (
    TrajectoryType,
    ReferencePoint,
    ReferenceTrajectory,
    reference_point,
    lemniscate_residual,
    CIRCLE_RADIUS,
    LEMNISCATE_SCALE,
    ANGULAR_RATE,
)

__all__ = [
    'TrajectoryType',
    'ReferencePoint',
    'ReferenceTrajectory',
    'reference_point',
    'lemniscate_residual',
    'CIRCLE_RADIUS',
    'LEMNISCATE_SCALE',
    'ANGULAR_RATE',
]
