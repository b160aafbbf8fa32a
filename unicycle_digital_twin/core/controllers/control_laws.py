"""
Kinematic Control Law for Unicycle Trajectory Tracking

This module implements the outer (kinematic) loop of the tracking
architecture. It converts the current robot pose and the instantaneous
reference point into commanded linear and angular velocities:

Control Architecture:
--------------------
          [Reference Trajectory]
                   |
                   v
    +---> [Kinematic Control Law] ---> (v_cmd, w_cmd)
    |              |
    |              v
    |   [Adaptive Dynamic Compensation]  (estimators/)
    |              |
    |              v
    |        [Unicycle Plant]            (dynamics/)
    |              |
    +--------------+
           pose (x, y, θ)

Control Law:
-----------
e_x = x_ref − x,   e_y = y_ref − y
d   = ‖(e_x, e_y)‖
θ_d = atan2(e_y, e_x)
e_θ = wrap(θ_d − θ) ∈ (−π, π]

v_cmd = min(k_v · d, v_max)
w_cmd = k_w · e_θ

The angular command is not saturated.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Tuple, Dict
from dataclasses import dataclass

from unicycle_digital_twin.core.dynamics.unicycle_dynamics import RobotPose
from unicycle_digital_twin.core.trajectories.reference_trajectory import ReferencePoint


TWO_PI = 2.0 * np.pi


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle into (−π, π] by repeated ±2π correction.

    Parameters
    ----------
    angle : float
        Raw angle [rad]

    Returns
    -------
    float
        Equivalent angle in (−π, π]
    """
    angle = float(angle)
    while angle > np.pi:
        angle -= TWO_PI
    while angle <= -np.pi:
        angle += TWO_PI
    return angle


@dataclass(frozen=True)
class VelocityCommand:
    """Linear [m/s] and angular [rad/s] velocity pair."""
    v: float
    w: float


class BaseController(ABC):
    """
    Abstract base class for all controllers.

    Defines the standard interface for control law implementation including
    initialization, state management, and step-wise computation.
    """

    def __init__(self, config: dict):
        """
        Initialize the controller.

        Parameters
        ----------
        config : dict
            Configuration dictionary with controller-specific parameters
        """
        self.config = config

    @abstractmethod
    def compute_control(
        self,
        reference: ReferencePoint,
        pose: RobotPose
    ) -> Tuple[VelocityCommand, Dict]:
        """
        Compute the velocity command for one time step.

        Parameters
        ----------
        reference : ReferencePoint
            Desired position on the reference curve
        pose : RobotPose
            Current robot pose

        Returns
        -------
        command : VelocityCommand
            Commanded velocities
        metadata : Dict
            Intermediate signals for logging
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Reset controller to initial state."""
        pass

    @abstractmethod
    def get_state(self) -> Dict:
        """
        Get current controller state for logging/debugging.

        Returns
        -------
        Dict
            Dictionary containing controller state variables
        """
        pass


class KinematicTrackingController(BaseController):
    """
    Point-tracking kinematic controller for a differential-drive robot.

    Steers the robot toward the reference point with a proportional law on
    distance (linear velocity) and on heading error (angular velocity).
    The controller is stateless: the command depends only on the current
    pose and the current reference point.

    Usage:
    ------
    >>> controller = KinematicTrackingController({'kv': 2.0, 'kw': 4.0})
    >>> cmd, meta = controller.compute_control(ref, pose)
    >>> print(f"v={cmd.v:.3f} m/s, w={cmd.w:.3f} rad/s, d={meta['dist_error']:.3f} m")
    """

    def __init__(self, config: dict = None):
        """
        Initialize kinematic controller.

        Parameters
        ----------
        config : dict
            Configuration containing:
            - 'kv': Distance gain [1/s] (default 2.0)
            - 'kw': Heading gain [1/s] (default 4.0)
            - 'v_max': Linear velocity limit [m/s] (default 1.0)
        """
        super().__init__(config or {})

        self.kv: float = float(self.config.get('kv', 2.0))
        self.kw: float = float(self.config.get('kw', 4.0))
        self.v_max: float = float(self.config.get('v_max', 1.0))

        if self.v_max <= 0.0:
            raise ValueError(f"v_max must be positive, got {self.v_max}")

        self.last_command = VelocityCommand(0.0, 0.0)
        self.saturation_active: bool = False

    def compute_control(
        self,
        reference: ReferencePoint,
        pose: RobotPose
    ) -> Tuple[VelocityCommand, Dict]:
        ex = reference.x - pose.x
        ey = reference.y - pose.y
        dist_error = float(np.hypot(ex, ey))

        target_theta = float(np.arctan2(ey, ex))
        angle_error = normalize_angle(target_theta - pose.theta)

        cmd_v = self.kv * dist_error
        cmd_w = self.kw * angle_error

        # Linear saturation only
        self.saturation_active = cmd_v > self.v_max
        if self.saturation_active:
            cmd_v = self.v_max

        command = VelocityCommand(v=cmd_v, w=cmd_w)
        self.last_command = command

        metadata = {
            'ex': ex,
            'ey': ey,
            'dist_error': dist_error,
            'target_theta': target_theta,
            'angle_error': angle_error,
            'saturated': self.saturation_active,
        }
        return command, metadata

    def reset(self) -> None:
        self.last_command = VelocityCommand(0.0, 0.0)
        self.saturation_active = False

    def get_state(self) -> Dict:
        return {
            'kv': self.kv,
            'kw': self.kw,
            'v_max': self.v_max,
            'last_v': self.last_command.v,
            'last_w': self.last_command.w,
            'saturated': self.saturation_active,
        }
