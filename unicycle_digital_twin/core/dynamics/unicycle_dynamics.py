import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RobotPose:
    """Planar pose: position [m] and heading [rad] in the world frame."""
    x: float
    y: float
    theta: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.theta], dtype=float)


@dataclass(frozen=True)
class DynamicsParameters:
    """Ground-truth mass composition of the robot [kg]."""
    base_mass: float = 1.0
    load_mass: float = 2.5

    def __post_init__(self):
        if self.base_mass <= 0.0:
            raise ValueError(f"base_mass must be positive, got {self.base_mass}")
        if self.load_mass < 0.0:
            raise ValueError(f"load_mass must be non-negative, got {self.load_mass}")

    def true_mass(self, has_load: bool) -> float:
        return self.base_mass + (self.load_mass if has_load else 0.0)


def apply_dynamics(
    cmd_v: float,
    cmd_w: float,
    theta_m: float,
    true_mass: float,
    skid_factor: float = 1.0,
) -> Tuple[float, float]:
    """
    Velocities actually achieved by the plant.

    The controller sizes its effort for a robot of mass theta_m; the robot
    responds as a body of mass true_mass, so the achieved velocity is the
    command scaled by theta_m / true_mass. An underestimated mass gives
    efficiency < 1 and the robot lags the reference.
    """
    if not true_mass > 0.0:
        raise ValueError(f"true_mass must be positive, got {true_mass}")
    efficiency = theta_m / true_mass * skid_factor
    return cmd_v * efficiency, cmd_w * efficiency


def integrate_pose(pose: RobotPose, actual_v: float, actual_w: float, dt: float) -> RobotPose:
    """Forward-Euler step of the unicycle kinematics. Heading is not wrapped."""
    return RobotPose(
        x=float(pose.x + actual_v * np.cos(pose.theta) * dt),
        y=float(pose.y + actual_v * np.sin(pose.theta) * dt),
        theta=float(pose.theta + actual_w * dt),
    )


class UnicycleDynamics:
    """Simplified mass-mismatch unicycle plant.

    Implements the response model used by the simulation runner:

        v = v_cmd · (θ_m / m) · s
        ω = ω_cmd · (θ_m / m) · s

    followed by first-order Euler integration of

        ẋ = v cos θ,  ẏ = v sin θ,  θ̇ = ω

    where m is the true mass (base + optional load), θ_m the controller's
    mass estimate and s a traction (skid) factor, 1.0 by default. This is a
    pedagogical plant, not a rigid-body model.
    """

    def __init__(self, config: dict = None) -> None:
        config = config or {}
        self.params = DynamicsParameters(
            base_mass=float(config.get('base_mass', 1.0)),
            load_mass=float(config.get('load_mass', 2.5)),
        )
        self.skid_factor = float(config.get('skid_factor', 1.0))
        if self.skid_factor <= 0.0:
            raise ValueError(f"skid_factor must be positive, got {self.skid_factor}")

    def true_mass(self, has_load: bool) -> float:
        return self.params.true_mass(has_load)

    def efficiency(self, theta_m: float, true_mass: float) -> float:
        if not true_mass > 0.0:
            raise ValueError(f"true_mass must be positive, got {true_mass}")
        return theta_m / true_mass * self.skid_factor

    def apply(self, cmd_v: float, cmd_w: float, theta_m: float, true_mass: float) -> Tuple[float, float]:
        return apply_dynamics(cmd_v, cmd_w, theta_m, true_mass, self.skid_factor)

    def integrate(self, pose: RobotPose, actual_v: float, actual_w: float, dt: float) -> RobotPose:
        return integrate_pose(pose, actual_v, actual_w, dt)
