"""
Adaptive Mass Estimator with Sigma-Modification

This module implements the on-line parameter update that compensates for
an unknown payload. The controller believes the robot has mass θ_m; the
estimator drives θ_m toward the true mass M while the tracking error is
significant.

Update Law (sigma-modification):
-------------------------------
    θ̇_m = γ (M − θ_m) − σ θ_m        when ‖e‖ > δ
    θ̇_m = 0                          otherwise (dead-zone)

discretised with forward Euler at the simulation step dt.

- γ = 0.5  adaptation gain
- σ = 0.01 leakage
- δ = 0.05 m dead-zone on the position error

The leakage term makes the estimator a strictly stable first-order system:
its fixed point is

    θ*_m = γ M / (γ + σ)

so θ_m stays bounded under persistent excitation at the cost of a steady
bias σ M / (γ + σ) below the true mass.

When adaptation is disabled the estimate is pinned to the nominal value
(1.0) every step, which is the wrong belief whenever a load is present.

A second channel θ_i (inertia) is carried in the estimate and reported in
telemetry but has no update law.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ParameterEstimate:
    """Controller belief about the mass (θ_m) and inertia (θ_i) factors."""
    theta_m: float = 1.0
    theta_i: float = 1.0


def sigma_modification_step(
    theta_m: float,
    dist_error: float,
    true_mass: float,
    adaptive: bool,
    dt: float,
    gamma: float = 0.5,
    sigma: float = 0.01,
    dead_zone: float = 0.05,
    nominal: float = 1.0,
) -> float:
    """
    Advance the mass estimate by one step.

    Parameters
    ----------
    theta_m : float
        Current mass estimate
    dist_error : float
        Euclidean position error this step [m]
    true_mass : float
        True robot mass [kg]
    adaptive : bool
        Adaptation enabled flag
    dt : float
        Time step [s]
    gamma, sigma : float
        Adaptation gain and leakage
    dead_zone : float
        Error threshold below which the estimate is frozen [m]
    nominal : float
        Static belief used when adaptation is disabled

    Returns
    -------
    float
        Updated estimate
    """
    if not adaptive:
        return nominal
    if dist_error <= dead_zone:
        return theta_m
    return theta_m + dt * (gamma * (true_mass - theta_m) - sigma * theta_m)


class SigmaModificationEstimator:
    """
    Gradient mass estimator with sigma-modification leakage.

    Holds the controller's `ParameterEstimate` and advances it once per
    simulation tick.

    Usage:
    ------
    >>> estimator = SigmaModificationEstimator({'gamma': 0.5, 'sigma': 0.01})
    >>> theta_m = estimator.update(dist_error=0.3, true_mass=3.5, adaptive=True, dt=1/60)
    >>> print(f"θ_m = {theta_m:.4f}  (fixed point {estimator.steady_state_estimate(3.5):.4f})")
    """

    def __init__(self, config: dict = None):
        """
        Initialize the estimator.

        Parameters
        ----------
        config : dict
            Configuration containing:
            - 'gamma': Adaptation gain (default 0.5)
            - 'sigma': Leakage coefficient (default 0.01)
            - 'dead_zone': Position error dead-zone [m] (default 0.05)
            - 'nominal_mass': Static estimate when disabled (default 1.0)
            - 'initial_theta_m', 'initial_theta_i': Reset values (default 1.0)
        """
        config = config or {}
        self.gamma: float = float(config.get('gamma', 0.5))
        self.sigma: float = float(config.get('sigma', 0.01))
        self.dead_zone: float = float(config.get('dead_zone', 0.05))
        self.nominal_mass: float = float(config.get('nominal_mass', 1.0))
        self.initial_estimate = ParameterEstimate(
            theta_m=float(config.get('initial_theta_m', 1.0)),
            theta_i=float(config.get('initial_theta_i', 1.0)),
        )

        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.sigma < 0.0:
            raise ValueError(f"sigma must be non-negative, got {self.sigma}")

        self.estimate: ParameterEstimate = self.initial_estimate
        self.iteration: int = 0
        self.adapting: bool = False

    @property
    def theta_m(self) -> float:
        return self.estimate.theta_m

    @property
    def theta_i(self) -> float:
        return self.estimate.theta_i

    def update(self, dist_error: float, true_mass: float, adaptive: bool, dt: float) -> float:
        """
        Run one estimator step and return the new θ_m.

        Raises
        ------
        FloatingPointError
            If the update produced a non-finite estimate
        """
        theta_m = sigma_modification_step(
            self.estimate.theta_m,
            dist_error,
            true_mass,
            adaptive,
            dt,
            gamma=self.gamma,
            sigma=self.sigma,
            dead_zone=self.dead_zone,
            nominal=self.nominal_mass,
        )
        if not np.isfinite(theta_m):
            raise FloatingPointError(f"Mass estimate diverged: {theta_m}")

        self.adapting = adaptive and dist_error > self.dead_zone
        self.estimate = ParameterEstimate(theta_m=float(theta_m), theta_i=self.estimate.theta_i)
        self.iteration += 1
        return self.estimate.theta_m

    def steady_state_estimate(self, true_mass: float) -> float:
        """Fixed point γM / (γ + σ) of the leaky update."""
        return self.gamma * true_mass / (self.gamma + self.sigma)

    def steady_state_bias(self, true_mass: float) -> float:
        """Residual underestimate σM / (γ + σ) at the fixed point."""
        return self.sigma * true_mass / (self.gamma + self.sigma)

    def reset(self) -> None:
        self.estimate = self.initial_estimate
        self.iteration = 0
        self.adapting = False

    def get_state(self) -> Dict:
        return {
            'theta_m': self.estimate.theta_m,
            'theta_i': self.estimate.theta_i,
            'gamma': self.gamma,
            'sigma': self.sigma,
            'dead_zone': self.dead_zone,
            'adapting': self.adapting,
            'iteration': self.iteration,
        }
