"""
Unit tests for the mass-mismatch plant and the Euler pose integrator.
"""

import numpy as np
import pytest

from unicycle_digital_twin.core.dynamics.unicycle_dynamics import (
    DynamicsParameters,
    RobotPose,
    UnicycleDynamics,
    apply_dynamics,
    integrate_pose,
)


DT = 1.0 / 60.0


class TestApplyDynamics:
    """Efficiency scaling θ_m / m."""

    def test_matched_mass_is_identity(self):
        assert apply_dynamics(0.7, -1.3, 1.0, 1.0) == (0.7, -1.3)

    def test_underestimated_mass_under_actuates(self):
        v, w = apply_dynamics(1.0, 2.0, 1.0, 3.5)
        assert v == pytest.approx(1.0 / 3.5)
        assert w == pytest.approx(2.0 / 3.5)

    def test_overestimated_mass_over_actuates(self):
        v, w = apply_dynamics(0.5, 0.5, 2.0, 1.0)
        assert v == pytest.approx(1.0)
        assert w == pytest.approx(1.0)

    def test_skid_factor(self):
        v, w = apply_dynamics(1.0, 1.0, 1.0, 1.0, skid_factor=0.8)
        assert (v, w) == pytest.approx((0.8, 0.8))

    @pytest.mark.parametrize("mass", [0.0, -1.0])
    def test_non_positive_mass_is_fatal(self, mass):
        with pytest.raises(ValueError):
            apply_dynamics(1.0, 1.0, 1.0, mass)


class TestIntegratePose:
    """Forward Euler on unicycle kinematics."""

    def test_straight_along_x(self):
        pose = integrate_pose(RobotPose(0.2, 0.0, 0.0), 1.0, 0.0, DT)
        assert pose == RobotPose(0.2 + DT, 0.0, 0.0)

    def test_heading_ninety_degrees(self):
        pose = integrate_pose(RobotPose(0.0, 0.0, np.pi / 2), 0.6, 0.0, 0.5)
        assert pose.x == pytest.approx(0.0, abs=1e-12)
        assert pose.y == pytest.approx(0.3)

    def test_uses_heading_before_rotation(self):
        pose = integrate_pose(RobotPose(0.0, 0.0, 0.0), 1.0, 10.0, 0.1)
        assert pose.x == pytest.approx(0.1)
        assert pose.y == 0.0
        assert pose.theta == pytest.approx(1.0)

    def test_heading_not_wrapped(self):
        pose = RobotPose(0.0, 0.0, 3.1)
        for _ in range(10):
            pose = integrate_pose(pose, 0.0, 1.0, 0.1)
        assert pose.theta == pytest.approx(4.1)

    def test_returns_new_pose(self):
        start = RobotPose(1.0, 2.0, 0.5)
        end = integrate_pose(start, 0.3, 0.1, DT)
        assert start == RobotPose(1.0, 2.0, 0.5)
        assert end is not start

    def test_as_array(self):
        assert np.allclose(RobotPose(1.0, 2.0, 3.0).as_array(), [1.0, 2.0, 3.0])


class TestUnicycleDynamics:
    """Configured plant."""

    def test_default_parameters(self):
        plant = UnicycleDynamics()
        assert plant.true_mass(False) == 1.0
        assert plant.true_mass(True) == 3.5
        assert plant.skid_factor == 1.0

    def test_efficiency(self):
        plant = UnicycleDynamics({'skid_factor': 0.5})
        assert plant.efficiency(1.0, 2.0) == pytest.approx(0.25)
        assert plant.apply(1.0, 1.0, 1.0, 2.0) == pytest.approx((0.25, 0.25))

    def test_integrate_delegates(self):
        plant = UnicycleDynamics()
        pose = RobotPose(0.0, 0.0, 0.0)
        assert plant.integrate(pose, 1.0, 0.5, DT) == integrate_pose(pose, 1.0, 0.5, DT)

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            UnicycleDynamics({'base_mass': 0.0})
        with pytest.raises(ValueError):
            UnicycleDynamics({'skid_factor': 0.0})
        with pytest.raises(ValueError):
            DynamicsParameters(base_mass=1.0, load_mass=-0.5)

    def test_efficiency_rejects_zero_mass(self):
        with pytest.raises(ValueError):
            UnicycleDynamics().efficiency(1.0, 0.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
