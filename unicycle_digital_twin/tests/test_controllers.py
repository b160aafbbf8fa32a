"""
Unit tests for the kinematic tracking control law.

This module contains pytest-based unit tests for angle normalization, the
proportional distance/heading law, linear velocity saturation and the
controller's state management.
"""

import numpy as np
import pytest

from unicycle_digital_twin.core.controllers.control_laws import (
    BaseController,
    KinematicTrackingController,
    VelocityCommand,
    normalize_angle,
)
from unicycle_digital_twin.core.dynamics.unicycle_dynamics import RobotPose
from unicycle_digital_twin.core.trajectories.reference_trajectory import ReferencePoint


class TestNormalizeAngle:
    """Heading error wrapping into (−π, π]."""

    @pytest.mark.parametrize("raw", np.linspace(-40.0, 40.0, 801))
    def test_range(self, raw):
        wrapped = normalize_angle(raw)
        assert -np.pi < wrapped <= np.pi

    @pytest.mark.parametrize("raw", [-25.0, -7.0, -3.5, -0.1, 0.0, 0.1, 3.5, 7.0, 25.0])
    def test_same_direction(self, raw):
        wrapped = normalize_angle(raw)
        assert np.cos(wrapped) == pytest.approx(np.cos(raw), abs=1e-9)
        assert np.sin(wrapped) == pytest.approx(np.sin(raw), abs=1e-9)

    def test_pi_boundary(self):
        assert normalize_angle(np.pi) == np.pi
        assert normalize_angle(-np.pi) == np.pi

    def test_identity_inside_range(self):
        for angle in (-3.0, -1.0, 0.0, 1.0, 3.0):
            assert normalize_angle(angle) == angle


class TestKinematicTrackingController:
    """Test suite for KinematicTrackingController."""

    @pytest.fixture
    def controller(self):
        """Standard controller configuration."""
        return KinematicTrackingController({'kv': 2.0, 'kw': 4.0, 'v_max': 1.0})

    def test_initialization(self, controller):
        assert controller.kv == 2.0
        assert controller.kw == 4.0
        assert controller.v_max == 1.0
        assert isinstance(controller, BaseController)

    def test_defaults_without_config(self):
        controller = KinematicTrackingController()
        assert (controller.kv, controller.kw, controller.v_max) == (2.0, 4.0, 1.0)

    def test_proportional_distance(self, controller):
        cmd, meta = controller.compute_control(ReferencePoint(0.3, 0.0), RobotPose(0.0, 0.0, 0.0))

        assert meta['dist_error'] == pytest.approx(0.3)
        assert cmd.v == pytest.approx(0.6)
        assert cmd.w == pytest.approx(0.0)
        assert not meta['saturated']

    def test_linear_saturation(self, controller):
        cmd, meta = controller.compute_control(ReferencePoint(2.0, 0.0), RobotPose(0.0, 0.0, 0.0))

        assert cmd.v == 1.0
        assert meta['saturated']
        assert controller.saturation_active

    def test_heading_error(self, controller):
        cmd, meta = controller.compute_control(ReferencePoint(0.0, 0.1), RobotPose(0.0, 0.0, 0.0))

        assert meta['target_theta'] == pytest.approx(np.pi / 2)
        assert meta['angle_error'] == pytest.approx(np.pi / 2)
        assert cmd.w == pytest.approx(4.0 * np.pi / 2)
        assert cmd.v == pytest.approx(0.2)

    def test_heading_error_is_wrapped(self, controller):
        # Robot has spun three full turns plus 0.1 rad
        pose = RobotPose(0.0, 0.0, 6.0 * np.pi + 0.1)
        cmd, meta = controller.compute_control(ReferencePoint(1.0, 0.0), pose)

        assert meta['angle_error'] == pytest.approx(-0.1)
        assert cmd.w == pytest.approx(-0.4)

    def test_angular_command_not_clamped(self, controller):
        # Reference just behind the robot: heading error close to π
        cmd, meta = controller.compute_control(ReferencePoint(-0.01, 0.001), RobotPose(0.0, 0.0, 0.0))

        assert abs(meta['angle_error']) > 3.0
        assert abs(cmd.w) > 12.0

    def test_global_error_components(self, controller):
        _, meta = controller.compute_control(ReferencePoint(0.8, 0.0), RobotPose(0.2, 0.0, 0.0))

        assert meta['ex'] == pytest.approx(0.6)
        assert meta['ey'] == pytest.approx(0.0)
        assert meta['dist_error'] == pytest.approx(0.6)

    def test_stateless_output(self, controller):
        ref = ReferencePoint(0.4, -0.2)
        pose = RobotPose(0.1, 0.1, 0.3)
        first, _ = controller.compute_control(ref, pose)
        controller.compute_control(ReferencePoint(5.0, 5.0), RobotPose(0.0, 0.0, 2.0))
        second, _ = controller.compute_control(ref, pose)

        assert first == second

    def test_reset_and_state(self, controller):
        cmd, _ = controller.compute_control(ReferencePoint(2.0, 0.0), RobotPose(0.0, 0.0, 0.0))
        state = controller.get_state()
        assert state['last_v'] == cmd.v
        assert state['saturated']

        controller.reset()
        state = controller.get_state()
        assert controller.last_command == VelocityCommand(0.0, 0.0)
        assert not state['saturated']

    def test_invalid_velocity_limit(self):
        with pytest.raises(ValueError):
            KinematicTrackingController({'v_max': 0.0})


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
