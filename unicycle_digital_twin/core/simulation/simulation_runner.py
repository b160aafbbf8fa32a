"""
Integrated Simulation Runner for the Unicycle Tracking Digital Twin

This module implements the closed-loop simulation engine, integrating:
- Reference trajectory generation (circle / figure-eight)
- Kinematic tracking control law
- Adaptive mass estimation with sigma-modification
- Mass-mismatch plant response
- Forward-Euler pose integration
- Downsampled trail and telemetry recording

The engine exposes a single `tick()` operation that advances the state by
one fixed logical step (dt = 1/60 s by default). The host decides the
cadence (render callback, timer, thread loop, or the batch loop in
`run_simulation`); the engine never resynchronises to wall-clock time and
does not catch up on dropped frames.

Data Flow (per tick):
--------------------
Trajectory → Control Law → Estimator → Plant Model → Integrator → Recorder
                                                                    |
                                               telemetry listeners <+

Threading:
---------
All simulation state is owned by the runner. `tick()`, `reset()`,
`apply_controls()` and `snapshot()` serialise on one lock so a renderer on
another thread only ever sees complete states. Telemetry listeners are
called after the lock is released.
"""


import numpy as np
from typing import Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field, replace
import os
import time
from collections import defaultdict
import threading

from unicycle_digital_twin.core.trajectories.reference_trajectory import (
    ReferencePoint,
    ReferenceTrajectory,
    TrajectoryType,
)
from unicycle_digital_twin.core.controllers.control_laws import (
    KinematicTrackingController,
    VelocityCommand,
)
from unicycle_digital_twin.core.estimators.adaptive_estimator import (
    ParameterEstimate,
    SigmaModificationEstimator,
)
from unicycle_digital_twin.core.dynamics.unicycle_dynamics import RobotPose, UnicycleDynamics
from unicycle_digital_twin.core.simulation.sample_recorder import (
    Point2D,
    SampleRecorder,
    TelemetryHistory,
    TelemetrySample,
)


TelemetryListener = Callable[[TelemetrySample], None]


@dataclass
class SimulationConfig:
    """Configuration for simulation runner."""

    # Timing
    dt: float = 1.0 / 60.0             # Logical step [s] (one rendered frame)
    sample_interval: float = 0.1       # Trail/telemetry downsampling [s]

    # Buffers
    trail_length: int = 200            # Points kept per trail
    history_length: int = 200          # Samples kept by the built-in history

    # Initial conditions (off the reference so the approach is visible)
    initial_pose: Tuple[float, float, float] = (0.2, 0.0, 0.0)

    # Execution (host loop only; tick() ignores these)
    enable_logging: bool = True        # Keep per-sample log_data for summaries
    enable_plotting: bool = False      # Plot at the end of run_simulation
    plot_path: Optional[str] = None    # Save figures instead of showing them
    real_time_factor: float = 0.0      # 0.0 = fast-as-possible, 1.0 = real-time
    verbose: bool = True               # Progress output in run_simulation

    # Component configs
    trajectory_config: Dict = field(default_factory=dict)
    controller_config: Dict = field(default_factory=lambda: {
        'kv': 2.0,                     # Distance gain [1/s]
        'kw': 4.0,                     # Heading gain [1/s]
        'v_max': 1.0,                  # Linear velocity limit [m/s]
    })
    estimator_config: Dict = field(default_factory=lambda: {
        'gamma': 0.5,                  # Adaptation gain
        'sigma': 0.01,                 # Leakage (sigma-modification)
        'dead_zone': 0.05,             # Position error dead-zone [m]
        'nominal_mass': 1.0,           # Static belief when adaptation is off
    })
    dynamics_config: Dict = field(default_factory=lambda: {
        'base_mass': 1.0,              # Robot mass [kg]
        'load_mass': 2.5,              # Transported load [kg]
        'skid_factor': 1.0,            # Traction efficiency (1.0 = no slip)
    })

    def __post_init__(self):
        if not self.dt > 0.0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if not self.sample_interval > 0.0:
            raise ValueError(f"sample_interval must be positive, got {self.sample_interval}")
        if self.trail_length <= 0:
            raise ValueError(f"trail_length must be positive, got {self.trail_length}")
        if self.history_length <= 0:
            raise ValueError(f"history_length must be positive, got {self.history_length}")
        if len(self.initial_pose) != 3:
            raise ValueError(f"initial_pose must be (x, y, theta), got {self.initial_pose}")


@dataclass(frozen=True)
class ControlConfig:
    """
    Inbound configuration written by the UI collaborator.

    The engine reads it every tick and never mutates it. Changing the
    trajectory resets the simulation; the other fields take effect on the
    next tick.
    """
    trajectory: TrajectoryType = TrajectoryType.CIRCLE
    adaptive: bool = False
    has_load: bool = False
    running: bool = True

    def __post_init__(self):
        # Accept 'CIRCLE' / 'FIGURE_EIGHT' strings from hosts
        object.__setattr__(self, 'trajectory', TrajectoryType(self.trajectory))


@dataclass(frozen=True)
class SimulationSnapshot:
    """Immutable view of the engine state handed to renderers."""
    time: float
    iteration: int
    pose: RobotPose
    reference: ReferencePoint
    estimate: ParameterEstimate
    position_error: float
    command: VelocityCommand
    actual: VelocityCommand
    reference_trail: Tuple[Point2D, ...]
    actual_trail: Tuple[Point2D, ...]
    controls: ControlConfig


class UnicycleTwinRunner:
    """
    Closed-loop simulation engine for adaptive unicycle trajectory tracking.

    This class owns the complete simulation state (clock, pose, parameter
    estimate, trails) and advances it one fixed step per `tick()`:
    1. Reference point at the new time
    2. Kinematic control law (v_cmd, w_cmd)
    3. Adaptive estimate update (sigma-modification)
    4. Plant response with the true mass
    5. Euler pose integration
    6. Downsampled trail/telemetry recording

    Usage:
    ------
    >>> runner = UnicycleTwinRunner(SimulationConfig())
    >>> runner.update_controls(has_load=True, adaptive=True)
    >>> results = runner.run_simulation(duration=60.0)
    >>> print(f"Final θ_m: {results['theta_m_final']:.3f}")
    """

    def __init__(self, config: Optional[SimulationConfig] = None, controls: Optional[ControlConfig] = None):
        """
        Initialize the simulation runner.

        Parameters
        ----------
        config : SimulationConfig, optional
            Timing, buffer and component configuration
        controls : ControlConfig, optional
            Initial UI configuration (circle, no load, no adaptation, running)
        """
        self.config = config or SimulationConfig()
        self.controls = controls or ControlConfig()

        # Serialises tick/reset/snapshot across host threads
        self.state_lock = threading.Lock()

        self._init_components()
        self._init_logging()

        self._listeners: List[TelemetryListener] = []
        self.history = TelemetryHistory(self.config.history_length)
        self.add_telemetry_listener(self.history.append)

        self._reset_state()

    def _init_components(self) -> None:
        """Create controller, estimator, plant and recorder from config."""
        self.controller = KinematicTrackingController(self.config.controller_config)
        self.estimator = SigmaModificationEstimator(self.config.estimator_config)
        self.dynamics = UnicycleDynamics(self.config.dynamics_config)
        self.recorder = SampleRecorder(
            dt=self.config.dt,
            interval=self.config.sample_interval,
            trail_length=self.config.trail_length,
        )

    def _init_logging(self) -> None:
        """Initialize data logging infrastructure."""
        self.log_data: Dict[str, List] = defaultdict(list)

        self.log_signals = [
            'time',
            'x', 'y', 'theta',
            'ref_x', 'ref_y',
            'position_error',
            'cmd_v', 'cmd_w',
            'actual_v', 'actual_w',
            'efficiency',
            'theta_m', 'theta_i',
            'true_mass',
        ]

    def _reset_state(self) -> None:
        """Restore clock, pose, estimate and trails. Caller holds the lock."""
        self.time: float = 0.0
        self.iteration: int = 0

        x0, y0, theta0 = self.config.initial_pose
        self.pose = RobotPose(float(x0), float(y0), float(theta0))

        self.trajectory = ReferenceTrajectory(self.controls.trajectory, self.config.trajectory_config)
        self.reference = self.trajectory.evaluate(0.0)
        self.position_error = float(np.hypot(self.reference.x - self.pose.x, self.reference.y - self.pose.y))

        self.command = VelocityCommand(0.0, 0.0)
        self.actual = VelocityCommand(0.0, 0.0)
        self.efficiency: float = 1.0

        self.controller.reset()
        self.estimator.reset()
        self.recorder.reset()
        self.log_data.clear()

    # ------------------------------------------------------------------
    # Inbound configuration
    # ------------------------------------------------------------------

    def apply_controls(self, controls: ControlConfig) -> None:
        """
        Replace the UI configuration.

        A trajectory change resets the whole simulation state in the same
        critical section, so no tick ever observes a partial reset.
        """
        with self.state_lock:
            previous = self.controls
            self.controls = controls
            if controls.trajectory != previous.trajectory:
                self._reset_state()

    def update_controls(self, **changes) -> ControlConfig:
        """Apply a partial configuration change, e.g. `update_controls(has_load=True)`."""
        controls = replace(self.controls, **changes)
        self.apply_controls(controls)
        return controls

    def reset(self) -> None:
        """
        Reset simulation to initial conditions.

        Also clears the built-in chart history; external listeners keep
        their data.
        """
        with self.state_lock:
            self._reset_state()
            self.history.clear()

    # ------------------------------------------------------------------
    # Outbound telemetry
    # ------------------------------------------------------------------

    def add_telemetry_listener(self, listener: TelemetryListener) -> None:
        self._listeners.append(listener)

    def remove_telemetry_listener(self, listener: TelemetryListener) -> None:
        self._listeners.remove(listener)

    def snapshot(self) -> SimulationSnapshot:
        """Consistent copy of the current state for renderers."""
        with self.state_lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            time=self.time,
            iteration=self.iteration,
            pose=self.pose,
            reference=self.reference,
            estimate=self.estimator.estimate,
            position_error=self.position_error,
            command=self.command,
            actual=self.actual,
            reference_trail=self.recorder.reference_trail.snapshot(),
            actual_trail=self.recorder.actual_trail.snapshot(),
            controls=self.controls,
        )

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def tick(self) -> SimulationSnapshot:
        """
        Advance the simulation by one logical step.

        When the controls say the simulation is paused, nothing changes and
        the current snapshot is returned.
        """
        with self.state_lock:
            sample = None
            if self.controls.running:
                sample = self._step()
            snapshot = self._snapshot_locked()

        if sample is not None:
            for listener in list(self._listeners):
                listener(sample)
        return snapshot

    run_single_step = tick

    def _step(self) -> Optional[TelemetrySample]:
        """One fixed step of the control loop. Caller holds the lock."""
        dt = self.config.dt
        controls = self.controls

        # Clock advances first; the reference is evaluated at the new time
        self.iteration += 1
        self.time = self.iteration * dt

        # 1. Desired position
        self.reference = self.trajectory.evaluate(self.time)

        # 2. Kinematic control law
        self.command, meta = self.controller.compute_control(self.reference, self.pose)
        self.position_error = meta['dist_error']

        # 3. Adaptive estimate
        true_mass = self.dynamics.true_mass(controls.has_load)
        theta_m = self.estimator.update(self.position_error, true_mass, controls.adaptive, dt)

        # 4. Plant response
        self.efficiency = self.dynamics.efficiency(theta_m, true_mass)
        actual_v, actual_w = self.dynamics.apply(self.command.v, self.command.w, theta_m, true_mass)
        self.actual = VelocityCommand(float(actual_v), float(actual_w))

        # 5. Pose integration
        self.pose = self.dynamics.integrate(self.pose, self.actual.v, self.actual.w, dt)

        # 6. Downsampled recording
        sample = self.recorder.record(
            self.time,
            actual=(self.pose.x, self.pose.y),
            reference=self.reference.position,
            position_error=self.position_error,
            theta_m=self.estimator.theta_m,
            theta_i=self.estimator.theta_i,
        )
        if sample is not None and self.config.enable_logging:
            self._log_data(true_mass)
        return sample

    def _log_data(self, true_mass: float) -> None:
        """Log current state to telemetry buffer at the sample rate."""
        self.log_data['time'].append(self.time)
        self.log_data['x'].append(self.pose.x)
        self.log_data['y'].append(self.pose.y)
        self.log_data['theta'].append(self.pose.theta)
        self.log_data['ref_x'].append(self.reference.x)
        self.log_data['ref_y'].append(self.reference.y)
        self.log_data['position_error'].append(self.position_error)
        self.log_data['cmd_v'].append(self.command.v)
        self.log_data['cmd_w'].append(self.command.w)
        self.log_data['actual_v'].append(self.actual.v)
        self.log_data['actual_w'].append(self.actual.w)
        self.log_data['efficiency'].append(self.efficiency)
        self.log_data['theta_m'].append(self.estimator.theta_m)
        self.log_data['theta_i'].append(self.estimator.theta_i)
        self.log_data['true_mass'].append(true_mass)

    # ------------------------------------------------------------------
    # Batch host loop
    # ------------------------------------------------------------------

    def run_simulation(self, duration: float) -> Dict:
        """
        Run the engine for a span of simulated time.

        The number of ticks is fixed up front (round(duration / dt)), so
        termination is deterministic and independent of wall-clock time.
        A paused simulation executes no steps and always prints a warning,
        regardless of `verbose`.

        Parameters
        ----------
        duration : float
            Simulated time to advance [s]

        Returns
        -------
        Dict
            Logged telemetry and performance summary
        """
        if duration < 0.0:
            raise ValueError(f"duration must be non-negative, got {duration}")

        verbose = self.config.verbose
        dt = self.config.dt
        n_steps = int(round(duration / dt))

        if verbose:
            print(f"Starting simulation for {duration:.2f} seconds...")
            print(f"  dt: {dt*1e3:.2f} ms ({n_steps} steps)")
            print(f"  Trajectory: {self.controls.trajectory.value}")
            print(f"  Load: {'Present' if self.controls.has_load else 'Absent'}")
            print(f"  Adaptation: {'Enabled' if self.controls.adaptive else 'Disabled'}")

        if not self.controls.running:
            print("Warning: simulation is paused; no steps executed")
            n_steps = 0

        start_time = time.perf_counter()
        start_sim_time = self.time
        progress_every = max(1, n_steps // 10)

        for step in range(1, n_steps + 1):
            self.tick()

            # Optional real-time pacing (no catch-up when behind)
            if self.config.real_time_factor > 0:
                elapsed_wall = time.perf_counter() - start_time
                target_wall = (self.time - start_sim_time) / self.config.real_time_factor
                if elapsed_wall < target_wall:
                    time.sleep(target_wall - elapsed_wall)

            if verbose and step % progress_every == 0:
                progress = 100.0 * step / n_steps
                print(f"  Progress: {progress:.0f}% (t={self.time:.2f}s)")

        elapsed_time = time.perf_counter() - start_time
        if verbose:
            print(f"Simulation complete: {self.time:.3f} simulated seconds")
            print(f"  Wall-clock time: {elapsed_time:.2f} seconds")
            print(f"  Total iterations: {self.iteration}")

        results = self._compute_summary()
        if self.config.enable_plotting:
            self.plot_results()
        return results

    def _compute_summary(self) -> Dict:
        """
        Compute performance metrics from logged data.

        Returns
        -------
        Dict
            Summary with tracking error statistics and final estimate
        """
        log_arrays = {key: np.array(val) for key, val in self.log_data.items()}
        errors = log_arrays.get('position_error', np.zeros(0))

        if len(errors) > 0:
            error_rms = float(np.sqrt(np.mean(errors**2)))
            error_peak = float(np.max(errors))
            error_final = float(errors[-1])
        else:
            error_rms = error_peak = error_final = 0.0

        summary = {
            'log_data': self.log_data,
            'log_arrays': log_arrays,
            'n_samples': len(log_arrays.get('time', [])),
            'duration': self.time,
            'position_error_rms': error_rms,
            'position_error_peak': error_peak,
            'position_error_final': error_final,
            'theta_m_final': self.estimator.theta_m,
            'theta_i_final': self.estimator.theta_i,
            'true_mass': self.dynamics.true_mass(self.controls.has_load),
            'final_pose': self.pose,
        }

        return summary

    def plot_results(self) -> None:
        """Draw the scene and the error/parameter charts for the current run."""
        import matplotlib.pyplot as plt
        from unicycle_digital_twin.core.visualization import (
            PlotStyleConfig,
            TimelinePlotter,
            TrajectoryPlotter,
        )

        if len(self.history) == 0:
            print("Warning: No telemetry to plot. Run simulation first.")
            return

        style = PlotStyleConfig()
        scene_fig, _ = TrajectoryPlotter(style).plot_snapshot(self.snapshot())
        charts_fig, _ = TimelinePlotter(style).plot_dashboard(
            self.history.as_log_data(),
            true_mass=self.dynamics.true_mass(self.controls.has_load),
        )

        if self.config.plot_path:
            base = os.path.splitext(self.config.plot_path)[0]
            scene_fig.savefig(f"{base}_scene.png", dpi=style.dpi)
            charts_fig.savefig(f"{base}_charts.png", dpi=style.dpi)
            plt.close(scene_fig)
            plt.close(charts_fig)
            print(f"INFO: Figures saved to {base}_scene.png and {base}_charts.png")
        else:
            plt.show()


SCENARIOS = {
    'baseline': ControlConfig(has_load=False, adaptive=False),
    'load_static': ControlConfig(has_load=True, adaptive=False),
    'load_adaptive': ControlConfig(has_load=True, adaptive=True),
}


def compare_scenarios(
    duration: float = 60.0,
    trajectory: TrajectoryType = TrajectoryType.CIRCLE,
    config: Optional[SimulationConfig] = None,
) -> Dict[str, Dict]:
    """
    Run the three demonstration scenarios on the same trajectory.

    - baseline: no load, static estimate (correct belief)
    - load_static: load present, static estimate (under-actuated)
    - load_adaptive: load present, sigma-modification enabled

    Returns
    -------
    Dict[str, Dict]
        Summary per scenario name
    """
    results = {}
    for name, controls in SCENARIOS.items():
        runner = UnicycleTwinRunner(
            replace(config) if config is not None else SimulationConfig(verbose=False),
            replace(controls, trajectory=trajectory),
        )
        results[name] = runner.run_simulation(duration)
    return results


def main():
    """
    Demonstration of the adaptive tracking twin.

    Compares tracking on the circle with and without adaptation while a
    load is transported.
    """
    print("=" * 70)
    print("Adaptive Unicycle Tracking Digital Twin")
    print("Sigma-Modification Mass Adaptation")
    print("=" * 70)
    print()

    duration = 60.0
    results = compare_scenarios(duration=duration)

    print()
    print("=" * 70)
    print("SCENARIO COMPARISON")
    print("=" * 70)
    print(f"{'Scenario':<20} {'Err RMS (m)':<14} {'Err final (m)':<15} {'θ_m final':<12} {'True mass':<10}")
    print("-" * 70)
    for name, res in results.items():
        print(f"{name:<20} {res['position_error_rms']:<14.4f} {res['position_error_final']:<15.4f} "
              f"{res['theta_m_final']:<12.4f} {res['true_mass']:<10.2f}")
    print("=" * 70)

    return results


if __name__ == '__main__':
    main()
