"""
Downsampled Trail and Telemetry Recording

The simulation ticks at 60 Hz but renderers and charts only need a point
every 0.1 s. This module decides when a tick is recorded, keeps the two
bounded trail buffers (reference path and actual path) and produces the
compact telemetry samples pushed to history consumers.

Sampling uses an explicit "time since last sample" accumulator rather than
a modulo test on absolute time, so exactly one sample is taken per
interval regardless of floating-point drift in the clock.
"""

import numpy as np
import pandas as pd
from collections import deque
from dataclasses import dataclass, asdict
from typing import Deque, Dict, List, Optional, Tuple


Point2D = Tuple[float, float]

TRAIL_LENGTH = 200
HISTORY_LENGTH = 200
SAMPLE_INTERVAL = 0.1          # [s]

# Tolerance on the accumulator comparison (same role as the multi-rate
# epsilon used for the fixed-step loop)
_SAMPLE_EPS = 1e-9


@dataclass(frozen=True)
class TelemetrySample:
    """One downsampled telemetry record."""
    time: float                # Simulated time rounded to 0.1 s [s]
    position_error: float      # Distance to the reference point [m]
    theta_m: float             # Mass estimate
    theta_i: float             # Inertia estimate (constant)


class TrailBuffer:
    """Bounded FIFO of (x, y) points; the oldest point is dropped when full."""

    def __init__(self, capacity: int = TRAIL_LENGTH):
        if capacity <= 0:
            raise ValueError(f"Trail capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._points: Deque[Point2D] = deque(maxlen=capacity)

    def append(self, x: float, y: float) -> None:
        self._points.append((float(x), float(y)))

    def clear(self) -> None:
        self._points.clear()

    def snapshot(self) -> Tuple[Point2D, ...]:
        return tuple(self._points)

    def as_array(self) -> np.ndarray:
        if not self._points:
            return np.zeros((0, 2))
        return np.array(self._points, dtype=float)

    def __len__(self) -> int:
        return len(self._points)


class SampleRecorder:
    """
    Decides which ticks are recorded and maintains the trail buffers.

    Usage:
    ------
    >>> recorder = SampleRecorder(dt=1/60)
    >>> sample = recorder.record(t, pose_xy, ref_xy, error, theta_m, theta_i)
    >>> if sample is not None:
    ...     history.append(sample)
    """

    def __init__(
        self,
        dt: float,
        interval: float = SAMPLE_INTERVAL,
        trail_length: int = TRAIL_LENGTH,
    ):
        if dt <= 0.0:
            raise ValueError(f"dt must be positive, got {dt}")
        if interval <= 0.0:
            raise ValueError(f"Sample interval must be positive, got {interval}")

        self.dt = dt
        self.interval = interval
        self.actual_trail = TrailBuffer(trail_length)
        self.reference_trail = TrailBuffer(trail_length)
        self.time_since_sample: float = 0.0
        self.samples_taken: int = 0

    def due(self) -> bool:
        """Advance the accumulator by one tick; True when a sample is due."""
        self.time_since_sample += self.dt
        if self.time_since_sample >= self.interval - _SAMPLE_EPS:
            self.time_since_sample -= self.interval
            # Absorb the epsilon so the remainder never goes negative
            if self.time_since_sample < 0.0:
                self.time_since_sample = 0.0
            elif self.time_since_sample >= self.interval:
                # Tick longer than the interval: one sample, keep the remainder
                self.time_since_sample %= self.interval
            return True
        return False

    def record(
        self,
        t: float,
        actual: Point2D,
        reference: Point2D,
        position_error: float,
        theta_m: float,
        theta_i: float,
    ) -> Optional[TelemetrySample]:
        """
        Register one tick; returns a sample when this tick is recorded.
        """
        if not self.due():
            return None

        self.actual_trail.append(*actual)
        self.reference_trail.append(*reference)
        self.samples_taken += 1

        return TelemetrySample(
            time=round(t, 1),
            position_error=float(position_error),
            theta_m=float(theta_m),
            theta_i=float(theta_i),
        )

    def reset(self) -> None:
        self.actual_trail.clear()
        self.reference_trail.clear()
        self.time_since_sample = 0.0
        self.samples_taken = 0


class TelemetryHistory:
    """
    Telemetry consumer retaining the most recent samples.

    Registered as a listener on the runner, it plays the role of the chart
    widgets' data source.

    Usage:
    ------
    >>> history = TelemetryHistory(max_samples=200)
    >>> runner.add_telemetry_listener(history.append)
    >>> df = history.to_dataframe()
    """

    FIELDS = ('time', 'position_error', 'theta_m', 'theta_i')

    def __init__(self, max_samples: int = HISTORY_LENGTH):
        if max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {max_samples}")
        self.max_samples = max_samples
        self._samples: Deque[TelemetrySample] = deque(maxlen=max_samples)

    def __call__(self, sample: TelemetrySample) -> None:
        self.append(sample)

    def append(self, sample: TelemetrySample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def latest(self, n: Optional[int] = None) -> List[TelemetrySample]:
        samples = list(self._samples)
        return samples if n is None else samples[-n:]

    def as_log_data(self, n: Optional[int] = None) -> Dict[str, List[float]]:
        """Column-oriented copy of the retained samples."""
        samples = self.latest(n)
        return {name: [getattr(s, name) for s in samples] for name in self.FIELDS}

    def to_dataframe(self, n: Optional[int] = None) -> pd.DataFrame:
        samples = self.latest(n)
        return pd.DataFrame([asdict(s) for s in samples], columns=list(self.FIELDS))

    def __len__(self) -> int:
        return len(self._samples)
