import math
from enum import Enum
from typing import List, Union

import numpy as np

from ..errors import ConfigurationError
from ..trajectory import PolynomialTrajectory, TrajectoryPoint


class MaterializeMode(Enum):
    TRAJECTORY = "trajectory"  # hand back the polynomial trajectory
    PATH = "path"  # uniformly time-sampled kinematic states


def sample_times(total_time: float, dt: float) -> np.ndarray:
    """
    Sample times covering [0, total_time].

    There are floor(total_time / dt) + 1 samples at i * dt; the last one is
    moved to total_time so the goal state is always included. Only the last
    interval is not uniform: it is between dt and just under 2 * dt long
    (exactly dt when total_time is a multiple of dt).
    """
    if not math.isfinite(dt) or dt <= 0:
        raise ConfigurationError(f"Sampling period must be positive, got {dt}")
    if dt > total_time:
        raise ConfigurationError(
            f"Sampling period {dt} exceeds trajectory duration {total_time:.6g}")
    # tolerate round-off when total_time is a multiple of dt
    count = int(math.floor(total_time / dt + 1e-9)) + 1
    times = np.arange(count) * dt
    times[-1] = total_time
    return times


def sample_trajectory(trajectory: PolynomialTrajectory, dt: float) -> List[TrajectoryPoint]:
    """Evaluate position, velocity, acceleration and yaw analytically at every sample time."""
    return [trajectory.sample(t) for t in sample_times(trajectory.total_time, dt)]


def materialize(trajectory: PolynomialTrajectory,
                mode: MaterializeMode,
                sampling_dt: float = 0.01) -> Union[PolynomialTrajectory, List[TrajectoryPoint]]:
    """
    Args:
        trajectory: Optimized trajectory
        mode: TRAJECTORY passes the trajectory through, PATH resamples it
        sampling_dt: Sampling period for PATH mode

    Returns:
        The trajectory itself or a list of TrajectoryPoint

    Raises:
        ConfigurationError: non-positive sampling period or one longer than the trajectory
    """
    if mode is MaterializeMode.TRAJECTORY:
        return trajectory
    if mode is MaterializeMode.PATH:
        return sample_trajectory(trajectory, sampling_dt)
    raise ConfigurationError(f"Unknown materialize mode: {mode!r}")
