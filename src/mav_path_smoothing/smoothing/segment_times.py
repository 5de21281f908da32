import numpy as np
from typing import List, Sequence

from ..config import SmoothingConfig
from ..trajectory import TrajectoryPoint, validate_waypoints


class SegmentTimeEstimator:
    """
    Seeds one duration per segment from straight-line waypoint spacing.

    The estimate is ``distance / v_max``, but never shorter than the
    rest-to-rest time ``2 * sqrt(distance / a_max)`` an acceleration limited
    vehicle needs, clamped to ``[min_segment_time, max_segment_time]``. It is
    only a starting point; the LOCO optimizer may rescale it.
    """

    def __init__(self, config: SmoothingConfig):
        self.config = config

    def estimate_times(self, waypoints: Sequence[TrajectoryPoint]) -> List[float]:
        """
        Args:
            waypoints: Ordered waypoints, at least 2

        Returns:
            List of len(waypoints) - 1 strictly positive durations

        Raises:
            DegenerateInputError: fewer than 2 waypoints or coincident neighbours
        """
        points = validate_waypoints(waypoints, self.config.coincidence_tolerance)

        segment_times = []
        for i in range(len(points) - 1):
            distance = np.linalg.norm(points[i+1].position - points[i].position)
            time_estimate = distance / self.config.v_max
            # time to accelerate and brake over the segment
            min_time = 2.0 * np.sqrt(distance / self.config.a_max)
            time_estimate = max(time_estimate, min_time)
            segment_times.append(float(min(max(time_estimate, self.config.min_segment_time),
                                           self.config.max_segment_time)))
        return segment_times
