from typing import Optional, Sequence

from ..config import CostWeights
from ..trajectory import PolynomialTrajectory, validate_waypoints
from ..trajectory.trajectory_base import WaypointLike
from .smoother_base import TrajectorySmoother


class PolynomialSmoother(TrajectorySmoother):
    """
    Baseline smoother: minimum-derivative polynomials through every waypoint.

    Segment times come from the estimator and are kept fixed; waypoints are
    hard constraints.
    """

    def __str__(self) -> str:
        return "Polynomial smoother"

    def get_trajectory_between_waypoints(self, waypoints: Sequence[WaypointLike],
                                         weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        points = validate_waypoints(waypoints, self.config.coincidence_tolerance)
        durations = self.time_estimator.estimate_times(points)
        return self.optimizer.solve(points, durations, weights,
                                    hard_constraints=True, optimize_time=False)

    def get_trajectory_between_two_points(self, start: WaypointLike, goal: WaypointLike,
                                          weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        return self.get_trajectory_between_waypoints(self._two_points(start, goal), weights)
