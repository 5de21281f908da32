import logging
from typing import Any, List, Optional, Sequence

from ..config import CostWeights, SmoothingConfig
from ..errors import ConfigurationError, OptimizationNotConvergedError
from ..trajectory import PolynomialTrajectory, TrajectoryPoint, split_straight_line, validate_waypoints
from ..trajectory.trajectory_base import WaypointLike
from .loco_optimizer import LocoOptimizer
from .preprocessor import WaypointPreprocessor
from .segment_times import SegmentTimeEstimator
from .smoother_base import TrajectorySmoother


class LocoSmoother(TrajectorySmoother):
    """
    Smoother minimizing the LOCO cost.

    Waypoints are optionally resampled through a visibility graph, then
    either fitted exactly (``add_waypoints`` off) or added as soft costs, and
    segment times are refined when ``optimize_time`` is set.

    Parameters:
        config (SmoothingConfig): smoothing parameters
        optimizer (LocoOptimizer): optimizer strategy (built from config if None)
        visibility_graph: collaborator used when ``resample_visibility`` is set
        map_context: obstacle context handed to the visibility graph
        preprocessor (WaypointPreprocessor): replaces the default preprocessor

    Examples:
        >>> smoother = LocoSmoother(SmoothingConfig(num_segments=5))
        >>> trajectory = smoother.get_trajectory_between_two_points((0, 0, 0), (10, 0, 0))
    """

    def __init__(self, config: Optional[SmoothingConfig] = None,
                 optimizer: Optional[LocoOptimizer] = None,
                 visibility_graph=None,
                 map_context: Any = None,
                 preprocessor: Optional[WaypointPreprocessor] = None) -> None:
        super().__init__(config, optimizer)
        self.visibility_graph = visibility_graph
        self.map_context = map_context
        self.preprocessor = preprocessor or WaypointPreprocessor(self.config, visibility_graph, map_context)

    def __str__(self) -> str:
        return "LOCO smoother"

    def get_trajectory_between_waypoints(self, waypoints: Sequence[WaypointLike],
                                         weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        points = self.preprocessor.resample(waypoints)
        return self._solve(points, weights)

    def get_trajectory_between_two_points(self, start: WaypointLike, goal: WaypointLike,
                                          weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        """
        Split start -> goal into ``num_segments`` equal segments and optimize.

        A visibility shortcut with intermediate points turns the request into a
        regular waypoint problem. A single segment without time refinement is
        interpolated directly.
        """
        if self.config.num_segments < 1:
            raise ConfigurationError(f"num_segments must be >= 1, got {self.config.num_segments}")
        start, goal = validate_waypoints([start, goal], self.config.coincidence_tolerance)

        if self.config.resample_visibility:
            points = self.preprocessor.resample([start, goal])
            if len(points) > 2:
                return self._solve(points, weights)

        points = split_straight_line(start, goal, self.config.num_segments)
        durations = self.time_estimator.estimate_times(points)
        if self.config.num_segments == 1 and not self.config.optimize_time:
            return self.optimizer.interpolate_two_points(start, goal, durations[0], weights)
        return self._solve(points, weights, durations)

    def _solve(self, points: List[TrajectoryPoint], weights: Optional[CostWeights],
               durations: Optional[List[float]] = None) -> PolynomialTrajectory:
        if durations is None:
            durations = self.time_estimator.estimate_times(points)
        try:
            return self.optimizer.solve(points, durations, weights,
                                        hard_constraints=not self.config.add_waypoints,
                                        optimize_time=self.config.optimize_time)
        except OptimizationNotConvergedError as e:
            if not self.config.accept_unconverged or e.trajectory is None:
                raise
            logging.warning(f"Accepting best-effort trajectory after {e.iterations} iterations: {e}")
            return e.trajectory

    # ---------- parameters ----------

    def _update_config(self, **changes) -> None:
        self.config = self.config.replace(**changes)
        self.time_estimator = SegmentTimeEstimator(self.config)
        self.preprocessor.config = self.config

    @property
    def resample_trajectory(self) -> bool:
        return self.config.resample_trajectory

    @resample_trajectory.setter
    def resample_trajectory(self, value: bool) -> None:
        self._update_config(resample_trajectory=bool(value))

    @property
    def resample_visibility(self) -> bool:
        return self.config.resample_visibility

    @resample_visibility.setter
    def resample_visibility(self, value: bool) -> None:
        self._update_config(resample_visibility=bool(value))

    @property
    def num_segments(self) -> int:
        return self.config.num_segments

    @num_segments.setter
    def num_segments(self, value: int) -> None:
        self._update_config(num_segments=value)

    @property
    def add_waypoints(self) -> bool:
        """Whether interior waypoints are soft costs instead of hard constraints."""
        return self.config.add_waypoints

    @add_waypoints.setter
    def add_waypoints(self, value: bool) -> None:
        self._update_config(add_waypoints=bool(value))
