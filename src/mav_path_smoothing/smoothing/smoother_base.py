from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

from ..config import CostWeights, SmoothingConfig
from ..trajectory import PolynomialTrajectory, TrajectoryPoint, as_waypoint
from ..trajectory.trajectory_base import WaypointLike
from .materializer import MaterializeMode, materialize
from .loco_optimizer import LocoOptimizer
from .segment_times import SegmentTimeEstimator


class TrajectorySmoother(ABC):
    """
    Base class for trajectory smoothing.

    Turns an ordered waypoint sequence into a PolynomialTrajectory or a
    resampled path. The optimizer is a strategy object; subclasses decide how
    it is driven.

    Parameters:
        config (SmoothingConfig): smoothing parameters, read only during a call
        optimizer (LocoOptimizer): inner/outer optimizer (built from config if None)
    """

    def __init__(self, config: Optional[SmoothingConfig] = None,
                 optimizer: Optional[LocoOptimizer] = None) -> None:
        self.config = config or SmoothingConfig()
        self.optimizer = optimizer or LocoOptimizer(self.config)
        self.time_estimator = SegmentTimeEstimator(self.config)

    @abstractmethod
    def get_trajectory_between_waypoints(self, waypoints: Sequence[WaypointLike],
                                         weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        """
        Interface for smoothing an ordered waypoint sequence into a trajectory.
        """
        pass

    @abstractmethod
    def get_trajectory_between_two_points(self, start: WaypointLike, goal: WaypointLike,
                                          weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        """
        Interface for the start/goal case.
        """
        pass

    def get_path_between_waypoints(self, waypoints: Sequence[WaypointLike],
                                   weights: Optional[CostWeights] = None) -> List[TrajectoryPoint]:
        trajectory = self.get_trajectory_between_waypoints(waypoints, weights)
        return materialize(trajectory, MaterializeMode.PATH, self.config.sampling_dt)

    def get_path_between_two_points(self, start: WaypointLike, goal: WaypointLike,
                                    weights: Optional[CostWeights] = None) -> List[TrajectoryPoint]:
        """
        Samples of exactly the trajectory returned by get_trajectory_between_two_points.
        """
        trajectory = self.get_trajectory_between_two_points(start, goal, weights)
        return materialize(trajectory, MaterializeMode.PATH, self.config.sampling_dt)

    def smooth(self, waypoints: Sequence[WaypointLike],
               weights: Optional[CostWeights] = None) -> Union[PolynomialTrajectory, List[TrajectoryPoint]]:
        """
        Smooth waypoints and materialize according to ``resample_trajectory``.

        Two waypoints go through the two-point case.
        """
        if len(waypoints) == 2:
            trajectory = self.get_trajectory_between_two_points(waypoints[0], waypoints[1], weights)
        else:
            trajectory = self.get_trajectory_between_waypoints(waypoints, weights)
        mode = MaterializeMode.PATH if self.config.resample_trajectory else MaterializeMode.TRAJECTORY
        return materialize(trajectory, mode, self.config.sampling_dt)

    def _two_points(self, start: WaypointLike, goal: WaypointLike):
        return as_waypoint(start), as_waypoint(goal)
