import logging
from typing import Any, List, Optional, Sequence

import numpy as np

from ..config import SmoothingConfig
from ..errors import ConfigurationError, NoPathFound
from ..trajectory import TrajectoryPoint, interpolate_polyline_yaw, validate_waypoints


class WaypointPreprocessor:
    """
    Rewrites waypoints with shortcut paths from a visibility graph.

    Parameters:
        config (SmoothingConfig): ``resample_visibility`` switches the pass on
        visibility_graph: collaborator with ``shortest_visible_path(start, goal, map_context)``
        map_context: obstacle context handed to the collaborator
    """
    def __init__(self, config: SmoothingConfig, visibility_graph=None, map_context: Any = None) -> None:
        self.config = config
        self.visibility_graph = visibility_graph
        self.map_context = map_context

    def resample(self, waypoints: Sequence[TrajectoryPoint]) -> List[TrajectoryPoint]:
        """
        Splice visibility-graph polylines between every pair of waypoints.

        Returns:
            The input unchanged if visibility resampling is disabled, else a new list

        Raises:
            NoPathFound: the collaborator cannot connect a pair
            ConfigurationError: resampling enabled without a collaborator
        """
        waypoints = validate_waypoints(waypoints, self.config.coincidence_tolerance)
        if not self.config.resample_visibility:
            return waypoints
        if self.visibility_graph is None:
            raise ConfigurationError("resample_visibility is set but no visibility graph was provided")

        resampled = [waypoints[0]]
        for i, (start, goal) in enumerate(zip(waypoints[:-1], waypoints[1:])):
            polyline = self.visibility_graph.shortest_visible_path(
                start.position, goal.position, self.map_context)
            if polyline is None or len(polyline) < 2:
                raise NoPathFound(f"No visible path between waypoints {i} and {i + 1}")

            polyline = np.asarray(polyline, dtype=float)
            polyline[0], polyline[-1] = start.position, goal.position
            yaws = interpolate_polyline_yaw(polyline, start.yaw, goal.yaw)
            for position, yaw in zip(polyline[1:-1], yaws[1:-1]):
                resampled.append(TrajectoryPoint(0.0, position, yaw=yaw))
            resampled.append(goal)

        logging.info(f"Visibility resampling: {len(waypoints)} -> {len(resampled)} waypoints")
        return resampled
