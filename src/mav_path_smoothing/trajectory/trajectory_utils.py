import numpy as np
from typing import List, Sequence, Union

from .trajectory_base import TrajectoryPoint, WaypointLike, as_waypoints
from ..errors import DegenerateInputError


def validate_waypoints(waypoints: Sequence[WaypointLike],
                       tolerance: float = 1e-6) -> List[TrajectoryPoint]:
    """
    Convert waypoints to TrajectoryPoints and check they form a usable path.

    Args:
        waypoints: Ordered waypoints
        tolerance: Minimum distance between consecutive positions

    Returns:
        List of TrajectoryPoint

    Raises:
        DegenerateInputError: fewer than 2 waypoints or coincident neighbours
    """
    if waypoints is None or len(waypoints) < 2:
        raise DegenerateInputError("Need at least 2 waypoints for trajectory generation")
    try:
        points = as_waypoints(waypoints)
    except ValueError as e:
        raise DegenerateInputError(str(e)) from e

    for i in range(1, len(points)):
        distance = np.linalg.norm(points[i].position - points[i-1].position)
        if not np.isfinite(distance):
            raise DegenerateInputError(f"Waypoint {i} has a non-finite position")
        if distance < tolerance:
            raise DegenerateInputError(
                f"Waypoints {i-1} and {i} coincide at {points[i].position.tolist()}")
    return points


def compute_path_length(path: Union[List[TrajectoryPoint], np.ndarray]) -> float:
    """
    Compute the total length of a path.

    Args:
        path: Waypoints or an array of positions

    Returns:
        Total path length
    """
    positions = positions_of(path) if not isinstance(path, np.ndarray) else path
    return float(np.sum(np.linalg.norm(np.diff(positions, axis=0), axis=1)))


def positions_of(waypoints: Sequence[TrajectoryPoint]) -> np.ndarray:
    return np.array([wp.position for wp in waypoints])


def unwrapped_yaws(waypoints: Sequence[TrajectoryPoint]) -> np.ndarray:
    """Waypoint yaws with 2*pi jumps removed so consecutive headings are close."""
    return np.unwrap(np.array([wp.yaw for wp in waypoints], dtype=float))


def split_straight_line(start: TrajectoryPoint, goal: TrajectoryPoint,
                        num_segments: int) -> List[TrajectoryPoint]:
    """
    Split the segment start -> goal into ``num_segments`` equal pieces.

    The returned list keeps the original start and goal (with their derivative
    state) and adds evenly spaced intermediate points with free derivatives.
    Yaw is interpolated along the shortest turn.
    """
    yaw_start, yaw_goal = np.unwrap([start.yaw, goal.yaw])
    points = [start]
    for i in range(1, num_segments):
        ratio = i / num_segments
        points.append(TrajectoryPoint(
            time=0.0,
            position=start.position + ratio * (goal.position - start.position),
            yaw=yaw_start + ratio * (yaw_goal - yaw_start)
        ))
    points.append(goal)
    return points


def interpolate_polyline_yaw(polyline: np.ndarray, yaw_start: float, yaw_goal: float) -> np.ndarray:
    """
    Linearly interpolate yaw along a polyline by arc length.

    Args:
        polyline: Positions, shape (n_points, 3)
        yaw_start, yaw_goal: Headings at the first and last vertex

    Returns:
        Array of yaw values, shape (n_points,)
    """
    yaw_start, yaw_goal = np.unwrap([yaw_start, yaw_goal])
    distances = np.concatenate(([0.0], np.cumsum(np.linalg.norm(np.diff(polyline, axis=0), axis=1))))
    if distances[-1] <= 0:
        return np.full(len(polyline), yaw_start)
    return np.interp(distances / distances[-1], [0.0, 1.0], [yaw_start, yaw_goal])
