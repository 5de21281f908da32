from .trajectory_base import TrajectoryPoint, as_waypoint, as_waypoints
from .polynomial_trajectory import PolynomialSegment, PolynomialTrajectory, time_basis
from .trajectory_utils import (
    validate_waypoints,
    compute_path_length,
    positions_of,
    unwrapped_yaws,
    split_straight_line,
    interpolate_polyline_yaw
)

__all__ = [
    'TrajectoryPoint',
    'as_waypoint',
    'as_waypoints',
    'PolynomialSegment',
    'PolynomialTrajectory',
    'time_basis',
    'validate_waypoints',
    'compute_path_length',
    'positions_of',
    'unwrapped_yaws',
    'split_straight_line',
    'interpolate_polyline_yaw'
]
