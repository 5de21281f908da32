import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union, Dict, Any


@dataclass
class TrajectoryPoint:
    """
    Single kinematic state along a trajectory.

    Used both for waypoints handed to the smoothers and for sampled states
    handed back. On a waypoint ``velocity``/``acceleration`` set to None means
    the derivative is free (zero at the start and goal).
    """
    time: float
    position: np.ndarray  # [x, y, z]
    velocity: Optional[np.ndarray] = None  # [vx, vy, vz]
    acceleration: Optional[np.ndarray] = None  # [ax, ay, az]
    jerk: Optional[np.ndarray] = None  # [jx, jy, jz]
    yaw: float = 0.0  # heading
    yaw_rate: Optional[float] = None

    def __post_init__(self):
        """Ensure arrays are numpy arrays."""
        self.position = np.asarray(self.position, dtype=float)
        if self.position.shape != (3,):
            raise ValueError(f"Position must have 3 components, got shape {self.position.shape}")
        for name in ("velocity", "acceleration", "jerk"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, np.asarray(value, dtype=float))
        self.yaw = float(self.yaw)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'position': self.position.tolist(),
            'velocity': self.velocity.tolist() if self.velocity is not None else None,
            'acceleration': self.acceleration.tolist() if self.acceleration is not None else None,
            'jerk': self.jerk.tolist() if self.jerk is not None else None,
            'yaw': self.yaw,
            'yaw_rate': self.yaw_rate
        }

    def __repr__(self) -> str:
        return f"TrajectoryPoint(t={self.time:.2f}, pos={self.position}, yaw={self.yaw:.2f})"


WaypointLike = Union[TrajectoryPoint, Sequence[float], np.ndarray]


def as_waypoint(point: WaypointLike) -> TrajectoryPoint:
    """
    Convert a tuple ``(x, y, z)``, ``(x, y, z, yaw)`` or a TrajectoryPoint to a waypoint.
    """
    if isinstance(point, TrajectoryPoint):
        return point
    values = np.asarray(point, dtype=float).ravel()
    if len(values) == 3:
        return TrajectoryPoint(0.0, values)
    if len(values) == 4:
        return TrajectoryPoint(0.0, values[:3], yaw=values[3])
    raise ValueError(f"Waypoint must have 3 or 4 components, got {len(values)}")


def as_waypoints(points: Sequence[WaypointLike]) -> List[TrajectoryPoint]:
    return [as_waypoint(p) for p in points]
