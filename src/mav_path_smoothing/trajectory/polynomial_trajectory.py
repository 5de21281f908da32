import math
import numpy as np
from typing import List, Optional, Dict, Any
from .trajectory_base import TrajectoryPoint

# x, y, z and yaw
DIMENSION = 4


def time_basis(t: float, degree: int, derivative: int = 0) -> np.ndarray:
    """
    Row vector mapping monomial coefficients to the given derivative at time t.

    The polynomial is p(t) = c0 + c1*t + ... + cN*t^N, so the entry for power j
    is j!/(j-r)! * t^(j-r) (zero for j < r).
    """
    row = np.zeros(degree + 1)
    for j in range(derivative, degree + 1):
        row[j] = math.perm(j, derivative) * t ** (j - derivative)
    return row


class PolynomialSegment:
    """Polynomial piece of a trajectory, valid on local time [0, duration]."""

    def __init__(self, coeffs: np.ndarray, duration: float, start_time: float = 0.0):
        """
        Initialize polynomial segment.

        Args:
            coeffs: Monomial coefficients [c0, c1, ..., cN] for each dimension,
                    shape (dimension, degree + 1)
            duration: Duration of this segment
            start_time: Start time of this segment in the overall trajectory
        """
        coeffs = np.atleast_2d(np.asarray(coeffs, dtype=float))
        if duration <= 0 or not np.isfinite(duration):
            raise ValueError(f"Segment duration must be positive and finite, got {duration}")
        self.coeffs = coeffs
        self.duration = float(duration)
        self.start_time = float(start_time)
        self.dimension = coeffs.shape[0]
        self.degree = coeffs.shape[1] - 1

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def evaluate(self, t: float, derivative: int = 0) -> np.ndarray:
        """
        Evaluate a derivative of the polynomial at local time t.

        Args:
            t: Time within segment (0 <= t <= duration)
            derivative: Derivative order (0 = position)

        Returns:
            Array of shape (dimension,)
        """
        t = float(np.clip(t, 0.0, self.duration))
        return self.coeffs @ time_basis(t, self.degree, derivative)

    def __repr__(self) -> str:
        return f"PolynomialSegment(T={self.duration:.3f}, degree={self.degree}, dim={self.dimension})"


class PolynomialTrajectory:
    """
    Ordered sequence of polynomial segments with cumulative time offsets.

    Dimensions are x, y, z and yaw. ``cost`` holds the LOCO cost breakdown when
    the trajectory was produced by the optimizer.
    """

    def __init__(self, segments: List[PolynomialSegment], cost=None):
        if not segments:
            raise ValueError("Trajectory needs at least one segment")
        degree, dimension = segments[0].degree, segments[0].dimension
        for segment in segments:
            if segment.degree != degree or segment.dimension != dimension:
                raise ValueError("Segments must share degree and dimension")

        # re-chain start times so they are cumulative
        self.segments: List[PolynomialSegment] = []
        current_time = 0.0
        for segment in segments:
            self.segments.append(PolynomialSegment(segment.coeffs, segment.duration, current_time))
            current_time += segment.duration

        self.degree = degree
        self.dimension = dimension
        self.cost = cost
        self._start_times = np.array([s.start_time for s in self.segments])

    @classmethod
    def from_coefficients(cls, coeffs: List[np.ndarray], durations: List[float], cost=None) -> "PolynomialTrajectory":
        return cls([PolynomialSegment(c, T) for c, T in zip(coeffs, durations)], cost=cost)

    @property
    def num_segments(self) -> int:
        return len(self.segments)

    @property
    def segment_times(self) -> List[float]:
        return [s.duration for s in self.segments]

    @property
    def total_time(self) -> float:
        return self.segments[-1].end_time

    def _locate(self, t: float):
        t = float(np.clip(t, 0.0, self.total_time))
        idx = int(np.searchsorted(self._start_times, t, side='right')) - 1
        idx = min(max(idx, 0), len(self.segments) - 1)
        segment = self.segments[idx]
        return segment, t - segment.start_time

    def evaluate(self, t: float, derivative: int = 0) -> np.ndarray:
        """Evaluate a derivative of all dimensions at trajectory time t (clamped)."""
        segment, local_t = self._locate(t)
        return segment.evaluate(local_t, derivative)

    def sample(self, t: float) -> TrajectoryPoint:
        """Evaluate the full kinematic state at trajectory time t."""
        segment, local_t = self._locate(t)
        p = segment.evaluate(local_t, 0)
        v = segment.evaluate(local_t, 1)
        a = segment.evaluate(local_t, 2)
        j = segment.evaluate(local_t, 3)
        return TrajectoryPoint(
            time=float(np.clip(t, 0.0, self.total_time)),
            position=p[:3],
            velocity=v[:3],
            acceleration=a[:3],
            jerk=j[:3],
            yaw=p[3] if self.dimension > 3 else 0.0,
            yaw_rate=v[3] if self.dimension > 3 else None
        )

    def boundary_times(self) -> np.ndarray:
        """Times of all segment boundaries, including 0 and total_time."""
        return np.append(self._start_times, self.total_time)

    def boundary_positions(self) -> np.ndarray:
        """Positions at all segment boundaries, shape (num_segments + 1, 3)."""
        points = [s.evaluate(0.0)[:3] for s in self.segments]
        points.append(self.segments[-1].evaluate(self.segments[-1].duration)[:3])
        return np.array(points)

    def max_continuity_error(self, order: int) -> float:
        """
        Largest jump of any derivative up to ``order`` across internal boundaries.
        """
        error = 0.0
        for left, right in zip(self.segments[:-1], self.segments[1:]):
            for r in range(order + 1):
                jump = left.evaluate(left.duration, r) - right.evaluate(0.0, r)
                error = max(error, float(np.max(np.abs(jump))))
        return error

    def get_path_length(self, samples_per_segment: int = 100) -> float:
        """Approximate arc length of the position curve."""
        length = 0.0
        for segment in self.segments:
            ts = np.linspace(0.0, segment.duration, samples_per_segment + 1)
            points = np.array([segment.evaluate(t)[:3] for t in ts])
            length += float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))
        return length

    def to_dict(self) -> Dict[str, Any]:
        """Convert trajectory to dictionary for serialization."""
        return {
            'total_time': self.total_time,
            'segments': [
                {
                    'start_time': s.start_time,
                    'duration': s.duration,
                    'coefficients': s.coeffs.tolist()
                }
                for s in self.segments
            ],
            'cost': self.cost.to_dict() if self.cost is not None else None
        }

    def __len__(self) -> int:
        return len(self.segments)

    def __repr__(self) -> str:
        return f"PolynomialTrajectory(segments={len(self.segments)}, T={self.total_time:.3f})"
