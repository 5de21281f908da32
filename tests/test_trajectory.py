import numpy as np
import pytest

from mav_path_smoothing import DegenerateInputError, PolynomialSegment, PolynomialTrajectory, TrajectoryPoint
from mav_path_smoothing.trajectory import (
    as_waypoint,
    compute_path_length,
    interpolate_polyline_yaw,
    split_straight_line,
    time_basis,
    validate_waypoints
)


def test_segment_evaluates_monomials():
    # p(t) = 1 + 2t + 3t^2
    segment = PolynomialSegment([[1.0, 2.0, 3.0]], duration=4.0)
    assert segment.evaluate(2.0)[0] == pytest.approx(17.0)
    assert segment.evaluate(2.0, 1)[0] == pytest.approx(14.0)
    assert segment.evaluate(2.0, 2)[0] == pytest.approx(6.0)
    assert segment.evaluate(2.0, 3)[0] == pytest.approx(0.0)


def test_segment_clamps_time():
    segment = PolynomialSegment([[0.0, 1.0]], duration=2.0)
    assert segment.evaluate(5.0)[0] == pytest.approx(2.0)
    assert segment.evaluate(-1.0)[0] == pytest.approx(0.0)


@pytest.mark.parametrize("duration", [0.0, -1.0, float("inf")])
def test_segment_rejects_bad_duration(duration):
    with pytest.raises(ValueError):
        PolynomialSegment([[1.0]], duration)


def test_time_basis():
    np.testing.assert_allclose(time_basis(2.0, 3, 0), [1, 2, 4, 8])
    np.testing.assert_allclose(time_basis(2.0, 3, 2), [0, 0, 2, 12])


def test_trajectory_chains_segments():
    first = PolynomialSegment([[0.0, 1.0]], duration=1.0)
    second = PolynomialSegment([[1.0, 2.0]], duration=2.0, start_time=7.0)
    trajectory = PolynomialTrajectory([first, second])

    assert trajectory.total_time == pytest.approx(3.0)
    assert trajectory.segment_times == [1.0, 2.0]
    assert trajectory.segments[1].start_time == pytest.approx(1.0)
    np.testing.assert_allclose(trajectory.boundary_times(), [0.0, 1.0, 3.0])
    # the boundary belongs to the later segment
    assert trajectory.evaluate(1.0, 1)[0] == pytest.approx(2.0)
    assert trajectory.evaluate(2.0)[0] == pytest.approx(3.0)
    assert trajectory.evaluate(10.0)[0] == pytest.approx(5.0)
    assert len(trajectory) == 2


def test_trajectory_rejects_empty_and_mixed_segments():
    with pytest.raises(ValueError):
        PolynomialTrajectory([])
    with pytest.raises(ValueError):
        PolynomialTrajectory([PolynomialSegment([[1.0, 2.0]], 1.0), PolynomialSegment([[1.0]], 1.0)])


def test_sample_splits_position_and_yaw():
    coeffs = np.array([[0.0, 1.0], [1.0, 0.0], [2.0, 0.0], [0.5, 0.25]])
    trajectory = PolynomialTrajectory.from_coefficients([coeffs], [2.0])
    state = trajectory.sample(1.0)
    np.testing.assert_allclose(state.position, [1.0, 1.0, 2.0])
    np.testing.assert_allclose(state.velocity, [1.0, 0.0, 0.0])
    assert state.yaw == pytest.approx(0.75)
    assert state.yaw_rate == pytest.approx(0.25)
    assert trajectory.get_path_length() == pytest.approx(2.0)


def test_as_waypoint():
    point = as_waypoint((1, 2, 3, 0.5))
    np.testing.assert_allclose(point.position, [1, 2, 3])
    assert point.yaw == 0.5
    with pytest.raises(ValueError):
        as_waypoint((1, 2))
    with pytest.raises(ValueError):
        TrajectoryPoint(0.0, [1.0, 2.0])


@pytest.mark.parametrize("waypoints", [
    [],
    [(0, 0, 0)],
    [(0, 0, 0), (0, 0, 0)],
    [(0, 0, 0), (1, 2)],
    [(0, 0, 0), (float("nan"), 0, 0)],
])
def test_validate_waypoints_rejects_degenerate_input(waypoints):
    with pytest.raises(DegenerateInputError):
        validate_waypoints(waypoints)


def test_split_straight_line_keeps_endpoints():
    start = TrajectoryPoint(0.0, [0, 0, 0], velocity=[1, 0, 0], yaw=0.0)
    goal = TrajectoryPoint(0.0, [4, 0, 0], yaw=1.0)
    points = split_straight_line(start, goal, 4)
    assert len(points) == 5
    assert points[0] is start and points[-1] is goal
    np.testing.assert_allclose(points[2].position, [2, 0, 0])
    assert points[2].yaw == pytest.approx(0.5)
    assert points[2].velocity is None
    assert compute_path_length(points) == pytest.approx(4.0)


def test_polyline_yaw_follows_arc_length():
    polyline = np.array([[0, 0, 0], [1, 0, 0], [1, 3, 0]], dtype=float)
    yaws = interpolate_polyline_yaw(polyline, 0.0, 2.0)
    np.testing.assert_allclose(yaws, [0.0, 0.5, 2.0])
