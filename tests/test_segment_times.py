import pytest

from mav_path_smoothing import DegenerateInputError, SegmentTimeEstimator, SmoothingConfig
from mav_path_smoothing.trajectory import as_waypoints


def test_durations_from_distance():
    estimator = SegmentTimeEstimator(SmoothingConfig(v_max=2.0, a_max=100.0))
    durations = estimator.estimate_times(as_waypoints([(0, 0, 0), (4, 0, 0), (4, 3, 0)]))
    assert durations == pytest.approx([2.0, 1.5])


def test_acceleration_limit_lengthens_short_hops():
    # 4 m at 10 m/s would take 0.4 s, but accelerating and braking at 1 m/s^2 takes 4 s
    estimator = SegmentTimeEstimator(SmoothingConfig(v_max=10.0, a_max=1.0))
    durations = estimator.estimate_times(as_waypoints([(0, 0, 0), (4, 0, 0), (404, 0, 0)]))
    assert durations == pytest.approx([4.0, 40.0])


def test_durations_are_clamped():
    config = SmoothingConfig(v_max=1.0, min_segment_time=0.5, max_segment_time=10.0)
    durations = SegmentTimeEstimator(config).estimate_times(
        as_waypoints([(0, 0, 0), (0.01, 0, 0), (100.01, 0, 0)]))
    assert durations == pytest.approx([0.5, 10.0])


def test_degenerate_waypoints():
    estimator = SegmentTimeEstimator(SmoothingConfig())
    with pytest.raises(DegenerateInputError):
        estimator.estimate_times(as_waypoints([(1, 1, 1)]))
    with pytest.raises(DegenerateInputError):
        estimator.estimate_times(as_waypoints([(1, 1, 1), (1, 1, 1)]))
