import numpy as np
import pytest

from mav_path_smoothing import (
    ConfigurationError,
    CostWeights,
    LocoOptimizer,
    OptimizationNotConvergedError,
    OptimizationSingularError,
    SmoothingConfig,
    TrajectoryPoint
)
from mav_path_smoothing.smoothing import smoothness_matrix
from mav_path_smoothing.trajectory import as_waypoints


def interior_deviation(trajectory, waypoints):
    boundaries = trajectory.boundary_positions()
    return sum(np.linalg.norm(boundaries[j] - np.asarray(wp[:3], dtype=float)) ** 2
               for j, wp in enumerate(waypoints) if 0 < j < len(waypoints) - 1)


def test_smoothness_matrix_matches_integral():
    # p(s) = s^4: int_0^1 (p'''')^2 ds = 24^2
    Q = smoothness_matrix(5, 4)
    assert Q[4, 4] == pytest.approx(576.0)
    assert Q[4, 5] == pytest.approx(24 * 120 / 2)
    assert np.all(Q[:4] == 0)
    np.testing.assert_allclose(Q, Q.T)


def test_hard_constraints_pass_through_waypoints(fixed_time_config, corner_waypoints):
    optimizer = LocoOptimizer(fixed_time_config)
    trajectory = optimizer.solve(as_waypoints(corner_waypoints), [1.0, 1.0])

    for t, waypoint in zip(trajectory.boundary_times(), corner_waypoints):
        np.testing.assert_allclose(trajectory.evaluate(t)[:3], waypoint, atol=1e-6)
    assert trajectory.max_continuity_error(fixed_time_config.continuity_order) < 1e-6
    np.testing.assert_allclose(trajectory.evaluate(0.0, 1)[:3], 0.0, atol=1e-6)
    np.testing.assert_allclose(trajectory.evaluate(trajectory.total_time, 2)[:3], 0.0, atol=1e-6)
    assert trajectory.cost.waypoint == 0.0
    assert trajectory.cost.time == pytest.approx(2.0)


def test_soft_waypoint_weight_pulls_trajectory_closer(fixed_time_config, zigzag_waypoints):
    optimizer = LocoOptimizer(fixed_time_config)
    points = as_waypoints(zigzag_waypoints)
    durations = [1.0, 1.0, 1.0]

    loose = optimizer.solve(points, durations, CostWeights(waypoint=1.0), hard_constraints=False)
    tight = optimizer.solve(points, durations, CostWeights(waypoint=1000.0), hard_constraints=False)

    assert interior_deviation(tight, zigzag_waypoints) < interior_deviation(loose, zigzag_waypoints)
    assert loose.max_continuity_error(fixed_time_config.continuity_order) < 1e-6
    # start and goal stay exact in soft mode
    np.testing.assert_allclose(loose.boundary_positions()[0], zigzag_waypoints[0], atol=1e-6)
    np.testing.assert_allclose(loose.boundary_positions()[-1], zigzag_waypoints[-1], atol=1e-6)


def test_waypoint_derivatives_are_honoured(fixed_time_config):
    optimizer = LocoOptimizer(fixed_time_config)
    points = [
        TrajectoryPoint(0.0, [0, 0, 0], velocity=[0.5, 0, 0]),
        TrajectoryPoint(0.0, [1, 0, 0], velocity=[1.0, 0.5, 0]),
        TrajectoryPoint(0.0, [1, 1, 0]),
    ]
    trajectory = optimizer.solve(points, [1.5, 1.5])
    np.testing.assert_allclose(trajectory.evaluate(0.0, 1)[:3], [0.5, 0, 0], atol=1e-6)
    np.testing.assert_allclose(trajectory.evaluate(1.5, 1)[:3], [1.0, 0.5, 0], atol=1e-6)


def test_yaw_is_unwrapped(fixed_time_config):
    optimizer = LocoOptimizer(fixed_time_config)
    trajectory = optimizer.solve(as_waypoints([(0, 0, 0, 3.0), (1, 0, 0, -3.0)]), [1.0])
    # shortest turn crosses pi instead of sweeping through zero
    assert trajectory.sample(trajectory.total_time).yaw == pytest.approx(2 * np.pi - 3.0)
    assert all(trajectory.sample(t).yaw >= 3.0 - 1e-9 for t in np.linspace(0.0, 1.0, 11))


def test_rank_deficient_program_raises():
    config = SmoothingConfig(continuity_order=1, optimize_time=False)
    waypoints = as_waypoints([(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0), (4, 0, 0)])
    with pytest.raises(OptimizationSingularError):
        LocoOptimizer(config).solve(waypoints, [1.0, 1.0, 1.0, 1.0])


def test_duration_mismatch_raises(fixed_time_config, corner_waypoints):
    optimizer = LocoOptimizer(fixed_time_config)
    with pytest.raises(ConfigurationError):
        optimizer.solve(as_waypoints(corner_waypoints), [1.0])
    with pytest.raises(ConfigurationError):
        optimizer.solve(as_waypoints(corner_waypoints), [1.0, -1.0])


def test_iteration_budget_exhaustion_carries_best_trajectory(corner_waypoints):
    config = SmoothingConfig(max_iterations=1, convergence_tolerance=1e-12)
    optimizer = LocoOptimizer(config)
    points = as_waypoints(corner_waypoints)
    initial = optimizer.solve(points, [5.0, 0.2])

    with pytest.raises(OptimizationNotConvergedError) as info:
        optimizer.solve(points, [5.0, 0.2], optimize_time=True)
    assert info.value.iterations == 1
    best = info.value.trajectory
    assert best is not None
    assert best.cost.converged is False
    assert best.cost.total < initial.cost.total


def test_time_refinement_never_increases_cost(corner_waypoints):
    optimizer = LocoOptimizer(SmoothingConfig())
    points = as_waypoints(corner_waypoints)
    fixed = optimizer.solve(points, [1.0, 1.0])
    try:
        refined = optimizer.solve(points, [1.0, 1.0], optimize_time=True)
    except OptimizationNotConvergedError as e:
        refined = e.trajectory

    assert refined.cost.total <= fixed.cost.total + 1e-9
    for t, waypoint in zip(refined.boundary_times(), corner_waypoints):
        np.testing.assert_allclose(refined.evaluate(t)[:3], waypoint, atol=1e-6)
    config = optimizer.config
    assert all(config.min_segment_time - 1e-9 <= T <= config.max_segment_time + 1e-9
               for T in refined.segment_times)


def test_two_point_interpolation_matches_single_segment_solve(fixed_time_config):
    optimizer = LocoOptimizer(fixed_time_config)
    start = TrajectoryPoint(0.0, [0, 0, 0], velocity=[0.2, 0.1, 0], yaw=0.3)
    goal = TrajectoryPoint(0.0, [3, 1, 2], yaw=-0.4)

    direct = optimizer.interpolate_two_points(start, goal, 2.5)
    solved = optimizer.solve([start, goal], [2.5])

    assert direct.degree == fixed_time_config.poly_degree
    for t in np.linspace(0.0, 2.5, 9):
        np.testing.assert_allclose(direct.evaluate(t), solved.evaluate(t), atol=1e-6)
    assert direct.cost.smoothness == pytest.approx(solved.cost.smoothness, rel=1e-6)


def test_resolving_through_own_boundaries_is_stable(fixed_time_config, corner_waypoints):
    optimizer = LocoOptimizer(fixed_time_config)
    first = optimizer.solve(as_waypoints(corner_waypoints), [1.0, 1.0])
    again = optimizer.solve(as_waypoints(first.boundary_positions()), first.segment_times)
    np.testing.assert_allclose(again.boundary_positions(), first.boundary_positions(), atol=1e-6)
    assert again.cost.total == pytest.approx(first.cost.total, rel=1e-6)
    for t in np.linspace(0.0, first.total_time, 7):
        np.testing.assert_allclose(again.evaluate(t)[:3], first.evaluate(t)[:3], atol=1e-6)


@pytest.mark.parametrize("durations", [[50.0, 50.0], [100.0, 100.0], [0.1, 100.0], [100.0, 0.1]])
def test_long_and_mixed_segment_times(fixed_time_config, corner_waypoints, durations):
    optimizer = LocoOptimizer(fixed_time_config)
    trajectory = optimizer.solve(as_waypoints(corner_waypoints), durations)
    np.testing.assert_allclose(trajectory.boundary_positions(), corner_waypoints, atol=1e-6)
    np.testing.assert_allclose(trajectory.evaluate(0.0, 1)[:3], 0.0, atol=1e-6)
    if durations[0] == durations[1]:
        assert trajectory.max_continuity_error(fixed_time_config.continuity_order) < 1e-6


def test_long_segments_in_soft_mode(fixed_time_config, zigzag_waypoints):
    optimizer = LocoOptimizer(fixed_time_config)
    trajectory = optimizer.solve(as_waypoints(zigzag_waypoints), [100.0, 100.0, 100.0], hard_constraints=False)
    np.testing.assert_allclose(trajectory.boundary_positions()[0], zigzag_waypoints[0], atol=1e-6)
    np.testing.assert_allclose(trajectory.boundary_positions()[-1], zigzag_waypoints[-1], atol=1e-6)
    assert np.isfinite(trajectory.cost.total)


@pytest.mark.parametrize("hard_constraints, durations", [
    (True, [1.0, 1.5, 0.7]),
    (False, [1.0, 1.5, 0.7]),
    (True, [0.3, 20.0, 2.0]),
])
def test_time_gradient_matches_central_differences(fixed_time_config, zigzag_waypoints,
                                                   hard_constraints, durations):
    optimizer = LocoOptimizer(fixed_time_config)
    points = as_waypoints(zigzag_waypoints)
    gradient = optimizer.time_gradient(points, durations, hard_constraints=hard_constraints)

    numerical = []
    for i, T in enumerate(durations):
        h = 1e-5 * T
        up, down = list(durations), list(durations)
        up[i] += h
        down[i] -= h
        numerical.append((optimizer.solve(points, up, hard_constraints=hard_constraints).cost.total
                          - optimizer.solve(points, down, hard_constraints=hard_constraints).cost.total) / (2 * h))
    np.testing.assert_allclose(gradient, numerical, rtol=1e-4, atol=1e-5)
