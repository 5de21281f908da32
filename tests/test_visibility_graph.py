import numpy as np
import pytest

from mav_path_smoothing import GridVisibilityGraph, LocoSmoother, NoPathFound, SmoothingConfig, VoxelMap


@pytest.fixture
def wall_map():
    return VoxelMap({(5, y, 0) for y in range(8)}, 11, 11, 1)


def test_direct_line_of_sight(wall_map):
    graph = GridVisibilityGraph()
    polyline = graph.shortest_visible_path((1, 1, 0), (4, 6, 0), wall_map)
    np.testing.assert_allclose(polyline, [[1, 1, 0], [4, 6, 0]])


def test_path_around_wall(wall_map):
    graph = GridVisibilityGraph()
    polyline = graph.shortest_visible_path((1, 1, 0), (9, 1, 0), wall_map)

    assert len(polyline) >= 3
    np.testing.assert_allclose(polyline[0], [1, 1, 0])
    np.testing.assert_allclose(polyline[-1], [9, 1, 0])
    assert polyline[:, 1].max() >= 8
    for a, b in zip(polyline[:-1], polyline[1:]):
        assert graph.lineOfSight(wall_map.to_voxel(a), wall_map.to_voxel(b), wall_map)


def test_line_of_sight_blocked_by_wall(wall_map):
    graph = GridVisibilityGraph()
    assert not graph.lineOfSight((1, 1, 0), (9, 1, 0), wall_map)
    assert graph.lineOfSight((1, 9, 0), (9, 9, 0), wall_map)


def test_fully_blocked():
    voxel_map = VoxelMap({(5, y, 0) for y in range(11)}, 11, 11, 1)
    with pytest.raises(NoPathFound):
        GridVisibilityGraph().shortest_visible_path((1, 1, 0), (9, 1, 0), voxel_map)


def test_occupied_endpoint(wall_map):
    with pytest.raises(NoPathFound):
        GridVisibilityGraph().shortest_visible_path((5, 3, 0), (9, 1, 0), wall_map)
    with pytest.raises(NoPathFound):
        GridVisibilityGraph().shortest_visible_path((1, 1, 0), (20, 1, 0), wall_map)


def test_voxel_map_world_conversion():
    voxel_map = VoxelMap([], 10, 10, 10, resolution=0.5, origin=(1.0, 0.0, 0.0))
    assert voxel_map.to_voxel((2.0, 1.0, 0.2)) == (2, 2, 0)
    np.testing.assert_allclose(voxel_map.to_point((2, 2, 0)), [2.0, 1.0, 0.0])


def test_smoother_follows_visible_path(wall_map):
    config = SmoothingConfig(resample_visibility=True, optimize_time=False)
    graph = GridVisibilityGraph()
    smoother = LocoSmoother(config, visibility_graph=graph, map_context=wall_map)

    trajectory = smoother.get_trajectory_between_two_points((1, 1, 0), (9, 1, 0))
    polyline = graph.shortest_visible_path((1, 1, 0), (9, 1, 0), wall_map)

    assert trajectory.num_segments == len(polyline) - 1
    np.testing.assert_allclose(trajectory.boundary_positions(), polyline, atol=1e-6)
