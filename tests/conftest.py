import matplotlib
matplotlib.use("Agg")

import pytest

from mav_path_smoothing import SmoothingConfig


@pytest.fixture
def fixed_time_config():
    return SmoothingConfig(optimize_time=False)


@pytest.fixture
def corner_waypoints():
    return [(0, 0, 0), (1, 0, 0), (1, 1, 0)]


@pytest.fixture
def zigzag_waypoints():
    return [(0, 0, 0), (1, 0, 0), (1, 1, 0), (2, 1, 0.5)]
