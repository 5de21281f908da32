import matplotlib.pyplot as plt

from mav_path_smoothing import LocoSmoother
from mav_path_smoothing.utils import Plot3D


def test_plot_trajectory(fixed_time_config, corner_waypoints):
    trajectory = LocoSmoother(fixed_time_config).get_trajectory_between_waypoints(corner_waypoints)
    ax = Plot3D(samples_dt=0.05).plot_trajectory(trajectory, waypoints=corner_waypoints)

    assert ax.get_title() == f"2 segments, T={trajectory.total_time:.2f}s"
    assert len(ax.collections) == 3
    plt.close("all")
