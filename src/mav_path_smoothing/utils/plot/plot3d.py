import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Line3DCollection

from ...smoothing.materializer import sample_trajectory
from ...trajectory import PolynomialTrajectory, positions_of, as_waypoints


class Plot3D:
    """
    Matplotlib view of smoothed trajectories.

    Parameters:
        samples_dt (float): sampling period used to draw the curve
        cmap (str): colormap for the speed along the trajectory
    """
    def __init__(self, samples_dt: float = 0.02, cmap: str = "viridis") -> None:
        self.samples_dt = samples_dt
        self.cmap = cmap

    def plot_trajectory(self, trajectory: PolynomialTrajectory, waypoints=None, ax=None, title: str = None):
        """
        Draw the trajectory coloured by speed, its segment boundaries and the waypoints.

        Returns:
            ax: the 3d axes that were drawn on
        """
        if ax is None:
            fig = plt.figure()
            ax = fig.add_subplot(111, projection="3d")

        dt = min(self.samples_dt, trajectory.total_time / 2)
        states = sample_trajectory(trajectory, dt)
        positions = np.array([s.position for s in states])
        speed = np.array([np.linalg.norm(s.velocity) for s in states])

        points = positions.reshape(-1, 1, 3)
        segments = np.concatenate([points[:-1], points[1:]], axis=1)
        lines = Line3DCollection(segments, cmap=self.cmap)
        lines.set_array(speed[:-1])
        ax.add_collection3d(lines)

        boundaries = trajectory.boundary_positions()
        ax.scatter(boundaries[:, 0], boundaries[:, 1], boundaries[:, 2], color="black", s=8)
        if waypoints is not None:
            wp = positions_of(as_waypoints(waypoints))
            ax.scatter(wp[:, 0], wp[:, 1], wp[:, 2], color="red")

        lower, upper = positions.min(axis=0), positions.max(axis=0)
        margin = max(float(np.max(upper - lower)) * 0.05, 1e-3)
        ax.set_xlim(lower[0] - margin, upper[0] + margin)
        ax.set_ylim(lower[1] - margin, upper[1] + margin)
        ax.set_zlim(lower[2] - margin, upper[2] + margin)
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_zlabel("z")
        ax.set_title(title or f"{trajectory.num_segments} segments, T={trajectory.total_time:.2f}s")
        plt.colorbar(lines, ax=ax, label="speed")
        return ax
