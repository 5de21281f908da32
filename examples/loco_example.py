"""
@file: loco_example.py
@brief: Smooth a waypoint set or a start/goal pair through a voxel map and plot it
"""
import argparse

import matplotlib.pyplot as plt

from scenarios import build_map, scenarios, waypoint_sets
from mav_path_smoothing import (
    CostWeights,
    GridVisibilityGraph,
    LocoSmoother,
    PolynomialSmoother,
    SmoothingConfig,
    SmoothingError
)
from mav_path_smoothing.utils import Plot3D

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="LOCO trajectory smoothing demo")
    parser.add_argument("--waypoints", "-w", choices=waypoint_sets.keys(), default=None,
                        help="Smooth a fixed waypoint set instead of a start/goal pair")
    parser.add_argument("--scenario", "-s", choices=scenarios.keys(), default="door",
                        help="Voxel map for the start/goal pair")
    parser.add_argument("--smoother", choices=["loco", "polynomial"], default="loco")
    parser.add_argument("--segments", "-n", type=int, default=3, help="Segments of a straight start/goal split")
    parser.add_argument("--soft", action="store_true", help="Treat interior waypoints as soft costs")
    parser.add_argument("--fixed-time", action="store_true", help="Keep the estimated segment times")
    parser.add_argument("--w-time", type=float, default=1.0, help="Weight of the total duration")
    parser.add_argument("--v-max", type=float, default=1.5, help="Speed used to seed segment times")
    args = parser.parse_args()

    config = SmoothingConfig(
        num_segments=args.segments,
        add_waypoints=args.soft,
        optimize_time=not args.fixed_time,
        accept_unconverged=True,
        v_max=args.v_max,
        weights=CostWeights(time=args.w_time)
    )

    if args.waypoints is not None:
        waypoints = waypoint_sets[args.waypoints]
        voxel_map = None
    else:
        XR, YR, ZR = 21, 15, 7
        start, goal = (2, 2, 3), (XR - 3, 2, 3)
        voxel_map = build_map(args.scenario, XR, YR, ZR, start, goal)
        waypoints = [start, goal]
        config = config.replace(resample_visibility=True)

    if args.smoother == "polynomial":
        smoother = PolynomialSmoother(config)
    else:
        smoother = LocoSmoother(config, visibility_graph=GridVisibilityGraph(), map_context=voxel_map)

    try:
        trajectory = smoother.smooth(waypoints)
    except SmoothingError as e:
        print(f"Smoothing failed: {e}")
        raise SystemExit(1)

    cost = trajectory.cost
    print(f"{smoother}: {trajectory}")
    print(f"Segment times: {[round(T, 3) for T in trajectory.segment_times]}")
    print(f"Cost: smoothness={cost.smoothness:.4g}, time={cost.time:.4g}, "
          f"waypoint={cost.waypoint:.4g}, iterations={cost.iterations}, converged={cost.converged}")
    print(f"Path length: {trajectory.get_path_length():.3f}")

    ax = Plot3D().plot_trajectory(trajectory, waypoints=waypoints, title=str(smoother))
    if voxel_map is not None:
        interior = [o for o in voxel_map.obstacles
                    if 0 < o[0] < XR - 1 and 0 < o[1] < YR - 1 and 0 < o[2] < ZR - 1]
        if interior:
            xs, ys, zs = zip(*interior)
            ax.scatter(xs, ys, zs, color="gray", alpha=0.15, s=20)
    plt.show()
