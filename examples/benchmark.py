"""
@file: benchmark.py
@brief: Compare the LOCO and baseline smoothers over the example maps
"""
import csv
import random
import time

from tqdm import tqdm

from scenarios import build_map, scenarios
from mav_path_smoothing import GridVisibilityGraph, LocoSmoother, PolynomialSmoother, SmoothingConfig, SmoothingError
from mav_path_smoothing import WaypointPreprocessor

if __name__ == '__main__':
    width = 21
    height = 15
    depth = 7

    iterations = 20
    base = SmoothingConfig(resample_visibility=True, accept_unconverged=True)
    smoothers = {
        "loco": lambda voxel_map: LocoSmoother(base, visibility_graph=GridVisibilityGraph(), map_context=voxel_map),
        "loco_soft": lambda voxel_map: LocoSmoother(base.replace(add_waypoints=True),
                                                    visibility_graph=GridVisibilityGraph(), map_context=voxel_map),
        "loco_fixed_time": lambda voxel_map: LocoSmoother(base.replace(optimize_time=False),
                                                          visibility_graph=GridVisibilityGraph(),
                                                          map_context=voxel_map),
    }

    with open('smoothing_results.csv', mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow(['Scenario', 'Smoother', 'Runtime (s)', 'Duration', 'Cost', 'Segments',
                         'Iterations', 'Start', 'Goal', 'Seed'])

        for scenario in tqdm(scenarios):
            for i in range(iterations):
                # Seed random for reproducibility
                random.seed(i)
                start = (random.randint(2, width // 2 - 2), random.randint(2, height - 3), random.randint(2, depth - 3))
                goal = (random.randint(width // 2 + 2, width - 3), random.randint(2, height - 3),
                        random.randint(2, depth - 3))
                voxel_map = build_map(scenario, width, height, depth, start, goal)

                for name, make in smoothers.items():
                    smoother = make(voxel_map)
                    start_time = time.time()
                    try:
                        trajectory = smoother.get_trajectory_between_two_points(start, goal)
                    except SmoothingError:
                        writer.writerow([scenario, name, time.time() - start_time, None, None, None, None,
                                         start, goal, i])
                        continue
                    runtime = time.time() - start_time
                    writer.writerow([scenario, name, runtime, trajectory.total_time, trajectory.cost.total,
                                     trajectory.num_segments, trajectory.cost.iterations, start, goal, i])

                # baseline through the same visible waypoints
                preprocessor = WaypointPreprocessor(base, GridVisibilityGraph(), voxel_map)
                start_time = time.time()
                try:
                    waypoints = preprocessor.resample([start, goal])
                    trajectory = PolynomialSmoother(base).get_trajectory_between_waypoints(waypoints)
                except SmoothingError:
                    continue
                writer.writerow([scenario, "polynomial", time.time() - start_time, trajectory.total_time,
                                 trajectory.cost.total, trajectory.num_segments, 0, start, goal, i])

    print("Results saved to smoothing_results.csv")
