"""
@file: scenarios.py
@brief: Voxel maps and waypoint sets used by the smoothing examples
"""
import random

from mav_path_smoothing import VoxelMap


def shell_walls(x_range, y_range, z_range):
    """Boundary voxels keeping the vehicle inside the box."""
    obs = set()
    for x in range(x_range):
        for y in range(y_range):
            for z in range(z_range):
                if x in (0, x_range - 1) or y in (0, y_range - 1) or z in (0, z_range - 1):
                    obs.add((x, y, z))
    return obs


def scenario_empty_box(x_range, y_range, z_range):
    return shell_walls(x_range, y_range, z_range)


def scenario_two_rooms_with_door(x_range, y_range, z_range, door_size=2):
    """
    Interior wall at mid X with a single door, so the visible path must
    bend through the opening.
    """
    obs = shell_walls(x_range, y_range, z_range)
    x0 = x_range // 2
    for y in range(1, y_range - 1):
        for z in range(1, z_range - 1):
            obs.add((x0, y, z))

    # the door sits near the far Y wall so start -> goal is never straight
    y_door, z_mid = y_range - 2 - door_size, z_range // 2
    for dy in range(door_size):
        for dz in range(-(door_size // 2), door_size - (door_size // 2)):
            obs.discard((x0, y_door + dy, z_mid + dz))
    return obs


def scenario_pillars(x_range, y_range, z_range, density=0.15, seed=0):
    """Full-height columns scattered on a lattice that leaves corridors."""
    rng = random.Random(seed)
    obs = shell_walls(x_range, y_range, z_range)
    cells = [(x, y) for x in range(2, x_range - 2) for y in range(2, y_range - 2)
             if x % 3 != 0 and y % 3 != 0]
    rng.shuffle(cells)
    for x, y in cells[:int(len(cells) * density)]:
        for z in range(1, z_range - 1):
            obs.add((x, y, z))
    return obs


def carve_safety_bubble(obs, center, x_range, y_range, z_range, radius=1):
    """Guarantee free interior voxels around start/goal."""
    cx, cy, cz = (int(round(c)) for c in center)
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            for dz in range(-radius, radius + 1):
                x, y, z = cx + dx, cy + dy, cz + dz
                if 0 < x < x_range - 1 and 0 < y < y_range - 1 and 0 < z < z_range - 1:
                    obs.discard((x, y, z))


def build_map(name, x_range, y_range, z_range, start, goal, resolution=1.0):
    obs = scenarios[name](x_range, y_range, z_range)
    carve_safety_bubble(obs, start, x_range, y_range, z_range)
    carve_safety_bubble(obs, goal, x_range, y_range, z_range)
    return VoxelMap(obs, x_range, y_range, z_range, resolution=resolution)


scenarios = {
    "empty": scenario_empty_box,
    "door": scenario_two_rooms_with_door,
    "pillars": scenario_pillars,
}

# waypoint lists for the plain smoothing (no map) examples, (x, y, z, yaw)
waypoint_sets = {
    "corner": [(0, 0, 1), (4, 0, 1), (4, 4, 1)],
    "zigzag": [(0, 0, 1, 0.0), (2, 1, 1.5, 0.5), (4, -1, 2, 0.0), (6, 1, 1.5, -0.5), (8, 0, 1, 0.0)],
    "climb": [(0, 0, 0), (1, 1, 2), (0, 2, 4), (-1, 1, 6), (0, 0, 8)],
}
