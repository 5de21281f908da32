"""
@file: visibility_graph.py
@brief: Visibility-graph collaborator interface and a Theta* voxel-grid implementation
"""
import heapq
import itertools
import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..errors import NoPathFound

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S"
)

Coord = Tuple[int, int, int]


class VisibilityGraph(ABC):
    """
    Collaborator returning the shortest obstacle-free polyline between two points.
    """

    @abstractmethod
    def shortest_visible_path(self, start: np.ndarray, goal: np.ndarray, map_context) -> np.ndarray:
        """
        Returns:
            polyline (np.ndarray): shape (n_points, 3), first row start, last row goal

        Raises:
            NoPathFound: start and goal cannot be connected
        """
        pass


class VoxelMap:
    """
    Occupied voxels of a bounded 3-d grid.

    Parameters:
        obstacles (Iterable[Coord]): occupied voxel indices
        x_range, y_range, z_range (int): number of voxels per axis
        resolution (float): voxel edge length
        origin (tuple): world position of voxel (0, 0, 0)

    Examples:
        >>> voxel_map = VoxelMap({(5, y, 0) for y in range(8)}, 11, 11, 1)
        >>> voxel_map.is_free((5, 9, 0))
        True
    """
    def __init__(self, obstacles: Iterable[Coord], x_range: int, y_range: int, z_range: int,
                 resolution: float = 1.0, origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)) -> None:
        self.obstacles = {tuple(int(c) for c in o) for o in obstacles}
        self.x_range = x_range
        self.y_range = y_range
        self.z_range = z_range
        self.resolution = resolution
        self.origin = np.asarray(origin, dtype=float)

    def in_bounds(self, p: Coord) -> bool:
        return 0 <= p[0] < self.x_range and 0 <= p[1] < self.y_range and 0 <= p[2] < self.z_range

    def is_free(self, p: Coord) -> bool:
        return self.in_bounds(p) and p not in self.obstacles

    def to_voxel(self, point) -> Coord:
        index = np.round((np.asarray(point, dtype=float) - self.origin) / self.resolution).astype(int)
        return int(index[0]), int(index[1]), int(index[2])

    def to_point(self, voxel: Coord) -> np.ndarray:
        return self.origin + np.asarray(voxel, dtype=float) * self.resolution


class GridVisibilityGraph(VisibilityGraph):
    """
    Theta* over a VoxelMap (any-angle shortest paths).

    Every expanded voxel tries to connect to its parent's parent when there is
    line of sight, so the returned polyline only bends at obstacle corners.
    """

    def __init__(self, log_interval: int = 1000) -> None:
        self.log_interval = log_interval
        self.motions = [m for m in itertools.product((-1, 0, 1), repeat=3) if m != (0, 0, 0)]

    def __str__(self) -> str:
        return "Theta* 3D"

    def shortest_visible_path(self, start, goal, map_context: VoxelMap) -> np.ndarray:
        start = np.asarray(start, dtype=float)
        goal = np.asarray(goal, dtype=float)
        s, g = map_context.to_voxel(start), map_context.to_voxel(goal)
        if not map_context.is_free(s) or not map_context.is_free(g):
            raise NoPathFound(f"Endpoint {s if not map_context.is_free(s) else g} is occupied or out of bounds")

        if self.lineOfSight(s, g, map_context):
            return np.vstack([start, goal])

        voxels = self.plan(s, g, map_context)
        polyline = np.array([map_context.to_point(v) for v in voxels])
        polyline[0], polyline[-1] = start, goal
        return polyline

    def plan(self, start: Coord, goal: Coord, voxel_map: VoxelMap) -> List[Coord]:
        """
        Returns:
            path (list[Coord]): start->goal voxel path with only the corner voxels
        """
        g: Dict[Coord, float] = {start: 0.0}
        parent: Dict[Coord, Coord] = {start: start}
        closed = set()
        counter = itertools.count()
        OPEN: List[tuple] = [(self.h(start, goal), next(counter), start)]

        expansions = 0
        while OPEN:
            _, _, node = heapq.heappop(OPEN)
            if node in closed:
                continue
            closed.add(node)
            expansions += 1

            if node == goal:
                logging.info(f"Visible path found after expanding {expansions} voxels")
                return self.extractPath(parent, start, goal)

            if expansions % self.log_interval == 0:
                logging.info(f"Expanded {expansions} voxels, OPEN size={len(OPEN)}")

            for nbr in self.getNeighbor(node, voxel_map):
                if nbr in closed:
                    continue
                # Path 2: connect straight to the parent of node when visible
                node_p = parent[node]
                if self.lineOfSight(node_p, nbr, voxel_map):
                    via, cost = node_p, g[node_p] + self.dist(node_p, nbr)
                else:
                    via, cost = node, g[node] + self.dist(node, nbr)
                if cost < g.get(nbr, math.inf):
                    g[nbr] = cost
                    parent[nbr] = via
                    heapq.heappush(OPEN, (cost + self.h(nbr, goal), next(counter), nbr))

        logging.warning(f"No visible path from {start} to {goal}")
        raise NoPathFound(f"No visible path from {start} to {goal}")

    def getNeighbor(self, node: Coord, voxel_map: VoxelMap) -> List[Coord]:
        neighbors = []
        for motion in self.motions:
            cand = (node[0] + motion[0], node[1] + motion[1], node[2] + motion[2])
            if voxel_map.is_free(cand) and self.lineOfSight(node, cand, voxel_map):
                neighbors.append(cand)
        return neighbors

    @staticmethod
    def dist(a: Coord, b: Coord) -> float:
        return math.dist(a, b)

    @staticmethod
    def h(node: Coord, goal: Coord) -> float:
        return math.dist(node, goal)

    # ---------- 3D Line of Sight (integer Bresenham) ----------

    def lineOfSight(self, a: Coord, b: Coord, voxel_map: VoxelMap) -> bool:
        """
        Returns True if the straight segment from a -> b passes only through free voxels.
        Includes endpoints.
        """
        if not voxel_map.is_free(a) or not voxel_map.is_free(b):
            return False

        # diagonal moves must not squeeze between two occupied voxels
        delta = [b[i] - a[i] for i in range(3)]
        if max(abs(d) for d in delta) == 1:
            for i in range(3):
                if delta[i] != 0:
                    side = list(a)
                    side[i] += delta[i]
                    if not voxel_map.is_free(tuple(side)):
                        return False

        dx, dy, dz = (abs(d) for d in delta)
        steps = [1 if d >= 0 else -1 for d in delta]
        p = list(a)

        # walk along the dominant axis, stepping the others on error overflow
        axis = max(range(3), key=lambda i: (dx, dy, dz)[i])
        others = [i for i in range(3) if i != axis]
        lengths = (dx, dy, dz)
        errors = {i: lengths[axis] // 2 for i in others}
        while p[axis] != b[axis]:
            p[axis] += steps[axis]
            for i in others:
                errors[i] -= lengths[i]
                if errors[i] < 0:
                    p[i] += steps[i]
                    errors[i] += lengths[axis]
            if not voxel_map.is_free(tuple(p)):
                return False
        return True

    # ---------- path reconstruction ----------

    def extractPath(self, parent: Dict[Coord, Coord], start: Coord, goal: Coord) -> List[Coord]:
        """
        Build start->goal path using the stored parents.
        """
        node = goal
        path = [node]
        while node != start:
            node = parent[node]
            path.append(node)
        path.reverse()
        return path
