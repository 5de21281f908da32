from .visibility_graph import VisibilityGraph, VoxelMap, GridVisibilityGraph
from .planner_service import PlannerService, PlannerResult

__all__ = ["VisibilityGraph", "VoxelMap", "GridVisibilityGraph", "PlannerService", "PlannerResult"]
