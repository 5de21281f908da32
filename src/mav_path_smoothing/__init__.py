from .errors import (
    SmoothingError,
    DegenerateInputError,
    ConfigurationError,
    PlanningFailure,
    NoPathFound,
    OptimizationFailure,
    OptimizationSingularError,
    OptimizationNotConvergedError
)
from .config import CostWeights, SmoothingConfig
from .trajectory import TrajectoryPoint, PolynomialSegment, PolynomialTrajectory
from .smoothing import (
    LocoOptimizer,
    LocoCost,
    LocoSmoother,
    MaterializeMode,
    PolynomialSmoother,
    SegmentTimeEstimator,
    TrajectorySmoother,
    WaypointPreprocessor,
    materialize
)
from .planning import GridVisibilityGraph, PlannerResult, PlannerService, VisibilityGraph, VoxelMap

__version__ = "0.1.0"

__all__ = [
    "SmoothingError", "DegenerateInputError", "ConfigurationError", "PlanningFailure", "NoPathFound",
    "OptimizationFailure", "OptimizationSingularError", "OptimizationNotConvergedError",
    "CostWeights", "SmoothingConfig",
    "TrajectoryPoint", "PolynomialSegment", "PolynomialTrajectory",
    "LocoOptimizer", "LocoCost", "LocoSmoother", "MaterializeMode", "PolynomialSmoother",
    "SegmentTimeEstimator", "TrajectorySmoother", "WaypointPreprocessor", "materialize",
    "GridVisibilityGraph", "PlannerResult", "PlannerService", "VisibilityGraph", "VoxelMap"
]
