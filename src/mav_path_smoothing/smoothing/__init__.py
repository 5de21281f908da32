from .segment_times import SegmentTimeEstimator
from .preprocessor import WaypointPreprocessor
from .loco_optimizer import LocoOptimizer, LocoCost, smoothness_matrix
from .materializer import MaterializeMode, materialize, sample_trajectory, sample_times
from .smoother_base import TrajectorySmoother
from .polynomial_smoother import PolynomialSmoother
from .loco_smoother import LocoSmoother

__all__ = [
    'SegmentTimeEstimator',
    'WaypointPreprocessor',
    'LocoOptimizer',
    'LocoCost',
    'smoothness_matrix',
    'MaterializeMode',
    'materialize',
    'sample_trajectory',
    'sample_times',
    'TrajectorySmoother',
    'PolynomialSmoother',
    'LocoSmoother'
]
