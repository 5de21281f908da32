import math
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class CostWeights:
    """Scalar weights of the LOCO cost terms."""
    smoothness: float = 0.1  # w_smooth, integral of the squared optimized derivative
    time: float = 1.0  # w_time, total trajectory duration
    waypoint: float = 10.0  # w_wp, squared deviation from soft waypoints

    def __post_init__(self):
        for name in ("smoothness", "time", "waypoint"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigurationError(f"Cost weight '{name}' must be a finite number, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"Cost weight '{name}' must be non-negative, got {value}")
        if self.smoothness <= 0:
            raise ConfigurationError("Smoothness weight must be strictly positive")


@dataclass(frozen=True)
class SmoothingConfig:
    """
    Parameter set of a smoothing call.

    Built once (directly or through ``from_dict``) and only read while
    smoothing. Use ``replace`` to derive a modified, re-validated copy.
    """
    # LOCO smoother switches
    resample_trajectory: bool = False
    resample_visibility: bool = False
    num_segments: int = 3
    add_waypoints: bool = False

    # polynomial smoother parameters
    poly_degree: int = 9
    derivative_to_optimize: int = 4
    continuity_order: Optional[int] = None
    sampling_dt: float = 0.01

    # dynamics used to seed segment times
    v_max: float = 1.0
    a_max: float = 2.0
    min_segment_time: float = 0.1
    max_segment_time: float = 100.0

    # outer time refinement
    optimize_time: bool = True
    max_iterations: int = 100
    convergence_tolerance: float = 1e-4
    initial_step: float = 0.5
    accept_unconverged: bool = False

    coincidence_tolerance: float = 1e-6
    weights: CostWeights = field(default_factory=CostWeights)

    def __post_init__(self):
        if self.continuity_order is None:
            object.__setattr__(self, "continuity_order", self.derivative_to_optimize)
        if isinstance(self.weights, Mapping):
            object.__setattr__(self, "weights", CostWeights(**self.weights))
        self._validate()

    def _validate(self) -> None:
        k = self.derivative_to_optimize
        if not isinstance(self.num_segments, int) or self.num_segments < 1:
            raise ConfigurationError(f"num_segments must be >= 1, got {self.num_segments!r}")
        if k < 1:
            raise ConfigurationError(f"derivative_to_optimize must be >= 1, got {k}")
        if self.poly_degree < 2 * k - 1:
            raise ConfigurationError(
                f"poly_degree must be at least {2 * k - 1} to minimize derivative {k}, got {self.poly_degree}")
        if not 1 <= self.continuity_order <= self.poly_degree - 1:
            raise ConfigurationError(
                f"continuity_order must lie in [1, {self.poly_degree - 1}], got {self.continuity_order}")
        for name in ("sampling_dt", "v_max", "a_max", "min_segment_time", "max_segment_time",
                     "convergence_tolerance", "initial_step", "coincidence_tolerance"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive finite number, got {value!r}")
        if self.min_segment_time >= self.max_segment_time:
            raise ConfigurationError("min_segment_time must be smaller than max_segment_time")
        if self.max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not isinstance(self.weights, CostWeights):
            raise ConfigurationError(f"weights must be CostWeights, got {type(self.weights).__name__}")

    def replace(self, **changes) -> "SmoothingConfig":
        """Return a validated copy with the given fields changed."""
        if "derivative_to_optimize" in changes and "continuity_order" not in changes \
                and self.continuity_order == self.derivative_to_optimize:
            changes["continuity_order"] = None
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "SmoothingConfig":
        """
        Build a configuration from flat named parameters.

        Missing names keep their defaults. Weights are given either as a nested
        ``weights`` mapping or as ``w_smoothness``, ``w_time`` and ``w_waypoint``.

        Raises:
            ConfigurationError: on unknown names or invalid values
        """
        params = dict(params)
        weights: Dict[str, float] = dict(params.pop("weights", {}) or {})
        for key, name in (("w_smoothness", "smoothness"), ("w_time", "time"), ("w_waypoint", "waypoint")):
            if key in params:
                weights[name] = params.pop(key)

        known = {f.name for f in dataclasses.fields(cls)} - {"weights"}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ConfigurationError(f"Unknown smoothing parameters: {', '.join(unknown)}")
        try:
            return cls(weights=CostWeights(**weights), **params)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return dataclasses.asdict(self)
