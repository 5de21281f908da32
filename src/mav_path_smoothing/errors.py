"""
@file: errors.py
@brief: Exceptions raised by the smoothing engine
"""


class SmoothingError(Exception):
    """Base class for every failure reported by the smoothing engine."""


class DegenerateInputError(SmoothingError, ValueError):
    """Malformed waypoint input (fewer than 2 points, coincident neighbours)."""


class ConfigurationError(SmoothingError, ValueError):
    """Invalid configuration value."""


class PlanningFailure(SmoothingError):
    """A planning collaborator could not produce a usable result."""


class NoPathFound(PlanningFailure):
    """The visibility graph cannot connect two waypoints."""


class OptimizationFailure(SmoothingError):
    """The LOCO optimizer could not produce a valid trajectory."""


class OptimizationSingularError(OptimizationFailure):
    """The inner quadratic program is rank deficient."""


class OptimizationNotConvergedError(OptimizationFailure):
    """
    The outer time refinement loop ran out of iterations.

    Parameters:
        message (str): description of the failure
        trajectory: best trajectory found before the iteration budget ran out
        iterations (int): number of outer iterations performed
    """
    def __init__(self, message: str, trajectory=None, iterations: int = 0) -> None:
        super().__init__(message)
        self.trajectory = trajectory
        self.iterations = iterations
