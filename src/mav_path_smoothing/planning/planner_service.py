"""
@file: planner_service.py
@brief: Start/goal planning front end over a trajectory smoother
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..errors import PlanningFailure, SmoothingError
from ..smoothing import MaterializeMode, TrajectorySmoother, materialize
from ..trajectory import PolynomialTrajectory, TrajectoryPoint
from ..trajectory.trajectory_base import WaypointLike


@dataclass
class PlannerResult:
    """Outcome of one planning request; ``error`` is set instead of raising."""
    trajectory: Optional[PolynomialTrajectory] = None
    path: Optional[List[TrajectoryPoint]] = None
    error: Optional[SmoothingError] = None

    @property
    def success(self) -> bool:
        return self.error is None


class PlannerService:
    """
    Plans start -> goal requests and publishes the last planned path.

    Requests can run synchronously (``plan``) or on a worker thread
    (``plan_async``), which returns a Future instead of detaching a thread.

    Parameters:
        smoother (TrajectorySmoother): smoother answering the requests
        max_workers (int): worker threads for asynchronous requests
    """
    def __init__(self, smoother: TrajectorySmoother, max_workers: int = 1) -> None:
        self.smoother = smoother
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.lock = threading.Lock()
        self.subscribers: List[Callable[[List[TrajectoryPoint]], None]] = []
        self.last_result: Optional[PlannerResult] = None

    def plan(self, start: WaypointLike, goal: WaypointLike) -> PlannerResult:
        try:
            trajectory = self.smoother.get_trajectory_between_two_points(start, goal)
            path = materialize(trajectory, MaterializeMode.PATH, self.smoother.config.sampling_dt)
        except SmoothingError as e:
            logging.error(f"Planning from {start} to {goal} failed: {e}")
            return PlannerResult(error=e)

        result = PlannerResult(trajectory=trajectory, path=path)
        with self.lock:
            self.last_result = result
        logging.info(f"Planned {trajectory}")
        return result

    def plan_async(self, start: WaypointLike, goal: WaypointLike) -> "Future[PlannerResult]":
        return self.executor.submit(self.plan, start, goal)

    def subscribe(self, callback: Callable[[List[TrajectoryPoint]], None]) -> None:
        with self.lock:
            self.subscribers.append(callback)

    def publish_path(self) -> List[TrajectoryPoint]:
        """
        Send the last successfully planned path to every subscriber.

        Raises:
            PlanningFailure: nothing has been planned yet
        """
        with self.lock:
            result = self.last_result
            subscribers = list(self.subscribers)
        if result is None:
            raise PlanningFailure("No path has been planned yet")
        for callback in subscribers:
            callback(result.path)
        return result.path

    def close(self) -> None:
        self.executor.shutdown(wait=True)

    def __enter__(self) -> "PlannerService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

