"""
@file: loco_optimizer.py
@brief: LOCO cost optimization of piecewise polynomial trajectories
"""
import math
import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import scipy.linalg

from ..config import CostWeights, SmoothingConfig
from ..errors import ConfigurationError, OptimizationNotConvergedError, OptimizationSingularError
from ..trajectory import PolynomialTrajectory, TrajectoryPoint, time_basis, unwrapped_yaws, validate_waypoints

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S"
)

ARMIJO_FACTOR = 1e-4
MAX_BACKTRACKS = 30


@dataclass
class LocoCost:
    """Weighted terms of the LOCO objective for one trajectory."""
    smoothness: float
    time: float
    waypoint: float
    iterations: int = 0
    converged: bool = True

    @property
    def total(self) -> float:
        return self.smoothness + self.time + self.waypoint

    def to_dict(self) -> Dict[str, float]:
        result = asdict(self)
        result['total'] = self.total
        return result


def smoothness_matrix(degree: int, derivative: int) -> np.ndarray:
    """
    Gram matrix of the squared derivative integral on normalized time [0, 1].

    For coefficients a on s = t/T, int_0^T (p^(k)(t))^2 dt = T^(1-2k) * a^T Q a.
    """
    n = degree + 1
    Q = np.zeros((n, n))
    for i in range(derivative, n):
        for j in range(derivative, n):
            power = i + j - 2 * derivative + 1
            Q[i, j] = math.perm(i, derivative) * math.perm(j, derivative) / power
    return Q


def equilibrate(K: np.ndarray, iterations: int = 10) -> Tuple[np.ndarray, np.ndarray]:
    """
    Symmetric Ruiz scaling of a square matrix.

    Returns:
        (D K D, diag(D))
    """
    scaled = K.copy()
    d = np.ones(K.shape[0])
    for _ in range(iterations):
        r = np.sqrt(np.max(np.abs(scaled), axis=1))
        r[r == 0] = 1.0
        scaled = scaled / r[:, None] / r[None, :]
        d /= r
    return scaled, d


class _AxisGroup:
    """Waypoint targets of axes sharing one constraint structure."""

    def __init__(self, name: str, targets: np.ndarray, derivatives: List[Dict[int, Optional[np.ndarray]]]):
        self.name = name
        self.targets = targets  # (num_waypoints, group_dimension)
        self.derivatives = derivatives  # per waypoint: order -> value or None
        self.dimension = targets.shape[1]

    def endpoint_value(self, index: int, order: int) -> np.ndarray:
        if order == 0:
            return self.targets[index]
        value = self.derivatives[index].get(order)
        return np.zeros(self.dimension) if value is None else np.asarray(value, dtype=float).reshape(-1)


class LocoOptimizer:
    """
    Minimizes the LOCO cost over polynomial coefficients and segment times.

        J = w_smooth * sum_i int |p_i^(k)|^2 dt + w_time * sum_i T_i
            + w_wp * sum_j |p(t_j) - wp_j|^2    (soft waypoints only)

    For fixed segment times the problem is an equality-constrained quadratic
    program solved through its KKT system. Segment times are refined by
    projected gradient descent on log(T_i), with the gradient taken from
    the KKT multipliers of the inner problem, until the relative cost change
    between accepted iterates is at most ``convergence_tolerance``.

    Parameters:
        config (SmoothingConfig): polynomial degree, derivative order,
            continuity order and outer loop settings
    """

    def __init__(self, config: Optional[SmoothingConfig] = None) -> None:
        self.config = config or SmoothingConfig()
        self.degree = self.config.poly_degree
        self.k = self.config.derivative_to_optimize
        self.q = self.config.continuity_order
        self.Q = smoothness_matrix(self.degree, self.k)
        # constraint pattern -> KKT matrix has full rank
        self._well_posed: Dict[tuple, bool] = {}

    def __str__(self) -> str:
        return "LOCO optimizer"

    def solve(self,
              waypoints: Sequence[TrajectoryPoint],
              initial_durations: Sequence[float],
              weights: Optional[CostWeights] = None,
              hard_constraints: bool = True,
              optimize_time: bool = False) -> PolynomialTrajectory:
        """
        Args:
            waypoints: Ordered waypoints, one more than durations
            initial_durations: Seed duration of each segment
            weights: Cost weights (config weights if None)
            hard_constraints: Pass exactly through interior waypoints instead of penalizing deviation
            optimize_time: Refine segment times in the outer loop

        Returns:
            PolynomialTrajectory with its LocoCost in ``cost``

        Raises:
            DegenerateInputError: invalid waypoints
            ConfigurationError: durations do not match waypoints or are not positive
            OptimizationSingularError: the quadratic program is rank deficient
            OptimizationNotConvergedError: the outer loop ran out of iterations
        """
        waypoints = validate_waypoints(waypoints, self.config.coincidence_tolerance)
        durations = self._check_durations(waypoints, initial_durations)
        weights = weights or self.config.weights

        groups = self._axis_groups(waypoints)
        if not optimize_time:
            return self._solve_fixed_times(groups, durations, weights, hard_constraints)[0]
        return self._optimize_times(groups, durations, weights, hard_constraints)

    def interpolate_two_points(self, start: TrajectoryPoint, goal: TrajectoryPoint,
                               duration: float, weights: Optional[CostWeights] = None) -> PolynomialTrajectory:
        """
        Single segment matching derivatives 0..k-1 at both ends.

        The degree 2k-1 Hermite polynomial is the exact minimizer of the
        k-th derivative integral for these boundary conditions, so no
        optimization is needed.
        """
        if duration <= 0 or not np.isfinite(duration):
            raise ConfigurationError(f"Segment duration must be positive and finite, got {duration}")
        groups = self._axis_groups([start, goal])
        order = 2 * self.k
        # conditions on derivatives in normalized time, d^r/ds^r = T^r d^r/dt^r
        A = np.array([time_basis(s, order - 1, r) for s in (0.0, 1.0) for r in range(self.k)])
        scale = np.array([duration ** r for _ in (0, 1) for r in range(self.k)])
        coeffs = []
        for group in groups:
            b = np.array([group.endpoint_value(idx, r) for idx in (0, 1) for r in range(self.k)])
            coeffs.append(scipy.linalg.solve(A, scale[:, None] * b).T)
        a = np.zeros((sum(g.dimension for g in groups), self.degree + 1))
        a[:, :order] = np.vstack(coeffs)
        monomial = a / duration ** np.arange(self.degree + 1)

        smooth = float(duration ** (1 - 2 * self.k) * np.einsum('di,ij,dj->', a, self.Q, a))
        weights = weights or self.config.weights
        cost = LocoCost(weights.smoothness * smooth, weights.time * duration, 0.0)
        return PolynomialTrajectory.from_coefficients([monomial], [duration], cost=cost)

    def time_gradient(self,
                      waypoints: Sequence[TrajectoryPoint],
                      durations: Sequence[float],
                      weights: Optional[CostWeights] = None,
                      hard_constraints: bool = True) -> np.ndarray:
        """
        Derivative of the optimal LOCO cost with respect to each segment time.
        """
        waypoints = validate_waypoints(waypoints, self.config.coincidence_tolerance)
        durations = self._check_durations(waypoints, durations)
        groups = self._axis_groups(waypoints)
        _, gradient = self._solve_fixed_times(groups, durations, weights or self.config.weights, hard_constraints)
        return gradient

    def _check_durations(self, waypoints: Sequence[TrajectoryPoint], durations: Sequence[float]) -> np.ndarray:
        durations = np.asarray(durations, dtype=float)
        if durations.shape != (len(waypoints) - 1,):
            raise ConfigurationError(
                f"Expected {len(waypoints) - 1} segment durations, got {durations.size}")
        if not np.all(np.isfinite(durations)) or np.any(durations <= 0):
            raise ConfigurationError(f"Segment durations must be positive and finite, got {durations.tolist()}")
        return durations

    # ---------- inner quadratic program ----------

    def _axis_groups(self, waypoints: Sequence[TrajectoryPoint]) -> List[_AxisGroup]:
        positions = np.array([wp.position for wp in waypoints])
        position_derivatives = [
            {1: wp.velocity, 2: wp.acceleration, 3: wp.jerk} for wp in waypoints
        ]
        yaws = unwrapped_yaws(waypoints).reshape(-1, 1)
        yaw_derivatives = [
            {1: None if wp.yaw_rate is None else np.array([wp.yaw_rate])} for wp in waypoints
        ]
        return [_AxisGroup("position", positions, position_derivatives),
                _AxisGroup("yaw", yaws, yaw_derivatives)]

    def _constraint_row(self, durations: np.ndarray, segment: int, s: float, order: int) -> np.ndarray:
        n = self.degree + 1
        row = np.zeros(len(durations) * n)
        row[segment * n:(segment + 1) * n] = time_basis(s, self.degree, order) / durations[segment] ** order
        return row

    def _constraints(self, group: _AxisGroup, durations: np.ndarray,
                     hard_constraints: bool) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Equality constraints on the normalized-time coefficients.

        Returns:
            (A, b, orders) where orders holds the derivative order of each row
        """
        num_segments = len(durations)
        zero = np.zeros(group.dimension)
        rows, rhs, orders = [], [], []

        def add(row, value, order):
            rows.append(row)
            rhs.append(value)
            orders.append(order)

        # start and goal states are always fixed
        for r in range(self.k):
            add(self._constraint_row(durations, 0, 0.0, r), group.endpoint_value(0, r), r)
            add(self._constraint_row(durations, num_segments - 1, 1.0, r), group.endpoint_value(num_segments, r), r)

        first_continuous = 1 if hard_constraints else 0
        for j in range(1, num_segments):
            for r in range(first_continuous, self.q + 1):
                add(self._constraint_row(durations, j - 1, 1.0, r)
                    - self._constraint_row(durations, j, 0.0, r), zero, r)
            if not hard_constraints:
                continue
            add(self._constraint_row(durations, j - 1, 1.0, 0), group.targets[j], 0)
            add(self._constraint_row(durations, j, 0.0, 0), group.targets[j], 0)
            for r in (1, 2):
                value = group.derivatives[j].get(r)
                if value is None:
                    continue
                value = np.asarray(value, dtype=float).reshape(-1)
                add(self._constraint_row(durations, j - 1, 1.0, r), value, r)
                if r > self.q:
                    add(self._constraint_row(durations, j, 0.0, r), value, r)

        return np.array(rows), np.array(rhs), np.array(orders, dtype=float)

    def _assemble(self, group: _AxisGroup, durations: np.ndarray, weights: CostWeights,
                  hard_constraints: bool):
        """
        KKT system in the scaled coefficients b_i = a_i / T_i^(k-1/2).

        In these coordinates every smoothness block is w_smooth * Q whatever
        the segment time, and each constraint row is normalized to unit max
        norm, so segment times from milliseconds to minutes stay balanced.

        Returns:
            (K, rhs, sigma, row_scale, A, orders) with A and orders in the
            unscaled coefficients
        """
        n = self.degree + 1
        num_segments = len(durations)
        A, b, orders = self._constraints(group, durations, hard_constraints)
        sigma = np.repeat(durations ** (self.k - 0.5), n)
        A_scaled = A * sigma[None, :]
        row_scale = np.max(np.abs(A_scaled), axis=1)
        A_scaled /= row_scale[:, None]

        H = np.kron(np.eye(num_segments), weights.smoothness * self.Q)
        g = np.zeros((num_segments * n, group.dimension))
        if not hard_constraints:
            for j in range(1, num_segments):
                idx = j * n
                H[idx, idx] += weights.waypoint * sigma[idx] ** 2
                g[idx] = -weights.waypoint * sigma[idx] * group.targets[j]

        size = H.shape[0] + A.shape[0]
        K = np.zeros((size, size))
        K[:H.shape[0], :H.shape[0]] = H
        K[H.shape[0]:, :H.shape[0]] = A_scaled
        K[:H.shape[0], H.shape[0]:] = A_scaled.T
        rhs = np.vstack([-g, b / row_scale[:, None]])
        return K, rhs, sigma, row_scale, A, orders

    def _check_well_posed(self, group: _AxisGroup, num_segments: int, weights: CostWeights,
                          hard_constraints: bool) -> None:
        """
        Rank test of the KKT matrix for this constraint pattern.

        Rank only depends on which rows exist, not on the segment times, so it
        is evaluated once at unit durations and cached.
        """
        pattern = tuple(
            tuple(r for r in (1, 2) if d.get(r) is not None) for d in group.derivatives[1:-1]
        ) if hard_constraints else ()
        key = (group.name, num_segments, hard_constraints, weights.waypoint > 0, pattern)
        if key not in self._well_posed:
            unit = CostWeights(smoothness=1.0, time=0.0, waypoint=1.0 if weights.waypoint > 0 else 0.0)
            K = self._assemble(group, np.ones(num_segments), unit, hard_constraints)[0]
            K_scaled, _ = equilibrate(K)
            self._well_posed[key] = bool(np.linalg.matrix_rank(K_scaled) == K.shape[0])
        if not self._well_posed[key]:
            raise OptimizationSingularError(
                f"Quadratic program for {group.name} is singular for {num_segments} segments "
                f"with continuity order {self.q}")

    def _solve_fixed_times(self, groups: List[_AxisGroup], durations: np.ndarray,
                           weights: CostWeights, hard_constraints: bool) -> Tuple[PolynomialTrajectory, np.ndarray]:
        """
        Returns:
            (trajectory, dJ/dT) where the gradient comes from the KKT multipliers
        """
        n = self.degree + 1
        num_segments = len(durations)
        size_x = num_segments * n

        solutions = []
        deviation = 0.0
        smooth_per_segment = np.zeros(num_segments)
        gradient = np.full(num_segments, weights.time)
        for group in groups:
            self._check_well_posed(group, num_segments, weights, hard_constraints)
            K, rhs, sigma, row_scale, A, orders = self._assemble(group, durations, weights, hard_constraints)

            K_scaled, d = equilibrate(K)
            try:
                z = scipy.linalg.solve(K_scaled, d[:, None] * rhs)
            except scipy.linalg.LinAlgError as e:
                raise OptimizationSingularError(
                    f"Quadratic program for {group.name} is singular "
                    f"(segment times {np.round(durations, 6).tolist()})") from e
            z = d[:, None] * z
            x = sigma[:, None] * z[:size_x]
            nu = z[size_x:] / row_scale[:, None]
            if not np.all(np.isfinite(x)) or not np.all(np.isfinite(nu)):
                raise OptimizationSingularError(f"Quadratic program for {group.name} produced non-finite coefficients")

            for i, T in enumerate(durations):
                cols = slice(i * n, (i + 1) * n)
                b_i = z[cols]
                smooth_per_segment[i] += weights.smoothness * float(np.einsum('id,ij,jd->', b_i, self.Q, b_i))
                # constraint rows scale as T_i^-r, so d(row)/dT_i = -r/T_i * row
                gradient[i] -= 2.0 * float(np.sum(orders[:, None] * nu * (A[:, cols] @ x[cols]))) / T

            if not hard_constraints:
                for j in range(1, num_segments):
                    deviation += float(np.sum((x[j * n] - group.targets[j]) ** 2))
            solutions.append(x)

        gradient += (1 - 2 * self.k) * smooth_per_segment / durations
        x = np.hstack(solutions)  # (num_segments * n, dimension)
        cost = LocoCost(
            smoothness=float(np.sum(smooth_per_segment)),
            time=weights.time * float(np.sum(durations)),
            waypoint=weights.waypoint * deviation if not hard_constraints else 0.0
        )

        scale = durations[:, None] ** np.arange(n)[None, :]
        coeffs = [x[i*n:(i+1)*n].T / scale[i] for i in range(num_segments)]
        return PolynomialTrajectory.from_coefficients(coeffs, durations.tolist(), cost=cost), gradient

    # ---------- outer time refinement ----------

    def _optimize_times(self, groups: List[_AxisGroup], durations: np.ndarray,
                        weights: CostWeights, hard_constraints: bool) -> PolynomialTrajectory:
        lower = math.log(self.config.min_segment_time)
        upper = math.log(self.config.max_segment_time)

        def evaluate(u: np.ndarray) -> Tuple[PolynomialTrajectory, np.ndarray]:
            T = np.exp(u)
            trajectory, gradient = self._solve_fixed_times(groups, T, weights, hard_constraints)
            # chain rule for u = log(T)
            return trajectory, gradient * T

        u = np.clip(np.log(durations), lower, upper)
        best, gradient = evaluate(u)
        cost = best.cost.total
        step = self.config.initial_step

        for iteration in range(1, self.config.max_iterations + 1):
            # no descent along coordinates pinned at a bound
            direction = -gradient
            direction[(u <= lower) & (direction < 0)] = 0.0
            direction[(u >= upper) & (direction > 0)] = 0.0
            norm = np.max(np.abs(direction))
            if norm <= 1e-12:
                logging.info(f"LOCO time refinement stationary after {iteration - 1} iterations, cost={cost:.6g}")
                best.cost.iterations = iteration - 1
                return best
            direction /= norm

            alpha = step
            candidate = None
            for _ in range(MAX_BACKTRACKS):
                u_new = np.clip(u + alpha * direction, lower, upper)
                trial, trial_gradient = evaluate(u_new)
                if trial.cost.total <= cost + ARMIJO_FACTOR * float(gradient @ (u_new - u)):
                    candidate = (u_new, trial, trial_gradient)
                    break
                alpha *= 0.5

            if candidate is None:
                logging.info(f"LOCO time refinement found no descent step after {iteration - 1} iterations, "
                             f"cost={cost:.6g}")
                best.cost.iterations = iteration - 1
                return best

            u, best, gradient = candidate
            change = (cost - best.cost.total) / max(1.0, abs(cost))
            cost = best.cost.total
            step = min(2 * alpha, 4 * self.config.initial_step)
            logging.debug(f"LOCO iteration {iteration}: cost={cost:.6g}, change={change:.3g}, step={alpha:.3g}")

            if change <= self.config.convergence_tolerance:
                logging.info(f"LOCO time refinement converged after {iteration} iterations, cost={cost:.6g}")
                best.cost.iterations = iteration
                return best

        best.cost.iterations = self.config.max_iterations
        best.cost.converged = False
        logging.warning(f"LOCO time refinement did not converge within {self.config.max_iterations} iterations")
        raise OptimizationNotConvergedError(
            f"Segment time refinement did not converge within {self.config.max_iterations} iterations",
            trajectory=best,
            iterations=self.config.max_iterations
        )
