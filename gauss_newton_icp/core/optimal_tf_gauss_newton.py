"""
Gauss-Newton refinement of the SE(3) transformation best aligning all pairings.

Each iteration relinearizes every pairing at the current pose, accumulates one
weighted 6x6 normal-equations system over all kinds of pairings, solves it for a
tangent-space increment and updates the pose on the manifold: pose <- pose ∘ exp(delta).
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np
from scipy.linalg import qr, solve_triangular

from .error_terms import (
    error_line2line,
    error_plane2plane,
    error_point2line,
    error_point2plane,
    error_point2point,
)
from .observability import hessian_observability
from .pair_weights import PairWeights, expand_point_weights
from .pairings import Pairings
from .robust_kernels import RobustKernel, RobustSqrtWeightFunc, create_robust_kernel
from .se3 import compose_increment, jacob_dDexpe_de
from .transformation import Transformation

logger = logging.getLogger(__name__)


@dataclass
class GaussNewtonParameters:
    linearization_point: Transformation | None = None  # initial guess, mandatory
    kernel: RobustKernel = RobustKernel.NONE
    kernel_param: float = 1.0
    pair_weights: PairWeights = field(default_factory=PairWeights)
    max_inner_loop_iterations: int = 6
    max_cost: float = 0.0  # stop once the residual norm is at or below this value
    min_delta: float = 1e-7  # stop once the norm of the increment is below this value
    verbose: bool = False


class Termination(enum.Enum):
    ITERATING = "iterating"
    CONVERGED_BY_COST = "converged_by_cost"
    CONVERGED_BY_STEP = "converged_by_step"
    EXHAUSTED = "exhausted"


@dataclass
class OptimalTFResult:
    optimal_pose: Transformation = field(default_factory=Transformation.unity)
    termination: Termination = Termination.ITERATING
    iterations: int = 0  # number of linearizations performed
    error_norm: float | None = None  # residual norm at the last linearization
    error_history: list[float] = field(default_factory=list)


def _contribute(g: np.ndarray, H: np.ndarray, Ji: np.ndarray, err_i: np.ndarray) -> None:
    g += Ji.T @ err_i
    H += Ji.T @ Ji


def linearize(
        pairings: Pairings,
        pose: Transformation,
        pair_weights: PairWeights,
        point_weights: np.ndarray,
        robust_fn: RobustSqrtWeightFunc | None,
) -> tuple[float, np.ndarray, np.ndarray]:
    """
    Evaluates all pairings at `pose` and accumulates the normal equations.

    :param pairings: the pairings to align
    :param pose: current linearization point
    :param pair_weights: default weight per kind of pairing
    :param point_weights: weight of each point-to-point pairing, shape (len(pairings.pt2pt),)
    :param robust_fn: sqrt IRLS weight as function of the squared residual norm, or None
    :return: (residual norm, gradient g of shape (6,), Hessian approximation H of shape (6, 6))
    """
    assert len(point_weights) == len(pairings.pt2pt)

    # shared by all pairings of this linearization (12x6)
    dDexpe_de = jacob_dDexpe_de(pose)

    g = np.zeros(6)
    H = np.zeros((6, 6))
    err_norm_sqr = 0.0

    terms: list[tuple[Sequence, Callable, Callable[[int], float]]] = [
        (pairings.pt2pt, error_point2point, lambda idx: point_weights[idx]),
        (pairings.pt2ln, error_point2line, lambda idx: pair_weights.pt2ln),
        (pairings.ln2ln, error_line2line, lambda idx: pair_weights.ln2ln),
        (pairings.pt2pl, error_point2plane, lambda idx: pair_weights.pt2pl),
        (pairings.pl2pl, error_plane2plane, lambda idx: pair_weights.pl2pl),
    ]

    for pairs, error_fn, base_weight in terms:
        for idx, pair in enumerate(pairs):
            err, J1 = error_fn(pair, pose)

            weight = base_weight(idx)
            if robust_fn is not None:
                weight *= robust_fn(float(err @ err))

            err_i = weight * err
            err_norm_sqr += float(err_i @ err_i)

            Ji = weight * (J1 @ dDexpe_de)
            _contribute(g, H, Ji, err_i)

    return np.sqrt(err_norm_sqr), g, H


def solve_increment(H: np.ndarray, g: np.ndarray) -> np.ndarray:
    """
    Solves H delta = -g using a column-pivoted QR factorization.

    Rank-deficient systems (degenerate pairing geometry) do not fail: components beyond
    the numerical rank are set to zero, so the returned increment may be unreliable.
    """
    Q, R, piv = qr(H, pivoting=True)
    diag = np.abs(np.diag(R))
    delta = np.zeros(H.shape[1])
    if diag.size == 0 or diag[0] == 0:
        return delta

    # a pivot counts as nonzero if larger than eps * size relative to the largest pivot
    threshold = diag[0] * np.finfo(float).eps * len(diag)
    rank = int(np.count_nonzero(diag > threshold))

    rhs = -(Q.T @ g)
    z = solve_triangular(R[:rank, :rank], rhs[:rank])
    delta[piv[:rank]] = z
    return delta


def optimal_tf_gauss_newton(pairings: Pairings, params: GaussNewtonParameters) -> OptimalTFResult:
    """
    Refines `params.linearization_point` to the pose minimizing the weighted, robustified
    squared errors of all pairings.

    The loop ends with CONVERGED_BY_COST (residual norm <= max_cost, no update applied in that
    iteration), CONVERGED_BY_STEP (|delta| < min_delta, update kept) or EXHAUSTED. All of them
    are regular outcomes.

    :param pairings: the pairings to align, not modified
    :param params: optimization parameters, not modified
    :return: the result holding the refined pose
    """
    if params.linearization_point is None:
        raise ValueError("This method requires a linearization point")

    result = OptimalTFResult(
        optimal_pose=Transformation(
            R=np.array(params.linearization_point.R, dtype=float, copy=True),
            t=np.array(params.linearization_point.t, dtype=float, copy=True),
        )
    )

    robust_fn = create_robust_kernel(params.kernel, params.kernel_param)

    # resolve the point-to-point block weights once, faults on a table which is too short
    point_weights = expand_point_weights(pairings.point_weights, len(pairings.pt2pt), params.pair_weights.pt2pt)

    if params.verbose:
        logger.info(f"Gauss-Newton with {pairings.contents_summary()} pairings, kernel={params.kernel.value}")

    for iteration in range(params.max_inner_loop_iterations):
        err_norm, g, H = linearize(pairings, result.optimal_pose, params.pair_weights, point_weights, robust_fn)
        result.iterations = iteration + 1
        result.error_norm = err_norm
        result.error_history.append(err_norm)

        if err_norm <= params.max_cost:
            result.termination = Termination.CONVERGED_BY_COST
            break

        if params.verbose:
            obs = hessian_observability(H)
            if obs.is_degenerate():
                logger.warning(f"Ill-conditioned Hessian (condition number {obs.condition_number:.3g}), "
                               f"weakest direction dominated by '{obs.dominant_dof}'.")

        delta = solve_increment(H, g)
        result.optimal_pose = compose_increment(result.optimal_pose, delta)

        log = logger.info if params.verbose else logger.debug
        log(f"[GN] iter: {iteration} err: {err_norm:.6e} delta: {np.array2string(delta, precision=6)}")

        if np.linalg.norm(delta) < params.min_delta:
            result.termination = Termination.CONVERGED_BY_STEP
            break
    else:
        result.termination = Termination.EXHAUSTED

    if params.verbose:
        logger.info(f"Gauss-Newton finished: {result.termination.value} after {result.iterations} iterations, "
                    f"err={result.error_norm}")
    return result


optimize = optimal_tf_gauss_newton
