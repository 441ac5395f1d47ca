"""
Residuals of each kind of pairing together with their Jacobians with respect to the
12 entries of the pose [R | t] (column-major, see se3.py).

All functions return (residual, jacobian) and leave their inputs untouched.
"""
import numpy as np

from .pairings import LinePair, PlanePair, PointLinePair, PointPair, PointPlanePair
from .se3 import skew_matrix
from .transformation import Transformation

# sine of the angle between two lines below which they are treated as parallel (about 0.6 deg)
_PARALLEL_SIN = 1e-2


def _jacob_point(p_local: np.ndarray) -> np.ndarray:
    """d (R p + t) / d vec([R | t]), a 3x12 matrix."""
    I = np.eye(3)
    return np.hstack((p_local[0] * I, p_local[1] * I, p_local[2] * I, I))


def _jacob_direction(d_local: np.ndarray) -> np.ndarray:
    """d (R d) / d vec([R | t]), a 3x12 matrix (translation does not act on directions)."""
    I = np.eye(3)
    return np.hstack((d_local[0] * I, d_local[1] * I, d_local[2] * I, np.zeros((3, 3))))


def error_point2point(pair: PointPair, pose: Transformation) -> tuple[np.ndarray, np.ndarray]:
    q = pose.R @ pair.local_point + pose.t
    return q - pair.global_point, _jacob_point(pair.local_point)


def error_point2line(pair: PointLinePair, pose: Transformation) -> tuple[np.ndarray, np.ndarray]:
    """Component of (transformed point - line point) orthogonal to the line."""
    q = pose.R @ pair.local_point + pose.t
    d = pair.line.direction
    P = np.eye(3) - np.outer(d, d)
    return P @ (q - pair.line.point), P @ _jacob_point(pair.local_point)


def error_point2plane(pair: PointPlanePair, pose: Transformation) -> tuple[np.ndarray, np.ndarray]:
    """Component of (transformed point - plane centroid) along the plane normal."""
    q = pose.R @ pair.local_point + pose.t
    n = pair.plane.normal
    P = np.outer(n, n)
    return P @ (q - pair.plane.centroid), P @ _jacob_point(pair.local_point)


def error_plane2plane(pair: PlanePair, pose: Transformation) -> tuple[np.ndarray, np.ndarray]:
    """Only the normal vectors are aligned, plane positions are ignored."""
    n_local = pair.local_plane.normal
    return pose.R @ n_local - pair.global_plane.normal, _jacob_direction(n_local)


def error_line2line(pair: LinePair, pose: Transformation) -> tuple[np.ndarray, np.ndarray]:
    """
    4-dimensional line-to-line error:
      [0:3] cross product of both directions (vanishes for either orientation of the lines),
      [3]   distance between the lines, signed along their common normal.
    For (nearly) parallel lines, including matched lines close to convergence, [3] is the distance
    of the transformed line point to the global line.
    """
    p_local = pair.local_line.point
    d_local = pair.local_line.direction
    p_g = pair.global_line.point
    d_g = pair.global_line.direction

    p = pose.R @ p_local + pose.t
    d = pose.R @ d_local
    Jp = _jacob_point(p_local)
    Jd = _jacob_direction(d_local)

    err = np.zeros(4)
    J = np.zeros((4, 12))

    # d x d_g = -[d_g]x d
    c = np.cross(d, d_g)
    dc_dd = -skew_matrix(d_g)
    err[:3] = c
    J[:3, :] = dc_dd @ Jd

    s = np.linalg.norm(c)
    diff = p - p_g
    if s > _PARALLEL_SIN:
        m = c / s
        err[3] = diff @ m
        dm_dc = (np.eye(3) - np.outer(m, m)) / s
        J[3, :] = m @ Jp + diff @ dm_dc @ dc_dd @ Jd
    else:
        u = diff - (diff @ d_g) * d_g
        dist = np.linalg.norm(u)
        err[3] = dist
        if dist > 0:
            J[3, :] = (u / dist) @ Jp

    return err, J
