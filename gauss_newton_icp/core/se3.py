"""
SE(3) exponential map and the local Jacobian needed to relinearize pose-matrix Jacobians.

Tangent vectors are ordered [vx, vy, vz, wx, wy, wz] (translation first, then rotation vector).
The 12 pose parameters are the column-major entries of the 3x4 matrix [R | t], i.e.
(R[:, 0], R[:, 1], R[:, 2], t).
"""
import numpy as np
from scipy.spatial.transform import Rotation

from .transformation import Transformation

# below this rotation angle the closed-form coefficients of V are replaced by their Taylor series
_SMALL_ANGLE = 1e-5


def skew_matrix(p: np.ndarray) -> np.ndarray:
    """Return the skew-symmetric matrix of a 3D vector p."""
    return np.array([[  0,   -p[2],  p[1]],
                     [ p[2],    0,  -p[0]],
                     [-p[1],  p[0],    0]])


def _left_jacobian_so3(w: np.ndarray) -> np.ndarray:
    theta = np.linalg.norm(w)
    W = skew_matrix(w)
    if theta < _SMALL_ANGLE:
        theta2 = theta * theta
        B = 0.5 - theta2 / 24.0
        C = 1.0 / 6.0 - theta2 / 120.0
    else:
        B = (1.0 - np.cos(theta)) / theta ** 2
        C = (theta - np.sin(theta)) / theta ** 3
    return np.eye(3) + B * W + C * (W @ W)


def exp(delta: np.ndarray) -> Transformation:
    """
    Group exponential of a 6D tangent vector.

    :param delta: [vx, vy, vz, wx, wy, wz]
    :return: the rigid transformation exp(delta)
    """
    delta = np.asarray(delta, dtype=float).reshape(6)
    v = delta[:3]
    w = delta[3:]
    R = Rotation.from_rotvec(w).as_matrix()
    t = _left_jacobian_so3(w) @ v
    return Transformation(R=R, t=t)


def log(pose: Transformation) -> np.ndarray:
    """Inverse of `exp`, valid for rotation angles below pi."""
    w = Rotation.from_matrix(pose.R).as_rotvec()
    v = np.linalg.solve(_left_jacobian_so3(w), pose.t)
    return np.concatenate((v, w))


def compose_increment(pose: Transformation, delta: np.ndarray) -> Transformation:
    """
    Right-multiplicative manifold update `pose ∘ exp(delta)`.
    The raw matrix entries of `pose` are never modified in place.
    """
    return pose.compose(exp(delta))


def jacob_dDexpe_de(pose: Transformation) -> np.ndarray:
    """
    Jacobian of vec(pose ∘ exp(eps)) with respect to eps, evaluated at eps = 0.

    To first order, pose ∘ exp(eps) = [R (I + [w]x) | t + R v], hence
      d vec / dv     = R                 (translation rows)
      d col_j / dw   = -R [e_j]x        (rotation column j)

    :param pose: the current linearization point
    :return: a 12x6 matrix mapping tangent increments to pose-parameter increments
    """
    J = np.zeros((12, 6))
    R = pose.R
    for j in range(3):
        e_j = np.zeros(3)
        e_j[j] = 1.0
        J[3 * j:3 * (j + 1), 3:] = -R @ skew_matrix(e_j)
    J[9:12, :3] = R
    return J
