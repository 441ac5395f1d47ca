from dataclasses import dataclass

import numpy as np
from scipy.spatial.transform import Rotation


@dataclass
class Transformation:
    R: np.ndarray  # Rotation matrix
    t: np.ndarray  # Translation vector

    @property
    def quat(self) -> np.ndarray:
        """Rotation as scalar-last quaternion (x, y, z, w)."""
        return Rotation.from_matrix(self.R).as_quat()

    @property
    def inverse(self):
        return Transformation(
            R=self.R.T,
            t=-self.R.T @ self.t,
        )

    @property
    def matrix(self) -> np.ndarray:
        out = np.zeros((4, 4))
        out[3, 3] = 1
        out[:3, :3] = self.R
        out[:3, 3] = self.t
        return out

    def compose(self, other: "Transformation") -> "Transformation":
        """Returns `self ∘ other`, i.e. `other` is applied first."""
        return Transformation(
            R=self.R @ other.R,
            t=self.R @ other.t + self.t,
        )

    @staticmethod
    def from_matrix(matrix: np.ndarray):
        """Accepts a homogeneous 4x4 or a 3x4 [R | t] matrix."""
        matrix = np.asarray(matrix, dtype=float)
        return Transformation(
            R=matrix[:3, :3].copy(),
            t=matrix[:3, 3].copy(),
        )

    @staticmethod
    def from_xyz_ypr(x: float, y: float, z: float, yaw: float, pitch: float, roll: float, degrees: bool = True):
        """
        Builds a pose from a translation and intrinsic Z-Y-X (yaw, pitch, roll) angles.
        """
        return Transformation(
            R=Rotation.from_euler("ZYX", [yaw, pitch, roll], degrees=degrees).as_matrix(),
            t=np.array([x, y, z], dtype=float),
        )

    @staticmethod
    def unity():
        return Transformation(
            R=np.eye(3),
            t=np.zeros((3)),
        )


def calc_transformation_scipy(P: np.ndarray, Q: np.ndarray, weights: np.ndarray = None) -> Transformation:
    """
    Apply the Kabsch algorithm [1]_ using the implementation in SciPy [2]_.

    Optionally, weights for the given points can be provided.

    Calculates the optimal transformation (translation and rotation) which transforms the
    points P to resemble Q with the least squared error. Used as a closed-form initial guess
    for the Gauss-Newton refinement.

    .. [1] https://en.wikipedia.org/wiki/Kabsch_algorithm \n
    .. [2] https://docs.scipy.org/doc/scipy/reference/generated/scipy.spatial.transform.Rotation.align_vectors.html

    :param P: One set of points which are transformed using the resulting transformation to then resemble Q.
        Numpy array of shape (N, 3).
    :param Q: The other set of points. Numpy array of shape (N, 3).
    :param weights: Optional weights (if None, all points are weighted equally). Numpy array of shape (N).
    :return: An instance of the Transformation dataclass.
    """
    if weights is None:
        weights = np.ones(len(P))
    assert len(P) == len(Q) == len(weights)

    # calculate weighted mean of each set of points
    p_bar = np.average(P, axis=0, weights=weights)
    q_bar = np.average(Q, axis=0, weights=weights)

    # Scipy expects points to be centered, substract the data point's centroids.
    R, _ = Rotation.align_vectors(Q - q_bar, P - p_bar, weights=weights)
    Rm = R.as_matrix()

    # See https://igl.ethz.ch/projects/ARAP/svd_rot.pdf on how to calculate the corresponding translation vector.
    t = q_bar - Rm @ p_bar

    return Transformation(Rm, t)


def apply_transformation(points: np.ndarray, trafo: Transformation):
    """
    Apply the transformation on multiple points.

    :param points: a numpy array containing multiple 3d points to transform
    :param trafo: a Transformation dataclass instance
    :return: `points`, transformed
    """
    return (trafo.R @ points.T).T + trafo.t
