import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from gauss_newton_icp.core.transformation import Transformation


def pose_vec(pose: Transformation) -> np.ndarray:
    """Column-major entries of [R | t], the 12 pose parameters used by the error terms."""
    return np.concatenate((pose.R.flatten(order="F"), pose.t))


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def ground_truth() -> Transformation:
    return Transformation(
        R=Rotation.from_rotvec([0.2, -0.3, 0.25]).as_matrix(),
        t=np.array([0.5, -0.2, 1.0]),
    )


@pytest.fixture
def some_pose() -> Transformation:
    return Transformation(
        R=Rotation.from_euler("ZYX", [30, -10, 5], degrees=True).as_matrix(),
        t=np.array([1.0, 2.0, -0.5]),
    )
