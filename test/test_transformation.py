import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from gauss_newton_icp.core.transformation import Transformation, apply_transformation, calc_transformation_scipy


class TestTransformation:

    def test_unity(self):
        np.testing.assert_array_equal(Transformation.unity().matrix, np.eye(4))

    def test_matrix_round_trip(self, some_pose):
        T = Transformation.from_matrix(some_pose.matrix)
        np.testing.assert_array_equal(T.R, some_pose.R)
        np.testing.assert_array_equal(T.t, some_pose.t)

    def test_from_3x4_matrix(self, some_pose):
        T = Transformation.from_matrix(some_pose.matrix[:3, :])
        np.testing.assert_array_equal(T.matrix, some_pose.matrix)

    def test_inverse(self, some_pose):
        np.testing.assert_allclose(some_pose.compose(some_pose.inverse).matrix, np.eye(4), atol=1e-12)
        np.testing.assert_allclose(some_pose.inverse.matrix, np.linalg.inv(some_pose.matrix), atol=1e-12)

    def test_compose_matches_matrix_product(self, some_pose, ground_truth):
        np.testing.assert_allclose(some_pose.compose(ground_truth).matrix, some_pose.matrix @ ground_truth.matrix,
                                   atol=1e-12)

    def test_quat(self):
        T = Transformation(R=Rotation.from_euler("z", 90, degrees=True).as_matrix(), t=np.zeros(3))
        np.testing.assert_allclose(np.abs(T.quat), [0, 0, np.sqrt(0.5), np.sqrt(0.5)], atol=1e-12)

    def test_from_xyz_ypr(self):
        T = Transformation.from_xyz_ypr(1.0, 2.0, 3.0, 90.0, 0.0, 0.0)
        np.testing.assert_allclose(T.t, [1.0, 2.0, 3.0])
        # yaw of 90 degrees turns x into y
        np.testing.assert_allclose(T.R @ [1, 0, 0], [0, 1, 0], atol=1e-12)

    def test_from_xyz_ypr_radians(self):
        T = Transformation.from_xyz_ypr(0, 0, 0, 0.0, 0.0, np.pi / 2, degrees=False)
        # roll of 90 degrees turns y into z
        np.testing.assert_allclose(T.R @ [0, 1, 0], [0, 0, 1], atol=1e-12)


class TestCalcTransformationScipy:

    def test_recovers_exact_transformation(self, ground_truth, rng):
        P = rng.uniform(-1, 1, size=(10, 3))
        Q = apply_transformation(P, ground_truth)
        T = calc_transformation_scipy(P, Q)
        np.testing.assert_allclose(T.R, ground_truth.R, atol=1e-9)
        np.testing.assert_allclose(T.t, ground_truth.t, atol=1e-9)

    def test_zero_weight_ignores_point(self, ground_truth, rng):
        P = rng.uniform(-1, 1, size=(6, 3))
        Q = apply_transformation(P, ground_truth)
        Q[0] += 10.0
        weights = np.ones(6)
        weights[0] = 0.0
        T = calc_transformation_scipy(P, Q, weights)
        np.testing.assert_allclose(T.t, ground_truth.t, atol=1e-9)

    def test_length_mismatch(self):
        with pytest.raises(AssertionError):
            calc_transformation_scipy(np.zeros((3, 3)), np.zeros((4, 3)))
