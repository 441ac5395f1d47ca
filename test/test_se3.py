import numpy as np
import pytest

from gauss_newton_icp.core import se3
from gauss_newton_icp.core.transformation import Transformation

from conftest import pose_vec


class TestExp:

    def test_zero_is_identity(self):
        T = se3.exp(np.zeros(6))
        np.testing.assert_array_almost_equal(T.matrix, np.eye(4), decimal=15)

    def test_pure_translation(self):
        T = se3.exp([1.0, -2.0, 3.0, 0, 0, 0])
        np.testing.assert_array_almost_equal(T.R, np.eye(3))
        np.testing.assert_array_almost_equal(T.t, [1.0, -2.0, 3.0])

    def test_rotation_about_z(self):
        T = se3.exp([0, 0, 0, 0, 0, np.pi / 2])
        np.testing.assert_array_almost_equal(T.R @ [1, 0, 0], [0, 1, 0])

    def test_log_inverts_exp(self):
        delta = np.array([0.3, -0.1, 0.7, 0.4, -0.2, 0.9])
        np.testing.assert_allclose(se3.log(se3.exp(delta)), delta, atol=1e-12)

    def test_small_angle_translation(self):
        # to first order in w, t = v + w x v / 2
        v = np.array([1.0, 2.0, 3.0])
        w = 1e-6 * np.array([0.0, 0.6, 0.8])
        T = se3.exp(np.concatenate((v, w)))
        np.testing.assert_allclose(T.t, v + 0.5 * np.cross(w, v), atol=1e-11)


class TestComposeIncrement:

    def test_zero_increment_is_identity_law(self, some_pose):
        P = se3.compose_increment(some_pose, np.zeros(6))
        np.testing.assert_allclose(P.R, some_pose.R, atol=1e-15)
        np.testing.assert_allclose(P.t, some_pose.t, atol=1e-15)

    def test_result_stays_rigid(self, some_pose, rng):
        for _ in range(20):
            delta = rng.normal(scale=2.0, size=6)
            P = se3.compose_increment(some_pose, delta)
            np.testing.assert_allclose(P.R.T @ P.R, np.eye(3), atol=1e-12)
            assert np.linalg.det(P.R) == pytest.approx(1.0, abs=1e-12)

    def test_is_right_multiplicative(self, some_pose):
        delta = np.array([0.1, 0.2, -0.3, 0.05, 0.0, -0.1])
        expected = some_pose.matrix @ se3.exp(delta).matrix
        np.testing.assert_allclose(se3.compose_increment(some_pose, delta).matrix, expected, atol=1e-14)

    def test_does_not_modify_pose(self, some_pose):
        R_before = some_pose.R.copy()
        t_before = some_pose.t.copy()
        se3.compose_increment(some_pose, np.ones(6))
        np.testing.assert_array_equal(some_pose.R, R_before)
        np.testing.assert_array_equal(some_pose.t, t_before)


class TestJacobDDexpeDe:

    def test_shape(self, some_pose):
        assert se3.jacob_dDexpe_de(some_pose).shape == (12, 6)

    def test_matches_finite_differences(self, some_pose):
        J = se3.jacob_dDexpe_de(some_pose)
        h = 1e-6
        for k in range(6):
            e = np.zeros(6)
            e[k] = h
            plus = pose_vec(se3.compose_increment(some_pose, e))
            minus = pose_vec(se3.compose_increment(some_pose, -e))
            np.testing.assert_allclose(J[:, k], (plus - minus) / (2 * h), atol=1e-7)

    def test_identity_pose(self):
        J = se3.jacob_dDexpe_de(Transformation.unity())
        # translation block is the identity, rotating the x-axis about z yields +y
        np.testing.assert_array_equal(J[9:12, :3], np.eye(3))
        np.testing.assert_array_almost_equal(J[0:3, 5], [0, 1, 0])


def test_skew_matrix_is_cross_product():
    a = np.array([1.0, -2.0, 0.5])
    b = np.array([0.3, 0.7, -1.1])
    np.testing.assert_allclose(se3.skew_matrix(a) @ b, np.cross(a, b))
