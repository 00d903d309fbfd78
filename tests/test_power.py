"""
Tests for the power iteration engine.

Fixed-count A^n x, convergence to the limit, oscillation under a
permutation, and conservation of the component sum.
"""

import warnings

import numpy as np
import polars as pl
import pytest

from markov_matrix import (
    InvalidShape,
    NonConvergence,
    NonConvergenceWarning,
    apply_power,
    iterate_to_convergence,
    limit,
    matrix_power,
    random_markov_matrix,
    trajectory,
    trajectory_frame,
)


A_EXAMPLE = np.array([[0.9, 0.2],
                      [0.1, 0.8]])
X0 = np.array([17.0, 4.0])
PERMUTATION = np.array([[0.0, 1.0],
                        [1.0, 0.0]])


class TestApplyPower:
    """Fixed-count mode."""

    def test_zero_power_returns_copy(self):
        x = X0.copy()
        y = apply_power(A_EXAMPLE, x, 0)
        np.testing.assert_array_equal(y, X0)
        y[0] = -1.0
        assert x[0] == 17.0, "Result must not alias the input"

    def test_one_step(self):
        np.testing.assert_allclose(apply_power(A_EXAMPLE, X0, 1), [16.1, 4.9])

    def test_converges_to_two_to_one(self):
        """A^1000 x is proportional to (2, 1)."""
        y = apply_power(A_EXAMPLE, X0, 1000)
        assert y[0] / y[1] == pytest.approx(2.0, abs=1e-9)
        np.testing.assert_allclose(y, [14.0, 7.0], atol=1e-6)

    @pytest.mark.parametrize("n", range(6))
    def test_permutation_oscillates(self, n):
        """P^n (1, 0) alternates between (1, 0) and (0, 1)."""
        y = apply_power(PERMUTATION, [1.0, 0.0], n)
        expected = [1.0, 0.0] if n % 2 == 0 else [0.0, 1.0]
        np.testing.assert_array_equal(y, expected)

    @pytest.mark.parametrize("n", [0, 1, 2, 7, 64, 333])
    def test_squaring_matches_repeated(self, n):
        A = random_markov_matrix(6, seed=3)
        x = np.arange(1.0, 7.0)
        np.testing.assert_allclose(
            apply_power(A, x, n, method="squaring"),
            apply_power(A, x, n, method="repeated"),
            rtol=1e-10, atol=1e-12,
        )

    def test_sum_conserved(self):
        """The component sum of A^n x equals that of x."""
        rng = np.random.default_rng(11)
        for _ in range(10):
            d = int(rng.integers(2, 10))
            A = random_markov_matrix(d, rng=rng)
            x = rng.random(d) * 100
            for n in (1, 5, 50):
                assert apply_power(A, x, n).sum() == pytest.approx(x.sum(), abs=1e-9)

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            apply_power(A_EXAMPLE, X0, 3, method="eigen")

    @pytest.mark.parametrize("n", [-1, 1.5, True, "3"])
    def test_bad_n(self, n):
        with pytest.raises(ValueError):
            apply_power(A_EXAMPLE, X0, n)

    def test_numpy_int_n(self):
        np.testing.assert_allclose(apply_power(A_EXAMPLE, X0, np.int64(1)), [16.1, 4.9])

    def test_dimension_mismatch(self):
        with pytest.raises(InvalidShape):
            apply_power(A_EXAMPLE, [1.0, 2.0, 3.0], 1)

    def test_non_square(self):
        with pytest.raises(InvalidShape):
            apply_power([[0.5, 0.5]], [1.0], 1)


class TestMatrixPower:

    def test_identity_at_zero(self):
        np.testing.assert_array_equal(matrix_power(A_EXAMPLE, 0), np.eye(2))

    def test_limit_matrix(self):
        """A^n approaches the rank-one matrix with steady-state columns."""
        An = matrix_power(A_EXAMPLE, 500)
        np.testing.assert_allclose(An, [[2 / 3, 2 / 3], [1 / 3, 1 / 3]], atol=1e-12)

    def test_permutation_squared(self):
        np.testing.assert_array_equal(matrix_power(PERMUTATION, 2), np.eye(2))


class TestIterateToConvergence:
    """Convergence mode."""

    def test_converges(self):
        result = iterate_to_convergence(A_EXAMPLE, X0, tol=1e-12)
        assert result.converged
        assert result.delta < 1e-12
        assert 0 < result.iterations < 200
        np.testing.assert_allclose(result.vector, [14.0, 7.0], atol=1e-9)

    @pytest.mark.parametrize("norm", ["max", "l1", "l2"])
    def test_norms(self, norm):
        result = iterate_to_convergence(A_EXAMPLE, X0, tol=1e-10, norm=norm)
        assert result.converged
        assert result.norm == norm
        np.testing.assert_allclose(result.vector, [14.0, 7.0], atol=1e-8)

    def test_looser_tol_stops_sooner(self):
        loose = iterate_to_convergence(A_EXAMPLE, X0, tol=1e-3)
        tight = iterate_to_convergence(A_EXAMPLE, X0, tol=1e-12)
        assert loose.iterations < tight.iterations

    def test_permutation_warns(self):
        """Oscillation hits the cap and warns, returning the last iterate."""
        with pytest.warns(NonConvergenceWarning):
            result = iterate_to_convergence(PERMUTATION, [1.0, 0.0], max_iter=51)

        assert not result.converged
        assert result.iterations == 51
        assert result.delta == pytest.approx(1.0)
        np.testing.assert_array_equal(result.vector, [0.0, 1.0])

    def test_permutation_raises_on_request(self):
        with pytest.raises(NonConvergence) as exc:
            iterate_to_convergence(PERMUTATION, [1.0, 0.0], max_iter=10, raise_on_failure=True)

        result = exc.value.result
        assert not result.converged
        np.testing.assert_array_equal(result.vector, [1.0, 0.0])

    def test_fixed_point_converges_immediately(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = iterate_to_convergence(PERMUTATION, [0.5, 0.5])
        assert result.converged
        assert result.iterations == 1

    def test_sum_conserved(self):
        A = random_markov_matrix(8, seed=5)
        x = np.linspace(1, 8, 8)
        result = iterate_to_convergence(A, x)
        assert result.vector.sum() == pytest.approx(x.sum(), abs=1e-9)

    def test_limit(self):
        np.testing.assert_allclose(limit(A_EXAMPLE, X0), [14.0, 7.0], atol=1e-9)

    def test_bad_norm(self):
        with pytest.raises(ValueError):
            iterate_to_convergence(A_EXAMPLE, X0, norm="frobenius")

    def test_bad_tol(self):
        with pytest.raises(ValueError):
            iterate_to_convergence(A_EXAMPLE, X0, tol=0.0)


class TestTrajectory:
    """Data behind the step-by-step view of A^k x."""

    def test_rows_are_powers(self):
        traj = trajectory(A_EXAMPLE, X0, 10)
        assert traj.shape == (11, 2)
        np.testing.assert_array_equal(traj[0], X0)
        for k in (1, 4, 10):
            np.testing.assert_allclose(traj[k], apply_power(A_EXAMPLE, X0, k))

    def test_zero_steps(self):
        traj = trajectory(A_EXAMPLE, X0, 0)
        np.testing.assert_array_equal(traj, [X0])

    def test_frame(self):
        df = trajectory_frame(A_EXAMPLE, X0, 20)

        assert isinstance(df, pl.DataFrame)
        assert df.columns == ['step', 'x_0', 'x_1', 'total']
        assert df.height == 21
        assert df['step'].to_list() == list(range(21))
        np.testing.assert_allclose(df['total'].to_numpy(), 21.0, atol=1e-9)

    def test_frame_permutation(self):
        df = trajectory_frame(PERMUTATION, [1.0, 0.0], 3)
        assert df['x_0'].to_list() == [1.0, 0.0, 1.0, 0.0]
        assert df['x_1'].to_list() == [0.0, 1.0, 0.0, 1.0]
