import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.linalg import block_diag
from kalmanfilter import observability
from kalmanfilter.types import ContinuousSystemMatrix, MeasurementMatrix

EPS = 1e-4


@pytest.mark.parametrize("F, C, index, n_eigenvalues", [
    ([[2, 1], [3, 0]], [[0, 2]], 2, 2),
    ([[2, 1], [3, 0]], [[1, 2]], 2, 2),
    ([[2, 1], [3, 0]], [[0, 0]], None, 0),
    ([[2, 1], [3, 0]], [[0, 2], [1, 0]], 1, 2),
    ([[2, 1], [1, 2]], [[-1, 1], [1, -1]], None, 1),
])
def test_two_states(F, C, index, n_eigenvalues):
    assert observability.kalman_observability_index(F, C, EPS) == index
    eigenvalues = observability.hautus_observable_eigenvalues(F, C, EPS)
    assert len(eigenvalues) == n_eigenvalues
    assert observability.is_observable(F, C, EPS) == (index is not None)
    assert observability.is_observable_hautus(F, C, EPS) == (n_eigenvalues == 2)
    assert observability.has_observable_eigenvalue(F, C, EPS) == (n_eigenvalues > 0)


def test_observable_eigenvalues():
    eigenvalues = observability.hautus_observable_eigenvalues(
        [[2, 1], [1, 2]], [[-1, 1], [1, -1]], EPS)
    assert eigenvalues.dtype == float
    assert_allclose(eigenvalues, [1])

    eigenvalues = observability.hautus_observable_eigenvalues(
        [[2, 1], [3, 0]], [[0, 2]], EPS)
    assert_allclose(np.sort(eigenvalues), [-1, 3])


def test_weak_predicate():
    # Only the mode with eigenvalue 1 is visible.
    F = [[2, 1], [1, 2]]
    C = [[-1, 1]]
    assert observability.has_observable_eigenvalue(F, C, EPS)
    assert not observability.is_observable_hautus(F, C, EPS)
    assert not observability.is_observable(F, C, EPS)


def test_complex_eigenvalues():
    F = [[0, -1], [1, 0]]
    eigenvalues = observability.hautus_observable_eigenvalues(F, [[1, 0]], EPS)
    assert np.iscomplexobj(eigenvalues)
    assert_allclose(np.sort_complex(eigenvalues), [-1j, 1j], atol=1e-12)
    assert observability.kalman_observability_index(F, [[1, 0]], EPS) == 2


def test_repeated_eigenvalues():
    F = [[1, 1], [0, 1]]
    assert observability.kalman_observability_index(F, [[1, 0]], EPS) == 2
    assert len(observability.hautus_observable_eigenvalues(F, [[1, 0]], EPS)) == 2
    assert observability.kalman_observability_index(F, [[0, 1]], EPS) is None
    assert len(observability.hautus_observable_eigenvalues(F, [[0, 1]], EPS)) == 0


def test_tests_agree():
    rng = np.random.RandomState(0)
    for n_states, n_outputs in [(1, 1), (3, 1), (4, 2), (6, 3)]:
        F = rng.randn(n_states, n_states)
        C = rng.randn(n_outputs, n_states)
        index = observability.kalman_observability_index(F, C, 1e-8)
        assert index == int(np.ceil(n_states / n_outputs))
        assert observability.is_observable_hautus(F, C, 1e-8)

        # A block which doesn't affect measurements is unobservable.
        F_extended = block_diag(F, rng.randn(2, 2))
        C_extended = np.hstack((C, np.zeros((n_outputs, 2))))
        assert observability.kalman_observability_index(F_extended, C_extended,
                                                        1e-8) is None
        eigenvalues = observability.hautus_observable_eigenvalues(
            F_extended, C_extended, 1e-8)
        assert len(eigenvalues) == n_states


def test_numeric_rank():
    assert observability.numeric_rank(np.identity(3), 0.5) == 3
    assert observability.numeric_rank(np.diag([1, 1e-3, 0]), 1e-2) == 1
    assert observability.numeric_rank(np.diag([1, 1e-3, 0]), 1e-4) == 2


def test_accepts_tagged():
    F = np.array([[2, 1], [3, 0]], dtype=np.float32)
    C = MeasurementMatrix([0, 2], dtype=np.float32)
    assert observability.kalman_observability_index(F, C, EPS) == 2
    with pytest.raises(TypeError):
        observability.kalman_observability_index(ContinuousSystemMatrix(F), C, EPS)


def test_errors():
    with pytest.raises(ValueError, match="`F` must be square"):
        observability.kalman_observability_index(np.zeros((2, 3)), [[1, 0, 0]], EPS)
    with pytest.raises(ValueError, match="`C` must have 2 columns"):
        observability.hautus_observable_eigenvalues(np.identity(2), [[1, 0, 0]], EPS)
    with pytest.raises(ValueError, match="`F` must have at least one row"):
        observability.kalman_observability_index(np.zeros((0, 0)), np.zeros((1, 0)),
                                                 EPS)
    with pytest.raises(ValueError, match="`C` must have at least one row"):
        observability.kalman_observability_index(np.identity(2), np.zeros((0, 2)), EPS)
    with pytest.raises(ValueError, match="`eps`"):
        observability.is_observable(np.identity(2), [[1, 0]], -1)
