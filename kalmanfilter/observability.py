"""Observability analysis of discrete linear systems.

A discrete linear system::

    x[k + 1] = F @ x[k]
    y[k] = C @ x[k]

is observable when its state can be reconstructed from a finite sequence of
measurements. Two equivalent tests are provided:

    - Kalman rank test: the matrix ``[C; C F; ...; C F^(n - 1)]`` has rank n
    - Hautus test: for each eigenvalue ``l`` of F the matrix ``[l I - F; C]``
      has rank n

Ranks are determined numerically as the number of singular values greater than
a tolerance `eps`. Decisions for singular values close to `eps` are sensitive to
rounding errors, no attempt to regularize them is made.

Refer to [1]_ for the theory.

Functions
---------
.. autosummary::
    :toctree: generated/

    numeric_rank
    kalman_observability_index
    hautus_observable_eigenvalues
    is_observable
    is_observable_hautus
    has_observable_eigenvalue

References
----------
.. [1] J. P. Hespanha, "Linear Systems Theory", 2nd edition
"""
import numpy as np
from scipy.linalg import eigvals, svdvals
from .types import DiscreteSystemMatrix, MeasurementMatrix, as_role


def _validate(F, C, eps):
    F = as_role(F, DiscreteSystemMatrix, "F")
    C = as_role(C, MeasurementMatrix, "C", F.dtype)
    n_states = F.shape[0]
    if n_states < 1:
        raise ValueError("`F` must have at least one row")
    if F.shape[1] != n_states:
        raise ValueError(f"`F` must be square, got shape {F.shape}")
    if C.shape[0] < 1:
        raise ValueError("`C` must have at least one row")
    if C.shape[1] != n_states:
        raise ValueError(f"`C` must have {n_states} columns, got {C.shape[1]}")
    if not np.isfinite(eps) or eps < 0:
        raise ValueError("`eps` must be finite and non-negative")
    return F.values, C.values


def numeric_rank(a, eps):
    """Compute rank of a matrix as number of singular values greater than `eps`."""
    return int(np.sum(svdvals(a) > eps))


def kalman_observability_index(F, C, eps):
    """Compute observability index by Kalman rank test.

    The observability matrix ``[C; C F; ...; C F^(k - 1)]`` is extended block by block
    for k from 1 to n. Its rank is computed once it has at least n rows.

    Parameters
    ----------
    F : DiscreteSystemMatrix or array_like, shape (n, n)
        System matrix.
    C : MeasurementMatrix or array_like, shape (m, n)
        Measurement matrix.
    eps : float
        Tolerance for singular values.

    Returns
    -------
    int or None
        The smallest k for which the observability matrix has rank n or None if
        the system is not observable.
    """
    F, C = _validate(F, C, eps)
    n_states = len(F)
    n_outputs = len(C)

    Q = np.empty((n_states * n_outputs, n_states), dtype=F.dtype)
    block = C
    for k in range(1, n_states + 1):
        if k > 1:
            block = block @ F
        Q[(k - 1) * n_outputs: k * n_outputs] = block
        if k * n_outputs >= n_states and numeric_rank(Q[:k * n_outputs], eps) == n_states:
            return k
    return None


def hautus_observable_eigenvalues(F, C, eps):
    """Find eigenvalues which pass Hautus test.

    An eigenvalue ``l`` passes the test when the matrix ``[l I - F; C]`` has rank n,
    meaning that the corresponding mode is visible in measurements.

    Parameters
    ----------
    F : DiscreteSystemMatrix or array_like, shape (n, n)
        System matrix.
    C : MeasurementMatrix or array_like, shape (m, n)
        Measurement matrix.
    eps : float
        Tolerance for singular values.

    Returns
    -------
    ndarray
        Eigenvalues which passed the test, repeated according to their algebraic
        multiplicity. The array is real if all eigenvalues of F are real.
    """
    F, C = _validate(F, C, eps)
    n_states = len(F)
    eigenvalues = eigvals(F)
    I = np.identity(n_states)

    passed = [l for l in eigenvalues
              if numeric_rank(np.vstack((l * I - F, C)), eps) == n_states]
    passed = np.array(passed, dtype=eigenvalues.dtype)
    if np.all(eigenvalues.imag == 0):
        passed = passed.real
    return passed


def is_observable(F, C, eps):
    """Check observability by Kalman rank test."""
    return kalman_observability_index(F, C, eps) is not None


def is_observable_hautus(F, C, eps):
    """Check observability by Hautus test.

    The system is observable when all n eigenvalues pass the test.
    """
    return len(hautus_observable_eigenvalues(F, C, eps)) == len(np.asarray(F))


def has_observable_eigenvalue(F, C, eps):
    """Check whether at least one eigenvalue passes Hautus test.

    This is a weaker condition than observability: only some modes of the system
    are required to be visible in measurements. Use `is_observable` or
    `is_observable_hautus` to check observability.
    """
    return len(hautus_observable_eigenvalues(F, C, eps)) > 0
