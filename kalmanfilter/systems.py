"""Conversion of continuous linear systems to discrete form.

A continuous linear time-invariant system::

    dx/dt = A @ x + B @ u

with input `u` kept constant over a time step `dt` is equivalent to the discrete
system::

    x[k + 1] = F @ x[k] + H @ u[k]

where ``F = exp(A dt)`` and ``H`` is the integral of ``exp(A v)`` over
``v`` from 0 to ``dt`` multiplied by ``B``. The matrix exponential and the integral are
computed by truncated power series, refer to [1]_ for the discussion.

Functions
---------
.. autosummary::
    :toctree: generated/

    continuous_to_discrete
    matrix_exponential
    input_matrix_series
    compute_process_noise

References
----------
.. [1] C. Moler, C. Van Loan, "Nineteen Dubious Ways to Compute the Exponential of
       a Matrix, Twenty-Five Years Later"
"""
from warnings import warn
import numpy as np
from scipy.linalg import LinAlgError, expm, inv
from . import util
from .types import (ContinuousSystemMatrix, ContinuousInputMatrix,
                    ContinuousNoiseMatrix, DiscreteSystemMatrix, DiscreteInputMatrix,
                    ProcessNoiseMatrix, as_role)

#: Maximum number of terms of power series.
MAX_TERMS = 20


def _check_system_matrix(A):
    A = as_role(A, ContinuousSystemMatrix, "A")
    n_rows, n_cols = A.shape
    if n_rows != n_cols:
        raise ValueError(f"`A` must be square, got shape {A.shape}")
    if n_rows < 1:
        raise ValueError("`A` must have at least one row")
    return A


def _check_input_matrix(B, n_states, dtype):
    B = as_role(B, ContinuousInputMatrix, "B", dtype)
    if B.shape[0] != n_states:
        raise ValueError(f"`B` must have {n_states} rows, got {B.shape[0]}")
    return B


def _check_scalars(dt, eps, dtype):
    if not np.isfinite(dt):
        raise ValueError("`dt` must be finite")
    if not np.isfinite(eps) or eps < 0:
        raise ValueError("`eps` must be finite and non-negative")
    return dtype.type(dt), dtype.type(eps)


def _sum_series(first_term, factor, eps, max_terms, name):
    # Sums T[1] + T[2] + ... where T[k] = T[k - 1] @ factor / k.
    result = first_term.copy()
    term = first_term
    for k in range(2, max_terms + 1):
        term = term @ factor / k
        result += term
        if util.max_abs(term) <= eps:
            return result
    warn(f"{name} series didn't converge to `eps`={eps} within {MAX_TERMS} terms, "
         "the truncated sum is returned.", RuntimeWarning)
    return result


def matrix_exponential(A, dt, eps):
    """Compute exponential of a scaled matrix by power series.

    The series ``I + A dt + (A dt)^2 / 2! + ...`` is summed until the maximum absolute
    element of the last added term becomes not greater than `eps` or until `MAX_TERMS`
    terms are summed. In the latter case `RuntimeWarning` is issued.

    Parameters
    ----------
    A : ContinuousSystemMatrix or array_like, shape (n, n)
        Continuous system matrix.
    dt : float
        Time step.
    eps : float
        Tolerance for the last series term.

    Returns
    -------
    DiscreteSystemMatrix, shape (n, n)
        Approximation of ``exp(A dt)``.
    """
    A = _check_system_matrix(A)
    dt, eps = _check_scalars(dt, eps, A.dtype)
    n = len(A)
    Adt = A.values * dt
    F = np.identity(n, dtype=A.dtype) + _sum_series(Adt, Adt, eps, MAX_TERMS - 1,
                                                    "Matrix exponential")
    return DiscreteSystemMatrix(F)


def input_matrix_series(A, B, dt, eps):
    """Compute discrete input matrix by power series.

    The discrete input matrix is computed as::

        H = (I dt + A dt^2 / 2! + A^2 dt^3 / 3! + ...) @ B

    The series doesn't require `A` to be invertible. The stopping rule is the same as
    in `matrix_exponential`.

    Parameters
    ----------
    A : ContinuousSystemMatrix or array_like, shape (n, n)
        Continuous system matrix.
    B : ContinuousInputMatrix or array_like, shape (n, m)
        Continuous input matrix.
    dt : float
        Time step.
    eps : float
        Tolerance for the last series term.

    Returns
    -------
    DiscreteInputMatrix, shape (n, m)
        Discrete input matrix.
    """
    A = _check_system_matrix(A)
    B = _check_input_matrix(B, len(A), A.dtype)
    dt, eps = _check_scalars(dt, eps, A.dtype)
    n = len(A)
    integral = _sum_series(np.identity(n, dtype=A.dtype) * dt, A.values * dt, eps,
                           MAX_TERMS, "Input matrix")
    return DiscreteInputMatrix(integral @ B.values)


def continuous_to_discrete(A, B, dt, eps):
    """Convert continuous linear system to discrete form.

    The system matrix ``F = exp(A dt)`` is computed by `matrix_exponential`.
    If `A` is invertible the input matrix is computed in closed form as::

        H = A^-1 @ (F - I) @ B

    Otherwise `input_matrix_series` is used. This happens for models containing pure
    integrators.

    Parameters
    ----------
    A : ContinuousSystemMatrix or array_like, shape (n, n)
        Continuous system matrix.
    B : ContinuousInputMatrix or array_like, shape (n, m)
        Continuous input matrix.
    dt : float
        Time step.
    eps : float
        Tolerance for the last term of power series.

    Returns
    -------
    Bunch with the following fields:

        F : DiscreteSystemMatrix, shape (n, n)
            Discrete system matrix.
        H : DiscreteInputMatrix, shape (n, m)
            Discrete input matrix.
    """
    A = _check_system_matrix(A)
    B = _check_input_matrix(B, len(A), A.dtype)
    F = matrix_exponential(A, dt, eps)
    try:
        A_inv = inv(A.values)
    except LinAlgError:
        H = input_matrix_series(A, B, dt, eps)
    else:
        I = np.identity(len(A), dtype=A.dtype)
        H = DiscreteInputMatrix((A_inv @ (F.values - I) @ B.values).astype(A.dtype))
    return util.Bunch(F=F, H=H)


def compute_process_noise(A, Qc, dt):
    """Compute discrete process noise covariance matrix.

    The result is the covariance of ``x[k + 1] - F @ x[k]`` when the continuous system
    is driven by white noise with intensity `Qc`::

        Q = integral of exp(A v) @ Qc @ exp(A v).T over v from 0 to dt

    It is computed from the exponential of the block matrix
    ``[[-A, Qc], [0, A.T]] dt`` as described in [1]_. The returned matrix is
    symmetrized.

    Parameters
    ----------
    A : ContinuousSystemMatrix or array_like, shape (n, n)
        Continuous system matrix.
    Qc : ContinuousNoiseMatrix or array_like, shape (n, n)
        Continuous process noise intensity, must be symmetric.
    dt : float
        Time step.

    Returns
    -------
    ProcessNoiseMatrix, shape (n, n)
        Discrete process noise covariance, to be passed to
        `kalmanfilter.kalman.KalmanFilterBuilder.with_process_noise`.

    References
    ----------
    .. [1] Charles F. van Loan, "Computing Integrals Involving the Matrix Exponential"
    """
    A = _check_system_matrix(A)
    n = len(A)
    Qc = as_role(Qc, ContinuousNoiseMatrix, "Qc", A.dtype)
    util.check_shape(Qc.values, (n, n), "Qc")
    if not np.allclose(Qc.values, Qc.values.T):
        raise ValueError("`Qc` must be symmetric")
    if not np.isfinite(dt):
        raise ValueError("`dt` must be finite")

    blocks = np.block([[-A.values, Qc.values],
                       [np.zeros((n, n), dtype=A.dtype), A.values.T]])
    exp_blocks = expm(blocks * dt)
    F = exp_blocks[n:, n:].T
    Q = F @ exp_blocks[:n, n:]
    return ProcessNoiseMatrix((0.5 * (Q + Q.T)).astype(A.dtype))
