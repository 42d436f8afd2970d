"""Role-tagged matrices and vectors.

Matrices of a linear state-space model often have identical storage layout while having
different meaning: a continuous system matrix and a discrete one are both square, and
a covariance matrix looks exactly like a process noise matrix. To prevent accidental
substitution each role is represented by its own wrapper class. Functions of the package
accept either an instance of the expected role or a plain array_like, which is then
wrapped into the expected role. Passing an instance of a different role raises
`TypeError`.

All wrappers store a private copy of the data as a floating point ndarray in `values`.
The floating type is preserved (single or double precision) or selected by `dtype`
argument.

Classes
-------
.. autosummary::
    :toctree: generated/

    Tagged
    StateVector
    CovarianceMatrix
    InputVector
    DiscreteSystemMatrix
    DiscreteInputMatrix
    ProcessNoiseMatrix
    ContinuousSystemMatrix
    ContinuousInputMatrix
    ContinuousNoiseMatrix
    MeasurementMatrix
    MeasurementRow

Functions
---------
.. autosummary::
    :toctree: generated/

    as_role
"""
import numpy as np
from .util import resolve_dtype


class Tagged:
    """Base class for role-tagged arrays.

    Parameters
    ----------
    values : array_like
        Data to wrap. A copy is always made.
    dtype : dtype or None, optional
        Floating type to use. If None (default), the type of `values` is used,
        integer types are promoted to float64.

    Attributes
    ----------
    values : ndarray
        Wrapped data.
    """
    ndim = None

    def __init__(self, values, dtype=None):
        if isinstance(values, Tagged):
            if not isinstance(values, type(self)):
                raise TypeError(f"Can't use {type(values).__name__} as "
                                f"{type(self).__name__}, pass `values` explicitly "
                                "to change the role")
            values = values.values
        dtype = resolve_dtype(dtype, values)
        values = self._prepare(np.array(values, dtype=dtype))
        if values.ndim != self.ndim:
            raise ValueError(f"{type(self).__name__} must have {self.ndim} "
                             f"dimension(s), got {values.ndim}")
        self.values = values

    @staticmethod
    def _prepare(values):
        return values

    @property
    def shape(self):
        return self.values.shape

    @property
    def dtype(self):
        return self.values.dtype

    def __len__(self):
        return len(self.values)

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self.values, dtype=dtype)
        if dtype is None:
            return self.values
        return self.values.astype(dtype, copy=False)

    def __repr__(self):
        return f"{type(self).__name__}({self.values!r})"


class _Vector(Tagged):
    ndim = 1

    @staticmethod
    def _prepare(values):
        return np.atleast_1d(values)


class _Matrix(Tagged):
    ndim = 2


class StateVector(_Vector):
    """State vector estimate, shape (n_states,)."""


class InputVector(_Vector):
    """Control input vector, shape (n_inputs,)."""


class CovarianceMatrix(_Matrix):
    """Covariance matrix of the state estimate, shape (n_states, n_states)."""


class DiscreteSystemMatrix(_Matrix):
    """Discrete state transition matrix F, shape (n_states, n_states)."""


class DiscreteInputMatrix(_Matrix):
    """Discrete input matrix H, shape (n_states, n_inputs)."""


class ProcessNoiseMatrix(_Matrix):
    """Discrete process noise covariance Q, shape (n_states, n_states)."""


class ContinuousSystemMatrix(_Matrix):
    """Continuous system matrix A, shape (n_states, n_states)."""


class ContinuousInputMatrix(_Matrix):
    """Continuous input matrix B, shape (n_states, n_inputs)."""


class ContinuousNoiseMatrix(_Matrix):
    """Continuous process noise intensity (power spectral density), shape
    (n_states, n_states)."""


class MeasurementMatrix(Tagged):
    """Measurement matrix C, shape (n_outputs, n_states).

    A 1-D input is treated as a single row.
    """
    ndim = 2

    @staticmethod
    def _prepare(values):
        return np.atleast_2d(values)


class MeasurementRow(Tagged):
    """Single row of a measurement matrix, shape (n_states,).

    A 2-D input with a single row is flattened.
    """
    ndim = 1

    @staticmethod
    def _prepare(values):
        if values.ndim == 2 and values.shape[0] == 1:
            return values[0]
        return values


def as_role(value, role, name, dtype=None):
    """Convert a value to a given role.

    Parameters
    ----------
    value : array_like or Tagged
        Value to convert.
    role : type
        Subclass of `Tagged` which is expected.
    name : str
        Argument name to report in error messages.
    dtype : dtype or None, optional
        Floating type of the result. If None (default), the type of `value` is kept.

    Returns
    -------
    Tagged
        Instance of `role`. If `value` already is such an instance with matching
        dtype it is returned as is.
    """
    if isinstance(value, Tagged) and not isinstance(value, role):
        raise TypeError(f"`{name}` must be {role.__name__}, "
                        f"got {type(value).__name__}")
    if isinstance(value, role) and (dtype is None or value.dtype == np.dtype(dtype)):
        return value
    return role(value, dtype)
