"""Utility functions.

Functions
---------
.. autosummary::
    :toctree: generated

    resolve_dtype
    check_shape
    max_abs
    compute_rms
    state_columns
"""
import numpy as np


def resolve_dtype(dtype, *arrays):
    """Determine a real floating dtype for computations.

    Parameters
    ----------
    dtype : dtype or None
        Requested dtype. If None, it is inferred from `arrays`: floating types are
        kept and integer types are promoted to float64.
    *arrays : array_like
        Arrays which take part in computations.

    Returns
    -------
    numpy.dtype
        Resolved dtype.
    """
    if dtype is None:
        if arrays:
            dtype = np.result_type(*[np.asarray(a).dtype for a in arrays])
        else:
            dtype = np.float64
        if not np.issubdtype(dtype, np.inexact):
            dtype = np.result_type(dtype, np.float64)
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise ValueError(f"`dtype` must be a real floating type, got {dtype}")
    return dtype


def check_shape(array, shape, name):
    """Check that array has the expected shape.

    Parameters
    ----------
    array : ndarray
        Array to check.
    shape : tuple
        Expected shape.
    name : str
        Name of the argument to report in the error message.
    """
    if array.shape != tuple(shape):
        raise ValueError(f"`{name}` must have shape {tuple(shape)}, got {array.shape}")


def max_abs(a):
    """Compute maximum absolute value of array elements."""
    a = np.asarray(a)
    if a.size == 0:
        return 0
    return np.max(np.abs(a))


def compute_rms(data):
    """Compute root-mean-square of data along 0 axis."""
    return np.mean(np.square(data), axis=0) ** 0.5


def state_columns(n, prefix='x'):
    """Create column names like 'x0', 'x1', ... for DataFrames."""
    return [f"{prefix}{i}" for i in range(n)]


class Bunch(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__

    def __repr__(self):
        if self.keys():
            m = max(map(len, list(self.keys()))) + 1
            return '\n'.join(['{}: {}'.format(k.rjust(m), type(v))
                              for k, v in self.items()])
        else:
            return self.__class__.__name__ + "()"

    def __dir__(self):
        return list(self.keys())
