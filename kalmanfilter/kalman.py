"""Linear Kalman filter.

Module contains the discrete linear Kalman filter for the system::

    x[k + 1] = F @ x[k] + H @ u[k] + w[k], with w ~ N(0, Q)

observed through scalar measurements::

    y = c @ x + v, with v ~ N(0, r)

A vector measurement with uncorrelated noise components (diagonal noise covariance) is
processed by calling `KalmanFilter.measure` once per measurement row. Refer to [1]_ for
the theory of Kalman filters.

A filter is configured by `KalmanFilterBuilder` and then run::

    kf = (KalmanFilterBuilder(2, 1)
          .with_system_matrix(F)
          .with_input_matrix(H)
          .with_process_noise(Q)
          .with_initial_state(x0, P0)
          .build())
    kf.predict(u)
    estimate = kf.measure(y, c, r)

Classes
-------
.. autosummary::
    :toctree: generated/

    KalmanFilterBuilder
    KalmanFilter
    SystemState
    StaleViewError

References
----------
.. [1] P\\. S\\. Maybeck, "Stochastic Models, Estimation and Control", volume 1
"""
import numpy as np
from . import util
from .types import (StateVector, CovarianceMatrix, InputVector, DiscreteSystemMatrix,
                    DiscreteInputMatrix, ProcessNoiseMatrix, MeasurementRow, as_role)


def _read_only(array):
    view = array.view()
    view.flags.writeable = False
    return view


class StaleViewError(RuntimeError):
    """Raised when `SystemState` is accessed after the filter was modified."""


class SystemState:
    """Read-only view of the filter state and covariance.

    The view doesn't copy data, its attributes are non-writeable arrays sharing memory
    with the filter. The view is valid only until the next call of `predict` or
    `measure`, after that accessing it raises `StaleViewError`. These calls store
    the results in new arrays, so arrays obtained from a view before keep the values
    of their step.

    Attributes
    ----------
    state : ndarray, shape (n_states,)
        State vector estimate.
    covariance : ndarray, shape (n_states, n_states)
        Covariance matrix of the estimate.
    """
    def __init__(self, kf):
        self._kf = kf
        self._generation = kf._generation

    @property
    def valid(self):
        """Whether the view still corresponds to the filter state."""
        return self._generation == self._kf._generation

    def _check(self):
        if not self.valid:
            raise StaleViewError("The filter was modified after this view was created")

    @property
    def state(self):
        self._check()
        return _read_only(self._kf._x)

    @property
    def covariance(self):
        self._check()
        return _read_only(self._kf._P)

    def copy(self):
        """Copy state and covariance.

        Returns
        -------
        Bunch with the following fields:

            state : StateVector
                Copy of the state vector.
            covariance : CovarianceMatrix
                Copy of the covariance matrix.
        """
        self._check()
        return util.Bunch(state=StateVector(self._kf._x),
                          covariance=CovarianceMatrix(self._kf._P))


class KalmanFilterBuilder:
    """Builder of `KalmanFilter`.

    Without explicit configuration the filter has identity system matrix, zero input
    and process noise matrices and zero initial state. The default initial covariance
    is an identity matrix with shape (n_inputs, n_inputs), it is accepted by `build`
    only when ``n_inputs == n_states``. Always provide the initial covariance by
    `with_initial_state` otherwise.

    Each ``with_*`` method checks dimensions, stores a copy of the data and returns
    the builder, so calls can be chained.

    Parameters
    ----------
    n_states : int
        Number of states.
    n_inputs : int
        Number of inputs, can be zero.
    dtype : dtype, optional
        Floating type for all matrices and vectors. Default is float64.
    """
    def __init__(self, n_states, n_inputs, dtype=np.float64):
        if n_states < 1:
            raise ValueError(f"`n_states` must be positive, got {n_states}")
        if n_inputs < 0:
            raise ValueError(f"`n_inputs` must be non-negative, got {n_inputs}")
        self.n_states = n_states
        self.n_inputs = n_inputs
        self.dtype = util.resolve_dtype(dtype)
        self._F = np.identity(n_states, dtype=self.dtype)
        self._H = np.zeros((n_states, n_inputs), dtype=self.dtype)
        self._Q = np.zeros((n_states, n_states), dtype=self.dtype)
        self._x = np.zeros(n_states, dtype=self.dtype)
        self._P = np.identity(n_inputs, dtype=self.dtype)
        self._built = False

    def _convert(self, value, role, name, shape):
        if self._built:
            raise RuntimeError("The builder was already used to build a filter")
        value = as_role(value, role, name, self.dtype)
        util.check_shape(value.values, shape, name)
        return value.values.copy()

    def with_system_matrix(self, F):
        """Set system matrix, shape (n_states, n_states)."""
        self._F = self._convert(F, DiscreteSystemMatrix, "F",
                                (self.n_states, self.n_states))
        return self

    def with_input_matrix(self, H):
        """Set input matrix, shape (n_states, n_inputs)."""
        self._H = self._convert(H, DiscreteInputMatrix, "H",
                                (self.n_states, self.n_inputs))
        return self

    def with_process_noise(self, Q):
        """Set process noise covariance matrix, shape (n_states, n_states)."""
        self._Q = self._convert(Q, ProcessNoiseMatrix, "Q",
                                (self.n_states, self.n_states))
        return self

    def with_initial_state(self, x, P):
        """Set initial state and its covariance.

        Parameters
        ----------
        x : StateVector or array_like, shape (n_states,)
            Initial state.
        P : CovarianceMatrix or array_like, shape (n_states, n_states)
            Initial covariance. Expected to be symmetric positive semi-definite,
            which is not checked.
        """
        x = self._convert(x, StateVector, "x", (self.n_states,))
        P = self._convert(P, CovarianceMatrix, "P", (self.n_states, self.n_states))
        self._x = x
        self._P = P
        return self

    def build(self):
        """Create the filter, the builder can't be used afterwards."""
        return KalmanFilter(self)


class KalmanFilter:
    """Discrete linear Kalman filter.

    Instances are created from `KalmanFilterBuilder`. Model matrices are fixed for
    the lifetime of the filter. State and covariance are replaced by new arrays in
    `predict` and `measure`, which return `SystemState` views without copying.

    The filter is not thread-safe, concurrent calls must be serialized by the caller.

    Parameters
    ----------
    builder : KalmanFilterBuilder
        Configured builder. Its data is transferred to the filter.

    Attributes
    ----------
    n_states, n_inputs : int
        Number of states and inputs.
    dtype : numpy.dtype
        Floating type used.
    F, H, Q : ndarray
        Non-writeable system, input and process noise matrices.
    last_innovation : float or None
        Residual ``y - c @ x`` of the last measurement.
    last_innovation_variance : float or None
        Variance ``c @ P @ c + r`` of the last residual.
    """
    def __init__(self, builder):
        if not isinstance(builder, KalmanFilterBuilder):
            raise TypeError(f"`builder` must be KalmanFilterBuilder, "
                            f"got {type(builder).__name__}")
        if builder._built:
            raise RuntimeError("The builder was already used to build a filter")
        n_states = builder.n_states
        if builder._P.shape != (n_states, n_states):
            raise ValueError(
                f"Initial covariance must have shape {(n_states, n_states)}, "
                f"got {builder._P.shape} (the default); provide it with "
                "`with_initial_state`")
        builder._built = True

        self.n_states = n_states
        self.n_inputs = builder.n_inputs
        self.dtype = builder.dtype
        self._F = builder._F
        self._H = builder._H
        self._Q = builder._Q
        self._x = builder._x
        self._P = builder._P
        self._generation = 0
        self.last_innovation = None
        self.last_innovation_variance = None

    @property
    def F(self):
        return _read_only(self._F)

    @property
    def H(self):
        return _read_only(self._H)

    @property
    def Q(self):
        return _read_only(self._Q)

    @property
    def estimate(self):
        """Current `SystemState` view."""
        return SystemState(self)

    def predict(self, u):
        """Predict state and covariance to the next time step.

        Computes::

            x = F @ x + H @ u
            P = F @ P @ F.T + Q

        Parameters
        ----------
        u : InputVector or array_like, shape (n_inputs,)
            Input vector.

        Returns
        -------
        SystemState
            View of the predicted state and covariance.
        """
        u = as_role(u, InputVector, "u", self.dtype)
        util.check_shape(u.values, (self.n_inputs,), "u")
        self._x = self._F @ self._x + self._H @ u.values
        self._P = self._F @ self._P @ self._F.T + self._Q
        self._generation += 1
        return SystemState(self)

    def measure(self, y, c, r):
        """Process a scalar measurement.

        Computes::

            S = c @ P @ c + r
            K = P @ c / S
            x = x + K * (y - c @ x)
            P = P - outer(K, c @ P)

        The plain covariance update is used, accumulated rounding errors might
        destroy symmetry and positive definiteness of ``P``.

        When ``S`` is zero (for example zero `c` and zero `r`) the gain and the
        updated state and covariance become non-finite. This is not treated as an error
        and no floating point warning is issued.

        Parameters
        ----------
        y : float
            Measured value.
        c : MeasurementRow or array_like, shape (n_states,)
            Measurement row relating the state to `y`. Can differ between calls.
        r : float
            Variance of the measurement noise.

        Returns
        -------
        SystemState
            View of the updated state and covariance.
        """
        c = as_role(c, MeasurementRow, "c", self.dtype)
        util.check_shape(c.values, (self.n_states,), "c")
        c = c.values
        y = self.dtype.type(y)
        r = self.dtype.type(r)

        with np.errstate(divide='ignore', invalid='ignore'):
            Pc = self._P @ c
            S = c @ Pc + r
            K = Pc / S
            e = y - c @ self._x
            self._x = self._x + K * e
            self._P = self._P - np.outer(K, c @ self._P)

        self.last_innovation = e
        self.last_innovation_variance = S
        self._generation += 1
        return SystemState(self)
