"""Simulation of linear systems.

Module provides continuous and discrete linear models driven by inputs and Gaussian
white noise, which produce noisy measurements. They are used to test filters and
to compare continuous and discretized forms of a system.

Functions
---------
.. autosummary::
    :toctree: generated/

    example_model_regular
    example_model_singular
    run_filter

Classes
-------
.. autosummary::
    :toctree: generated/

    ContinuousLinearModel
    DiscreteLinearModel
"""
import numpy as np
import pandas as pd
from scipy._lib._util import check_random_state
from . import util
from .systems import continuous_to_discrete
from .types import (StateVector, InputVector, ContinuousSystemMatrix,
                    ContinuousInputMatrix, DiscreteSystemMatrix, DiscreteInputMatrix,
                    MeasurementMatrix, as_role)


def _verify_sd(sd, n, name):
    sd = np.asarray(sd, dtype=float)
    if sd.ndim == 0:
        sd = np.resize(sd, n)
    elif sd.shape != (n,):
        raise ValueError(f"`{name}` might be float or array with shape {(n,)}")
    if np.any(sd < 0):
        raise ValueError(f"`{name}` must be non-negative")
    return sd


class _LinearModel:
    def __init__(self, x0, M, N, C, w_sd, r_sd, rng, names):
        M_name, N_name = names
        n_states = M.shape[0]
        if M.shape != (n_states, n_states):
            raise ValueError(f"`{M_name}` must be square, got shape {M.shape}")
        if N.shape[0] != n_states:
            raise ValueError(f"`{N_name}` must have {n_states} rows, got {N.shape[0]}")
        C = as_role(C, MeasurementMatrix, "C", M.dtype)
        if C.shape[0] < 1:
            raise ValueError("`C` must have at least one row")
        if C.shape[1] != n_states:
            raise ValueError(f"`C` must have {n_states} columns, got {C.shape[1]}")
        x0 = as_role(x0, StateVector, "x0", M.dtype)
        util.check_shape(x0.values, (n_states,), "x0")

        self.n_states = n_states
        self.n_inputs = N.shape[1]
        self.n_outputs = C.shape[0]
        self.C = C
        self.w_sd = _verify_sd(w_sd, self.n_states, "w_sd")
        self.r_sd = _verify_sd(r_sd, self.n_outputs, "r_sd")
        self.state = x0.values.copy()
        self.rng = check_random_state(rng)

    def _prepare_input(self, u):
        u = as_role(u, InputVector, "u", self.state.dtype)
        util.check_shape(u.values, (self.n_inputs,), "u")
        return u.values

    def _output(self):
        return self.C.values @ self.state + self.rng.normal(0, self.r_sd)


class ContinuousLinearModel(_LinearModel):
    """Continuous linear model.

    The model is::

        dx/dt = A @ x + B @ u + w
        y = C @ x + v

    where ``w`` and ``v`` are independent zero mean Gaussian noises.
    The state is propagated by Euler method.

    Parameters
    ----------
    x0 : StateVector or array_like, shape (n_states,)
        Initial state.
    A : ContinuousSystemMatrix or array_like, shape (n_states, n_states)
        System matrix.
    B : ContinuousInputMatrix or array_like, shape (n_states, n_inputs)
        Input matrix.
    C : MeasurementMatrix or array_like, shape (n_outputs, n_states)
        Measurement matrix.
    w_sd : array_like, shape (n_states,) or float, optional
        Standard deviations of the noise ``w`` drawn at each step. Default is 0.
    r_sd : array_like, shape (n_outputs,) or float, optional
        Standard deviations of the measurement noise. Default is 0.
    rng : None, int or `numpy.random.RandomState`, optional
        Seed to create or already created RandomState. None (default) corresponds to
        nondeterministic seeding.
    """
    def __init__(self, x0, A, B, C, w_sd=0, r_sd=0, rng=None):
        A = as_role(A, ContinuousSystemMatrix, "A")
        B = as_role(B, ContinuousInputMatrix, "B", A.dtype)
        super().__init__(x0, A.values, B.values, C, w_sd, r_sd, rng, ("A", "B"))
        self.A = A
        self.B = B

    def step(self, u, dt):
        """Propagate the state by `dt` and generate measurements.

        Parameters
        ----------
        u : InputVector or array_like, shape (n_inputs,)
            Input held constant over the step.
        dt : float
            Time step.

        Returns
        -------
        ndarray, shape (n_outputs,)
            Measurements at the end of the step.
        """
        u = self._prepare_input(u)
        w = self.rng.normal(0, self.w_sd)
        self.state += (self.A.values @ self.state + self.B.values @ u + w) * dt
        return self._output()

    def to_discrete(self, dt, eps):
        """Create the discrete model with time step `dt`.

        The discrete model starts from a copy of the current state. Noise parameters
        and the random generator are shared.

        Parameters
        ----------
        dt : float
            Time step.
        eps : float
            Tolerance for power series, see
            `kalmanfilter.systems.continuous_to_discrete`.

        Returns
        -------
        DiscreteLinearModel
        """
        system = continuous_to_discrete(self.A, self.B, dt, eps)
        return DiscreteLinearModel(self.state, system.F, system.H, self.C,
                                   self.w_sd, self.r_sd, self.rng)


class DiscreteLinearModel(_LinearModel):
    """Discrete linear model.

    The model is::

        x[k + 1] = F @ x[k] + H @ u[k] + w[k]
        y[k + 1] = C @ x[k + 1] + v[k + 1]

    where ``w`` and ``v`` are independent zero mean Gaussian noises.

    Parameters
    ----------
    x0 : StateVector or array_like, shape (n_states,)
        Initial state.
    F : DiscreteSystemMatrix or array_like, shape (n_states, n_states)
        System matrix.
    H : DiscreteInputMatrix or array_like, shape (n_states, n_inputs)
        Input matrix.
    C : MeasurementMatrix or array_like, shape (n_outputs, n_states)
        Measurement matrix.
    w_sd : array_like, shape (n_states,) or float, optional
        Standard deviations of the process noise. Default is 0.
    r_sd : array_like, shape (n_outputs,) or float, optional
        Standard deviations of the measurement noise. Default is 0.
    rng : None, int or `numpy.random.RandomState`, optional
        Seed to create or already created RandomState. None (default) corresponds to
        nondeterministic seeding.
    """
    def __init__(self, x0, F, H, C, w_sd=0, r_sd=0, rng=None):
        F = as_role(F, DiscreteSystemMatrix, "F")
        H = as_role(H, DiscreteInputMatrix, "H", F.dtype)
        super().__init__(x0, F.values, H.values, C, w_sd, r_sd, rng, ("F", "H"))
        self.F = F
        self.H = H

    def step(self, u):
        """Propagate the state by one step and generate measurements.

        Parameters
        ----------
        u : InputVector or array_like, shape (n_inputs,)
            Input.

        Returns
        -------
        ndarray, shape (n_outputs,)
            Measurements at the new time step.
        """
        u = self._prepare_input(u)
        w = self.rng.normal(0, self.w_sd)
        self.state = self.F.values @ self.state + self.H.values @ u + w
        return self._output()


def example_model_regular():
    """Create stable 2-state model with invertible system matrix.

    The system matrix has eigenvalues -3.5 and -1.5. The input drives the first state,
    the second state is measured with gain 2. Noises are zero.
    """
    return ContinuousLinearModel(x0=[0, 0],
                                 A=[[-3, 1.5], [0.5, -2]],
                                 B=[[1], [0]],
                                 C=[[0, 2]])


def example_model_singular():
    """Create stable 2-state model with singular system matrix.

    The system matrix has eigenvalues -3.75 and 0. The rest is as in
    `example_model_regular`.
    """
    return ContinuousLinearModel(x0=[0, 0],
                                 A=[[-3, 1.5], [1.5, -0.75]],
                                 B=[[1], [0]],
                                 C=[[0, 2]])


def run_filter(kf, model, inputs, measurement_noise=None, time_step=1):
    """Run Kalman filter on measurements from a simulated model.

    At each step the model is propagated with the input, the filter predicts with
    the same input and then processes each measurement row separately.

    Parameters
    ----------
    kf : `kalmanfilter.kalman.KalmanFilter`
        Filter configured for the model.
    model : DiscreteLinearModel
        Model to generate measurements. It is modified in place.
    inputs : array_like, shape (n_steps, n_inputs) or (n_steps,)
        Inputs for each step. 1-D array is allowed for a single input.
    measurement_noise : array_like, shape (n_outputs,), float or None, optional
        Measurement noise variances used by the filter. If None (default), variances
        of the model measurement noise are used.
    time_step : float, optional
        Time step to compute the index of the result. Default is 1.

    Returns
    -------
    Bunch with the following fields:

        state, state_sd : DataFrame
            Estimated states and their standard deviations after processing
            measurements at each step.
        true_state : DataFrame
            True model states.
        innovations : DataFrame
            Normalized innovations for each measurement.
    """
    inputs = np.asarray(inputs, dtype=float)
    if inputs.ndim == 1 and model.n_inputs == 1:
        inputs = inputs[:, None]
    if inputs.ndim != 2 or inputs.shape[1] != model.n_inputs:
        raise ValueError(f"`inputs` must have shape (n_steps, {model.n_inputs})")
    if measurement_noise is None:
        measurement_noise = model.r_sd ** 2
    r = _verify_sd(measurement_noise, model.n_outputs, "measurement_noise")

    state = []
    state_sd = []
    true_state = []
    innovations = []
    for u in inputs:
        y = model.step(u)
        estimate = kf.predict(u)
        innovation = []
        for i in range(model.n_outputs):
            estimate = kf.measure(y[i], model.C.values[i], r[i])
            innovation.append(kf.last_innovation / kf.last_innovation_variance ** 0.5)
        state.append(estimate.state)
        state_sd.append(np.diagonal(estimate.covariance) ** 0.5)
        true_state.append(model.state.copy())
        innovations.append(innovation)

    index = pd.Index(time_step * np.arange(1, len(inputs) + 1), name='time')
    columns = util.state_columns(model.n_states)
    return util.Bunch(
        state=pd.DataFrame(np.array(state), index=index, columns=columns),
        state_sd=pd.DataFrame(np.array(state_sd), index=index, columns=columns),
        true_state=pd.DataFrame(np.array(true_state), index=index, columns=columns),
        innovations=pd.DataFrame(np.array(innovations).reshape(-1, model.n_outputs),
                                 index=index,
                                 columns=util.state_columns(model.n_outputs, 'y')))
