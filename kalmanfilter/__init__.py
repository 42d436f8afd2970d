"""kalmanfilter: Linear Kalman filter and linear system analysis in Python.

Type naming conventions
-----------------------
Matrices and vectors of a linear state-space model are represented by role-tagged
wrappers from `kalmanfilter.types`. Each holds a floating point ndarray in `values`.
The following roles are defined:

    - `StateVector` - state estimate ``x``, shape (n_states,)
    - `CovarianceMatrix` - covariance ``P`` of the state estimate
    - `InputVector` - control input ``u``, shape (n_inputs,)
    - `ContinuousSystemMatrix`, `ContinuousInputMatrix` - matrices ``A`` and ``B`` of
      a continuous model ``dx/dt = A @ x + B @ u``
    - `ContinuousNoiseMatrix` - intensity of continuous process noise
    - `DiscreteSystemMatrix`, `DiscreteInputMatrix` - matrices ``F`` and ``H`` of
      a discrete model ``x[k + 1] = F @ x[k] + H @ u[k]``
    - `ProcessNoiseMatrix` - covariance ``Q`` of discrete process noise
    - `MeasurementMatrix` - matrix ``C`` relating state and measurements
    - `MeasurementRow` - single row ``c`` of a measurement matrix

Functions accept plain array_like values in place of the wrappers, but an instance of
a wrong role is rejected with `TypeError`.

Precision
---------
Computations are done in the floating type of the inputs (float32 or float64), integer
inputs are promoted to float64. The type can be set explicitly by `dtype` arguments.

Modules
-------
.. autosummary::
   :toctree: generated/

   kalman
   observability
   sim
   systems
   types
   util
"""
from . import kalman, observability, sim, systems, types, util

__version__ = "1.0"
