import numpy as np
import pytest
from numpy.testing import assert_array_equal
from kalmanfilter import types


def test_wrapping():
    data = np.array([[1, 2], [3, 4]])
    F = types.DiscreteSystemMatrix(data)
    assert F.dtype == np.float64
    assert F.shape == (2, 2)
    assert len(F) == 2
    data[0, 0] = 10
    assert_array_equal(F.values, [[1, 2], [3, 4]])
    assert_array_equal(np.asarray(F), F.values)
    assert repr(F).startswith("DiscreteSystemMatrix(")

    x = types.StateVector(np.array([1, 2], dtype=np.float32))
    assert x.dtype == np.float32
    x = types.StateVector([1, 2], dtype=np.float32)
    assert x.dtype == np.float32
    assert types.InputVector(3.0).shape == (1,)


def test_roles():
    A = types.ContinuousSystemMatrix(np.identity(2))
    with pytest.raises(TypeError):
        types.DiscreteSystemMatrix(A)
    with pytest.raises(TypeError, match="`F` must be DiscreteSystemMatrix"):
        types.as_role(A, types.DiscreteSystemMatrix, "F")
    F = types.DiscreteSystemMatrix(A.values)
    assert types.as_role(F, types.DiscreteSystemMatrix, "F") is F
    F32 = types.as_role(F, types.DiscreteSystemMatrix, "F", np.float32)
    assert F32.dtype == np.float32
    assert F.dtype == np.float64
    assert isinstance(types.as_role([[1]], types.ProcessNoiseMatrix, "Q"),
                      types.ProcessNoiseMatrix)


def test_dimensions():
    with pytest.raises(ValueError, match="must have 2 dimension"):
        types.CovarianceMatrix([1, 2])
    with pytest.raises(ValueError, match="must have 1 dimension"):
        types.StateVector([[1, 2], [3, 4]])
    with pytest.raises(ValueError, match="`dtype`"):
        types.StateVector([1, 2], dtype=int)

    assert types.MeasurementMatrix([1, 2]).shape == (1, 2)
    assert types.MeasurementRow([[1, 2]]).shape == (2,)
    with pytest.raises(ValueError):
        types.MeasurementRow([[1, 2], [3, 4]])
