import numpy as np
import pytest
from numpy.testing import assert_allclose
from kalmanfilter import util


def test_resolve_dtype():
    assert util.resolve_dtype(None, [1, 2]) == np.float64
    assert util.resolve_dtype(None, np.zeros(2, dtype=np.float32)) == np.float32
    assert util.resolve_dtype(None) == np.float64
    assert util.resolve_dtype(np.float32, [1, 2]) == np.float32
    with pytest.raises(ValueError):
        util.resolve_dtype(np.complex128)


def test_check_shape():
    util.check_shape(np.zeros((2, 3)), (2, 3), "a")
    with pytest.raises(ValueError, match=r"`a` must have shape \(3, 2\), got \(2, 3\)"):
        util.check_shape(np.zeros((2, 3)), (3, 2), "a")


def test_max_abs():
    assert util.max_abs([[1, -3], [2, 0]]) == 3
    assert util.max_abs(np.zeros((0, 2))) == 0


def test_compute_rms():
    assert_allclose(util.compute_rms([[1, 2], [-1, -2]]), [1, 2])


def test_bunch():
    bunch = util.Bunch(a=1, b=2)
    assert bunch.a == 1
    bunch.c = 3
    assert bunch['c'] == 3
    with pytest.raises(AttributeError):
        bunch.d
    assert util.state_columns(3) == ['x0', 'x1', 'x2']
