import numpy as np
import pytest
from ..covariance import scaling_matrix, stationary_probability
from ..errors import DegenerateSamplingError, DegenerateSamplingWarning

def test_lag_zero_diagonal_is_p_and_offdiagonal_p_squared():
    S = scaling_matrix(3, 0.2, 0.3, 0)
    assert S.shape == (3, 3)
    assert np.allclose(np.diag(S), 0.4)
    off = S[~np.eye(3, dtype=bool)]
    assert np.allclose(off, 0.16)

def test_positive_lag_diagonal_matches_markov_two_point_probability():
    a, b, h = 0.2, 0.3, 3
    p = a / (a + b)
    S = scaling_matrix(4, a, b, h)
    expected = p**2 + p * (1 - p) * (1 - a - b) ** h
    assert np.allclose(np.diag(S), expected)
    # matrix power of the chain gives the same joint probability
    P = np.array([[1 - a, a], [b, 1 - b]])
    joint = p * np.linalg.matrix_power(P, h)[1, 1]
    assert np.isclose(expected, joint)

def test_full_sampling_is_all_ones():
    for h in (0, 1, 5):
        assert np.allclose(scaling_matrix(3, 1.0, 0.0, h), 1.0)

def test_memoryless_chain_diagonal_is_p_squared_beyond_lag_zero():
    # a + b = 1 -> (1 - a - b)^h = 0
    S = scaling_matrix(2, 0.3, 0.7, 2)
    assert np.allclose(S, 0.09)

@pytest.mark.parametrize("a,b", [(0.0, 0.5), (-0.1, 0.2), (0.5, 1.5), (1.2, 0.1)])
def test_invalid_rates_raise(a, b):
    with pytest.raises(DegenerateSamplingError):
        scaling_matrix(2, a, b, 1)

def test_negative_lag_raises():
    with pytest.raises(ValueError):
        scaling_matrix(2, 0.5, 0.5, -1)

def test_stationary_probability():
    assert np.isclose(stationary_probability(0.2, 0.3), 0.4)
    assert stationary_probability(1.0, 0.0) == 1.0

def test_alternating_chain_raises_at_odd_lags_and_warns_at_even_lags():
    # a = b = 1: (1 - a - b)^h = (-1)^h, so the odd-lag diagonal is p^2 - p^2 = 0
    for h in (1, 3):
        with pytest.raises(DegenerateSamplingError):
            scaling_matrix(2, 1.0, 1.0, h)
    for h in (0, 2):
        with pytest.warns(DegenerateSamplingWarning):
            S = scaling_matrix(2, 1.0, 1.0, h)
        assert np.all(S > 0)

def test_aperiodic_chain_does_not_warn():
    import warnings
    with warnings.catch_warnings():
        warnings.simplefilter("error", DegenerateSamplingWarning)
        scaling_matrix(3, 0.9, 0.9, 1)
        scaling_matrix(3, 1.0, 0.0, 1)
