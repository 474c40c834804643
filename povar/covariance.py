from __future__ import annotations
from typing import Optional
import warnings
import numpy as np

from .errors import DegenerateSamplingError, DegenerateSamplingWarning
from .loggers.tolerances import TolerancePolicy

# ---------------------------------------------------------------------
# Lag covariances under Markov sampling
# - stationary sampling probability p = a / (a + b)
# - scaling matrix S(D, a, b, h) = E[pi_{t+h} pi_t^T]
# - bias-corrected lag-h covariance estimate
# ---------------------------------------------------------------------


def stationary_probability(a: float, b: float) -> float:
    """p = a / (a + b) after checking that the chain is well defined."""
    if not (0.0 < a <= 1.0) or not (0.0 <= b <= 1.0):
        raise DegenerateSamplingError(
            f"sampling rates must satisfy 0 < a <= 1 and 0 <= b <= 1, got a={a}, b={b}."
        )
    # a > 0 and b <= 1 already give 0 < a + b <= 2, i.e. |1 - a - b| <= 1
    return a / (a + b)


def scaling_matrix(D: int, a: float, b: float, h: int) -> np.ndarray:
    """Expected product of sampling indicators at lag h.

    Off-diagonal entries are p^2 (independent chains). On the diagonal the
    entry is p for h = 0 and p^2 + p (1 - p) (1 - a - b)^h otherwise, the
    probability that one chain is observed at two times h apart.

    a + b = 2 (a = b = 1) is the alternating chain: it warns, and at odd lags,
    where the diagonal is exactly zero, it raises DegenerateSamplingError.
    """
    if h < 0:
        raise ValueError(f"lag h must be nonnegative, got {h}.")
    p = stationary_probability(a, b)
    if a + b >= 2.0:
        if h % 2 == 1:
            raise DegenerateSamplingError(
                f"a={a}, b={b} alternates every step: no coordinate is observed at two "
                f"times an odd lag h={h} apart."
            )
        warnings.warn(
            f"a={a}, b={b} gives a periodic sampling chain; odd-lag covariances are "
            "not estimable.",
            DegenerateSamplingWarning, stacklevel=2,
        )
    S = np.full((D, D), p ** 2)
    if h == 0:
        diag = p
    else:
        diag = p ** 2 + p * (1.0 - p) * (1.0 - a - b) ** h
    np.fill_diagonal(S, diag)
    return S


def _check_observations(pi: np.ndarray, Y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    pi = np.asarray(pi)
    Y = np.asarray(Y, dtype=float)
    if Y.ndim != 2:
        raise ValueError(f"Y must be 2-D (T, D); got shape {Y.shape}.")
    if pi.shape != Y.shape:
        raise ValueError(f"pi and Y must have the same shape, got {pi.shape} and {Y.shape}.")
    return pi.astype(bool), Y


def estimate_gamma(pi: np.ndarray,
                   Y: np.ndarray,
                   a: float,
                   b: float,
                   omega: float,
                   h: int,
                   tol: Optional[TolerancePolicy] = None) -> np.ndarray:
    """Bias-corrected empirical lag-h covariance of the latent process.

        Gamma_h = [ 1/(T-h) sum_t Y_{t+h} Y_t^T ] / S(h)  -  1{h=0} omega^2 I

    Shapes
    -------
    pi, Y : (T, D), time-major
    returns (D, D)

    Raises ``DegenerateSamplingError`` if S has an entry too close to zero to
    divide by (e.g. p ~ 0, or the alternating chain a = b = 1 at odd lags).
    """
    tol = tol or TolerancePolicy()
    pi, Y = _check_observations(pi, Y)
    T, D = Y.shape
    if not (0 <= h < T):
        raise ValueError(f"lag h must satisfy 0 <= h < T={T}, got {h}.")

    S = scaling_matrix(D, a, b, h)
    if np.min(np.abs(S)) < tol.scaling_atol:
        raise DegenerateSamplingError(
            f"scaling matrix has near-zero entries (min |S|={np.min(np.abs(S)):.3g}) "
            f"for a={a}, b={b}, h={h}."
        )

    Xhat = np.where(pi, Y, 0.0)
    G = (Xhat[h:].T @ Xhat[:T - h]) / (T - h)
    G = G / S
    if h == 0:
        G = G - omega ** 2 * np.eye(D)
    return G
