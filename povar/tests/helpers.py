# tests/helpers.py
import numpy as np
from ..config import ProcessParameters
from ..simulation import simulate_povar


def simulate(theta, *, sigma=1.0, a=1.0, b=0.0, omega=0.0, T=5000, seed=0):
    """Simulate with a fresh generator; full sampling by default."""
    params = ProcessParameters(theta=theta, sigma=sigma, a=a, b=b, omega=omega, T=T)
    return simulate_povar(params, np.random.default_rng(seed))


def two_per_row_theta():
    """Diagonal plus one shifted off-diagonal per row, magnitudes well separated.

    The two smallest off-diagonal entries differ by more than the 10% bisection
    bracket so that the density crosses 2 in a single step.
    """
    diag = np.array([0.45, 0.40, 0.35, 0.42, 0.38, 0.44, 0.36, 0.41, 0.39, 0.43])
    off = np.array([0.10, 0.16, 0.25, 0.28, 0.22, 0.30, 0.26, 0.24, 0.29, 0.27])
    D = diag.size
    theta = np.diag(diag)
    for i in range(D):
        theta[i, (i + 3) % D] = off[i]
    return theta
