from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np
from numpy.random import Generator
from scipy.linalg import solve_discrete_lyapunov

from .config import ProcessParameters


@dataclass
class Trajectory:
    """One simulated run, all arrays time-major ``(T, D)``.

    X  : latent states
    pi : sampling mask (True = observed)
    Y  : observations, exactly zero where ``pi`` is False
    """
    X: np.ndarray
    pi: np.ndarray
    Y: np.ndarray

    @property
    def T(self) -> int:
        return int(self.Y.shape[0])

    @property
    def D(self) -> int:
        return int(self.Y.shape[1])


def stationary_covariance(theta: np.ndarray, sigma: float) -> np.ndarray:
    """Covariance of the stationary law of x_t = theta x_{t-1} + sigma eps_t.

    Solves Sigma = theta Sigma theta^T + sigma^2 I. For normal theta this is
    sigma^2 (I - theta theta^T)^{-1}.
    """
    theta = np.asarray(theta, dtype=float)
    D = theta.shape[0]
    S = solve_discrete_lyapunov(theta, sigma ** 2 * np.eye(D))
    return 0.5 * (S + S.T)


def sampling_mask(T: int, D: int, a: float, b: float, rng: Generator) -> np.ndarray:
    """Independent two-state Markov chains, one per column.

    pi[0, d] ~ Bernoulli(p) with p = a / (a + b); afterwards an observed
    coordinate stays observed w.p. 1 - b and an unobserved one becomes
    observed w.p. a.

    Returns:
        pi: bool array of shape (T, D)
    """
    p = a / (a + b)
    pi = np.empty((T, D), dtype=bool)
    pi[0] = rng.random(D) < p
    for t in range(1, T):
        u = rng.random(D)
        pi[t] = np.where(pi[t - 1], u < 1.0 - b, u < a)
    return pi


def simulate_povar(params: ProcessParameters, rng: Optional[Generator] = None) -> Trajectory:
    """Simulate latent states, sampling mask and noisy partial observations.

    Args:
        params: process description (theta, sigma, a, b, omega, T).
        rng: ``numpy.random.Generator``; the only source of randomness.

    Returns:
        Trajectory with X, pi, Y of shape (T, D).
    """
    if rng is None:
        rng = np.random.default_rng()

    theta, sigma, T, D = params.theta, params.sigma, params.T, params.D

    # state process, started in its stationary law
    X = np.empty((T, D), dtype=float)
    Sigma0 = stationary_covariance(theta, sigma)
    X[0] = rng.multivariate_normal(np.zeros(D), Sigma0)
    for t in range(1, T):
        X[t] = theta @ X[t - 1] + sigma * rng.standard_normal(D)

    pi = sampling_mask(T, D, params.a, params.b, rng)

    # observations
    noise = params.omega * rng.standard_normal((T, D))
    Y = np.where(pi, X + noise, 0.0)

    return Trajectory(X=X, pi=pi, Y=Y)
