# povar/config.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import numpy as np

from .ensembles import rates_from_p


@dataclass
class ProcessParameters:
    """Parameters of one partially-observed VAR(1) process.

    theta : (D, D) transition matrix, spectral radius < 1
    sigma : process noise std
    a, b  : sampling chain rates (unobserved->observed, observed->unobserved)
    omega : observation noise std
    T     : horizon
    """
    theta: np.ndarray
    sigma: float = 1.0
    a: float = 1.0
    b: float = 0.0
    omega: float = 0.1
    T: int = 10_000

    def __post_init__(self) -> None:
        self.theta = np.asarray(self.theta, dtype=float)
        if self.theta.ndim != 2 or self.theta.shape[0] != self.theta.shape[1]:
            raise ValueError(f"theta must be square (D, D), got shape {self.theta.shape}.")
        rho = float(np.max(np.abs(np.linalg.eigvals(self.theta)))) if self.theta.size else 0.0
        if rho >= 1.0:
            raise ValueError(f"theta must have spectral radius < 1 for stationarity, got {rho:.4g}.")
        if not self.sigma > 0:
            raise ValueError(f"sigma must be positive, got {self.sigma}.")
        if not (0.0 < self.a <= 1.0):
            raise ValueError(f"a must be in (0,1], got {self.a}.")
        if not (0.0 <= self.b <= 1.0):
            raise ValueError(f"b must be in [0,1], got {self.b}.")
        if self.omega < 0:
            raise ValueError(f"omega must be nonnegative, got {self.omega}.")
        if int(self.T) < 2:
            raise ValueError(f"T must be >= 2, got {self.T}.")
        self.T = int(self.T)

    @property
    def D(self) -> int:
        return int(self.theta.shape[0])

    @property
    def p(self) -> float:
        return self.a / (self.a + self.b)


@dataclass
class EstimatorOpts:
    """Options of the sparse (LP + bisection) estimator."""
    lam_min: float = 0.0
    lam_max: float = 1e2
    rel_tol: float = 0.1
    max_iter: int = 60
    method: str = "highs"
    time_limit: Optional[float] = None   # seconds per LP solve; None = no limit

    def __post_init__(self) -> None:
        if not self.lam_max > self.lam_min:
            raise ValueError(
                f"lam_max must exceed lam_min, got [{self.lam_min}, {self.lam_max}]."
            )
        if not (0.0 < self.rel_tol < 1.0):
            raise ValueError(f"rel_tol must be in (0,1), got {self.rel_tol}.")
        if self.max_iter <= 0:
            raise ValueError("max_iter must be a positive integer.")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError("time_limit must be positive when provided.")


@dataclass
class ExperimentConfig:
    """One experiment point: draw theta, simulate, estimate, score."""
    D: int = 5
    s: Optional[int] = None          # nonzeros per row of the true theta (None -> D)
    sigma: float = 1.0
    p: float = 1.0
    a: Optional[float] = None
    b: Optional[float] = None
    omega: float = 0.1
    T: int = 10_000
    h0: int = 0
    s_hat: Optional[float] = None    # target density (None -> D, i.e. dense estimator)
    theta_scale: float = 0.5         # operator 2-norm of the drawn theta

    def __post_init__(self) -> None:
        if self.D < 1:
            raise ValueError(f"D must be positive, got {self.D}.")
        if self.s is None:
            self.s = self.D
        if not (1 <= self.s <= self.D):
            raise ValueError(f"s must be in [1, D]={self.D}, got {self.s}.")
        if self.s_hat is None:
            self.s_hat = self.D
        if self.s_hat <= 0:
            raise ValueError(f"s_hat must be positive, got {self.s_hat}.")

        # (a, b) default to the chain whose stationary probability is p
        if self.a is None and self.b is None:
            self.a, self.b = rates_from_p(self.p)
        elif self.a is None or self.b is None:
            raise ValueError("a and b must be given together (or neither, to use p).")
        else:
            if self.a + self.b <= 0:
                raise ValueError(f"a + b must be positive, got a={self.a}, b={self.b}.")
            self.p = self.a / (self.a + self.b)

        if self.h0 < 0:
            raise ValueError(f"h0 must be nonnegative, got {self.h0}.")
        if not (0.0 < self.theta_scale < 1.0):
            raise ValueError(f"theta_scale must be in (0,1), got {self.theta_scale}.")

    @property
    def estimator(self) -> str:
        return "dense" if self.s_hat == self.D else "sparse"

    def process_parameters(self, theta: np.ndarray) -> ProcessParameters:
        return ProcessParameters(theta=theta, sigma=self.sigma, a=self.a, b=self.b,
                                 omega=self.omega, T=self.T)


@dataclass
class RunMeta:
    seed: int
    version: str = "0.1.0"
    extra: Dict[str, Any] = field(default_factory=dict)
