from typing import Tuple

import numpy as np
import numpy.linalg as npl


# ---------------------------------------------------------------------
# Random transition matrices and sampling-rate helpers.
# theta: (D, D)
# ---------------------------------------------------------------------


def random_theta(D: int, s: int, rng: np.random.Generator, scale: float = 0.5) -> np.ndarray:
    """Row-sparse Gaussian theta with exactly s nonzeros per row.

    The support of each row is drawn uniformly without replacement; the matrix
    is rescaled so that its operator 2-norm equals ``scale`` (< 1 keeps the
    VAR(1) process stable).
    """
    if not (1 <= s <= D):
        raise ValueError(f"s must be in [1, D]={D}, got {s}.")
    theta = np.zeros((D, D))
    for d in range(D):
        cols = rng.choice(D, size=s, replace=False)
        theta[d, cols] = rng.standard_normal(s)
    nrm = npl.norm(theta, 2)
    if nrm == 0.0:
        # all draws exactly zero; practically unreachable
        return theta
    return scale * theta / nrm


def rates_from_p(p: float) -> Tuple[float, float]:
    """(a, b) = (p, 1 - p): the memoryless chain with stationary probability p."""
    if not (0.0 < p <= 1.0):
        raise ValueError(f"p must be in (0,1], got {p}.")
    return float(p), 1.0 - float(p)


def rates_for_b(p: float, b: float) -> Tuple[float, float]:
    """(a, b) with stationary probability p for a given exit rate b.

    Solves a / (a + b) = p, i.e. a = b p / (1 - p). Raises if the implied a
    falls outside (0, 1).
    """
    if not (0.0 < p < 1.0):
        raise ValueError(f"p must be in (0,1) for a b-sweep, got {p}.")
    a = b * p / (1.0 - p)
    if not (0.0 < a < 1.0):
        raise ValueError(f"b={b} with p={p} implies a={a:.4g} outside (0,1).")
    return float(a), float(b)
