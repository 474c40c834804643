from __future__ import annotations
from typing import Tuple, Optional
import numpy as np

from .loggers.tolerances import TolerancePolicy

# ---------------------------------------------------------------------
# Scores for transition-matrix estimates and sweep trend fitting
# ---------------------------------------------------------------------


def estimation_error(theta_hat: np.ndarray, theta: np.ndarray) -> float:
    """||theta_hat - theta||_inf, the induced infinity norm (max absolute row sum)."""
    theta_hat = np.asarray(theta_hat, dtype=float)
    theta = np.asarray(theta, dtype=float)
    if theta_hat.shape != theta.shape:
        raise ValueError(f"shape mismatch: {theta_hat.shape} vs {theta.shape}.")
    return float(np.linalg.norm(theta_hat - theta, ord=np.inf))


def row_density(M: np.ndarray, tol: Optional[TolerancePolicy] = None) -> float:
    """Average number of nonzeros per row (same convention as the sparse estimator's target)."""
    tol = tol or TolerancePolicy()
    M = np.asarray(M)
    return tol.count_nonzero(M) / M.shape[0]


def support_recovery(theta_hat: np.ndarray, theta: np.ndarray,
                     tol: Optional[TolerancePolicy] = None) -> dict:
    """Precision/recall of the estimated support against the true one."""
    tol = tol or TolerancePolicy()
    est = np.abs(np.asarray(theta_hat)) > tol.zero_atol
    true = np.abs(np.asarray(theta)) > tol.zero_atol
    tp = int((est & true).sum())
    n_est, n_true = int(est.sum()), int(true.sum())
    return {
        "precision": tp / n_est if n_est else float("nan"),
        "recall": tp / n_true if n_true else float("nan"),
        "n_est": n_est,
        "n_true": n_true,
    }


def theil_sen(x, y) -> Tuple[float, float]:
    """Theil-Sen line fit: median of pairwise slopes, then median intercept."""
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same length, got {x.size} and {y.size}.")
    if x.size < 2:
        raise ValueError("theil_sen needs at least two points.")
    i, j = np.triu_indices(x.size, k=1)
    dx = x[j] - x[i]
    keep = dx != 0
    if not np.any(keep):
        raise ValueError("theil_sen needs at least two distinct x values.")
    slope = float(np.median((y[j] - y[i])[keep] / dx[keep]))
    intercept = float(np.median(y - slope * x))
    return slope, intercept


def loglog_trend(x, y) -> Tuple[float, float]:
    """Theil-Sen fit of log10(y) on log10(x); returns (alpha, beta) with y ~ 10^beta x^alpha."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    ok = (x > 0) & (y > 0) & np.isfinite(x) & np.isfinite(y)
    return theil_sen(np.log10(x[ok]), np.log10(y[ok]))
