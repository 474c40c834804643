"""Sparsity-targeting (Dantzig-selector) estimator of the transition matrix.

For a fixed bound lambda the estimate solves the linear program

    min  sum(theta_plus + theta_minus)
    s.t. (theta_plus - theta_minus) G0 - G1 <= lambda     (elementwise)
         G1 - (theta_plus - theta_minus) G0 <= lambda
         theta_plus, theta_minus >= 0

with G0 = Gamma_{h0}, G1 = Gamma_{h0+1}. lambda is then bisected until the
density of the solution (nonzeros per row) matches the requested target.
"""
from __future__ import annotations
import logging
from typing import Optional, Dict, Any, Tuple

import numpy as np
import scipy.sparse as sp
from scipy.optimize import linprog

from ..config import EstimatorOpts
from ..covariance import estimate_gamma
from ..errors import LPSolveError, SparsityTargetError
from ..loggers.tolerances import TolerancePolicy
from ..loggers.ledger import log_probe, log_approx

logger = logging.getLogger(__name__)


def lp_matrices(G0: np.ndarray, G1: np.ndarray, lam: float):
    """Build (c, A_ub, b_ub) of the LP for a pinned lambda.

    Variables are [vec(theta_plus), vec(theta_minus)] with row-major vec, so
    vec(theta G0) = kron(I, G0^T) vec(theta).

    Returns
    -------
    c    : (2 D^2,)
    A_ub : sparse (2 D^2, 2 D^2)
    b_ub : (2 D^2,)
    """
    G0 = np.asarray(G0, dtype=float)
    G1 = np.asarray(G1, dtype=float)
    if G0.ndim != 2 or G0.shape[0] != G0.shape[1] or G1.shape != G0.shape:
        raise ValueError(f"G0 and G1 must be square and of equal shape, got {G0.shape}, {G1.shape}.")
    D = G0.shape[0]
    M = sp.kron(sp.identity(D, format="csr"), sp.csr_matrix(G0.T), format="csr")
    A_ub = sp.bmat([[M, -M], [-M, M]], format="csr")
    g1 = G1.ravel()
    b_ub = np.concatenate([lam + g1, lam - g1])
    c = np.ones(2 * D * D)
    return c, A_ub, b_ub


def solve_dantzig_lp(G0: np.ndarray,
                     G1: np.ndarray,
                     lam: float,
                     opts: Optional[EstimatorOpts] = None) -> np.ndarray:
    """Solve the LP at a fixed lambda and return theta_hat = theta_plus - theta_minus.

    Any termination other than optimal raises ``LPSolveError``.
    """
    opts = opts or EstimatorOpts()
    c, A_ub, b_ub = lp_matrices(G0, G1, lam)
    solver_options = {}
    if opts.time_limit is not None:
        solver_options["time_limit"] = float(opts.time_limit)

    res = linprog(c, A_ub=A_ub, b_ub=b_ub, bounds=(0, None),
                  method=opts.method, options=solver_options or None)
    if res.status != 0:
        raise LPSolveError(lam, res.status, res.message)

    D = G0.shape[0]
    n = D * D
    return (res.x[:n] - res.x[n:]).reshape(D, D)


def _relative_width(lam_min: float, lam_max: float) -> float:
    if lam_max == 0.0:
        return float("inf")
    return (lam_max - lam_min) / abs(lam_max)


def estimate_theta_sparse(pi: np.ndarray,
                          Y: np.ndarray,
                          a: float,
                          b: float,
                          omega: float,
                          h0: int,
                          s_hat: float,
                          opts: Optional[EstimatorOpts] = None,
                          tol: Optional[TolerancePolicy] = None,
                          ledger: Optional[Dict[str, Any]] = None,
                          return_info: bool = False,
                          ) -> np.ndarray | Tuple[np.ndarray, Dict[str, Any]]:
    """Sparse estimate of theta with about ``s_hat`` nonzeros per row.

    Bisection on lambda over [opts.lam_min, opts.lam_max]: each probe pins
    lambda to the bracket midpoint and solves the LP. The estimate at the
    first probe whose bracket has relative width below ``opts.rel_tol`` is
    returned. A density below ``s_hat`` lowers the upper end, otherwise the
    lower end is raised.

    Density is (number of entries with |theta_hat| > tol.zero_atol) / D,
    i.e. average nonzeros per row; ``s_hat = D`` means fully dense.

    Raises
    ------
    LPSolveError        : an LP probe did not end optimal (fatal, not retried)
    SparsityTargetError : no convergence within ``opts.max_iter`` probes
    """
    opts = opts or EstimatorOpts()
    tol = tol or TolerancePolicy()
    if h0 < 0:
        raise ValueError(f"h0 must be nonnegative, got {h0}.")
    if s_hat <= 0:
        raise ValueError(f"s_hat must be positive, got {s_hat}.")

    G0 = estimate_gamma(pi, Y, a, b, omega, h0, tol=tol)
    G1 = estimate_gamma(pi, Y, a, b, omega, h0 + 1, tol=tol)
    D = G0.shape[0]
    log_approx(ledger, "sparse",
               f"Dantzig LP on (Gamma_{h0}, Gamma_{h0 + 1}); bisection rel_tol={opts.rel_tol}")

    lam_min, lam_max = float(opts.lam_min), float(opts.lam_max)
    history = []
    density = float("nan")
    for it in range(1, opts.max_iter + 1):
        lam = 0.5 * (lam_min + lam_max)
        theta_hat = solve_dantzig_lp(G0, G1, lam, opts)
        density = tol.count_nonzero(theta_hat) / D
        history.append((lam, density))
        log_probe(ledger, lam, density, lam_min, lam_max)
        logger.debug("probe %d: lambda=%.6g density=%.3f bracket=[%.6g, %.6g]",
                     it, lam, density, lam_min, lam_max)

        if _relative_width(lam_min, lam_max) < opts.rel_tol:
            if return_info:
                info = {"lam": lam, "iterations": it, "density": density,
                        "bracket": (lam_min, lam_max), "history": history}
                return theta_hat, info
            return theta_hat

        if density < s_hat:  # too sparse
            lam_max = lam
        else:  # not sparse enough
            lam_min = lam

    raise SparsityTargetError(s_hat, opts.max_iter, lam_min, lam_max, density)
