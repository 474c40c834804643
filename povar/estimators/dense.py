import warnings
from typing import Optional, Dict, Any

import numpy as np

from ..covariance import estimate_gamma
from ..errors import IllConditionedWarning
from ..loggers.tolerances import TolerancePolicy
from ..loggers.ledger import log_warning, log_approx


def checked_pinv(G: np.ndarray,
                 tol: Optional[TolerancePolicy] = None,
                 ledger: Optional[Dict[str, Any]] = None,
                 name: str = "Gamma") -> np.ndarray:
    """Moore-Penrose inverse with an explicit rcond; warns on near-singular input."""
    tol = tol or TolerancePolicy()
    G = np.asarray(G, dtype=float)
    if G.ndim != 2 or G.shape[0] != G.shape[1]:
        raise ValueError(f"{name} must be square, got shape {G.shape}.")
    if not np.all(np.isfinite(G)):
        raise ValueError(f"{name} contains non-finite entries.")

    s = np.linalg.svd(G, compute_uv=False)
    rank = tol.rank_from_singulars(s)
    cond = tol.condition_number(s)
    if rank < G.shape[0] or cond > tol.cond_warn:
        msg = (f"{name} is ill-conditioned (cond={cond:.3e}, numerical rank "
               f"{rank}/{G.shape[0]}); pseudo-inverse truncates at rcond={tol.pinv_rcond:g}.")
        warnings.warn(msg, IllConditionedWarning, stacklevel=3)
        log_warning(ledger, msg)
    return np.linalg.pinv(G, rcond=tol.pinv_rcond)


def estimate_theta_dense(pi: np.ndarray,
                         Y: np.ndarray,
                         a: float,
                         b: float,
                         omega: float,
                         h0: int = 0,
                         tol: Optional[TolerancePolicy] = None,
                         ledger: Optional[Dict[str, Any]] = None) -> np.ndarray:
    """
    Unconstrained estimate theta_hat = Gamma_{h0+1} pinv(Gamma_{h0}).

    This is the least-norm solution of theta Gamma_{h0} ~ Gamma_{h0+1}.

    Shapes
    -------
    pi, Y : (T, D) sampling mask and observations
    returns (D, D)
    """
    if h0 < 0:
        raise ValueError(f"h0 must be nonnegative, got {h0}.")
    G0 = estimate_gamma(pi, Y, a, b, omega, h0, tol=tol)
    G1 = estimate_gamma(pi, Y, a, b, omega, h0 + 1, tol=tol)
    log_approx(ledger, "dense", f"theta_hat = Gamma_{h0 + 1} pinv(Gamma_{h0})")
    return G1 @ checked_pinv(G0, tol=tol, ledger=ledger, name=f"Gamma_{h0}")
