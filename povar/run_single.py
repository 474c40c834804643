# povar/run_single.py
from __future__ import annotations
import numpy as np
from typing import Dict, Any, Optional

from .config import ExperimentConfig, EstimatorOpts, RunMeta
from .ensembles import random_theta
from .simulation import simulate_povar
from .estimators import estimate_theta_dense, estimate_theta_sparse
from .metrics import estimation_error, row_density, support_recovery
from .loggers.runtime_banner import runtime_banner
from .loggers.seeding import SeedPolicy
from .loggers.tolerances import TolerancePolicy
from .loggers.ledger import start_ledger, attach_tolerances, log_approx


def run_single(cfg: ExperimentConfig,
               seed: Optional[int] = None,
               opts: Optional[EstimatorOpts] = None,
               tol: Optional[TolerancePolicy] = None,
               rng: Optional[np.random.Generator] = None,
               light: bool = True) -> Dict[str, Any]:
    """
    Run one experiment point:
      1) draw theta with cfg.s nonzeros per row (operator norm cfg.theta_scale)
      2) simulate (X, pi, Y) over cfg.T steps
      3) estimate theta: dense if cfg.s_hat == cfg.D, sparse otherwise
      4) score ||theta_hat - theta||_inf

    Either ``seed`` or an already-running ``rng`` must be given; sweeps pass
    their own generator so that one seed drives a whole sequence of points.
    Estimator errors (LPSolveError, SparsityTargetError, DegenerateSamplingError)
    propagate to the caller.
    """
    if rng is None:
        if seed is None:
            raise ValueError("run_single needs a seed or an rng.")
        rng = SeedPolicy(seed).np_rng
    opts = opts or EstimatorOpts()

    # --- ledger & tolerances
    _ledger = start_ledger()
    _tol = tol or TolerancePolicy()
    attach_tolerances(_ledger, _tol)

    # --- theta and trajectory
    theta = random_theta(cfg.D, cfg.s, rng, scale=cfg.theta_scale)
    params = cfg.process_parameters(theta)
    traj = simulate_povar(params, rng)
    log_approx(_ledger, "initial-state", "X_0 drawn from the stationary law (discrete Lyapunov)")

    # --- estimation
    info = None
    if cfg.estimator == "dense":
        theta_hat = estimate_theta_dense(traj.pi, traj.Y, cfg.a, cfg.b, cfg.omega, cfg.h0,
                                         tol=_tol, ledger=_ledger)
    else:
        theta_hat, info = estimate_theta_sparse(traj.pi, traj.Y, cfg.a, cfg.b, cfg.omega, cfg.h0,
                                                cfg.s_hat, opts=opts, tol=_tol, ledger=_ledger,
                                                return_info=True)

    out: Dict[str, Any] = {
        "seed": seed,
        "D": cfg.D, "s": cfg.s, "sigma": cfg.sigma,
        "p": cfg.p, "a": cfg.a, "b": cfg.b,
        "omega": cfg.omega, "T": cfg.T, "h0": cfg.h0, "s_hat": cfg.s_hat,
        "estimator": cfg.estimator,
        "error": estimation_error(theta_hat, theta),
        "density_hat": row_density(theta_hat, _tol),
        "support": support_recovery(theta_hat, theta, _tol),
        "observed_fraction": float(traj.pi.mean()),
        "lam": None if info is None else float(info["lam"]),
        "bisection_iters": None if info is None else int(info["iterations"]),
        "bisection_history": (None if info is None
                              else [[float(lam), float(d)] for lam, d in info["history"]]),
        "env": runtime_banner(),
        "meta": vars(RunMeta(seed=-1 if seed is None else int(seed))),
        "notes": {"ledger": _ledger},
        "light": bool(light),
    }
    if not light:
        out["theta"] = theta
        out["theta_hat"] = theta_hat
        out["mask"] = traj.pi
    return out
