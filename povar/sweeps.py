"""
Parameter sweeps of the estimation error.

Each sweep fixes a base configuration, draws one curve per value of a
"curve" parameter (by default the sampling probability p) and, along each
curve, one experiment point per swept value. A single generator seeded once
at the start drives the whole sweep, so a sweep is reproducible as a unit.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .config import ExperimentConfig, EstimatorOpts
from .ensembles import rates_for_b
from .loggers.seeding import SeedPolicy
from .loggers.tolerances import TolerancePolicy
from .metrics import loglog_trend
from .run_single import run_single

logger = logging.getLogger(__name__)

DEFAULT_P_VALUES = (0.1, 0.2, 0.5, 1.0)
DEFAULT_SEED = 63
SWEEPABLE = ("T", "D", "omega", "s", "h0", "p", "sigma")
ESTIMATORS = ("dense", "sparse")


def _point_config(base: Mapping[str, Any], estimator: str, **overrides) -> ExperimentConfig:
    kw = dict(base)
    kw.update(overrides)
    kw.pop("s_hat", None)
    cfg = ExperimentConfig(**kw)
    if estimator == "sparse":
        # target the true per-row sparsity
        cfg = ExperimentConfig(**{**kw, "s_hat": cfg.s})
    elif estimator != "dense":
        raise ValueError(f"unknown estimator: {estimator}")
    return cfg


def _row(res: Dict[str, Any], param: str, value: Any, curve_param: str,
         curve_value: Any, estimator: str) -> Dict[str, Any]:
    return {
        "param": param,
        "value": value,
        "curve_param": curve_param,
        "curve_value": curve_value,
        "estimator": estimator,
        "estimator_used": res["estimator"],
        "error": res["error"],
        "density_hat": res["density_hat"],
        "D": res["D"], "s": res["s"], "T": res["T"], "omega": res["omega"],
        "p": res["p"], "a": res["a"], "b": res["b"], "h0": res["h0"],
        "lam": res["lam"],
    }


def sweep(param: str,
          values: Iterable,
          base: Optional[Mapping[str, Any]] = None,
          curve_param: str = "p",
          curve_values: Sequence = DEFAULT_P_VALUES,
          estimators: Sequence[str] = ("dense",),
          seed: int = DEFAULT_SEED,
          opts: Optional[EstimatorOpts] = None,
          tol: Optional[TolerancePolicy] = None) -> pd.DataFrame:
    """Estimation error along ``param`` for each value of ``curve_param``.

    ``base`` holds ExperimentConfig keyword arguments shared by every point.
    Points with ``estimator="sparse"`` target s_hat = s (the true row sparsity).
    """
    if param not in SWEEPABLE:
        raise ValueError(f"cannot sweep '{param}'; choose from {SWEEPABLE}.")
    if curve_param not in SWEEPABLE or curve_param == param:
        raise ValueError(f"invalid curve parameter '{curve_param}'.")
    base = dict(base or {})
    if "p" in (param, curve_param) and ("a" in base or "b" in base):
        raise ValueError("explicit rates a/b in base would override the swept p.")
    values = list(values)
    rng = SeedPolicy(seed).np_rng

    rows = []
    for cv in curve_values:
        logger.info("sweep %s: %s=%s (%d points)", param, curve_param, cv, len(values))
        for v in values:
            for est in estimators:
                cfg = _point_config(base, est, **{curve_param: cv, param: v})
                res = run_single(cfg, seed=None, opts=opts, tol=tol, rng=rng)
                rows.append(_row(res, param, v, curve_param, cv, est))
    return pd.DataFrame(rows)


def sweep_b(one_minus_b_values: Iterable[float],
            base: Optional[Mapping[str, Any]] = None,
            p_values: Sequence[float] = DEFAULT_P_VALUES[:-1],
            seed: int = DEFAULT_SEED,
            opts: Optional[EstimatorOpts] = None,
            tol: Optional[TolerancePolicy] = None) -> pd.DataFrame:
    """Error versus the exit rate b at fixed stationary probability p.

    For each p < 1 and each b = 1 - x, a = b p / (1 - p); points where a falls
    outside (0, 1) are skipped.
    """
    base = dict(base or {})
    rng = SeedPolicy(seed).np_rng
    rows = []
    for p in p_values:
        if not (0.0 < p < 1.0):
            raise ValueError(f"p must be in (0,1) for a b-sweep, got {p}.")
        for x in one_minus_b_values:
            try:
                a, b = rates_for_b(p, 1.0 - float(x))
            except ValueError as exc:
                logger.debug("sweep_b: skip p=%s 1-b=%s (%s)", p, x, exc)
                continue
            cfg = _point_config(base, "dense", a=a, b=b)
            res = run_single(cfg, seed=None, opts=opts, tol=tol, rng=rng)
            rows.append(_row(res, "one_minus_b", float(x), "p", p, "dense"))
    return pd.DataFrame(rows)


def fit_trends(df: pd.DataFrame, x: str = "value", y: str = "error") -> pd.DataFrame:
    """Theil-Sen slope/intercept of log10(y) vs log10(x) per (curve, estimator)."""
    out = []
    for (cv, est), g in df.groupby(["curve_value", "estimator"], sort=False):
        g = g[(g[x] > 0) & (g[y] > 0)]
        if g[x].nunique() < 2:
            continue
        alpha, beta = loglog_trend(g[x].to_numpy(), g[y].to_numpy())
        out.append({"curve_value": cv, "estimator": est,
                    "alpha": alpha, "beta": beta, "n_points": int(len(g))})
    return pd.DataFrame(out, columns=["curve_value", "estimator", "alpha", "beta", "n_points"])


def log_grid(lo_exp: float, hi_exp: float, npoints: int, integer: bool = False) -> np.ndarray:
    """10**linspace(lo_exp, hi_exp, npoints), optionally rounded to integers."""
    g = 10.0 ** np.linspace(lo_exp, hi_exp, int(npoints))
    if integer:
        return np.unique(np.round(g).astype(int))
    return g
