from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Sequence

from .config import ExperimentConfig, EstimatorOpts
from .ensembles import rates_for_b
from .io_utils import save_json, save_csv, ensure_dir
from .run_single import run_single
from .sweeps import sweep, sweep_b, fit_trends, log_grid

logger = logging.getLogger(__name__)


# ------------------------
# small parsing utilities
# ------------------------
def _parse_str_list(s: str) -> list[str]:
    # Accepts "a,b,c" or "a b c"
    return [x.strip() for x in s.replace(",", " ").split() if x.strip()]


def _parse_values(s: str, integer: bool = False) -> list:
    """
    Accepts:
      - comma list: "1,2,3" or "0.1,0.5"
      - range: "0:10" (0..9), or "0:10:2" (step=2), integers only
      - log grid: "log:2:5:20" -> 20 points 10**linspace(2, 5, 20)
    """
    s = s.strip()
    if s.startswith("log:"):
        parts = s.split(":")[1:]
        if len(parts) != 3:
            raise ValueError(f"Bad log grid '{s}'. Use 'log:lo_exp:hi_exp:npoints'.")
        g = log_grid(float(parts[0]), float(parts[1]), int(parts[2]), integer=integer)
        cast = int if integer else float
        return [cast(x) for x in g]
    if ":" in s:
        parts = [int(x) for x in s.split(":")]
        if len(parts) == 2:
            start, stop = parts
            step = 1
        elif len(parts) == 3:
            start, stop, step = parts
        else:
            raise ValueError(f"Bad range '{s}'. Use 'start:stop[:step]'.")
        return list(range(start, stop, step))
    cast = int if integer else float
    return [cast(x) for x in s.split(",") if x.strip()]


_INTEGER_PARAMS = {"T", "D", "s", "h0"}


def _add_point_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--D", type=int, default=5, help="State dimension.")
    p.add_argument("--s", type=int, default=None,
                   help="Nonzeros per row of the true theta (default: D).")
    p.add_argument("--sigma", type=float, default=1.0, help="Process noise std.")
    p.add_argument("--p", type=float, default=1.0,
                   help="Stationary sampling probability; sets (a, b) = (p, 1-p) unless --b is given.")
    p.add_argument("--b", type=float, default=None,
                   help="Exit rate b of the sampling chain; a is set to b p / (1 - p).")
    p.add_argument("--omega", type=float, default=0.1, help="Observation noise std.")
    p.add_argument("--T", type=int, default=10_000)
    p.add_argument("--h0", type=int, default=0, help="Base lag.")


def _add_solver_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--lam-max", type=float, default=EstimatorOpts().lam_max,
                   help="Upper end of the initial lambda bracket.")
    p.add_argument("--rel-tol", type=float, default=EstimatorOpts().rel_tol,
                   help="Relative bracket width at which bisection stops.")
    p.add_argument("--max-iter", type=int, default=EstimatorOpts().max_iter,
                   help="Maximum number of LP probes.")
    p.add_argument("--time-limit", type=float, default=None,
                   help="Seconds allowed per LP solve (default: unlimited).")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="povar experiments")
    sub = p.add_subparsers(dest="cmd", required=True)

    # -------- single --------
    ps = sub.add_parser("single", help="Run a single experiment point.")
    _add_point_args(ps)
    ps.add_argument("--s-hat", "--s_hat", dest="s_hat", type=float, default=None,
                    help="Target nonzeros per row; default D (dense estimator).")
    ps.add_argument("--seed", type=int, default=0)
    ps.add_argument("--out-json", "--out_json", dest="out_json", type=str, default=None,
                    help="Write the result JSON to this path instead of printing.")
    ps.add_argument("--plots", action="store_true",
                    help="Also plot the sampling mask and, for the sparse estimator, the lambda trace.")
    _add_solver_args(ps)

    # -------- sweep --------
    pw = sub.add_parser("sweep", help="Sweep one parameter; one curve per value of another.")
    _add_point_args(pw)
    pw.add_argument("--param", type=str, required=True,
                    choices=["T", "D", "omega", "s", "h0", "p", "sigma"])
    pw.add_argument("--values", type=str, required=True,
                    help="e.g. '100,1000' or '5:50' or 'log:2:5:20'.")
    pw.add_argument("--curve-param", type=str, default="p",
                    choices=["T", "D", "omega", "s", "h0", "p", "sigma"])
    pw.add_argument("--curve-values", type=str, default="0.1,0.2,0.5,1.0")
    pw.add_argument("--estimators", type=str, default="dense",
                    help="Comma list from {dense, sparse}.")
    pw.add_argument("--seed", type=int, default=63)
    pw.add_argument("--out-csv", type=str, default="sweep.csv")
    pw.add_argument("--plots", action="store_true", help="Also write a log-log plot.")
    pw.add_argument("--plot-format", type=str, default="png", choices=("png", "pdf", "both"))
    _add_solver_args(pw)

    # -------- sweep-b --------
    pb = sub.add_parser("sweep-b", help="Error vs exit rate b at fixed p.")
    _add_point_args(pb)
    pb.add_argument("--one-minus-b", type=str, default="log:-2:0:20",
                    help="Values of 1 - b (list, range or log grid).")
    pb.add_argument("--p-values", type=str, default="0.1,0.2,0.5")
    pb.add_argument("--seed", type=int, default=63)
    pb.add_argument("--out-csv", type=str, default="sweep_b.csv")
    _add_solver_args(pb)

    return p.parse_args(argv)


def _opts(a: argparse.Namespace) -> EstimatorOpts:
    return EstimatorOpts(lam_max=a.lam_max, rel_tol=a.rel_tol,
                         max_iter=a.max_iter, time_limit=a.time_limit)


def _base_kwargs(a: argparse.Namespace) -> Dict[str, Any]:
    kw: Dict[str, Any] = dict(D=a.D, s=a.s, sigma=a.sigma, p=a.p,
                              omega=a.omega, T=a.T, h0=a.h0)
    if a.b is not None:
        kw["a"], kw["b"] = rates_for_b(a.p, a.b)
    return kw


def _plot_paths(out_csv: str, fmt: str) -> tuple[Optional[str], Optional[str]]:
    stem = os.path.splitext(out_csv)[0]
    png = stem + ".png" if fmt in ("png", "both") else None
    pdf = stem + ".pdf" if fmt in ("pdf", "both") else None
    return png, pdf


def _plot_single(out: Dict[str, Any], stem: str) -> None:
    from .plots import plot_bisection, plot_mask
    ensure_dir(os.path.dirname(stem))
    plot_mask(out.pop("mask"), out_png=stem + "_mask.png", title=f"p={out['p']:.3g}")
    if out["bisection_history"]:
        plot_bisection(out["bisection_history"], out["s_hat"], out_png=stem + "_bisection.png",
                       ledger=out["notes"]["ledger"])
    for k in ("theta", "theta_hat"):
        out.pop(k, None)
    out["light"] = True


def main(argv: Optional[Sequence[str]] = None) -> int:
    a = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if a.verbose else logging.INFO,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if a.cmd == "single":
        cfg = ExperimentConfig(**_base_kwargs(a), s_hat=a.s_hat)
        out = run_single(cfg, seed=a.seed, opts=_opts(a), light=not a.plots)
        if a.plots:
            _plot_single(out, os.path.splitext(a.out_json or "single.json")[0])
        if a.out_json:
            save_json(out, a.out_json)
            logger.info("wrote %s", a.out_json)
        else:
            print(json.dumps({k: out[k] for k in ("estimator", "error", "density_hat", "lam")},
                             indent=2))
        return 0

    if a.cmd == "sweep":
        base = _base_kwargs(a)
        base.pop(a.param, None)
        base.pop(a.curve_param, None)
        values = _parse_values(a.values, integer=a.param in _INTEGER_PARAMS)
        curve_values = _parse_values(a.curve_values, integer=a.curve_param in _INTEGER_PARAMS)
        df = sweep(a.param, values, base=base, curve_param=a.curve_param,
                   curve_values=curve_values, estimators=_parse_str_list(a.estimators),
                   seed=a.seed, opts=_opts(a))
        save_csv(df, a.out_csv)
        trends = fit_trends(df)
        save_csv(trends, os.path.splitext(a.out_csv)[0] + "_trends.csv")
        for r in trends.itertuples(index=False):
            logger.info("%s=%s (%s): alpha=%.2f beta=%.2f",
                        a.curve_param, r.curve_value, r.estimator, r.alpha, r.beta)
        if a.plots:
            from .plots import plot_sweep
            png, pdf = _plot_paths(a.out_csv, a.plot_format)
            ensure_dir(os.path.dirname(a.out_csv))
            plot_sweep(df, out_png=png, out_pdf=pdf, xlabel=a.param)
        logger.info("wrote %s (%d rows)", a.out_csv, len(df))
        return 0

    if a.cmd == "sweep-b":
        base = _base_kwargs(a)
        for k in ("p", "a", "b"):
            base.pop(k, None)
        df = sweep_b(_parse_values(a.one_minus_b), base=base,
                     p_values=_parse_values(a.p_values), seed=a.seed, opts=_opts(a))
        save_csv(df, a.out_csv)
        logger.info("wrote %s (%d rows)", a.out_csv, len(df))
        return 0

    raise ValueError(f"unknown command: {a.cmd}")


if __name__ == "__main__":
    sys.exit(main())
