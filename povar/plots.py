from __future__ import annotations
from typing import Optional, Sequence, Tuple, Union, Callable

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

import os

from .metrics import loglog_trend

_Pathish = Union[str, os.PathLike]

MARKERS = ("o", "p", "s", "^", "D", "v")

# ====================== Helpers ===================

def _new_ax(figsize=(6, 3.4)):
    fig, ax = plt.subplots(figsize=figsize)
    return fig, ax

def _save_fig(fig, out_png: Optional[_Pathish] = None, out_pdf: Optional[_Pathish] = None, dpi: int = 150):
    if out_png:
        fig.savefig(out_png, dpi=dpi, bbox_inches="tight")
    if out_pdf:
        fig.savefig(out_pdf, bbox_inches="tight")
    plt.close(fig)

def _save_or_return(fig, ax, out_png: Optional[_Pathish], out_pdf: Optional[_Pathish]):
    if out_png or out_pdf:
        _save_fig(fig, out_png, out_pdf, dpi=200)
        return None
    return fig, ax

def _title_and_labels(ax, *, title: Optional[str] = None,
                      xlabel: Optional[str] = None, ylabel: Optional[str] = None):
    if title:
        ax.set_title(title)
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)


def annotate_ledger_footer(fig, ledger: dict | None):
    if not ledger:
        return
    env = ledger.get("env", {})
    tol = ledger.get("tolerances", {})
    approx = ledger.get("approximations", [])
    footer = []
    if env:
        footer.append(f"numpy={env.get('numpy')}, scipy={env.get('scipy')}")
    if tol:
        footer.append(f"pinv_rcond={tol.get('pinv_rcond')}, zero_atol={tol.get('zero_atol')}")
    if approx:
        kinds = ",".join(sorted({a.get('kind', '') for a in approx}))
        footer.append(f"approximations={kinds}")
    txt = " | ".join(footer)
    if txt:
        fig.text(0.01, 0.01, txt, fontsize=8, ha="left", va="bottom")


# ====================== Sweep curves (log-log + Theil-Sen) ===================

def plot_sweep(df: pd.DataFrame,
               out_png: Optional[_Pathish] = None,
               out_pdf: Optional[_Pathish] = None,
               xlabel: Optional[str] = None,
               ylabel: str = r"Estimation error $\|\hat\theta - \theta\|_\infty$",
               x_fn: Optional[Callable[[np.ndarray], np.ndarray]] = None,
               trend: bool = True,
               title: Optional[str] = None):
    """
    Scatter of error vs swept value, one series per (curve_value, estimator),
    log-log axes. With ``trend`` a Theil-Sen line is drawn and its slope
    shown in the legend. ``x_fn`` maps the x values before plotting (e.g.
    omega -> omega**2 for a variance-ratio axis).
    """
    fig, ax = _new_ax(figsize=(6, 4.2))
    groups = list(df.groupby(["curve_value", "estimator"], sort=False))
    curve_param = df["curve_param"].iloc[0] if len(df) else "p"
    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    curve_values = list(dict.fromkeys(df["curve_value"])) if len(df) else []

    for (cv, est), g in groups:
        k = curve_values.index(cv)
        color = colors[k % len(colors)]
        x = g["value"].to_numpy(dtype=float)
        if x_fn is not None:
            x = np.asarray(x_fn(x), dtype=float)
        y = g["error"].to_numpy(dtype=float)
        label = f"{curve_param}={cv} ({est})"
        ok = (x > 0) & (y > 0)
        if trend and np.unique(x[ok]).size >= 2:
            alpha, beta = loglog_trend(x, y)
            xs = np.sort(x[ok])
            ls = ":" if est == "sparse" else "-"
            ax.plot(xs, 10 ** (alpha * np.log10(xs) + beta), color=color, ls=ls, lw=1.2)
            label += rf" | $\alpha$={alpha:.2f}"
        face = "white" if est == "sparse" else color
        ax.scatter(x, y, marker=MARKERS[k % len(MARKERS)], facecolors=face,
                   edgecolors=color, s=22, label=label)

    ax.set_xscale("log")
    ax.set_yscale("log")
    ax.grid(True, which="both", ls="--", alpha=0.3)
    if groups:
        ax.legend(fontsize=8)
    _title_and_labels(ax, title=title, xlabel=xlabel or str(df["param"].iloc[0] if len(df) else ""),
                      ylabel=ylabel)
    return _save_or_return(fig, ax, out_png, out_pdf)


# ====================== Bisection trace ===================

def plot_bisection(history: Sequence[Tuple[float, float]],
                   s_hat: float,
                   out_png: Optional[_Pathish] = None,
                   out_pdf: Optional[_Pathish] = None,
                   ledger: dict | None = None):
    """Probe lambda vs achieved row density, in probe order, with the target line."""
    h = np.asarray(history, dtype=float).reshape(-1, 2)
    fig, ax = _new_ax(figsize=(5.2, 3.4))
    ax.plot(h[:, 0], h[:, 1], "o-", lw=1, ms=4)
    for i, (lam, s) in enumerate(h, start=1):
        ax.annotate(str(i), (lam, s), fontsize=7, xytext=(3, 3), textcoords="offset points")
    ax.axhline(s_hat, color="k", ls="--", lw=1)
    ax.set_xscale("log")
    _title_and_labels(ax, xlabel=r"$\lambda$", ylabel="nonzeros per row")
    annotate_ledger_footer(fig, ledger)
    return _save_or_return(fig, ax, out_png, out_pdf)


# ====================== Sampling mask raster ===================

def plot_mask(pi: np.ndarray,
              out_png: Optional[_Pathish] = None,
              out_pdf: Optional[_Pathish] = None,
              max_T: int = 500,
              title: Optional[str] = None):
    """Raster of the sampling mask (coordinates x time), first ``max_T`` steps."""
    pi = np.asarray(pi, dtype=bool)[:max_T]
    fig, ax = _new_ax(figsize=(7, 2.4))
    ax.imshow(pi.T, aspect="auto", interpolation="nearest", cmap="Greys")
    _title_and_labels(ax, title=title, xlabel="t", ylabel="coordinate")
    return _save_or_return(fig, ax, out_png, out_pdf)
