from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .runtime_banner import runtime_banner

def start_ledger() -> Dict[str, Any]:
    return {
        "started_utc": datetime.now(timezone.utc).isoformat(),
        "env": runtime_banner(),
        "approximations": [],
        "warnings": [],
        "tolerances": {},
        "probes": [],
    }

def attach_tolerances(ledger: Dict[str, Any], tol) -> None:
    ledger["tolerances"] = dict(vars(tol))

def log_approx(ledger: Optional[Dict[str, Any]], kind: str, detail: str) -> None:
    if ledger is not None:
        ledger["approximations"].append({"kind": kind, "detail": detail})

def log_warning(ledger: Optional[Dict[str, Any]], msg: str) -> None:
    if ledger is not None:
        ledger["warnings"].append(str(msg))

def log_probe(ledger: Optional[Dict[str, Any]], lam: float, density: float,
              lam_min: float, lam_max: float) -> None:
    """Record one bisection probe of the sparse estimator."""
    if ledger is not None:
        ledger["probes"].append({
            "lam": float(lam),
            "density": float(density),
            "bracket": [float(lam_min), float(lam_max)],
        })
