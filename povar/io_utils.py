# povar/io_utils.py
from __future__ import annotations
import json
import os
from typing import Dict, Any, Union

import numpy as np
import pandas as pd

from .simulation import Trajectory

_Pathish = Union[str, os.PathLike]


# -------------------------- paths & atomics ---------------------------

def ensure_dir(path: _Pathish) -> None:
    """Create directory if not exists. No-op for '' (current dir)."""
    path = os.fspath(path)
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


def _atomic_write_text(text: str, path: _Pathish) -> None:
    path = os.fspath(path)
    ensure_dir(os.path.dirname(path))
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
    os.replace(tmp, path)


# -------------------------- JSON / CSV / NPZ --------------------------

def _np_json_encoder(obj: Any) -> Any:
    """JSON encoder for NumPy scalars and arrays."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def save_json(data: Dict[str, Any], path: _Pathish) -> None:
    """Atomically save JSON with pretty indent; handles NumPy scalars and arrays."""
    text = json.dumps(data, indent=2, default=_np_json_encoder)
    _atomic_write_text(text, path)


def save_csv(df: pd.DataFrame, path: _Pathish) -> None:
    """Atomically save a DataFrame as CSV (no index)."""
    _atomic_write_text(df.to_csv(index=False), path)


def save_npz(arrs: Dict[str, np.ndarray], path: _Pathish) -> None:
    """Atomically save compressed NPZ."""
    path = os.fspath(path)
    ensure_dir(os.path.dirname(path))
    tmp = path + ".tmp.npz"
    np.savez_compressed(tmp, **arrs)
    os.replace(tmp, path)


def save_trajectory(traj: Trajectory, path: _Pathish) -> None:
    save_npz({"X": traj.X, "pi": traj.pi, "Y": traj.Y}, path)


def load_trajectory(path: _Pathish) -> Trajectory:
    with np.load(os.fspath(path)) as z:
        return Trajectory(X=z["X"], pi=z["pi"].astype(bool), Y=z["Y"])
