from __future__ import annotations
from dataclasses import dataclass
import numpy as np

@dataclass
class TolerancePolicy:
    """Centralized numerical tolerances (logged to the ledger)."""
    svd_rtol: float = 1e-9
    svd_atol: float = 1e-12
    pinv_rcond: float = 1e-10
    zero_atol: float = 1e-9
    scaling_atol: float = 1e-12
    cond_warn: float = 1e10

    def rank_from_singulars(self, s: np.ndarray) -> int:
        if s.size == 0:
            return 0
        s = np.asarray(s, dtype=float)
        smax = float(s[0])
        thresh = max(self.svd_atol, self.svd_rtol * smax)
        return int((s > thresh).sum())

    def condition_number(self, s: np.ndarray) -> float:
        """sigma_max / sigma_min from descending singular values; inf if singular."""
        s = np.asarray(s, dtype=float)
        if s.size == 0 or s[-1] <= 0.0:
            return float("inf")
        return float(s[0] / s[-1])

    def count_nonzero(self, M: np.ndarray) -> int:
        """Entries of M that are not approximately zero."""
        return int((np.abs(np.asarray(M)) > self.zero_atol).sum())
