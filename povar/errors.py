# povar/errors.py
from __future__ import annotations


class DegenerateSamplingError(ValueError):
    """Sampling rates (a, b) make the bias correction undefined or unstable."""


class LPSolveError(RuntimeError):
    """The Dantzig-selector LP did not terminate at a global optimum."""

    def __init__(self, lam: float, status: int, message: str):
        self.lam = float(lam)
        self.status = int(status)
        self.solver_message = str(message)
        super().__init__(
            f"LP at lambda={self.lam:.6g} ended with status {self.status}: {self.solver_message}"
        )


class SparsityTargetError(RuntimeError):
    """Bisection on lambda did not reach the target density within max_iter probes."""

    def __init__(self, s_hat: float, max_iter: int, lam_min: float, lam_max: float,
                 density: float):
        self.s_hat = float(s_hat)
        self.max_iter = int(max_iter)
        self.bracket = (float(lam_min), float(lam_max))
        self.density = float(density)
        super().__init__(
            f"failed to reach target sparsity s_hat={self.s_hat:g} in {self.max_iter} probes "
            f"(bracket=[{lam_min:.6g}, {lam_max:.6g}], last density={self.density:g})"
        )


class IllConditionedWarning(RuntimeWarning):
    """Lag covariance passed to a pseudo-inverse is near singular."""


class DegenerateSamplingWarning(RuntimeWarning):
    """Sampling chain is periodic (a + b = 2): every coordinate alternates each step."""
