# povar/estimators/__init__.py

from .dense import estimate_theta_dense, checked_pinv
from .sparse import estimate_theta_sparse, solve_dantzig_lp, lp_matrices

__all__ = [
    "estimate_theta_dense",
    "checked_pinv",
    "estimate_theta_sparse",
    "solve_dantzig_lp",
    "lp_matrices",
]
