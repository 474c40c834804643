# povar/__init__.py
"""Transition-matrix estimation for partially-observed VAR(1) processes."""
from .config import ProcessParameters, EstimatorOpts, ExperimentConfig
from .simulation import Trajectory, simulate_povar
from .covariance import scaling_matrix, estimate_gamma
from .estimators import estimate_theta_dense, estimate_theta_sparse
from .errors import (
    DegenerateSamplingError,
    LPSolveError,
    SparsityTargetError,
    IllConditionedWarning,
    DegenerateSamplingWarning,
)

__version__ = "0.1.0"

__all__ = [
    "ProcessParameters",
    "EstimatorOpts",
    "ExperimentConfig",
    "Trajectory",
    "simulate_povar",
    "scaling_matrix",
    "estimate_gamma",
    "estimate_theta_dense",
    "estimate_theta_sparse",
    "DegenerateSamplingError",
    "LPSolveError",
    "SparsityTargetError",
    "IllConditionedWarning",
    "DegenerateSamplingWarning",
]
