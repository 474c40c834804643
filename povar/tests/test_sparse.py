import numpy as np
import pytest
from ..config import EstimatorOpts
from ..covariance import estimate_gamma
from ..errors import LPSolveError, SparsityTargetError
from ..estimators.sparse import estimate_theta_sparse, solve_dantzig_lp, lp_matrices
from ..loggers import start_ledger
from ..metrics import row_density
from ..ensembles import random_theta
from .helpers import simulate, two_per_row_theta

def test_lp_matrices_encode_theta_times_gamma0(rng):
    D = 3
    G0 = rng.standard_normal((D, D))
    G1 = rng.standard_normal((D, D))
    theta = rng.standard_normal((D, D))
    c, A_ub, b_ub = lp_matrices(G0, G1, 0.5)
    x = np.concatenate([np.maximum(theta, 0).ravel(), np.maximum(-theta, 0).ravel()])
    lhs = A_ub @ x
    r = (theta @ G0).ravel()
    assert np.allclose(lhs[:D * D], r)
    assert np.allclose(lhs[D * D:], -r)
    assert np.allclose(b_ub, np.concatenate([0.5 + G1.ravel(), 0.5 - G1.ravel()]))
    assert c.shape == (2 * D * D,) and np.all(c == 1.0)

def test_lp_matrices_shape_checks():
    with pytest.raises(ValueError):
        lp_matrices(np.eye(2), np.eye(3), 1.0)

def test_large_lambda_gives_zero_and_zero_lambda_gives_exact_solution():
    G0 = np.array([[2.0, 0.3], [0.3, 1.5]])
    theta = np.array([[0.5, -0.2], [0.1, 0.4]])
    G1 = theta @ G0
    assert np.allclose(solve_dantzig_lp(G0, G1, 1e3), 0.0)
    assert np.allclose(solve_dantzig_lp(G0, G1, 0.0), theta, atol=1e-5)

def test_residual_bound_holds_at_pinned_lambda(rng):
    G0 = np.eye(4) + 0.1 * rng.standard_normal((4, 4))
    G1 = rng.standard_normal((4, 4))
    lam = 0.3
    th = solve_dantzig_lp(G0, G1, lam)
    assert np.max(np.abs(th @ G0 - G1)) <= lam + 1e-6

def test_bisection_reaches_target_density():
    theta = two_per_row_theta()
    tr = simulate(theta, sigma=1.0, a=1.0, b=0.0, omega=0.1, T=20_000, seed=3)
    opts = EstimatorOpts()
    ledger = start_ledger()
    theta_hat, info = estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.1, 0, 2.0,
                                            opts=opts, ledger=ledger, return_info=True)
    assert theta_hat.shape == (10, 10)
    assert info["iterations"] <= opts.max_iter
    lo, hi = info["bracket"]
    assert (hi - lo) / hi < opts.rel_tol
    assert abs(info["density"] - 2.0) <= 0.2 + 1e-12
    assert np.isclose(row_density(theta_hat), info["density"])
    assert len(ledger["probes"]) == info["iterations"] == len(info["history"])

@pytest.mark.parametrize("seed", [0, 1])
def test_bisection_on_random_two_per_row_theta(seed):
    rng = np.random.default_rng(seed)
    theta = random_theta(10, 2, rng)
    tr = simulate(theta, omega=0.1, T=10_000, seed=seed + 100)
    opts = EstimatorOpts()
    theta_hat, info = estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.1, 0, 2.0,
                                            opts=opts, return_info=True)
    assert info["iterations"] <= opts.max_iter
    assert abs(info["density"] - 2.0) <= 0.3
    assert np.isclose(row_density(theta_hat), info["density"])

def test_sparse_estimate_is_close_to_truth_on_its_support():
    theta = two_per_row_theta()
    tr = simulate(theta, omega=0.1, T=20_000, seed=4)
    theta_hat = estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.1, 0, 2.0)
    # shrinkage biases toward zero; no entry should be far off
    assert np.max(np.abs(theta_hat - theta)) < 0.2
    # entries well above the last one dropped stay in the support
    strong = np.abs(theta) >= 0.2
    assert np.all(np.abs(theta_hat[strong]) > 0)

def test_infeasible_probe_is_fatal():
    tr = simulate(0.5 * np.eye(3), T=500, seed=5)
    opts = EstimatorOpts(lam_min=-2.0, lam_max=-1.0)
    with pytest.raises(LPSolveError) as ei:
        estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.0, 0, 1.0, opts=opts)
    assert ei.value.status != 0
    assert ei.value.lam == pytest.approx(-1.5)

def test_unreachable_target_raises_after_max_iter():
    tr = simulate(0.5 * np.eye(3), T=500, seed=6)
    opts = EstimatorOpts(max_iter=5)
    ledger = start_ledger()
    with pytest.raises(SparsityTargetError) as ei:
        # more nonzeros per row than columns: the lower end never moves
        estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.0, 0, 4.0, opts=opts, ledger=ledger)
    assert ei.value.max_iter == 5
    assert len(ledger["probes"]) == 5

def test_invalid_arguments():
    tr = simulate(0.5 * np.eye(2), T=100, seed=7)
    with pytest.raises(ValueError):
        estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.0, 0, 0.0)
    with pytest.raises(ValueError):
        estimate_theta_sparse(tr.pi, tr.Y, 1.0, 0.0, 0.0, -1, 1.0)
