import numpy as np
import pandas as pd
import pytest
from ..config import ExperimentConfig, EstimatorOpts
from ..ensembles import rates_for_b
from ..run_single import run_single
from ..sweeps import sweep, sweep_b, fit_trends, log_grid

def test_run_single_dense_smoke():
    cfg = ExperimentConfig(D=3, p=1.0, omega=0.1, T=2000)
    out = run_single(cfg, seed=0)
    assert out["estimator"] == "dense"
    assert np.isfinite(out["error"]) and out["error"] >= 0
    assert out["lam"] is None and out["bisection_iters"] is None
    assert out["bisection_history"] is None
    L = out["notes"]["ledger"]
    assert isinstance(L["approximations"], list) and isinstance(L["tolerances"], dict)
    assert "theta" not in out

def test_run_single_sparse_records_bisection():
    cfg = ExperimentConfig(D=4, s=1, s_hat=1, p=1.0, omega=0.1, T=3000)
    out = run_single(cfg, seed=1, opts=EstimatorOpts(max_iter=80), light=False)
    assert out["estimator"] == "sparse"
    assert out["lam"] > 0
    assert 1 <= out["bisection_iters"] <= 80
    assert out["theta_hat"].shape == (4, 4)
    assert len(out["notes"]["ledger"]["probes"]) == out["bisection_iters"]
    assert len(out["bisection_history"]) == out["bisection_iters"]
    assert out["mask"].shape == (3000, 4) and out["mask"].all()

def test_run_single_is_reproducible():
    cfg = ExperimentConfig(D=2, p=0.5, T=1000)
    assert run_single(cfg, seed=5)["error"] == run_single(cfg, seed=5)["error"]
    with pytest.raises(ValueError):
        run_single(cfg)

def test_sweep_rows_and_determinism():
    kw = dict(base={"D": 2, "omega": 0.1}, curve_values=(0.5, 1.0), seed=0)
    df1 = sweep("T", [300, 600, 1200], **kw)
    df2 = sweep("T", [300, 600, 1200], **kw)
    assert isinstance(df1, pd.DataFrame) and len(df1) == 6
    assert set(df1["curve_value"]) == {0.5, 1.0}
    assert np.array_equal(df1["error"].to_numpy(), df2["error"].to_numpy())
    # p = 0.5 curve uses the memoryless chain (a, b) = (0.5, 0.5)
    half = df1[df1["curve_value"] == 0.5]
    assert np.allclose(half["a"], 0.5) and np.allclose(half["b"], 0.5)

def test_sweep_dense_and_sparse_over_s():
    df = sweep("s", [1, 2], base={"D": 3, "T": 3000, "omega": 0.1},
               curve_values=(1.0,), estimators=("dense", "sparse"), seed=1)
    assert len(df) == 4
    sparse = df[df["estimator"] == "sparse"]
    assert list(sparse["estimator_used"]) == ["sparse", "sparse"]
    assert sparse["lam"].notna().all()

def test_sweep_h0_curves_over_p():
    df = sweep("p", [0.5, 1.0], base={"D": 2, "T": 1000}, curve_param="h0",
               curve_values=(1, 0), seed=2)
    assert set(df["h0"]) == {0, 1}

def test_sweep_rejects_bad_requests():
    with pytest.raises(ValueError):
        sweep("bogus", [1])
    with pytest.raises(ValueError):
        sweep("T", [100], curve_param="T")
    with pytest.raises(ValueError):
        sweep("T", [100], base={"a": 0.2, "b": 0.2})
    with pytest.raises(ValueError):
        sweep("T", [500], base={"D": 2}, curve_values=(1.0,), estimators=("ridge",))

def test_sweep_b_skips_infeasible_rates():
    df = sweep_b([0.01, 0.5, 0.99], base={"D": 2, "T": 600}, p_values=(0.8,), seed=3)
    # a = 4 b: only 1 - b = 0.99 (b = 0.01) keeps a inside (0, 1)
    assert len(df) == 1
    assert df["b"].iloc[0] == pytest.approx(0.01)
    assert df["a"].iloc[0] == pytest.approx(0.04)
    assert df["value"].iloc[0] == pytest.approx(0.99)

def test_sweep_b_rates_match_rate_helper():
    df = sweep_b([0.3, 0.6], base={"D": 2, "T": 600}, p_values=(0.2, 0.5), seed=4)
    assert len(df) == 4
    for r in df.itertuples(index=False):
        assert (r.a, r.b) == pytest.approx(rates_for_b(r.curve_value, 1.0 - r.value))

def test_fit_trends_on_power_law():
    x = np.array([100.0, 1000.0, 10000.0])
    df = pd.DataFrame({
        "value": np.concatenate([x, x]),
        "error": np.concatenate([2.0 * x ** -0.5, 3.0 * x ** -1.0]),
        "curve_value": [0.5] * 3 + [1.0] * 3,
        "estimator": ["dense"] * 6,
    })
    tr = fit_trends(df).set_index("curve_value")
    assert tr.loc[0.5, "alpha"] == pytest.approx(-0.5)
    assert tr.loc[1.0, "alpha"] == pytest.approx(-1.0)
    assert tr.loc[1.0, "beta"] == pytest.approx(np.log10(3.0))

def test_log_grid():
    g = log_grid(2, 5, 4, integer=True)
    assert list(g) == [100, 1000, 10000, 100000]
