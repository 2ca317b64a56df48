import numpy as np
import pytest

from sirs_ode.errors import IntegrationWarning
from sirs_ode.sweeps.parameter_sweep import run_parameter_sweep, summary_metrics
from sirs_ode import solve_sirs

FIXED = dict(gamma=0.1, immunity_duration=365, duration=200)


def test_sweep_over_r0():
    df = run_parameter_sweep({"r0": [0.5, 2.5]}, fixed_parameters=FIXED)
    assert list(df["r0"]) == [0.5, 2.5]
    assert df["success"].all()

    low, high = df.iloc[0], df.iloc[1]
    # below threshold the peak is the initial value
    assert low["t_peak"] == 0.0
    assert low["I_peak"] == 0.01
    assert high["I_peak"] > 0.1
    assert high["t_peak"] > 0.0


def test_grid_combinations():
    df = run_parameter_sweep(
        {"r0": [1.5, 2.5, 3.5], "gamma": [0.1, 0.2]},
        fixed_parameters=dict(immunity_duration=365, duration=100),
    )
    assert len(df) == 6
    assert set(zip(df["r0"], df["gamma"])) == {
        (r0, g) for r0 in (1.5, 2.5, 3.5) for g in (0.1, 0.2)
    }


def test_scalar_metric():
    df = run_parameter_sweep(
        {"r0": [2.5]},
        lambda traj: float(traj.state("R")[-1]),
        fixed_parameters=FIXED,
    )
    assert "metric" in df.columns
    assert 0.0 < df["metric"].iloc[0] < 1.0


def test_failed_runs_recorded_as_nan():
    with pytest.warns(IntegrationWarning):
        df = run_parameter_sweep(
            {"immunity_duration": [0.0, 365.0]},
            fixed_parameters=dict(r0=2.5, gamma=0.1, duration=200),
        )
    assert list(df["success"]) == [False, True]
    assert np.isnan(df["I_peak"].iloc[0])
    assert df["I_peak"].iloc[1] > 0.1


def test_summary_metrics_final_state():
    traj = solve_sirs(r0=2.5, **FIXED)
    m = summary_metrics(traj)
    assert np.isclose(m["S_final"] + m["I_final"] + m["R_final"], 1.0, atol=1e-6)
