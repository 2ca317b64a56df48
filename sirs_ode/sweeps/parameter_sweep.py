# sirs_ode/sweeps/parameter_sweep.py
from __future__ import annotations
from typing import Callable, Dict, Any, Iterable, Optional
import itertools
import pandas as pd

from sirs_ode.integrate.trajectory import Trajectory, peak_infected
from sirs_ode.solve import solve_sirs

MetricResult = float | Dict[str, float]


def summary_metrics(traj: Trajectory) -> Dict[str, float]:
    """Peak timing/size and final state of one trajectory."""
    t_peak, I_peak = peak_infected(traj)
    S_end, I_end, R_end = traj.final_state
    return {
        "t_peak": t_peak,
        "I_peak": I_peak,
        "S_final": float(S_end),
        "I_final": float(I_end),
        "R_final": float(R_end),
    }


def run_parameter_sweep(
    sweep_parameters: Dict[str, Iterable],
    metric_function: Callable[[Trajectory], MetricResult] = summary_metrics,
    *,
    fixed_parameters: Optional[Dict[str, Any]] = None,
    run_function: Callable[..., Optional[Trajectory]] = solve_sirs,
) -> pd.DataFrame:
    """
    Runs the SIRS model over a grid of parameters and collects metrics.

    Every combination is an independent call; nothing is shared between
    runs.

    Parameters
    ----------
    sweep_parameters : Dict[str, Iterable]
        Parameter name -> values, e.g. {'r0': np.linspace(0.5, 4, 8)}.
        Names are keyword arguments of ``run_function``.
    metric_function : Callable
        Takes a Trajectory and returns a scalar (stored in column
        'metric') or a dict of named metrics.
    fixed_parameters : Optional[Dict[str, Any]], optional
        Parameters held constant for all runs.
    run_function : Callable, optional
        Returns a Trajectory, or None on failure. Defaults to
        ``solve_sirs``.

    Returns
    -------
    pd.DataFrame
        One row per combination: the swept parameters, a boolean
        'success' column and the metrics (NaN for failed runs).

    Examples
    --------
    >>> df = run_parameter_sweep(
    ...     {"r0": [1.5, 2.5]},
    ...     fixed_parameters=dict(gamma=0.1, immunity_duration=365, duration=200),
    ... )
    >>> list(df.columns[:2])
    ['r0', 'success']
    """
    if fixed_parameters is None:
        fixed_parameters = {}

    param_names = list(sweep_parameters.keys())
    param_values = [list(v) for v in sweep_parameters.values()]

    results_list = []
    for combo in itertools.product(*param_values):
        current_sweep_params = dict(zip(param_names, combo))
        all_params = {**fixed_parameters, **current_sweep_params}

        row: Dict[str, Any] = dict(current_sweep_params)
        traj = run_function(**all_params)
        row["success"] = traj is not None

        if traj is not None:
            metrics = metric_function(traj)
            if isinstance(metrics, dict):
                row.update(metrics)
            else:
                row["metric"] = metrics
        # Failed runs leave their metric columns missing -> NaN in the frame

        results_list.append(row)

    return pd.DataFrame(results_list)
