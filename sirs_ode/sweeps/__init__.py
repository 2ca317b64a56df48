# sirs_ode/sweeps/__init__.py
from .parameter_sweep import run_parameter_sweep, summary_metrics
