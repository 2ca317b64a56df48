# sirs_ode/__init__.py
"""
SIRS epidemic model integrated with an adaptive Dormand-Prince solver.
"""
from .config import ABS_TOL, INITIAL_STATE, INITIAL_STEP, REL_TOL, SolverOptions
from .errors import IntegrationFailure, IntegrationWarning, InvalidParametersError, SIRSError
from .integrate import Dopri5, IntegrationStats, Sample, Trajectory, integrate
from .models import SIRS, SIRSParams
from .solve import integrate_sirs, solve_sirs

__version__ = "0.1.0"

__all__ = [
    "ABS_TOL",
    "INITIAL_STATE",
    "INITIAL_STEP",
    "REL_TOL",
    "SolverOptions",
    "SIRSError",
    "InvalidParametersError",
    "IntegrationFailure",
    "IntegrationWarning",
    "Dopri5",
    "IntegrationStats",
    "Sample",
    "Trajectory",
    "integrate",
    "SIRS",
    "SIRSParams",
    "integrate_sirs",
    "solve_sirs",
]
