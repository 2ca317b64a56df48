# sirs_ode/config.py
"""
Solver configuration and the fixed constants of ``solve_sirs``.
"""
from dataclasses import dataclass
from typing import Optional
import math

from sirs_ode.errors import InvalidParametersError

# Fixed constants of the solve_sirs entry point
INITIAL_STEP = 0.1
ABS_TOL = 1.0e-5
REL_TOL = 1.0e-5
INITIAL_STATE = (0.99, 0.01, 0.0)


def _require_positive(name: str, value: float):
    if not (math.isfinite(value) and value > 0):
        raise InvalidParametersError(f"{name} must be positive and finite, got {value}")


@dataclass(frozen=True)
class SolverOptions:
    """
    Step-size control settings for the Dormand-Prince integrator.

    Parameters
    ----------
    initial_step : float
        First trial step size.
    rtol, atol : float
        Relative and absolute local error tolerances.
    safety : float
        Safety factor applied to the optimal step-size ratio.
    min_factor, max_factor : float
        Bounds on the step-size ratio between consecutive proposals.
    max_step : float, optional
        Largest step size allowed. Defaults to the full interval.
    max_steps : int
        Maximum number of step attempts (accepted + rejected).
    stiffness_check : int
        Run the stiffness test every ``stiffness_check`` accepted steps.
        0 disables the test.
    output_step : float, optional
        If given, record the solution on a regular grid with this spacing
        (dense output) instead of at every accepted step.
    """
    initial_step: float = INITIAL_STEP
    rtol: float = REL_TOL
    atol: float = ABS_TOL
    safety: float = 0.9
    min_factor: float = 0.2
    max_factor: float = 5.0
    max_step: Optional[float] = None
    max_steps: int = 100_000
    stiffness_check: int = 1000
    output_step: Optional[float] = None

    def __post_init__(self):
        _require_positive("initial_step", self.initial_step)
        _require_positive("rtol", self.rtol)
        _require_positive("atol", self.atol)
        if not 0.0 < self.safety < 1.0:
            raise InvalidParametersError(f"safety must be in (0, 1), got {self.safety}")
        if not 0.0 < self.min_factor < 1.0 < self.max_factor:
            raise InvalidParametersError(
                f"need 0 < min_factor < 1 < max_factor, "
                f"got min_factor={self.min_factor}, max_factor={self.max_factor}"
            )
        if self.max_step is not None:
            _require_positive("max_step", self.max_step)
        if self.max_steps < 1:
            raise InvalidParametersError(f"max_steps must be at least 1, got {self.max_steps}")
        if self.stiffness_check < 0:
            raise InvalidParametersError(
                f"stiffness_check must be non-negative, got {self.stiffness_check}"
            )
        if self.output_step is not None:
            _require_positive("output_step", self.output_step)
