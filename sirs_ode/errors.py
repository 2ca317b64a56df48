# sirs_ode/errors.py
"""
Exception and warning types raised by sirs_ode.

Two kinds of failure are kept apart:

- InvalidParametersError: the request itself is malformed (non-positive
  rates, zero immunity duration, an empty time interval, bad solver
  options). Raised before any integration work is done.
- IntegrationFailure: the request was valid but the adaptive solver could
  not finish it. Carries the partial trajectory computed so far.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from sirs_ode.integrate.trajectory import IntegrationStats, Trajectory


class SIRSError(Exception):
    """Base class for all sirs_ode errors."""


class InvalidParametersError(SIRSError, ValueError):
    """Model or solver parameters outside their documented domain."""


class IntegrationFailure(SIRSError, RuntimeError):
    """
    The adaptive integrator stopped before reaching the end of the interval.

    Attributes
    ----------
    kind : str
        One of ``"step_size_too_small"``, ``"max_steps_reached"``,
        ``"stiffness_detected"``, ``"non_finite"``, or ``"solver_failed"``
        for a failure reported by a scipy solver.
    t : float
        Last time the solver reached successfully.
    trajectory : Trajectory or None
        Samples accepted before the failure.
    stats : IntegrationStats or None
        Work counters at the moment of failure.
    """

    STEP_SIZE_TOO_SMALL = "step_size_too_small"
    MAX_STEPS_REACHED = "max_steps_reached"
    STIFFNESS_DETECTED = "stiffness_detected"
    NON_FINITE = "non_finite"
    SOLVER_FAILED = "solver_failed"

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        t: float,
        trajectory: Optional[Trajectory] = None,
        stats: Optional[IntegrationStats] = None,
    ):
        super().__init__(f"{kind} at t={t:.6g}: {message}")
        self.kind = kind
        self.t = t
        self.trajectory = trajectory
        self.stats = stats


class IntegrationWarning(RuntimeWarning):
    """Emitted when a failed integration is discarded instead of raised."""
