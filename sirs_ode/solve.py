# sirs_ode/solve.py
"""
Single-call entry point: SIRS parameters in, trajectory out.

    >>> from sirs_ode import solve_sirs
    >>> traj = solve_sirs(r0=2.5, gamma=0.1, immunity_duration=365, duration=200)
    >>> rows = traj.to_list()       # [[t, S, I, R], ...]
"""
from typing import Optional
import warnings

from sirs_ode.config import INITIAL_STATE, SolverOptions
from sirs_ode.errors import IntegrationFailure, IntegrationWarning, InvalidParametersError
from sirs_ode.integrate.dopri5 import Dopri5
from sirs_ode.integrate.trajectory import Trajectory
from sirs_ode.models.sirs import SIRS


def integrate_sirs(
    r0: float,
    gamma: float,
    immunity_duration: float,
    duration: float,
    *,
    options: Optional[SolverOptions] = None,
) -> Trajectory:
    """
    Integrate the SIRS model from the fixed initial state over [0, duration].

    Raises
    ------
    InvalidParametersError
        Non-positive gamma, immunity_duration or duration, or negative r0.
    IntegrationFailure
        The solver could not reach ``duration``; carries the partial trajectory.
    """
    model = SIRS.from_inputs(r0, gamma, immunity_duration)
    if not duration > 0:
        raise InvalidParametersError(f"duration must be positive, got {duration}")

    solver = Dopri5(model.rhs, options, labels=model.labels)
    return solver.integrate(0.0, duration, INITIAL_STATE)


def solve_sirs(
    r0: float,
    gamma: float,
    immunity_duration: float,
    duration: float,
    *,
    partial: bool = False,
    output_step: Optional[float] = None,
) -> Optional[Trajectory]:
    """
    Solve the SIRS model with the default solver settings.

    Uses initial step 0.1, absolute and relative tolerance 1e-5 and the
    initial state (S, I, R) = (0.99, 0.01, 0.00).

    Parameters
    ----------
    r0 : float
        Basic reproduction number; beta = r0 * gamma.
    gamma : float
        Recovery rate.
    immunity_duration : float
        Mean duration of immunity; xi = 1 / immunity_duration.
    duration : float
        Simulation horizon.
    partial : bool
        If True, return the partial trajectory of a failed integration
        instead of None.
    output_step : float, optional
        Sample the solution on a regular grid with this spacing instead of
        at every accepted step.

    Returns
    -------
    Trajectory or None
        None when the parameters are invalid, or when integration fails
        and ``partial`` is False. Every such failure is reported through
        an ``IntegrationWarning``.

    Notes
    -----
    Fast dynamics over a long horizon can trip the stiffness check. For
    example ``solve_sirs(20, 1, 1, 1000)`` stops with
    ``stiffness_detected`` while spiralling into the endemic equilibrium
    and returns None. Pass ``partial=True`` to keep the samples computed up
    to that point, or integrate with an implicit scipy method::

        SIRS.from_inputs(20, 1, 1).integrate(INITIAL_STATE, (0, 1000), method="BDF")
    """
    try:
        options = SolverOptions(output_step=output_step)
        return integrate_sirs(r0, gamma, immunity_duration, duration, options=options)
    except InvalidParametersError as exc:
        warnings.warn(f"invalid SIRS parameters: {exc}", IntegrationWarning, stacklevel=2)
        return None
    except IntegrationFailure as exc:
        warnings.warn(
            f"SIRS integration failed ({exc.kind}) at t={exc.t:.6g}; "
            + ("returning partial trajectory" if partial else "discarding results"),
            IntegrationWarning,
            stacklevel=2,
        )
        return exc.trajectory if partial else None
