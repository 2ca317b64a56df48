# sirs_ode/integrate/dopri5.py
"""
Dormand-Prince 5(4) explicit Runge-Kutta integrator with adaptive step size.

The method advances with the fifth-order solution and uses the embedded
fourth-order solution for the local error estimate. The last stage of an
accepted step is the derivative at the new point and is reused as the first
stage of the next step (FSAL), so an accepted step costs six right-hand-side
evaluations.

Step-size control
-----------------
Per step the scaled error is

    err = max_i |y5_i - y4_i| / (atol + rtol * max(|y_i|, |y_new_i|))

The step is accepted when err <= 1. The next proposal is
h * clip(safety * err^(-1/5), min_factor, max_factor); after a rejection
the step is not allowed to grow.

References
----------
Dormand, J. R. & Prince, P. J. (1980). A family of embedded Runge-Kutta
formulae. J. Comp. Appl. Math. 6(1), 19-26.
Hairer, E., Norsett, S. P. & Wanner, G. (1993). Solving Ordinary
Differential Equations I, Section II.4-II.6.
"""
from typing import Callable, Optional, Sequence
import numpy as np

from sirs_ode.config import SolverOptions
from sirs_ode.errors import IntegrationFailure, InvalidParametersError
from sirs_ode.integrate.trajectory import IntegrationStats, Trajectory, TrajectoryBuilder

Array = np.ndarray
RHS = Callable[[float, Array], Array]

# ============================================================================
# Butcher tableau
# ============================================================================

C = np.array([0.0, 1 / 5, 3 / 10, 4 / 5, 8 / 9, 1.0, 1.0])

A = np.array([
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    [1 / 5, 0.0, 0.0, 0.0, 0.0, 0.0],
    [3 / 40, 9 / 40, 0.0, 0.0, 0.0, 0.0],
    [44 / 45, -56 / 15, 32 / 9, 0.0, 0.0, 0.0],
    [19372 / 6561, -25360 / 2187, 64448 / 6561, -212 / 729, 0.0, 0.0],
    [9017 / 3168, -355 / 33, 46732 / 5247, 49 / 176, -5103 / 18656, 0.0],
    [35 / 384, 0.0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84],
])

# y5 - y4 weights (b - b_hat)
E = np.array([
    71 / 57600, 0.0, -71 / 16695, 71 / 1920, -17253 / 339200, 22 / 525, -1 / 40,
])

# Continuous extension (Hairer's dense output for DOPRI5)
D = np.array([
    -12715105075 / 11282082432, 0.0, 87487479700 / 32700410799,
    -10690763975 / 1880347072, 701980252875 / 199316789632,
    -1453857185 / 822651844, 69997945 / 29380423,
])

N_STAGES = 7

# Hairer's stiffness test thresholds
STIFF_H_LAMBDA = 3.25
STIFF_HITS = 15
NONSTIFF_RESET = 6


def _output_grid(t0: float, tf: float, dt: float) -> Array:
    """Regular grid t0 + k*dt in (t0, tf), closed with tf itself."""
    span = tf - t0
    n = int(np.floor(span / dt)) + 1
    grid = t0 + dt * np.arange(1, n + 1)
    grid = grid[grid < tf - 1e-9 * span]
    return np.append(grid, tf)


class Dopri5:
    """
    Adaptive Dormand-Prince integrator for ``dy/dt = rhs(t, y)``.

    Parameters
    ----------
    rhs : callable
        ``rhs(t, y) -> dy`` returning an array shaped like ``y``.
    options : SolverOptions, optional
        Tolerances and step-size control settings.
    labels : sequence of str, optional
        Names of the state components, stored on the trajectory.

    Examples
    --------
    >>> solver = Dopri5(lambda t, y: -y, SolverOptions(rtol=1e-8, atol=1e-8), labels=("x",))
    >>> traj = solver.integrate(0.0, 1.0, [1.0])
    >>> round(traj.final_state[0], 6)
    0.367879
    """

    def __init__(self, rhs: RHS, options: Optional[SolverOptions] = None,
                 labels: Optional[Sequence[str]] = None):
        self.rhs = rhs
        self.options = options if options is not None else SolverOptions()
        self.labels = tuple(labels) if labels is not None else None

    def integrate(self, t0: float, tf: float, y0) -> Trajectory:
        """
        Integrate from ``t0`` to ``tf`` starting at ``y0``.

        Returns
        -------
        Trajectory
            First sample ``(t0, y0)``, last sample at ``tf``.

        Raises
        ------
        InvalidParametersError
            If ``t0 >= tf`` or ``y0`` is not a finite 1-D vector.
        IntegrationFailure
            If the solver cannot reach ``tf``. The exception carries the
            partial trajectory.
        """
        opts = self.options
        t0, tf = float(t0), float(tf)
        if not (np.isfinite(t0) and np.isfinite(tf)) or t0 >= tf:
            raise InvalidParametersError(f"need finite t0 < tf, got t0={t0}, tf={tf}")

        y = np.array(y0, dtype=float)
        if y.ndim != 1 or y.size == 0 or not np.all(np.isfinite(y)):
            raise InvalidParametersError(f"y0 must be a finite 1-D vector, got {y0!r}")

        labels = self.labels or tuple(f"y{i}" for i in range(y.size))
        if len(labels) != y.size:
            raise InvalidParametersError(
                f"y0 has length {y.size}, but {len(labels)} labels were given: {labels}"
            )

        stats = IntegrationStats()
        out = TrajectoryBuilder(labels, stats)
        out.append(t0, y)

        def f(t, state):
            stats.n_eval += 1
            return np.asarray(self.rhs(t, state), dtype=float)

        def fail(kind, message, t):
            return IntegrationFailure(kind, message, t=t, trajectory=out.build(), stats=stats)

        span = tf - t0
        max_step = span if opts.max_step is None else min(opts.max_step, span)
        h = min(opts.initial_step, max_step)
        grid = _output_grid(t0, tf, opts.output_step) if opts.output_step else None
        grid_idx = 0

        K = np.empty((N_STAGES, y.size), dtype=float)
        with np.errstate(over="ignore", invalid="ignore"):
            K[0] = f(t0, y)
        if not np.all(np.isfinite(K[0])):
            raise fail(IntegrationFailure.NON_FINITE,
                       "right-hand side is not finite at the initial state", t0)

        t = t0
        rejected_last = False
        non_finite_last = False
        n_attempts = 0
        n_stiff = 0
        n_nonstiff = 0

        while t < tf:
            if n_attempts >= opts.max_steps:
                raise fail(IntegrationFailure.MAX_STEPS_REACHED,
                           f"exceeded {opts.max_steps} step attempts", t)
            n_attempts += 1

            if h <= 16.0 * np.finfo(float).eps * max(abs(t), 1.0):
                if non_finite_last:
                    raise fail(IntegrationFailure.NON_FINITE,
                               "state or derivative became non-finite", t)
                raise fail(IntegrationFailure.STEP_SIZE_TOO_SMALL,
                           f"step size {h:.3e} underflowed", t)

            last = t + 1.01 * h >= tf
            if last:
                h = tf - t
            t_new = tf if last else t + h

            # Stages 2..7; the seventh stage state is the 5th-order solution
            with np.errstate(over="ignore", invalid="ignore"):
                for i in range(1, N_STAGES):
                    y_stage = y + h * (A[i, :i] @ K[:i])
                    if i == N_STAGES - 2:
                        y_stage6 = y_stage
                    K[i] = f(t_new if i == N_STAGES - 1 else t + C[i] * h, y_stage)
                y_new = y_stage
                err_vec = h * (E @ K)
                scale = opts.atol + opts.rtol * np.maximum(np.abs(y), np.abs(y_new))
                err = float(np.max(np.abs(err_vec) / scale))

            if not np.isfinite(err) or not np.all(np.isfinite(K[-1])):
                stats.rejected_steps += 1
                rejected_last = True
                non_finite_last = True
                h *= opts.min_factor
                continue
            non_finite_last = False

            if err > 1.0:
                stats.rejected_steps += 1
                rejected_last = True
                factor = max(opts.min_factor, opts.safety * err ** -0.2)
                h *= factor
                continue

            # Accepted
            stats.accepted_steps += 1
            if grid is None:
                out.append(t_new, y_new)
            else:
                while grid_idx < len(grid) and grid[grid_idx] <= t_new:
                    t_out = grid[grid_idx]
                    if t_out == t_new:
                        out.append(t_out, y_new)
                    else:
                        out.append(t_out, self._interpolate(t_out, t, h, y, y_new, K))
                    grid_idx += 1

            stiff_due = opts.stiffness_check and (
                stats.accepted_steps % opts.stiffness_check == 0 or n_stiff > 0
            )
            if stiff_due:
                num = np.sum((K[-1] - K[-2]) ** 2)
                den = np.sum((y_new - y_stage6) ** 2)
                if den > 0.0 and h * np.sqrt(num / den) > STIFF_H_LAMBDA:
                    n_nonstiff = 0
                    n_stiff += 1
                    if n_stiff == STIFF_HITS:
                        raise fail(IntegrationFailure.STIFFNESS_DETECTED,
                                   "problem appears stiff; use an implicit method", t_new)
                else:
                    n_nonstiff += 1
                    if n_nonstiff == NONSTIFF_RESET:
                        n_stiff = 0

            t = t_new
            y = y_new
            K[0] = K[-1]

            if err == 0.0:
                factor = opts.max_factor
            else:
                factor = min(opts.max_factor, max(opts.min_factor, opts.safety * err ** -0.2))
            if rejected_last:
                factor = min(factor, 1.0)
            rejected_last = False
            h = min(h * factor, max_step)

        return out.build()

    @staticmethod
    def _interpolate(t_out: float, t: float, h: float, y: Array, y_new: Array, K: Array) -> Array:
        """Fourth-order continuous extension over the step [t, t + h]."""
        theta = (t_out - t) / h
        theta1 = 1.0 - theta
        ydiff = y_new - y
        bspl = h * K[0] - ydiff
        r4 = ydiff - h * K[-1] - bspl
        r5 = h * (D @ K)
        return y + theta * (ydiff + theta1 * (bspl + theta * (r4 + theta1 * r5)))


def integrate(
    rhs: RHS,
    t0: float,
    tf: float,
    initial_step: float,
    y0,
    abs_tol: float,
    rel_tol: float,
    **options,
) -> Trajectory:
    """
    Functional form of ``Dopri5(...).integrate(t0, tf, y0)``.

    Extra keyword arguments are passed to ``SolverOptions``; ``labels`` is
    passed to the integrator.
    """
    labels = options.pop("labels", None)
    opts = SolverOptions(initial_step=initial_step, atol=abs_tol, rtol=rel_tol, **options)
    return Dopri5(rhs, opts, labels=labels).integrate(t0, tf, y0)
