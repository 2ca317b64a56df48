# sirs_ode/models/base.py
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np
from scipy.integrate import solve_ivp

from sirs_ode.config import SolverOptions
from sirs_ode.errors import IntegrationFailure, InvalidParametersError
from sirs_ode.integrate.dopri5 import Dopri5

Array = np.ndarray

class ODEBase:
    @property
    def labels(self) -> Sequence[str]:
        raise NotImplementedError

    def rhs(self, t: float, y: Array) -> Array: # type: ignore
        raise NotImplementedError

    def initial_state(self, y0: Dict[str, float] | np.ndarray | List[float]) -> Array:
        """
        Convert ``y0`` to an ordered state vector.

        Args:
            y0 (Dict[str, float] | np.ndarray | List[float]):
                Either a dictionary mapping state labels to values (missing
                labels default to 0) or a sequence ordered as ``self.labels``.
        """
        labels = list(self.labels)

        if isinstance(y0, dict):
            unknown = set(y0) - set(labels)
            if unknown:
                raise InvalidParametersError(
                    f"y0 has unknown states {sorted(unknown)}; model states are {labels}"
                )
            return np.array([y0.get(k, 0.0) for k in labels], dtype=float)
        if isinstance(y0, (np.ndarray, list, tuple)):
            y0v = np.asarray(y0, dtype=float)
            if len(y0v) != len(labels):
                raise InvalidParametersError(
                    f"y0 array has length {len(y0v)}, but model has "
                    f"{len(labels)} states: {labels}"
                )
            return y0v
        raise TypeError(
            f"y0 must be a dict, numpy.ndarray, list, or tuple, "
            f"got {type(y0)}"
        )

    def integrate(
        self,
        y0: Dict[str, float] | np.ndarray | List[float],
        t_span: Tuple[float, float],
        *,
        method: str = "dopri5",
        options: Optional[SolverOptions] = None,
        **solve_kw
    ) -> Tuple[Array, Array]:
        """
        Integrate the ODE system over ``t_span``.

        Args:
            y0: Initial conditions, see ``initial_state``.
            t_span: ``(t0, tf)`` with ``t0 < tf``.
            method: ``"dopri5"`` for the built-in adaptive Dormand-Prince
                solver. Any other name is handed to
                ``scipy.integrate.solve_ivp`` together with ``solve_kw``.
            options: Solver settings for ``"dopri5"``.

        Returns:
            (t, y): times of shape (n,) and states of shape (n_states, n).

        Raises:
            InvalidParametersError: for a malformed ``y0`` or ``t_span``.
            IntegrationFailure: if the solver does not reach ``tf``.
        """
        y0v = self.initial_state(y0)
        t0, tf = t_span

        if method.lower() == "dopri5":
            if solve_kw:
                raise TypeError(f"unexpected keyword arguments for dopri5: {sorted(solve_kw)}")
            traj = Dopri5(self.rhs, options, labels=self.labels).integrate(t0, tf, y0v)
            return traj.t, traj.y

        if t0 >= tf:
            raise InvalidParametersError(f"need t0 < tf, got t_span={t_span}")
        sol = solve_ivp(self.rhs, (t0, tf), y0v, method=method, **solve_kw)
        if not sol.success:
            raise IntegrationFailure(
                IntegrationFailure.SOLVER_FAILED,
                f"{method} returned status {sol.status}: {sol.message}",
                t=float(sol.t[-1]),
            )
        return sol.t, sol.y
