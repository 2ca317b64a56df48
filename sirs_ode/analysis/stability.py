# sirs_ode/analysis/stability.py
from __future__ import annotations
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from sirs_ode.models.base import ODEBase

Array = np.ndarray

def calculate_jacobian(model: ODEBase, y_eq: np.ndarray, t: float = 0.0, step: float = 1e-6) -> Array:
    """
    Jacobian of the model's RHS at ``y_eq`` by central differences.

    J[i, j] = d(rhs_i) / dy_j

    Parameters
    ----------
    model : ODEBase
        An ODE model instance (e.g. SIRS).
    y_eq : np.ndarray
        State vector at which to linearise.
    t : float, optional
        Evaluation time. Defaults to 0.0.
    step : float, optional
        Finite difference step size. Defaults to 1e-6.

    Returns
    -------
    np.ndarray
        The (n_states x n_states) Jacobian matrix.
    """
    y_eq = np.asarray(y_eq, dtype=float)
    # Row j of `shifts` perturbs component j only
    shifts = step * np.eye(len(y_eq))
    columns = [model.rhs(t, y_eq + e) - model.rhs(t, y_eq - e) for e in shifts]
    return np.column_stack(columns) / (2.0 * step)


def analyze_stability(model: ODEBase, point: np.ndarray, t: float = 0.0,
                      *, conserved: bool = True) -> tuple[Array, float, bool]:
    """
    Local stability of an equilibrium from the eigenvalues of the Jacobian.

    Parameters
    ----------
    model : ODEBase
        An ODE model instance.
    point : np.ndarray
        The equilibrium state (disease-free or endemic).
    t : float, optional
        Evaluation time. Defaults to 0.0.
    conserved : bool, optional
        If True the total population is conserved, so the Jacobian has a
        structural zero eigenvalue (left eigenvector (1, ..., 1)). That
        eigenvalue is dropped before judging stability. Defaults to True.

    Returns
    -------
    tuple[np.ndarray, float, bool]
        - eigvals: eigenvalues considered (possibly complex).
        - max_real_part: the dominant real part.
        - is_stable: True if max_real_part < 0.
    """
    jac = calculate_jacobian(model, point, t=t)
    eigvals = np.linalg.eigvals(jac)

    if conserved:
        # Drop the eigenvalue closest to zero
        eigvals = np.delete(eigvals, np.argmin(np.abs(eigvals)))

    max_real_part = float(np.max(np.real(eigvals)))
    is_stable = max_real_part < -1e-12 # Tolerance for numerical zero

    return eigvals, max_real_part, is_stable
