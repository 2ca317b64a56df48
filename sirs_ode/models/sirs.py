"""
SIRS model for a closed population with waning immunity.

    dS/dt = -beta*S*I + xi*R
    dI/dt =  beta*S*I - gamma*I
    dR/dt =  gamma*I  - xi*R

State variables are population fractions. Transmission is mass-action on
fractions, so R0 = beta/gamma.
"""
from dataclasses import dataclass
import math
import numpy as np

from sirs_ode.analysis.equilibria import sirs_equilibria
from sirs_ode.errors import InvalidParametersError
from sirs_ode.models.base import ODEBase


@dataclass(frozen=True)
class SIRSParams:
    """
    Rates of the SIRS model.

    gamma: recovery rate
    beta: transmission rate (beta = R0 * gamma)
    xi: rate of immunity loss (xi = 1 / immunity_duration)
    """
    gamma: float
    beta: float
    xi: float

    def __post_init__(self):
        if not (math.isfinite(self.gamma) and self.gamma > 0):
            raise InvalidParametersError(f"gamma must be positive, got {self.gamma}")
        if not (math.isfinite(self.beta) and self.beta >= 0):
            raise InvalidParametersError(f"beta must be non-negative, got {self.beta}")
        if not (math.isfinite(self.xi) and self.xi > 0):
            raise InvalidParametersError(f"xi must be positive, got {self.xi}")

    @classmethod
    def from_inputs(cls, r0: float, gamma: float, immunity_duration: float) -> "SIRSParams":
        """
        Derive the model rates from user-facing quantities.

        Args:
            r0: Basic reproduction number (>= 0; 0 switches transmission off)
            gamma: Recovery rate (> 0)
            immunity_duration: Mean time until immunity is lost (> 0)
        """
        if not (math.isfinite(r0) and r0 >= 0):
            raise InvalidParametersError(f"r0 must be non-negative, got {r0}")
        if not (math.isfinite(gamma) and gamma > 0):
            raise InvalidParametersError(f"gamma must be positive, got {gamma}")
        if not (math.isfinite(immunity_duration) and immunity_duration > 0):
            raise InvalidParametersError(
                f"immunity_duration must be positive, got {immunity_duration}"
            )
        return cls(gamma=gamma, beta=r0 * gamma, xi=1.0 / immunity_duration)


class SIRS(ODEBase):
    """
    SIRS model with waning immunity.

    Examples
    --------
    >>> m = SIRS.from_inputs(r0=2.5, gamma=0.1, immunity_duration=365)
    >>> t, y = m.integrate(dict(S=0.99, I=0.01, R=0.0), (0, 200))
    """

    def __init__(self, beta: float, gamma: float, xi: float):
        self.params = SIRSParams(gamma=gamma, beta=beta, xi=xi)

    @classmethod
    def from_inputs(cls, r0: float, gamma: float, immunity_duration: float) -> "SIRS":
        p = SIRSParams.from_inputs(r0, gamma, immunity_duration)
        return cls(beta=p.beta, gamma=p.gamma, xi=p.xi)

    @property
    def labels(self) -> tuple[str, ...]:
        return ("S", "I", "R")

    def rhs(self, t: float, y: np.ndarray) -> np.ndarray:
        S, I, R = y
        p = self.params
        infection = p.beta * S * I

        dS = -infection + p.xi * R
        dI = +infection - p.gamma * I
        dR = +p.gamma * I - p.xi * R
        return np.array([dS, dI, dR])

    def R0(self) -> float:
        """Basic reproduction number R0 = beta/gamma."""
        return self.params.beta / self.params.gamma

    def endemic_equilibrium(self) -> tuple[float, float, float]:
        """
        Return (S*, I*, R*) for a unit population.
        Returns the disease-free point (1, 0, 0) if R0 <= 1.
        """
        p = self.params
        return sirs_equilibria(p.beta, p.gamma, p.xi)

    def check_conservation(self, y: np.ndarray) -> float:
        """
        |d(S+I+R)/dt| at state y. Zero up to rounding for a closed population.
        """
        return float(abs(self.rhs(0.0, y).sum()))
