"""
Equilibrium analysis for the SIRS model.

Based on Keeling & Rohani (2008), Chapter 2.
"""

from typing import Tuple


def disease_free_equilibrium(N: float = 1.0) -> Tuple[float, float, float]:
    """Everyone susceptible: (N, 0, 0)."""
    return N, 0.0, 0.0


def sirs_equilibria(beta: float, gamma: float, xi: float,
                    N: float = 1.0) -> Tuple[float, float, float]:
    """
    Calculate the endemic equilibrium of the SIRS model.

    Setting the derivatives to zero with S + I + R = N gives

        S* = gamma / beta                        (= N / R0)
        I* = xi / (gamma + xi) * (N - S*)
        R* = gamma / (gamma + xi) * (N - S*)

    Args:
        beta: Transmission rate
        gamma: Recovery rate
        xi: Rate of immunity loss
        N: Population size (default 1.0 for fractions)

    Returns:
        (S*, I*, R*). The disease-free point when R0 = beta/gamma <= 1.

    Examples:
        >>> S, I, R = sirs_equilibria(beta=0.25, gamma=0.1, xi=1/365)
        >>> print(f"S* = {S:.3f}")
        S* = 0.400
    """
    R0 = beta * N / gamma
    if R0 <= 1.0:
        return disease_free_equilibrium(N)

    S_star = N / R0
    I_star = (xi / (gamma + xi)) * (N - S_star)
    R_star = (gamma / (gamma + xi)) * (N - S_star)
    return S_star, I_star, R_star
