# sirs_ode/analysis/__init__.py
from .equilibria import disease_free_equilibrium, sirs_equilibria
from .stability import calculate_jacobian, analyze_stability

__all__ = [
    "disease_free_equilibrium",
    "sirs_equilibria",
    "calculate_jacobian",
    "analyze_stability",
]
