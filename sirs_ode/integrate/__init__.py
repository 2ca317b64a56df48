# sirs_ode/integrate/__init__.py
from .trajectory import IntegrationStats, Sample, Trajectory, peak_infected
from .dopri5 import Dopri5, integrate
