# sirs_ode/models/__init__.py
from .base import ODEBase
from .sirs import SIRS, SIRSParams
