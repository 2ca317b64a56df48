# sirs_ode/validation/__init__.py
from .trajectory_validator import TrajectoryValidator, ValidationResult, validate_trajectory
