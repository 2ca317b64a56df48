"""
Trajectory Validation for sirs_ode

Checks a computed SIRS trajectory against properties the exact solution
is known to have:
- Initial state reproduced exactly
- Strictly increasing time grid ending at the requested horizon
- Conservation of S + I + R
- R₀ threshold behaviour (epidemic iff R₀ > 1)
- Approach to the endemic equilibrium over long horizons

Usage:
    from sirs_ode import solve_sirs
    from sirs_ode.models.sirs import SIRS
    from sirs_ode.validation import TrajectoryValidator

    traj = solve_sirs(2.5, 0.1, 365, 200)
    model = SIRS.from_inputs(2.5, 0.1, 365)
    results = TrajectoryValidator(traj, model).validate_all()

References: Keeling & Rohani (2008), Modeling Infectious Diseases
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional, List, Sequence
import numpy as np

from sirs_ode.config import INITIAL_STATE
from sirs_ode.integrate.trajectory import Trajectory
from sirs_ode.models.sirs import SIRS


@dataclass
class ValidationResult:
    """Result from a single validation check."""
    test_name: str
    passed: bool
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        status = "✓ PASS" if self.passed else "✗ FAIL"
        return f"{status}: {self.test_name}\n  {self.message}"


class TrajectoryValidator:
    """
    Validate an SIRS trajectory against the behaviour of the exact solution.

    Parameters
    ----------
    trajectory : Trajectory
        Output of ``solve_sirs`` / ``Dopri5.integrate``.
    model : SIRS
        The model the trajectory was computed from.
    tolerance : float
        Conservation tolerance (default: 1e-6)
    verbose : bool
        Print each result as it is produced (default: True)

    Examples
    --------
    >>> validator = TrajectoryValidator(traj, model, verbose=False)
    >>> results = validator.validate_all()
    >>> print(f"Passed: {sum(r.passed for r in results)}/{len(results)}")
    """

    def __init__(self, trajectory: Trajectory, model: SIRS,
                 tolerance: float = 1e-6, verbose: bool = True):
        self.trajectory = trajectory
        self.model = model
        self.tolerance = tolerance
        self.verbose = verbose
        self.results: List[ValidationResult] = []

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def _add_result(self, result: ValidationResult):
        self.results.append(result)
        if self.verbose:
            print(result)

    # =========================================================================
    # 1. INITIAL STATE AND TIME GRID
    # =========================================================================

    def check_initial_state(self, y0: Sequence[float] = INITIAL_STATE,
                            t0: float = 0.0) -> ValidationResult:
        """First sample must be exactly (t0, y0)."""
        traj = self.trajectory
        if len(traj) == 0:
            return ValidationResult("Initial State", False, "Trajectory is empty")

        t_first = float(traj.t[0])
        y_first = traj.y[:, 0]
        passed = t_first == t0 and np.array_equal(y_first, np.asarray(y0, dtype=float))
        message = (f"First sample matches t={t0}, y0={tuple(y0)}" if passed
                   else f"First sample is t={t_first}, y={tuple(y_first)}")
        return ValidationResult(
            test_name="Initial State",
            passed=passed,
            message=message,
            details={"t0": t_first, "y0": y_first.tolist()}
        )

    def check_time_grid(self, tf: Optional[float] = None) -> ValidationResult:
        """Times strictly increasing; last time equal to ``tf`` if given."""
        t = self.trajectory.t
        increasing = bool(np.all(np.diff(t) > 0))
        reached = True
        if tf is not None and len(t):
            reached = bool(np.isclose(t[-1], tf, rtol=1e-12, atol=1e-12))

        passed = increasing and reached and len(t) > 0
        if passed:
            message = f"{len(t)} samples, strictly increasing, t_end={t[-1]:.6g}"
        elif not increasing:
            message = "Time grid is not strictly increasing"
        else:
            message = f"Trajectory ends at t={t[-1] if len(t) else None}, expected {tf}"
        return ValidationResult(
            test_name="Time Grid",
            passed=passed,
            message=message,
            details={"n_samples": len(t), "increasing": increasing, "reached_tf": reached}
        )

    # =========================================================================
    # 2. CONSERVATION
    # =========================================================================

    def check_conservation(self) -> ValidationResult:
        """S + I + R stays at its initial value within ``tolerance``."""
        y = self.trajectory.y
        if y.shape[1] == 0:
            return ValidationResult("Population Conservation", False, "Trajectory is empty")

        totals = y.sum(axis=0)
        max_variation = float(np.max(np.abs(totals - totals[0])))
        passed = max_variation <= self.tolerance
        return ValidationResult(
            test_name="Population Conservation",
            passed=passed,
            message=(f"max |N(t) - N(0)| = {max_variation:.2e} "
                     f"({'≤' if passed else '>'} {self.tolerance:.0e})"),
            details={"max_variation": max_variation, "N0": float(totals[0])}
        )

    # =========================================================================
    # 3. R₀ THRESHOLD BEHAVIOUR
    # =========================================================================

    def check_r0_threshold(self, growth_threshold: float = 1.1) -> ValidationResult:
        """
        R₀ > 1: infected fraction grows above its initial value.
        R₀ ≤ 1: infected fraction never grows and ends below its initial value.
        """
        R0 = self.model.R0()
        I = self.trajectory.state("I")
        I_initial, I_max, I_final = float(I[0]), float(I.max()), float(I[-1])

        if R0 > 1:
            passed = I_max > I_initial * growth_threshold
            message = (f"R₀={R0:.2f}>1: epidemic occurred (peak I={I_max:.4f})" if passed
                       else f"R₀={R0:.2f}>1 but I never exceeded {growth_threshold}×I(0)")
        else:
            passed = I_final < I_initial and I_max <= I_initial * (1 + self.tolerance)
            message = (f"R₀={R0:.2f}≤1: infection declined (final I={I_final:.2e})" if passed
                       else f"R₀={R0:.2f}≤1 but I grew to {I_max:.4f}")
        return ValidationResult(
            test_name="R₀ Threshold Behavior",
            passed=passed,
            message=message,
            details={"R0": R0, "I_initial": I_initial, "I_max": I_max, "I_final": I_final}
        )

    # =========================================================================
    # 4. EQUILIBRIUM APPROACH
    # =========================================================================

    def check_equilibrium_approach(self, rtol: float = 0.05,
                                   atol: float = 1e-4) -> ValidationResult:
        """
        Final state within ``rtol``/``atol`` of the model's equilibrium.

        Only meaningful for horizons long compared with 1/gamma and 1/xi.
        """
        expected = np.array(self.model.endemic_equilibrium())
        final = self.trajectory.final_state
        deviation = np.abs(final - expected)
        passed = bool(np.all(deviation <= atol + rtol * np.abs(expected)))
        return ValidationResult(
            test_name="Equilibrium Approach",
            passed=passed,
            message=(f"Final state {np.round(final, 4).tolist()} vs "
                     f"equilibrium {np.round(expected, 4).tolist()}"),
            details={"final": final.tolist(), "equilibrium": expected.tolist(),
                     "max_deviation": float(deviation.max())}
        )

    # =========================================================================
    # RUN ALL
    # =========================================================================

    def validate_all(self, tf: Optional[float] = None,
                     include_equilibrium: bool = False) -> List[ValidationResult]:
        """
        Run all checks. The equilibrium check is opt-in because it only
        applies to long horizons.
        """
        self._log("=" * 70)
        self._log("TRAJECTORY VALIDATION SUITE")
        self._log("=" * 70)
        self._log(f"R₀: {self.model.R0():.3f}, samples: {len(self.trajectory)}")
        self._log("")

        self.results = []
        self._add_result(self.check_initial_state())
        self._add_result(self.check_time_grid(tf))
        self._add_result(self.check_conservation())
        self._add_result(self.check_r0_threshold())
        if include_equilibrium:
            self._add_result(self.check_equilibrium_approach())

        passed = sum(r.passed for r in self.results)
        self._log("")
        self._log(f"SUMMARY: {passed}/{len(self.results)} checks passed")
        return self.results

    def summary(self) -> str:
        if not self.results:
            return "No validation results yet. Run validate_all() first."

        passed = sum(r.passed for r in self.results)
        lines = [
            "=" * 70,
            "VALIDATION SUMMARY",
            "=" * 70,
            f"Passed: {passed}/{len(self.results)} checks",
            "",
        ]
        for result in self.results:
            status = "✓" if result.passed else "✗"
            lines.append(f"{status} {result.test_name}: {result.message}")
        lines.append("=" * 70)
        return "\n".join(lines)


def validate_trajectory(trajectory: Trajectory, model: SIRS, *,
                        tf: Optional[float] = None,
                        verbose: bool = True) -> List[ValidationResult]:
    """Quick validation with default settings."""
    return TrajectoryValidator(trajectory, model, verbose=verbose).validate_all(tf=tf)
