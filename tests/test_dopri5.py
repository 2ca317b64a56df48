import numpy as np
import pytest

from sirs_ode.config import SolverOptions
from sirs_ode.errors import IntegrationFailure, InvalidParametersError
from sirs_ode.integrate.dopri5 import Dopri5, integrate


def _decay(t, y):
    return -y


def _oscillator(t, y):
    return np.array([y[1], -y[0]])


def test_exponential_decay_accuracy():
    traj = integrate(_decay, 0.0, 2.0, 0.1, [1.0], 1e-8, 1e-8)
    assert np.isclose(traj.final_state[0], np.exp(-2.0), atol=1e-6)
    assert np.allclose(traj.y[0], np.exp(-traj.t), atol=1e-6)


def test_first_sample_is_initial_state_and_last_is_tf():
    y0 = [1.0, 0.0]
    traj = Dopri5(_oscillator).integrate(0.0, 2 * np.pi, y0)
    assert traj.t[0] == 0.0
    assert np.array_equal(traj.y[:, 0], y0)
    assert traj.t[-1] == 2 * np.pi
    assert np.all(np.diff(traj.t) > 0)


def test_oscillator_returns_to_start_after_one_period():
    traj = Dopri5(_oscillator).integrate(0.0, 2 * np.pi, [1.0, 0.0])
    assert np.allclose(traj.final_state, [1.0, 0.0], atol=1e-3)


def test_nonzero_start_time():
    traj = integrate(_decay, 5.0, 6.0, 0.1, [1.0], 1e-8, 1e-8)
    assert traj.t[0] == 5.0
    assert traj.t[-1] == 6.0
    assert np.isclose(traj.final_state[0], np.exp(-1.0), atol=1e-6)


def test_eval_count_matches_fsal_bookkeeping():
    traj = Dopri5(_decay).integrate(0.0, 10.0, [1.0])
    s = traj.stats
    assert s.accepted_steps == len(traj) - 1
    # one initial evaluation, then six per attempted step
    assert s.n_eval == 1 + 6 * (s.accepted_steps + s.rejected_steps)


def test_step_size_grows_on_smooth_problem():
    traj = Dopri5(_decay).integrate(0.0, 10.0, [1.0])
    # a fixed 0.1 step would need 100 steps
    assert len(traj) - 1 < 100
    assert np.diff(traj.t).max() > 0.1


def test_large_initial_step_is_rejected_and_shrunk():
    opts = SolverOptions(initial_step=1.0, rtol=1e-10, atol=1e-10)
    traj = Dopri5(_decay, opts).integrate(0.0, 10.0, [1.0])
    assert traj.stats.rejected_steps >= 1
    assert np.diff(traj.t)[0] < 1.0
    assert np.isclose(traj.final_state[0], np.exp(-10.0), atol=1e-8)


def test_step_growth_is_bounded_by_max_factor():
    opts = SolverOptions(initial_step=1e-4)
    traj = Dopri5(_decay, opts).integrate(0.0, 10.0, [1.0])
    dts = np.diff(traj.t)
    ratios = dts[1:-1] / dts[:-2]
    assert np.all(ratios <= opts.max_factor * (1 + 1e-9))


def test_max_step_is_respected():
    opts = SolverOptions(max_step=0.25)
    traj = Dopri5(_decay, opts).integrate(0.0, 10.0, [1.0])
    assert np.diff(traj.t).max() <= 0.25 * 1.01 + 1e-12


@pytest.mark.parametrize("t0, tf", [(1.0, 1.0), (2.0, 1.0), (0.0, np.inf)])
def test_empty_or_reversed_interval_is_rejected(t0, tf):
    with pytest.raises(InvalidParametersError):
        Dopri5(_decay).integrate(t0, tf, [1.0])


def test_invalid_parameters_error_is_a_value_error():
    with pytest.raises(ValueError):
        Dopri5(_decay).integrate(1.0, 0.0, [1.0])


def test_bad_initial_state_is_rejected():
    with pytest.raises(InvalidParametersError):
        Dopri5(_decay).integrate(0.0, 1.0, [np.nan])
    with pytest.raises(InvalidParametersError):
        Dopri5(_decay).integrate(0.0, 1.0, [[1.0, 2.0]])


def test_label_count_must_match_state():
    with pytest.raises(InvalidParametersError):
        Dopri5(_decay, labels=("a", "b")).integrate(0.0, 1.0, [1.0])


class TestSolverOptions:

    @pytest.mark.parametrize("kwargs", [
        dict(initial_step=0.0),
        dict(rtol=-1e-5),
        dict(atol=0.0),
        dict(safety=1.5),
        dict(min_factor=1.2),
        dict(max_factor=0.5),
        dict(max_step=-1.0),
        dict(max_steps=0),
        dict(stiffness_check=-1),
        dict(output_step=0.0),
    ])
    def test_invalid_options_rejected(self, kwargs):
        with pytest.raises(InvalidParametersError):
            SolverOptions(**kwargs)

    def test_defaults(self):
        opts = SolverOptions()
        assert opts.initial_step == 0.1
        assert opts.rtol == 1e-5
        assert opts.atol == 1e-5
        assert (opts.min_factor, opts.max_factor) == (0.2, 5.0)


class TestFailures:

    def test_finite_time_blowup_underflows(self):
        # y' = y^2, y(0) = 1 has a singularity at t = 1
        opts = SolverOptions(stiffness_check=0)
        with pytest.raises(IntegrationFailure) as info:
            Dopri5(lambda t, y: y ** 2, opts).integrate(0.0, 2.0, [1.0])

        exc = info.value
        # the state is still finite when the step underflows
        assert exc.kind == IntegrationFailure.STEP_SIZE_TOO_SMALL
        assert exc.t < 1.0
        assert np.all(np.isfinite(exc.trajectory.y))
        partial = exc.trajectory
        assert len(partial) > 1
        assert partial.t[0] == 0.0
        assert partial.t[-1] == exc.t
        assert np.all(np.diff(partial.t) > 0)

    def test_max_steps_guard(self):
        opts = SolverOptions(max_steps=5)
        with pytest.raises(IntegrationFailure) as info:
            Dopri5(_decay, opts).integrate(0.0, 100.0, [1.0])

        exc = info.value
        assert exc.kind == IntegrationFailure.MAX_STEPS_REACHED
        assert exc.stats.accepted_steps + exc.stats.rejected_steps == 5
        assert len(exc.trajectory) == exc.stats.accepted_steps + 1

    def test_non_finite_initial_derivative(self):
        with pytest.raises(IntegrationFailure) as info:
            Dopri5(lambda t, y: np.array([np.nan])).integrate(0.0, 1.0, [1.0])

        exc = info.value
        assert exc.kind == IntegrationFailure.NON_FINITE
        assert len(exc.trajectory) == 1
        assert exc.t == 0.0

    def test_non_finite_derivative_mid_run(self):
        def rhs(t, y):
            return np.array([np.inf]) if t > 0.5 else -y

        with pytest.raises(IntegrationFailure) as info:
            Dopri5(rhs).integrate(0.0, 1.0, [1.0])

        exc = info.value
        assert exc.kind == IntegrationFailure.NON_FINITE
        assert 0.0 < exc.t <= 0.5
        partial = exc.trajectory
        assert len(partial) > 1
        assert partial.t[-1] == exc.t
        assert np.all(np.isfinite(partial.y))

    def test_stiffness_detected(self):
        # fast relaxation onto cos(t); explicit steps are pinned to the
        # stability boundary once the transient has decayed
        def rhs(t, y):
            return -1e4 * (y - np.cos(t))

        opts = SolverOptions(stiffness_check=1, max_steps=1_000_000)
        with pytest.raises(IntegrationFailure) as info:
            Dopri5(rhs, opts).integrate(0.0, 10.0, [1.0])

        exc = info.value
        assert exc.kind == IntegrationFailure.STIFFNESS_DETECTED
        assert exc.t < 10.0
        partial = exc.trajectory
        assert len(partial) > 1
        assert partial.t[0] == 0.0
        assert np.all(np.isfinite(partial.y))

    def test_stiffness_check_disabled(self):
        def rhs(t, y):
            return -1e4 * (y - np.cos(t))

        opts = SolverOptions(stiffness_check=0, max_steps=1_000_000)
        traj = Dopri5(rhs, opts).integrate(0.0, 0.5, [1.0])
        assert traj.t[-1] == 0.5
        assert np.isclose(traj.final_state[0], np.cos(0.5), atol=1e-3)

    def test_failure_is_a_runtime_error(self):
        opts = SolverOptions(max_steps=1)
        with pytest.raises(RuntimeError):
            Dopri5(_decay, opts).integrate(0.0, 100.0, [1.0])

    def test_no_false_stiffness_on_smooth_problem(self):
        opts = SolverOptions(stiffness_check=1)
        traj = Dopri5(_decay, opts).integrate(0.0, 5.0, [1.0])
        assert traj.t[-1] == 5.0


class TestDenseOutput:

    def test_regular_grid(self):
        opts = SolverOptions(output_step=0.25)
        traj = Dopri5(_decay, opts).integrate(0.0, 3.0, [1.0])
        assert np.allclose(traj.t, np.arange(0.0, 3.0 + 1e-9, 0.25))
        assert traj.t[-1] == 3.0

    def test_grid_closed_with_tf_when_not_a_multiple(self):
        opts = SolverOptions(output_step=0.4)
        traj = Dopri5(_decay, opts).integrate(0.0, 1.0, [1.0])
        assert np.allclose(traj.t, [0.0, 0.4, 0.8, 1.0])

    def test_interpolated_values_are_accurate(self):
        opts = SolverOptions(output_step=0.05, rtol=1e-8, atol=1e-8)
        traj = Dopri5(_oscillator, opts).integrate(0.0, 2.0, [1.0, 0.0])
        assert np.allclose(traj.y[0], np.cos(traj.t), atol=1e-6)
        assert np.allclose(traj.y[1], -np.sin(traj.t), atol=1e-6)
