"""
Tests for the bootstrap ensemble and run-level behavior of bootstrap().
"""

import logging

import numpy as np
import pytest

from pyorthoreg.core.exceptions import (
    ConfigurationError,
    DimensionError,
    ValidationError,
)
from pyorthoreg.censored import EnsembleParams, bootstrap, summarize
from pyorthoreg.censored._bootstrap import run_ensemble
from pyorthoreg.censored.backends import (
    CPUFitBackend,
    LevenbergMarquardtMinimizer,
    MinimizerOutput,
)


class EveryOtherFails:
    """Wraps LM and marks every second call as unconverged."""

    def __init__(self):
        self._inner = LevenbergMarquardtMinimizer()
        self.calls = 0

    @property
    def name(self):
        return 'flaky'

    def minimize(self, objective_fn, initial_params):
        out = self._inner.minimize(objective_fn, initial_params)
        self.calls += 1
        if self.calls % 2 == 0:
            return MinimizerOutput(
                params=out.params,
                param_uncertainties=out.param_uncertainties,
                objective_value=out.objective_value,
                degrees_of_freedom=out.degrees_of_freedom,
                converged=False,
                message="forced failure",
                n_function_evals=out.n_function_evals,
                rank=out.rank,
            )
        return out


class RaisesOnCall:
    """Wraps LM and raises LinAlgError on one chosen call."""

    def __init__(self, failing_call):
        self._inner = LevenbergMarquardtMinimizer()
        self.failing_call = failing_call
        self.calls = 0

    @property
    def name(self):
        return 'raising'

    def minimize(self, objective_fn, initial_params):
        self.calls += 1
        if self.calls == self.failing_call:
            raise np.linalg.LinAlgError("SVD did not converge")
        return self._inner.minimize(objective_fn, initial_params)


class RecordingBackend:
    """Records the design of every trial instead of fitting it."""

    name = 'recording'

    def __init__(self):
        self.designs = []
        self._inner = CPUFitBackend()

    def solve(self, design):
        self.designs.append(design)
        return self._inner.solve(design)


# ═══════════════════════════════════════════════════════════════════════
# Ensemble driver
# ═══════════════════════════════════════════════════════════════════════


class TestRunEnsemble:

    def test_trial_zero_is_original(self, line_data):
        backend = RecordingBackend()
        idx = np.tile(np.arange(line_data.n), (2, 1))
        results = run_ensemble(line_data, idx, backend)
        assert len(results) == 3
        assert backend.designs[0] is line_data

    def test_trial_uses_index_row(self, line_data):
        backend = RecordingBackend()
        idx = np.tile(np.arange(line_data.n)[::-1], (1, 1))
        run_ensemble(line_data, idx, backend)
        np.testing.assert_array_equal(backend.designs[1].x, line_data.x[::-1])

    def test_shape_mismatch(self, line_data):
        with pytest.raises(DimensionError):
            run_ensemble(line_data, np.zeros((3, 5), dtype=np.int64), CPUFitBackend())

    def test_invalid_jobs(self, line_data):
        idx = np.zeros((1, line_data.n), dtype=np.int64)
        with pytest.raises(ValidationError, match="n_jobs"):
            run_ensemble(line_data, idx, CPUFitBackend(), n_jobs=0)

    def test_logs_completion(self, line_data, caplog):
        idx = np.zeros((0, line_data.n), dtype=np.int64)
        with caplog.at_level(logging.INFO, logger="pyorthoreg"):
            run_ensemble(line_data, idx, CPUFitBackend())
        assert "bootstrap finished" in caplog.text


# ═══════════════════════════════════════════════════════════════════════
# bootstrap()
# ═══════════════════════════════════════════════════════════════════════


class TestBootstrap:

    def test_record_count(self, line_data):
        solution = bootstrap(line_data, 10, seed=1)
        assert len(solution.fits) == 11
        assert solution.indices.shape == (10, line_data.n)
        assert isinstance(solution.ensemble, EnsembleParams)
        assert solution.seed == 1

    def test_zero_boots(self, line_data):
        solution = bootstrap(line_data, 0, seed=1)
        assert len(solution.fits) == 1
        assert solution.indices.shape == (0, line_data.n)
        with pytest.raises(ConfigurationError):
            summarize(solution)

    def test_one_boot_cannot_be_summarized(self, line_data):
        with pytest.raises(ConfigurationError):
            bootstrap(line_data, 1, seed=1).stats()

    def test_negative_boots(self, line_data):
        with pytest.raises(ValidationError):
            bootstrap(line_data, -1)

    def test_original_matches_fit(self, line_data):
        from pyorthoreg.censored import fit
        solution = bootstrap(line_data, 3, seed=2)
        single = fit(line_data)
        assert solution.original.slope == single.slope
        assert solution.original.intercept == single.intercept

    def test_seed_reproducibility(self, line_data):
        a = bootstrap(line_data, 8, seed=11)
        b = bootstrap(line_data, 8, seed=11)
        np.testing.assert_array_equal(a.indices, b.indices)
        np.testing.assert_array_equal(a.ensemble.table(), b.ensemble.table())

    def test_thread_count_does_not_change_results(self, line_data):
        serial = bootstrap(line_data, 20, seed=5, n_jobs=1)
        threaded = bootstrap(line_data, 20, seed=5, n_jobs=4)
        np.testing.assert_array_equal(serial.ensemble.table(), threaded.ensemble.table())

    def test_replay_from_indices(self, line_data):
        first = bootstrap(line_data, 6, seed=9)
        replay = bootstrap(line_data, 6, indices=first.indices)
        np.testing.assert_array_equal(first.ensemble.table(), replay.ensemble.table())
        assert replay.seed is None

    def test_replay_indices_are_copied(self, line_data):
        idx = np.tile(np.arange(line_data.n), (2, 1))
        bootstrap(line_data, 2, indices=idx)
        idx[0, 0] = 1
        assert idx.flags.writeable

    def test_indices_read_only(self, line_data):
        solution = bootstrap(line_data, 2, seed=0)
        with pytest.raises(ValueError):
            solution.indices[0, 0] = 3

    def test_replay_shape_mismatch(self, line_data):
        with pytest.raises(DimensionError):
            bootstrap(line_data, 3, indices=np.zeros((2, line_data.n), dtype=np.int64))

    def test_replay_out_of_range(self, line_data):
        idx = np.full((2, line_data.n), line_data.n, dtype=np.int64)
        with pytest.raises(ValidationError, match="indices"):
            bootstrap(line_data, 2, indices=idx)

    def test_failed_trials_are_flagged(self, line_data):
        solution = bootstrap(line_data, 10, seed=3, minimizer=EveryOtherFails())
        # calls 2, 4, ..., 10 fail: trials 1, 3, 5, 7, 9
        assert solution.n_failed == 5
        assert not solution.ensemble.converged[1]
        assert solution.ensemble.converged[0]
        assert any(w.startswith("trial 1:") for w in solution.warnings)

    def test_failed_trials_excluded_from_stats(self, line_data):
        solution = bootstrap(line_data, 10, seed=3, minimizer=EveryOtherFails())
        stats = summarize(solution)
        assert stats.n_valid == 5
        assert stats.n_failed == 5
        valid = solution.ensemble.column("slope")[[2, 4, 6, 8, 10]]
        assert stats.slope.median == pytest.approx(np.median(valid))

    def test_failed_trials_logged(self, line_data, caplog):
        with caplog.at_level(logging.WARNING, logger="pyorthoreg"):
            bootstrap(line_data, 2, seed=3, minimizer=EveryOtherFails())
        assert "bootstrap trial 1 did not converge" in caplog.text

    def test_raising_trial_does_not_abort_run(self, line_data):
        # serial run: call 3 is trial 2
        solution = bootstrap(line_data, 10, seed=0, minimizer=RaisesOnCall(3))
        assert len(solution.fits) == 11
        assert solution.n_failed == 1
        failed = solution.fits[2]
        assert not failed.converged
        assert np.isnan(failed.slope)
        assert failed.message.startswith("LinAlgError")
        assert failed.n_points == line_data.n
        assert any(w.startswith("trial 2: fit raised LinAlgError") for w in solution.warnings)
        assert solution.stats().n_valid == 9

    def test_raising_trial_logged(self, line_data, caplog):
        with caplog.at_level(logging.WARNING, logger="pyorthoreg"):
            bootstrap(line_data, 3, seed=0, minimizer=RaisesOnCall(2))
        assert "bootstrap trial 1 failed: SVD did not converge" in caplog.text

    def test_raising_original_fit_propagates(self, line_data):
        with pytest.raises(np.linalg.LinAlgError):
            bootstrap(line_data, 3, seed=0, minimizer=RaisesOnCall(1))

    def test_info_and_timing(self, line_data):
        solution = bootstrap(line_data, 4, seed=0, n_jobs=2)
        assert solution.info['nboots'] == 4
        assert solution.info['n_jobs'] == 2
        assert solution.info['n'] == line_data.n
        assert solution.backend_name == 'cpu_lm'
        assert {'resampling', 'fitting', 'total_seconds'} <= set(solution.timing)

    def test_summary_text(self, line_data):
        solution = bootstrap(line_data, 5, seed=0)
        text = solution.summary()
        assert "nboots = 5" in text
        assert "BOOTSTRAP SUMMARY" in text
        assert repr(solution).startswith("BootstrapSolution(")


class TestBootstrapEndToEnd:
    """A long run recovers the generating line within its own dispersion."""

    def test_recovers_line(self, line_data):
        solution = bootstrap(line_data, 200, seed=42)
        stats = solution.stats()
        assert stats.n_valid >= 190
        assert abs(stats.slope.median - 2.0) <= max(3 * stats.slope.stdev, 0.2)
        assert abs(stats.intercept.median - 1.0) <= max(3 * stats.intercept.stdev, 0.3)
        assert stats.slope.stdev > 0
        assert stats.scatter.median >= 0
