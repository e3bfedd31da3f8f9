"""
Tests for the Result[P] envelope and the section Timer.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - has_warning() method
    - Timer sections accumulate and land in the timing dict
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pyorthoreg.core.compute import Timer, timed
from pyorthoreg.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def make_result(warnings=()):
    return Result(
        params=FakeParams(value=1.0),
        info={"method": "lm"},
        timing=None,
        backend_name="cpu_lm",
        warnings=warnings,
    )


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = Result(
            params=FakeParams(value=42.0),
            info={"method": "lm", "converged": True},
            timing={"total_seconds": 0.01},
            backend_name="cpu_lm",
        )
        assert result.params.value == 42.0
        assert result.info["converged"] is True
        assert result.timing["total_seconds"] == 0.01
        assert result.backend_name == "cpu_lm"

    def test_warnings_default_empty(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name="cpu_lm")
        assert result.warnings == ()


class TestImmutability:

    def test_cannot_set_params(self):
        with pytest.raises(FrozenInstanceError):
            make_result().params = FakeParams(2.0)

    def test_cannot_set_warnings(self):
        with pytest.raises(FrozenInstanceError):
            make_result().warnings = ("x",)


class TestHasWarning:

    def test_no_warnings_returns_false(self):
        assert not make_result().has_warning("converge")

    def test_substring_match(self):
        result = make_result(("Minimizer did not converge after 600 evaluations",))
        assert result.has_warning("did not converge")

    def test_no_match(self):
        result = make_result(("Jacobian is rank-deficient",))
        assert not result.has_warning("converge")


# ═══════════════════════════════════════════════════════════════════════
# Timer
# ═══════════════════════════════════════════════════════════════════════


class TestTimer:

    def test_sections_recorded(self):
        timer = Timer()
        timer.start()
        with timer.section("minimization"):
            pass
        timer.stop()
        result = timer.result()
        assert set(result) == {"total_seconds", "minimization"}
        assert result["total_seconds"] >= result["minimization"] >= 0

    def test_repeated_sections_accumulate(self):
        timer = Timer()
        timer.start()
        for _ in range(3):
            with timer.section("fitting"):
                pass
        timer.stop()
        assert list(timer.result()) == ["total_seconds", "fitting"]

    def test_stop_before_start(self):
        with pytest.raises(RuntimeError):
            Timer().stop()

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError):
            timer.result()

    def test_timed_context(self):
        with timed() as timer:
            pass
        assert timer.result()["total_seconds"] >= 0
