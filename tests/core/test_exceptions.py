"""
Tests for PyOrthoReg exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyOrthoRegError)
    - Diagnostic attributes on ConfigurationError and ConvergenceError
    - Default attribute values (None for optional attributes)
"""

import pytest

from pyorthoreg.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    DimensionError,
    NumericalError,
    PyOrthoRegError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyOrthoRegError."""

    def test_validation_error_is_base_error(self):
        with pytest.raises(PyOrthoRegError):
            raise ValidationError("bad input")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_configuration_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise ConfigurationError("nboots too small")

    def test_numerical_error_is_base_error(self):
        with pytest.raises(PyOrthoRegError):
            raise NumericalError("too few valid trials")

    def test_convergence_error_is_base_error(self):
        with pytest.raises(PyOrthoRegError):
            raise ConvergenceError("did not converge", iterations=100)

    def test_convergence_error_is_not_numerical_error(self):
        """ConvergenceError inherits from PyOrthoRegError, not NumericalError."""
        err = ConvergenceError("did not converge", iterations=100)
        assert not isinstance(err, NumericalError)

    def test_configuration_error_is_not_numerical_error(self):
        assert not isinstance(ConfigurationError("x"), NumericalError)


# ═══════════════════════════════════════════════════════════════════════
# ConfigurationError
# ═══════════════════════════════════════════════════════════════════════


class TestConfigurationError:
    """ConfigurationError names the offending setting."""

    def test_all_attributes(self):
        err = ConfigurationError("nboots must be >= 2", parameter="nboots", value=1)
        assert str(err) == "nboots must be >= 2"
        assert err.parameter == "nboots"
        assert err.value == 1

    def test_defaults_are_none(self):
        err = ConfigurationError("bad")
        assert err.parameter is None
        assert err.value is None

    def test_catchable_with_attributes(self):
        with pytest.raises(ConfigurationError) as exc_info:
            raise ConfigurationError("exists", parameter="overwrite", value="/tmp/run")
        assert exc_info.value.parameter == "overwrite"
        assert exc_info.value.value == "/tmp/run"


# ═══════════════════════════════════════════════════════════════════════
# ConvergenceError
# ═══════════════════════════════════════════════════════════════════════


class TestConvergenceError:
    """ConvergenceError carries iteration diagnostics."""

    def test_all_attributes(self):
        err = ConvergenceError(
            "fit did not converge",
            iterations=800,
            final_change=12.5,
            reason="max_nfev",
            threshold=1e-8,
        )
        assert str(err) == "fit did not converge"
        assert err.iterations == 800
        assert err.final_change == 12.5
        assert err.reason == "max_nfev"
        assert err.threshold == 1e-8

    def test_required_iterations(self):
        """iterations is required (positional)."""
        err = ConvergenceError("failed", 42)
        assert err.iterations == 42

    def test_defaults_are_none(self):
        err = ConvergenceError("failed", iterations=10)
        assert err.final_change is None
        assert err.reason is None
        assert err.threshold is None

    def test_zero_iterations(self):
        err = ConvergenceError("immediate failure", iterations=0)
        assert err.iterations == 0
