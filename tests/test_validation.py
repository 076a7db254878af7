"""Tests for input validation."""

import numpy as np
import pytest

from ustat_decouple.core.kernel import create_kernel
from ustat_decouple.errors import InvalidInputError
from ustat_decouple.validation import InputValidationReport, validate_input_data


def diff(a, b):
    return float(np.abs(np.asarray(a) - np.asarray(b)).sum())


class TestValidateInputData:
    """Pre-flight checks on samples and kernel."""

    def test_valid_input(self):
        """Well-formed samples pass and record the probe value."""
        x = [np.array([1.0, 2.0]), np.array([2.0, 2.0]), np.array([0.0, 1.0])]
        report = validate_input_data(x, create_kernel(diff, "L1"))
        assert isinstance(report, InputValidationReport)
        assert report.valid
        assert report.n_samples == 3
        assert report.item_types == ['ndarray']
        assert report.probe_value == 1.0
        assert "PASSED" in report.summary()

    def test_too_small_raises(self):
        """Strict mode raises on a single sample."""
        with pytest.raises(InvalidInputError, match="at least 2"):
            validate_input_data([np.zeros(2)], diff)

    def test_non_strict_returns_report(self):
        """Non-strict mode reports instead of raising."""
        report = validate_input_data([np.zeros(2)], diff, strict=False)
        assert not report.valid
        assert report.errors
        assert "FAILED" in report.summary()

    def test_not_a_sequence(self):
        """Sets and None are not sample collections."""
        with pytest.raises(InvalidInputError):
            validate_input_data({1, 2, 3}, diff)
        report = validate_input_data(None, diff, strict=False)
        assert not report.valid

    def test_kernel_not_callable(self):
        """A string is not a kernel."""
        report = validate_input_data([1, 2], "diff", strict=False)
        assert any("must be a function" in e for e in report.errors)

    def test_kernel_returns_vector(self):
        """Kernel must return a single real number."""
        report = validate_input_data(
            [np.zeros(3), np.ones(3)], lambda a, b: a - b, strict=False,
        )
        assert not report.valid
        assert any("Kernel validation failed" in e for e in report.errors)

    def test_kernel_raises(self):
        """A failing kernel probe fails validation."""
        def broken(a, b):
            raise RuntimeError("no")

        with pytest.raises(InvalidInputError) as exc_info:
            validate_input_data([1, 2], broken)
        assert exc_info.value.errors

    def test_mixed_types_warn(self):
        """Mixed item types warn but stay valid."""
        report = validate_input_data([1, 2.5, 3], lambda a, b: a - b)
        assert report.valid
        assert report.warnings
        assert report.to_dict()['item_types'] == ['float', 'int']
