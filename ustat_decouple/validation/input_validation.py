"""
Input Data Validation

Pre-flight checks on a sample collection and kernel before a decoupling
run: the sample must be an indexable sequence of at least 2 items, the
kernel must be callable and must return one real number on (x[0], x[1]).

PRINCIPLE: "Check before compute, not after B iterations"

Usage:
    from ustat_decouple.validation import validate_input_data

    report = validate_input_data(sequences, hamming)   # raises on errors
    report = validate_input_data(sequences, hamming, strict=False)
    print(report.summary())
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ustat_decouple.core.aggregate import as_real, collection_length
from ustat_decouple.errors import InvalidInputError

logger = logging.getLogger(__name__)


@dataclass
class InputValidationReport:
    """Report from input validation."""

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    n_samples: int = 0
    item_types: List[str] = field(default_factory=list)
    probe_value: Optional[float] = None

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            "=" * 60,
            "INPUT VALIDATION REPORT",
            "=" * 60,
            "",
            f"Samples: {self.n_samples}",
            f"Item types: {', '.join(self.item_types) or '-'}",
        ]
        if self.probe_value is not None:
            lines.append(f"Kernel probe K(x[0], x[1]) = {self.probe_value:.4f}")
        lines.append("")

        if self.errors:
            lines.append("ERRORS:")
            for e in self.errors:
                lines.append(f"  - {e}")
            lines.append("")

        if self.warnings:
            lines.append("WARNINGS:")
            for w in self.warnings:
                lines.append(f"  - {w}")
            lines.append("")

        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Status: {status}")
        lines.append("=" * 60)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict."""
        return {
            'valid': self.valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'n_samples': self.n_samples,
            'item_types': self.item_types,
            'probe_value': self.probe_value,
        }


def _kernel_function(kernel: Any):
    """Callable behind a kernel object, or None."""
    evaluate = getattr(kernel, "evaluate", None)
    if callable(evaluate):
        return evaluate
    if callable(kernel):
        return kernel
    return None


def validate_input_data(
    x: Any,
    kernel: Any,
    strict: bool = True,
) -> InputValidationReport:
    """
    Validate a sample collection and kernel for decoupling.

    Args:
        x: Sample collection
        kernel: Kernel object or callable
        strict: Raise InvalidInputError when any error is found

    Returns:
        InputValidationReport
    """
    report = InputValidationReport()

    try:
        report.n_samples = collection_length(x, "Input data")
    except InvalidInputError as exc:
        report.errors.append(str(exc))
        report.valid = False
        if strict:
            raise InvalidInputError("Input validation failed", report.errors) from exc
        return report

    if report.n_samples < 2:
        report.errors.append(f"Sample size must be at least 2, got {report.n_samples}")

    types = sorted({type(x[i]).__name__ for i in range(report.n_samples)})
    report.item_types = types
    if len(types) > 1:
        msg = f"Input elements have different types: {', '.join(types)}"
        report.warnings.append(msg)
        logger.warning(msg)

    fn = _kernel_function(kernel)
    if fn is None:
        report.errors.append(f"Kernel function must be a function, got {type(kernel).__name__}")
    elif report.n_samples >= 2:
        # Probe on the first two elements
        try:
            report.probe_value = as_real(fn(x[0], x[1]))
        except Exception as exc:
            report.errors.append(f"Kernel validation failed: {exc}")

    report.valid = not report.errors

    if strict and report.errors:
        raise InvalidInputError("Input validation failed", report.errors)

    return report
