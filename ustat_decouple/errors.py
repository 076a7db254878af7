"""
Decoupling Errors

Every failure raised by ustat_decouple derives from DecouplingError.

    DecouplingError
    ├── InvalidInputError        bad collections, lengths, options
    ├── InsufficientPairsError   n < 2, zero pairs to average
    ├── KernelInvocationError    kernel raised / returned a non-real for (i, j)
    ├── BatchElementFailure      one batch element failed (wraps the above)
    └── ComputationCancelled     cancel signal or timeout tripped

PRINCIPLE: "Zero pairs is an error, never a NaN"
"""

from typing import Any, List, Optional


class DecouplingError(Exception):
    """Base class for all decoupling failures."""


class InvalidInputError(DecouplingError, ValueError):
    """Raised when collections or options are unusable."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        if self.errors:
            message = message + ":\n" + "\n".join(f"  ERROR: {e}" for e in self.errors)
        super().__init__(message)


class InsufficientPairsError(DecouplingError):
    """Raised when the sample size yields no index pairs."""

    def __init__(self, n: int, mode: Any):
        self.n = n
        self.mode = mode
        super().__init__(
            f"{getattr(mode, 'value', mode)} mode needs at least 2 items, got n={n} (0 pairs)"
        )


class KernelInvocationError(DecouplingError):
    """Raised when the kernel fails on pair (i, j)."""

    def __init__(self, i: int, j: int, cause: BaseException):
        self.i = i
        self.j = j
        self.cause = cause
        super().__init__(
            f"Kernel failed on pair ({i}, {j}): {type(cause).__name__}: {cause}"
        )


class BatchElementFailure(DecouplingError):
    """Raised when batch element `index` fails."""

    def __init__(self, index: int, cause: DecouplingError):
        self.index = index
        self.cause = cause
        super().__init__(f"Batch element {index} failed: {cause}")


class ComputationCancelled(DecouplingError):
    """Raised when a CancellationToken trips between chunks of work."""

    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(f"Computation {reason}")
