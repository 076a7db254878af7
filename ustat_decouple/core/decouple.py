"""
Decoupling Engine
=================

Probabilistic decoupling of a U-statistic (de la Peña & Montgomery-Smith).

Steps:
    1. Original statistic: U = D(X, X), the mean kernel over pairs of X
    2. For b = 1..B draw an independent copy Y_b of X (bootstrap)
    3. Decoupled statistic: D(X, Y_b) for each b
    4. Distribution {D(X, Y_b)} approximates the statistic under independence

Inference on the distribution (standard errors, intervals, tests) is left
to the caller.

References:
    de la Peña & Montgomery-Smith (1995) "Decoupling inequalities for the
        tail probabilities of multivariate U-statistics"
    de la Peña & Giné (1999) "Decoupling: From Dependence to Independence"
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import polars as pl

from ustat_decouple.core.aggregate import (
    DEFAULT_CHUNK_SIZE,
    collection_length,
    compute_decoupled_sum,
)
from ustat_decouple.core.batch import compute_decoupled_sums
from ustat_decouple.core.cancellation import CancellationToken
from ustat_decouple.core.kernel import (
    Kernel,
    as_kernel,
    kernel_is_symmetric,
    kernel_name,
)
from ustat_decouple.core.pairs import PairMode
from ustat_decouple.core.resample import bootstrap_copies
from ustat_decouple.errors import InsufficientPairsError, InvalidInputError

logger = logging.getLogger(__name__)

METHOD = "Friedman-de la Pena Decoupling"


@dataclass(eq=False)
class DecoupleResult:
    """Original U-statistic plus its decoupled distribution."""

    original_stat: float
    decoupled_distribution: np.ndarray
    kernel_name: str = "Custom Kernel"
    method: str = METHOD
    mode: str = PairMode.SYMMETRIC.value
    n_samples: int = 0
    B: int = 0
    seed: int = 123
    failed_indices: list = field(default_factory=list)

    def __eq__(self, other):
        if not isinstance(other, DecoupleResult):
            return NotImplemented
        # NaN marks failed iterations, so NaN compares equal to NaN
        return (
            np.array_equal(
                np.asarray(self.original_stat), np.asarray(other.original_stat), equal_nan=True,
            )
            and np.array_equal(
                self.decoupled_distribution, other.decoupled_distribution, equal_nan=True,
            )
            and (self.kernel_name, self.method, self.mode, self.n_samples, self.B, self.seed)
            == (other.kernel_name, other.method, other.mode, other.n_samples, other.B, other.seed)
            and list(self.failed_indices) == list(other.failed_indices)
        )

    @property
    def n_failed(self) -> int:
        return len(self.failed_indices)

    @property
    def decoupled_mean(self) -> float:
        finite = self.decoupled_distribution[np.isfinite(self.decoupled_distribution)]
        return float(np.mean(finite)) if len(finite) else np.nan

    def summary(self) -> str:
        """Human-readable summary."""
        finite = self.decoupled_distribution[np.isfinite(self.decoupled_distribution)]
        lines = [
            "=" * 60,
            "DECOUPLING RESULT",
            "=" * 60,
            "",
            f"Kernel: {self.kernel_name}",
            f"Method: {self.method}",
            f"Mode: {self.mode}",
            f"Samples: {self.n_samples}",
            f"Iterations (B): {self.B}  seed={self.seed}",
            "",
            f"Original U-statistic: {self.original_stat:.4f}",
            f"Decoupled mean:       {self.decoupled_mean:.4f}",
        ]
        if len(finite):
            lines.append(f"Decoupled range:      [{np.min(finite):.4f}, {np.max(finite):.4f}]")
        if self.failed_indices:
            lines.append("")
            lines.append(f"FAILED iterations ({self.n_failed}): {self.failed_indices[:10]}")
        lines.append("=" * 60)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Scalar fields as a serializable dict (distribution excluded)."""
        return {
            'original_stat': float(self.original_stat),
            'decoupled_mean': self.decoupled_mean,
            'kernel_name': self.kernel_name,
            'method': self.method,
            'mode': self.mode,
            'n_samples': int(self.n_samples),
            'B': int(self.B),
            'seed': int(self.seed),
            'n_failed': self.n_failed,
            'failed_indices': [int(b) for b in self.failed_indices],
        }

    def to_frame(self) -> pl.DataFrame:
        """Decoupled distribution as a frame: iteration, decoupled_stat."""
        return pl.DataFrame({
            'iteration': np.arange(len(self.decoupled_distribution), dtype=np.int64),
            'decoupled_stat': np.asarray(self.decoupled_distribution, dtype=np.float64),
        })


def u_statistic(
    x: Sequence,
    kernel: Union[Kernel, Any],
    mode: Union[PairMode, str, bool, None] = None,
    *,
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel: Optional[CancellationToken] = None,
) -> float:
    """
    U-statistic of x: mean kernel over pairs of x with itself.

    mode defaults from the kernel's symmetric flag.
    """
    if mode is None:
        mode = kernel_is_symmetric(kernel)
    return compute_decoupled_sum(
        x, x, kernel, mode, n_jobs=n_jobs, chunk_size=chunk_size, cancel=cancel,
    )


def decouple_u_stat(
    x: Sequence,
    kernel: Union[Kernel, Any],
    B: int = 1000,
    seed: int = 123,
    mode: Union[PairMode, str, bool, None] = None,
    *,
    n_jobs: int = 1,
    on_error: str = "raise",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel: Optional[CancellationToken] = None,
) -> DecoupleResult:
    """
    Decouple a U-statistic using B independent bootstrap copies of x.

    Args:
        x: Sample collection (sequences, expression profiles, ...)
        kernel: UStatKernel / Kernel object, or a two-argument callable
        B: Number of decoupling iterations
        seed: Base seed (copy b uses seed + b)
        mode: Pair mode; default from kernel.symmetric (callables: symmetric)
        n_jobs: joblib workers across iterations
        on_error: "raise" or "nan" (see compute_decoupled_sums)
        chunk_size: Row block size inside each aggregate
        cancel: Optional CancellationToken

    Returns:
        DecoupleResult
    """
    n = collection_length(x, "X")
    if B < 1:
        raise InvalidInputError(f"B must be >= 1, got {B}")

    if mode is None:
        mode = kernel_is_symmetric(kernel)
    mode = PairMode.coerce(mode)
    if n < 2:
        raise InsufficientPairsError(n, mode)

    name = kernel_name(kernel)
    kernel = as_kernel(kernel)

    logger.info(f"Decoupling '{name}': n={n}, B={B}, mode={mode.value}, seed={seed}")

    original = compute_decoupled_sum(
        x, x, kernel, mode, n_jobs=n_jobs, chunk_size=chunk_size, cancel=cancel,
    )

    copies = bootstrap_copies(x, B, seed)
    batch = compute_decoupled_sums(
        x, copies, kernel, mode,
        on_error=on_error, n_jobs=n_jobs, chunk_size=chunk_size, cancel=cancel,
    )

    result = DecoupleResult(
        original_stat=original,
        decoupled_distribution=batch.values,
        kernel_name=name,
        mode=mode.value,
        n_samples=n,
        B=B,
        seed=seed,
        failed_indices=sorted(batch.failures),
    )
    logger.info(f"Decoupling done: original={original:.4f}, decoupled_mean={result.decoupled_mean:.4f}")
    return result
