"""
Decoupled Sum Engine
====================

Mean kernel value over the index pairs of two paired collections:

    D(X, Y) = (1 / |P|) * Σ_{(i,j) ∈ P} K(X[i], Y[j])

where P is the pair set of the mode (see ustat_decouple.core.pairs).
With Y = X this is the ordinary U-statistic; with Y an independent copy
of X it is the decoupled statistic.

Execution:
- n_jobs == 1: one left-to-right running sum in enumeration order.
  Result is exactly sum(values) / count. Bit-reproducible.
- n_jobs != 1: rows split into blocks of chunk_size, each block summed
  locally on a joblib thread, partial (sum, count) reduced in block order.
  Same expected value; rounding may differ from the sequential sum.

Cost: O(n²) kernel calls per invocation. No memoization.
"""

import logging
import numbers
from collections.abc import Mapping
from typing import Any, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from joblib import Parallel, delayed

from ustat_decouple.core.cancellation import CancellationToken, check_cancel
from ustat_decouple.core.kernel import Kernel, as_kernel
from ustat_decouple.core.pairs import PairMode, iter_pairs, n_pairs, row_blocks
from ustat_decouple.errors import (
    InsufficientPairsError,
    InvalidInputError,
    KernelInvocationError,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64


class _BlockSum(NamedTuple):
    total: float
    count: int
    error: Optional[KernelInvocationError]


def collection_length(collection: Any, label: str) -> int:
    """Length of a random-access collection, or InvalidInputError."""
    if collection is None:
        raise InvalidInputError(f"{label} is missing (got None)")
    if isinstance(collection, Mapping) or not hasattr(collection, "__getitem__"):
        raise InvalidInputError(
            f"{label} must be an ordered, indexable sequence, got {type(collection).__name__}"
        )
    try:
        return len(collection)
    except TypeError:
        raise InvalidInputError(
            f"{label} has no length ({type(collection).__name__})"
        ) from None


def check_paired(x: Sequence, y: Sequence) -> int:
    """Return n for equal-length X and Y."""
    n = collection_length(x, "X")
    m = collection_length(y, "Y")
    if n != m:
        raise InvalidInputError(f"X and Y must have equal length, got len(X)={n}, len(Y)={m}")
    return n


def as_real(value: Any) -> float:
    """Convert one kernel output to float; reject non-scalars and non-reals."""
    if isinstance(value, numbers.Real):
        return float(value)
    arr = np.asarray(value)
    if arr.size != 1 or arr.dtype.kind not in "biuf":
        raise TypeError(
            f"kernel must return a single real number, got {type(value).__name__}"
            f" (dtype={arr.dtype}, size={arr.size})"
        )
    return float(arr.reshape(()))


def check_n_jobs(n_jobs: int) -> int:
    """joblib worker count: 1 = sequential, -1 = all cores, never 0."""
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, numbers.Integral) or n_jobs == 0:
        raise InvalidInputError(
            f"n_jobs must be a non-zero integer (1 = sequential, -1 = all cores), got {n_jobs!r}"
        )
    return int(n_jobs)


def _evaluate(kernel: Kernel, x: Sequence, y: Sequence, i: int, j: int) -> float:
    try:
        a, b = x[i], y[j]
    except (IndexError, KeyError) as exc:
        raise InvalidInputError(
            f"X and Y must be positionally indexable; lookup of pair ({i}, {j}) failed: {exc!r}"
        ) from exc
    try:
        return as_real(kernel.evaluate(a, b))
    except Exception as exc:
        raise KernelInvocationError(i, j, exc) from exc


def _accumulate_sequential(
    x: Sequence,
    y: Sequence,
    kernel: Kernel,
    mode: PairMode,
    n: int,
    blocks,
    cancel: Optional[CancellationToken],
) -> Tuple[float, int]:
    total = 0.0
    count = 0
    for rows in blocks:
        check_cancel(cancel)
        for i, j in iter_pairs(n, mode, rows):
            total += _evaluate(kernel, x, y, i, j)
            count += 1
    return total, count


def _accumulate_block(
    x: Sequence,
    y: Sequence,
    kernel: Kernel,
    mode: PairMode,
    n: int,
    rows: range,
    cancel: Optional[CancellationToken],
) -> _BlockSum:
    """Local (sum, count) for one row block; stops at the first kernel failure."""
    check_cancel(cancel)
    total = 0.0
    count = 0
    for i, j in iter_pairs(n, mode, rows):
        try:
            total += _evaluate(kernel, x, y, i, j)
        except KernelInvocationError as exc:
            return _BlockSum(0.0, 0, exc)
        count += 1
    return _BlockSum(total, count, None)


def _accumulate_parallel(
    x: Sequence,
    y: Sequence,
    kernel: Kernel,
    mode: PairMode,
    n: int,
    blocks,
    cancel: Optional[CancellationToken],
    n_jobs: int,
) -> Tuple[float, int]:
    logger.debug(f"Summing {len(blocks)} row blocks on n_jobs={n_jobs}")
    partials = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_accumulate_block)(x, y, kernel, mode, n, rows, cancel)
        for rows in blocks
    )

    # Reduce in block order; the earliest failing block wins
    total = 0.0
    count = 0
    for part in partials:
        if part.error is not None:
            raise part.error
        total += part.total
        count += part.count
    return total, count


def compute_decoupled_sum(
    x: Sequence,
    y: Sequence,
    kernel: Union[Kernel, Any],
    mode: Union[PairMode, str, bool] = PairMode.SYMMETRIC,
    *,
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel: Optional[CancellationToken] = None,
) -> float:
    """
    Mean kernel value over the pairs of X and Y.

    Args:
        x: Left collection, length n
        y: Right collection, length n (paired with x by index)
        kernel: Kernel object or two-argument callable
        mode: 'symmetric' (i < j) or 'asymmetric' (i != j)
        n_jobs: joblib workers for the pair loop (1 = sequential)
        chunk_size: Outer rows per block (cancellation / parallel granularity)
        cancel: Optional CancellationToken checked between blocks

    Returns:
        Mean of kernel(x[i], y[j]) over the enumerated pairs

    Raises:
        InvalidInputError: missing / non-sequence input, len(x) != len(y),
            n_jobs == 0
        InsufficientPairsError: n < 2
        KernelInvocationError: kernel failed on some (i, j)
        ComputationCancelled: token tripped
    """
    n_jobs = check_n_jobs(n_jobs)
    mode = PairMode.coerce(mode)
    kernel = as_kernel(kernel)
    n = check_paired(x, y)

    expected = n_pairs(n, mode)
    if expected == 0:
        raise InsufficientPairsError(n, mode)

    blocks = row_blocks(n, chunk_size)
    if n_jobs == 1 or len(blocks) == 1:
        total, count = _accumulate_sequential(x, y, kernel, mode, n, blocks, cancel)
    else:
        total, count = _accumulate_parallel(x, y, kernel, mode, n, blocks, cancel, n_jobs)

    logger.debug(f"Decoupled sum: n={n}, mode={mode.value}, pairs={count}")
    return total / count
