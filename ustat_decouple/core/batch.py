"""
Batch Decoupled Sums
====================

Repeats compute_decoupled_sum for one fixed X against B paired
collections (typically bootstrap copies). values[b] always belongs to
ys[b]; downstream code pairs results with per-b metadata by index.

Failure policy (on_error):
- "raise" (default): first failing element aborts the batch with
  BatchElementFailure(index, cause). Parallel runs report the lowest
  failing index.
- "nan": explicit partial mode. Failing elements become NaN in values,
  their errors are kept in failures.

Cancellation is not a per-element failure and always propagates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from joblib import Parallel, delayed

from ustat_decouple.core.aggregate import (
    DEFAULT_CHUNK_SIZE,
    check_n_jobs,
    collection_length,
    compute_decoupled_sum,
)
from ustat_decouple.core.cancellation import CancellationToken, check_cancel
from ustat_decouple.core.kernel import Kernel, as_kernel
from ustat_decouple.core.pairs import PairMode
from ustat_decouple.errors import (
    BatchElementFailure,
    ComputationCancelled,
    DecouplingError,
    InvalidInputError,
)

logger = logging.getLogger(__name__)

ON_ERROR_MODES = ("raise", "nan")


@dataclass(eq=False)
class BatchResult:
    """
    One decoupled sum per batch element, index-aligned with the input.

    Behaves as a read-only sequence of floats. Two results are equal when
    their values match (NaN == NaN) and the same indices failed.
    """
    values: np.ndarray
    failures: Dict[int, DecouplingError] = field(default_factory=dict)

    def __eq__(self, other):
        if not isinstance(other, BatchResult):
            return NotImplemented
        return (
            np.array_equal(self.values, other.values, equal_nan=True)
            and sorted(self.failures) == sorted(other.failures)
        )

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index):
        return self.values[index]

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self.values)

    @property
    def n_failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> np.ndarray:
        """Boolean mask of elements that computed successfully."""
        mask = np.ones(len(self.values), dtype=bool)
        if self.failures:
            mask[np.fromiter(self.failures, dtype=np.intp)] = False
        return mask

    def to_numpy(self) -> np.ndarray:
        return self.values.copy()

    def tolist(self) -> List[float]:
        return [float(v) for v in self.values]


def _compute_element(
    b: int,
    x: Sequence,
    y: Sequence,
    kernel: Kernel,
    mode: PairMode,
    chunk_size: int,
    cancel: Optional[CancellationToken],
) -> Tuple[int, float, Optional[DecouplingError]]:
    """One batch element; errors are returned, cancellation is raised."""
    check_cancel(cancel)
    try:
        value = compute_decoupled_sum(
            x, y, kernel, mode, n_jobs=1, chunk_size=chunk_size, cancel=cancel,
        )
    except ComputationCancelled:
        raise
    except DecouplingError as exc:
        return b, np.nan, exc
    return b, value, None


def compute_decoupled_sums(
    x: Sequence,
    ys: Sequence[Sequence],
    kernel: Union[Kernel, Any],
    mode: Union[PairMode, str, bool] = PairMode.SYMMETRIC,
    *,
    on_error: str = "raise",
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel: Optional[CancellationToken] = None,
) -> BatchResult:
    """
    Decoupled sum of X against every collection in ys.

    Args:
        x: Fixed left collection
        ys: B right collections, each the length of x
        kernel: Kernel object or two-argument callable (shared by all b)
        mode: Pair mode (shared by all b)
        on_error: "raise" (fail fast) or "nan" (record failure, continue)
        n_jobs: joblib workers across batch elements (1 = sequential)
        chunk_size: Row block size inside each aggregate
        cancel: Optional CancellationToken

    Returns:
        BatchResult with len == len(ys)

    Raises:
        BatchElementFailure: an element failed and on_error == "raise"
        InvalidInputError: ys missing / not a sequence, bad on_error, n_jobs == 0
        ComputationCancelled: token tripped
    """
    n_jobs = check_n_jobs(n_jobs)
    if on_error not in ON_ERROR_MODES:
        raise InvalidInputError(f"on_error must be one of {ON_ERROR_MODES}, got {on_error!r}")
    mode = PairMode.coerce(mode)
    kernel = as_kernel(kernel)
    B = collection_length(ys, "Ys")

    logger.info(f"Batch: B={B}, mode={mode.value}, on_error={on_error}, n_jobs={n_jobs}")

    values = np.full(B, np.nan, dtype=np.float64)
    failures: Dict[int, DecouplingError] = {}

    if n_jobs == 1 or B <= 1:
        for b in range(B):
            _, value, error = _compute_element(b, x, ys[b], kernel, mode, chunk_size, cancel)
            if error is not None:
                if on_error == "raise":
                    raise BatchElementFailure(b, error) from error
                failures[b] = error
            values[b] = value
    else:
        results = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_compute_element)(b, x, ys[b], kernel, mode, chunk_size, cancel)
            for b in range(B)
        )
        # joblib preserves input order, so the first error seen is the lowest index
        for b, value, error in results:
            if error is not None:
                if on_error == "raise":
                    raise BatchElementFailure(b, error) from error
                failures[b] = error
            values[b] = value

    if failures:
        first = min(failures)
        logger.warning(
            f"{len(failures)}/{B} batch elements failed (first: index {first}: {failures[first]})"
        )

    logger.info(f"Batch done: {B - len(failures)}/{B} computed")
    return BatchResult(values=values, failures=failures)
