"""
Pair Enumeration
================

Index-pair enumeration for decoupled sums.

Modes:
- symmetric:  (i, j) with 0 <= i < j < n      → n(n-1)/2 pairs
- asymmetric: (i, j) with i != j, 0 <= i,j < n → n(n-1) pairs

Order is outer index ascending, inner index ascending. Callers rely on
this order for reproducible kernel side effects and summation rounding.

Normalization: symmetric mode averages over the upper triangle only and
applies NO factor of 2. For K(x, y) == K(y, x) the ordered-pair sum is
twice the upper-triangle sum and the ordered-pair count is twice the
upper-triangle count, so the mean is identical. Do not add a factor of 2.
"""

from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np

from ustat_decouple.errors import InvalidInputError


class PairMode(str, Enum):
    """Pair-enumeration strategy."""
    SYMMETRIC = "symmetric"      # i < j
    ASYMMETRIC = "asymmetric"    # i != j

    @classmethod
    def coerce(cls, mode: Union["PairMode", str, bool]) -> "PairMode":
        """Accept a PairMode, its string value, or a symmetric flag."""
        if isinstance(mode, cls):
            return mode
        if isinstance(mode, (bool, np.bool_)):
            return cls.SYMMETRIC if mode else cls.ASYMMETRIC
        try:
            return cls(str(mode).lower())
        except ValueError:
            raise InvalidInputError(
                f"Unknown mode {mode!r} (expected 'symmetric' or 'asymmetric')"
            ) from None


def n_pairs(n: int, mode: PairMode) -> int:
    """Number of pairs enumerated for n items."""
    if n < 2:
        return 0
    if mode is PairMode.SYMMETRIC:
        return n * (n - 1) // 2
    return n * (n - 1)


def iter_pairs(
    n: int,
    mode: PairMode,
    rows: Optional[range] = None,
) -> Iterator[Tuple[int, int]]:
    """
    Yield index pairs in enumeration order.

    Args:
        n: Collection length
        mode: PairMode
        rows: Restrict outer index i to this range (default: all rows)
    """
    if rows is None:
        rows = range(n)

    if mode is PairMode.SYMMETRIC:
        for i in rows:
            for j in range(i + 1, n):
                yield i, j
    else:
        for i in rows:
            for j in range(n):
                if i != j:
                    yield i, j


def row_blocks(n: int, chunk_size: int) -> List[range]:
    """Split outer rows 0..n-1 into contiguous blocks of chunk_size."""
    if chunk_size < 1:
        raise InvalidInputError(f"chunk_size must be >= 1, got {chunk_size}")
    return [range(start, min(start + chunk_size, n)) for start in range(0, n, chunk_size)]
