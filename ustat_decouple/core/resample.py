"""
Bootstrap copies of a sample collection.

Copy b is drawn with replacement from X using its own generator seeded
with seed + b, so copy b does not depend on B and any single copy can be
regenerated on its own.
"""

from typing import Any, List, Sequence

import numpy as np

from ustat_decouple.core.aggregate import collection_length
from ustat_decouple.errors import InvalidInputError


def bootstrap_indices(n: int, B: int, seed: int = 123) -> np.ndarray:
    """
    Resampling indices.

    Args:
        n: Sample size
        B: Number of copies
        seed: Base seed; copy b uses seed + b

    Returns:
        (B, n) int64 array of indices into the sample
    """
    if n < 1:
        raise InvalidInputError(f"Cannot resample an empty collection (n={n})")
    if B < 0:
        raise InvalidInputError(f"B must be >= 0, got {B}")

    out = np.empty((B, n), dtype=np.int64)
    for b in range(B):
        rng = np.random.default_rng(seed + b)
        out[b] = rng.integers(0, n, size=n)
    return out


def bootstrap_copies(x: Sequence[Any], B: int, seed: int = 123) -> List[List[Any]]:
    """B resampled copies of x, each a list the length of x."""
    n = collection_length(x, "X")
    indices = bootstrap_indices(n, B, seed)
    return [[x[k] for k in row] for row in indices]
