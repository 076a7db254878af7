"""
Reader: long-format sample files into item lists.

Schema (one row per element of an item):
    sample_id   item identifier (any type)
    position    element order within the item (optional)
    value       element value (numeric or string)

Items keep the order in which their ids first appear in the file.
"""

from pathlib import Path
from typing import Any, List, Tuple

import numpy as np
import polars as pl

from ustat_decouple.errors import InvalidInputError


def _read_frame(path: Path) -> pl.DataFrame:
    if path.suffix == '.parquet':
        return pl.read_parquet(path)
    if path.suffix == '.csv':
        return pl.read_csv(path)
    raise InvalidInputError(f"Unsupported sample file type {path.suffix!r} (use .parquet or .csv)")


def read_samples(
    path: str,
    id_column: str = "sample_id",
    index_column: str = "position",
    value_column: str = "value",
) -> Tuple[List[Any], List[np.ndarray]]:
    """
    Read sample items from a long-format parquet or csv file.

    Returns:
        (ids, items), where items[k] is a 1D numpy array of the elements of ids[k]
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    df = _read_frame(path)

    missing = [c for c in (id_column, value_column) if c not in df.columns]
    if missing:
        raise InvalidInputError(
            f"Sample file {path.name} is missing columns {missing} (has {df.columns})"
        )

    values = pl.col(value_column)
    if index_column in df.columns:
        values = values.sort_by(index_column)

    grouped = df.group_by(id_column, maintain_order=True).agg(values)

    ids = grouped[id_column].to_list()
    items = [np.asarray(v) for v in grouped[value_column].to_list()]
    return ids, items
