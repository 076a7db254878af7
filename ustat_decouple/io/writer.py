"""
Writer: all result writes go through here.

Outputs:
    decoupled_distribution.parquet   iteration, decoupled_stat
    decouple_summary.yaml            scalar fields of the result
"""

import polars as pl
import yaml
from pathlib import Path

DISTRIBUTION_FILENAME = 'decoupled_distribution.parquet'
SUMMARY_FILENAME = 'decouple_summary.yaml'


def _safe_write(df: pl.DataFrame, path: Path, verbose: bool = True) -> bool:
    """
    Guard against writing invalid parquet files.

    Returns True if a file was written, False if skipped.
    """
    if df is None:
        return False

    if len(df.columns) == 0:
        if verbose:
            print(f"  !! Skipped {path} (empty schema, 0 columns)")
        return False

    # 0 rows still writes a schema-only parquet
    df.write_parquet(str(path))
    return True


def write_result(result, output_dir: str, verbose: bool = True) -> Path:
    """
    Write a DecoupleResult to output_dir.

    Returns:
        Path to the distribution parquet
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    dist_path = out / DISTRIBUTION_FILENAME
    _safe_write(result.to_frame(), dist_path, verbose=verbose)

    with open(out / SUMMARY_FILENAME, 'w') as f:
        yaml.safe_dump(result.to_dict(), f, sort_keys=False)

    if verbose:
        print(f"  {DISTRIBUTION_FILENAME}: {len(result.decoupled_distribution):,} rows")
        print(f"  {SUMMARY_FILENAME}")

    return dist_path
