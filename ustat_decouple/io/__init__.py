"""Sample file reading and result writing (polars parquet/csv, yaml)."""

from .reader import read_samples
from .writer import write_result, DISTRIBUTION_FILENAME, SUMMARY_FILENAME

__all__ = ['read_samples', 'write_result', 'DISTRIBUTION_FILENAME', 'SUMMARY_FILENAME']
