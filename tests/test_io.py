"""Tests for sample reading and result writing."""

import numpy as np
import polars as pl
import pytest
import yaml

from ustat_decouple.core.decouple import DecoupleResult
from ustat_decouple.errors import InvalidInputError
from ustat_decouple.io import (
    DISTRIBUTION_FILENAME,
    SUMMARY_FILENAME,
    read_samples,
    write_result,
)
from ustat_decouple.io.writer import _safe_write


def _make_samples(path, shuffled=False):
    """Three 3-element numeric items, long format."""
    rows = []
    for sid, values in (("b", [1.0, 2.0, 3.0]), ("a", [4.0, 5.0, 6.0]), ("c", [7.0, 8.0, 9.0])):
        for pos, v in enumerate(values):
            rows.append({"sample_id": sid, "position": pos, "value": v})
    if shuffled:
        rows = rows[::-1]
    df = pl.DataFrame(rows)
    if path.suffix == ".csv":
        df.write_csv(path)
    else:
        df.write_parquet(path)
    return df


class TestReadSamples:
    """Long-format sample files into item lists."""

    def test_parquet(self, tmp_path):
        """Items keep first-appearance order of their ids."""
        path = tmp_path / "samples.parquet"
        _make_samples(path)
        ids, items = read_samples(str(path))
        assert ids == ["b", "a", "c"]
        np.testing.assert_array_equal(items[0], [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(items[2], [7.0, 8.0, 9.0])

    def test_position_orders_elements(self, tmp_path):
        """Elements are sorted by position within each item."""
        path = tmp_path / "samples.parquet"
        _make_samples(path, shuffled=True)
        ids, items = read_samples(str(path))
        assert ids == ["c", "a", "b"]
        np.testing.assert_array_equal(items[2], [1.0, 2.0, 3.0])

    def test_csv(self, tmp_path):
        """csv reads the same schema."""
        path = tmp_path / "samples.csv"
        _make_samples(path)
        ids, items = read_samples(str(path))
        assert len(items) == 3

    def test_string_values(self, tmp_path):
        """String elements and no position column."""
        path = tmp_path / "dna.parquet"
        pl.DataFrame({
            "sample_id": ["s1"] * 4 + ["s2"] * 4,
            "value": list("ACGT") + list("ACGA"),
        }).write_parquet(path)
        _, items = read_samples(str(path))
        assert int((items[0] != items[1]).sum()) == 1

    def test_missing_file(self, tmp_path):
        """Missing file is a FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_samples(str(tmp_path / "nope.parquet"))

    def test_missing_column(self, tmp_path):
        """id and value columns are required."""
        path = tmp_path / "samples.parquet"
        pl.DataFrame({"id": [1, 2], "value": [1.0, 2.0]}).write_parquet(path)
        with pytest.raises(InvalidInputError):
            read_samples(str(path))

    def test_unsupported_suffix(self, tmp_path):
        """Only parquet and csv are read."""
        path = tmp_path / "samples.json"
        path.write_text("[]")
        with pytest.raises(InvalidInputError):
            read_samples(str(path))


class TestWriteResult:
    """Distribution parquet and summary yaml."""

    def test_outputs(self, tmp_path):
        """Both files are written with the result's fields."""
        result = DecoupleResult(
            original_stat=2.5,
            decoupled_distribution=np.array([2.0, 3.0, np.nan]),
            kernel_name="L2",
            n_samples=4,
            B=3,
            failed_indices=[2],
        )
        path = write_result(result, str(tmp_path / "out"), verbose=False)
        assert path.name == DISTRIBUTION_FILENAME

        df = pl.read_parquet(path)
        assert df.height == 3
        assert df["iteration"].to_list() == [0, 1, 2]

        summary = yaml.safe_load((tmp_path / "out" / SUMMARY_FILENAME).read_text())
        assert summary["original_stat"] == 2.5
        assert summary["failed_indices"] == [2]
        assert summary["kernel_name"] == "L2"


class TestSafeWrite:
    """Parquet write guard."""

    def test_skips_frame_without_columns(self, tmp_path, capsys):
        """0-column frames are skipped, not written."""
        path = tmp_path / "empty.parquet"
        assert _safe_write(pl.DataFrame(), path) is False
        assert not path.exists()
        assert "Skipped" in capsys.readouterr().out

    def test_skips_none(self, tmp_path):
        """None is not a frame."""
        assert _safe_write(None, tmp_path / "none.parquet") is False

    def test_zero_rows_keeps_schema(self, tmp_path):
        """0-row frames write a schema-only parquet."""
        path = tmp_path / "rows.parquet"
        df = pl.DataFrame({"iteration": [], "decoupled_stat": []},
                          schema={"iteration": pl.Int64, "decoupled_stat": pl.Float64})
        assert _safe_write(df, path) is True
        back = pl.read_parquet(path)
        assert back.height == 0
        assert back.columns == ["iteration", "decoupled_stat"]
