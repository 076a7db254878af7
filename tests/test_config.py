"""Tests for decouple.yaml loading and kernel resolution."""

import math
from pathlib import Path

import pytest
import yaml

from ustat_decouple.config import DecoupleConfig, load_config, resolve_kernel
from ustat_decouple.core.pairs import PairMode
from ustat_decouple.errors import InvalidInputError


def _write_config(path: Path, **fields) -> Path:
    data = {'samples': 'samples.parquet', 'kernel': 'math:dist'}
    data.update(fields)
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadConfig:
    """decouple.yaml lookup, defaults, overrides and validation."""

    def test_defaults(self, tmp_path):
        """Missing keys take the documented defaults."""
        cfg_path = _write_config(tmp_path / "decouple.yaml")
        config = load_config(str(cfg_path))
        assert config.B == 1000
        assert config.seed == 123
        assert config.n_jobs == 1
        assert config.on_error == "raise"
        assert config.effective_mode() is PairMode.SYMMETRIC

    def test_relative_paths_resolve_against_config_dir(self, tmp_path):
        """samples and output_dir are relative to the yaml file."""
        cfg_path = _write_config(tmp_path / "decouple.yaml", output_dir="out")
        config = load_config(str(cfg_path))
        assert config.samples == (tmp_path / "samples.parquet").resolve()
        assert config.output_dir == (tmp_path / "out").resolve()

    def test_directory_lookup(self, tmp_path):
        """A directory resolves to its decouple.yaml."""
        _write_config(tmp_path / "decouple.yaml", B=50)
        assert load_config(str(tmp_path)).B == 50

    def test_missing_config(self, tmp_path):
        """Directory without decouple.yaml."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path))

    def test_overrides(self, tmp_path):
        """Explicit overrides win; None overrides are ignored."""
        cfg_path = _write_config(tmp_path / "decouple.yaml", B=50)
        config = load_config(str(cfg_path), B=7, seed=None, on_error="nan")
        assert config.B == 7
        assert config.seed == 123
        assert config.on_error == "nan"

    def test_mode_override(self, tmp_path):
        """mode takes precedence over the symmetric flag."""
        cfg_path = _write_config(tmp_path / "decouple.yaml", symmetric=True, mode="asymmetric")
        assert load_config(str(cfg_path)).effective_mode() is PairMode.ASYMMETRIC

    def test_asymmetric_from_flag(self, tmp_path):
        """symmetric: false selects asymmetric pairs."""
        cfg_path = _write_config(tmp_path / "decouple.yaml", symmetric=False)
        assert load_config(str(cfg_path)).effective_mode() is PairMode.ASYMMETRIC

    @pytest.mark.parametrize("field,value", [
        ("B", 0),
        ("n_jobs", 0),
        ("chunk_size", 0),
        ("on_error", "skip"),
        ("timeout", -1.0),
        ("kernel", "dist"),
    ])
    def test_invalid_values(self, tmp_path, field, value):
        """Schema violations surface as InvalidInputError with details."""
        cfg_path = _write_config(tmp_path / "decouple.yaml", **{field: value})
        with pytest.raises(InvalidInputError) as exc_info:
            load_config(str(cfg_path))
        assert exc_info.value.errors

    def test_yaml_round_trip(self, tmp_path):
        """to_yaml output loads back through from_yaml."""
        config = DecoupleConfig(samples=Path("s.parquet"), kernel="math:dist", B=9)
        config.to_yaml(str(tmp_path / "c.yaml"))
        loaded = DecoupleConfig.from_yaml(str(tmp_path / "c.yaml"))
        assert loaded.B == 9
        assert loaded.kernel == "math:dist"


class TestResolveKernel:
    """Import-path kernel lookup."""

    def test_colon_path(self):
        """module:function form."""
        assert resolve_kernel("math:dist") is math.dist

    def test_dotted_path(self):
        """module.function form."""
        assert resolve_kernel("math.dist") is math.dist

    def test_missing_module(self):
        """Unimportable module."""
        with pytest.raises(InvalidInputError):
            resolve_kernel("no_such_module_xyz:kernel")

    def test_missing_attribute(self):
        """Module without the named function."""
        with pytest.raises(InvalidInputError):
            resolve_kernel("math:no_such_function")

    def test_not_callable(self):
        """Attribute exists but is not callable."""
        with pytest.raises(InvalidInputError):
            resolve_kernel("math:pi")
