"""
Decoupling Run Config Schema

decouple.yaml → DecoupleConfig. Only the runner reads this; library
functions take explicit keyword arguments.

Usage:
    config = DecoupleConfig.from_yaml("decouple.yaml")
    config.B, config.kernel, config.effective_mode()

Example decouple.yaml:
    samples: sequences.parquet
    output_dir: output
    kernel: mylab.kernels:hamming_distance
    kernel_name: Hamming Distance
    symmetric: true
    B: 500
    seed: 123
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from ustat_decouple.core.pairs import PairMode


class DecoupleConfig(BaseModel):
    """Configuration for one decoupling run."""

    samples: Path = Field(..., description="Long-format parquet/csv of sample items")
    output_dir: Path = Field(default=Path("output"), description="Where results are written")

    kernel: str = Field(..., description="Import path of the kernel, 'module:function'")
    kernel_name: Optional[str] = Field(default=None, description="Label for results (default: function name)")
    symmetric: bool = Field(default=True, description="Kernel is symmetric in its arguments")
    mode: Optional[Literal["symmetric", "asymmetric"]] = Field(
        default=None,
        description="Pair mode override (default: from symmetric)",
    )

    B: int = Field(default=1000, ge=1, description="Number of decoupling iterations")
    seed: int = Field(default=123, description="Base seed; iteration b uses seed + b")
    n_jobs: int = Field(default=1, description="joblib workers (-1 = all cores)")
    chunk_size: int = Field(default=64, ge=1, description="Row block size per aggregate")
    on_error: Literal["raise", "nan"] = Field(default="raise", description="Batch failure policy")
    timeout: Optional[float] = Field(default=None, gt=0, description="Wall-clock limit in seconds")

    id_column: str = Field(default="sample_id")
    index_column: str = Field(default="position")
    value_column: str = Field(default="value")

    @field_validator("n_jobs")
    @classmethod
    def _check_n_jobs(cls, v: int) -> int:
        if v == 0:
            raise ValueError("n_jobs must be non-zero (1 = sequential, -1 = all cores)")
        return v

    @field_validator("kernel")
    @classmethod
    def _check_kernel(cls, v: str) -> str:
        if "." not in v and ":" not in v:
            raise ValueError(f"kernel must be an import path like 'module:function', got {v!r}")
        return v

    def effective_mode(self) -> PairMode:
        if self.mode is not None:
            return PairMode(self.mode)
        return PairMode.SYMMETRIC if self.symmetric else PairMode.ASYMMETRIC

    @classmethod
    def from_yaml(cls, path: str) -> "DecoupleConfig":
        """Load from a yaml file (paths taken as written)."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: str) -> None:
        """Save to a yaml file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, sort_keys=False)
