"""
ustat_decouple: probabilistic decoupling for U-statistics.

Public API:
    from ustat_decouple import compute_decoupled_sum, compute_decoupled_sums

    compute_decoupled_sum(X, Y, kernel, "symmetric")     → float
    compute_decoupled_sums(X, Ys, kernel, "symmetric")   → BatchResult
    decouple_u_stat(X, kernel, B=1000, seed=123)         → DecoupleResult

Layers:
    ustat_decouple.core        Engines. Collections + kernel in, numbers out
    ustat_decouple.validation  Pre-flight checks (sample list, kernel probe)
    ustat_decouple.config      decouple.yaml schema and loader
    ustat_decouple.io          Sample reader, result writer (parquet, yaml)
    ustat_decouple.run         Runner / CLI (python -m ustat_decouple)
"""

from ustat_decouple.core import (
    PairMode,
    Kernel,
    UStatKernel,
    create_kernel,
    CancellationToken,
    compute_decoupled_sum,
    BatchResult,
    compute_decoupled_sums,
    bootstrap_indices,
    bootstrap_copies,
    DecoupleResult,
    decouple_u_stat,
    u_statistic,
)
from ustat_decouple.errors import (
    DecouplingError,
    InvalidInputError,
    InsufficientPairsError,
    KernelInvocationError,
    BatchElementFailure,
    ComputationCancelled,
)
from ustat_decouple.validation import validate_input_data, InputValidationReport

__all__ = [
    "PairMode",
    "Kernel",
    "UStatKernel",
    "create_kernel",
    "CancellationToken",
    "compute_decoupled_sum",
    "BatchResult",
    "compute_decoupled_sums",
    "bootstrap_indices",
    "bootstrap_copies",
    "DecoupleResult",
    "decouple_u_stat",
    "u_statistic",
    "DecouplingError",
    "InvalidInputError",
    "InsufficientPairsError",
    "KernelInvocationError",
    "BatchElementFailure",
    "ComputationCancelled",
    "validate_input_data",
    "InputValidationReport",
]
