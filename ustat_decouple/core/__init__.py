"""
Decoupling Engines.

Pure computation: collections and a kernel in, numbers out. No file I/O.
"""

from .pairs import PairMode, iter_pairs, n_pairs
from .kernel import Kernel, UStatKernel, create_kernel, as_kernel
from .cancellation import CancellationToken
from .aggregate import compute_decoupled_sum
from .batch import BatchResult, compute_decoupled_sums
from .resample import bootstrap_indices, bootstrap_copies
from .decouple import DecoupleResult, decouple_u_stat, u_statistic

__all__ = [
    'PairMode',
    'iter_pairs',
    'n_pairs',
    'Kernel',
    'UStatKernel',
    'create_kernel',
    'as_kernel',
    'CancellationToken',
    'compute_decoupled_sum',
    'BatchResult',
    'compute_decoupled_sums',
    'bootstrap_indices',
    'bootstrap_copies',
    'DecoupleResult',
    'decouple_u_stat',
    'u_statistic',
]
