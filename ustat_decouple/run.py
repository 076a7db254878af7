"""
Decoupling Runner
=================

Config in, parquet out. Pure orchestration, no computation here.

    decouple.yaml → read samples → validate → decouple_u_stat → write

Usage:
    python -m ustat_decouple path/to/decouple.yaml
    python -m ustat_decouple path/to/dir --B 200 --n-jobs 4
    python -m ustat_decouple path/to/decouple.yaml --on-error nan --timeout 600
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from ustat_decouple.config import DecoupleConfig, load_config, resolve_kernel
from ustat_decouple.core.cancellation import CancellationToken
from ustat_decouple.core.decouple import DecoupleResult, decouple_u_stat
from ustat_decouple.core.kernel import create_kernel
from ustat_decouple.errors import DecouplingError
from ustat_decouple.io import read_samples, write_result
from ustat_decouple.validation import validate_input_data

logger = logging.getLogger(__name__)


def run(config: DecoupleConfig, verbose: bool = True) -> DecoupleResult:
    """
    Execute one decoupling run described by `config`.

    Returns:
        DecoupleResult (also written to config.output_dir)
    """
    t0 = time.time()

    fn = resolve_kernel(config.kernel)
    kernel = create_kernel(
        fn,
        config.kernel_name or getattr(fn, '__name__', 'Custom Kernel'),
        symmetric=config.effective_mode().value == 'symmetric',
    )

    ids, items = read_samples(
        str(config.samples),
        id_column=config.id_column,
        index_column=config.index_column,
        value_column=config.value_column,
    )
    if verbose:
        print(f"Samples: {len(items)} items from {config.samples}")

    report = validate_input_data(items, kernel)
    logger.info(f"Input validation passed ({len(report.warnings)} warnings)")

    cancel = CancellationToken(timeout=config.timeout) if config.timeout else None

    result = decouple_u_stat(
        items,
        kernel,
        B=config.B,
        seed=config.seed,
        mode=config.effective_mode(),
        n_jobs=config.n_jobs,
        on_error=config.on_error,
        chunk_size=config.chunk_size,
        cancel=cancel,
    )

    write_result(result, str(config.output_dir), verbose=verbose)

    if verbose:
        print(result.summary())
        print(f"Done in {time.time() - t0:.1f}s")

    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='ustat_decouple',
        description='Decouple a U-statistic over a sample file',
    )
    parser.add_argument('config', help='decouple.yaml or a directory containing it')
    parser.add_argument('--B', type=int, default=None, help='Number of decoupling iterations')
    parser.add_argument('--seed', type=int, default=None, help='Base seed')
    parser.add_argument('--n-jobs', type=int, default=None, help='joblib workers (-1 = all cores)')
    parser.add_argument('--on-error', choices=['raise', 'nan'], default=None,
                        help='Batch failure policy')
    parser.add_argument('--output-dir', default=None, help='Override output directory')
    parser.add_argument('--timeout', type=float, default=None, help='Wall-clock limit (seconds)')
    parser.add_argument('--quiet', action='store_true', help='Warnings only, no summary')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        config = load_config(
            args.config,
            B=args.B,
            seed=args.seed,
            n_jobs=args.n_jobs,
            on_error=args.on_error,
            timeout=args.timeout,
        )
        if args.output_dir:
            config.output_dir = Path(args.output_dir)
        run(config, verbose=not args.quiet)
    except (DecouplingError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0
