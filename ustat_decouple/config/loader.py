"""
Config Loader: decouple.yaml into DecoupleConfig, plus kernel resolution.

Tries:
    1. path itself (if it's a .yaml/.yml file)
    2. path/decouple.yaml

Relative samples / output_dir resolve against the config file's directory.
"""

import importlib
from pathlib import Path
from typing import Any, Callable, Dict

import yaml
from pydantic import ValidationError

from ustat_decouple.config.schema import DecoupleConfig
from ustat_decouple.errors import InvalidInputError

CONFIG_FILENAME = "decouple.yaml"

DEFAULTS: Dict[str, Any] = {
    'output_dir': 'output',
    'symmetric': True,
    'B': 1000,
    'seed': 123,
    'n_jobs': 1,
    'chunk_size': 64,
    'on_error': 'raise',
}


def find_config(path: str) -> Path:
    p = Path(path)
    if p.is_file() and p.suffix in ('.yaml', '.yml'):
        return p
    candidate = p / CONFIG_FILENAME
    if not candidate.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} in {path}")
    return candidate


def load_config(path: str, **overrides: Any) -> DecoupleConfig:
    """
    Load and validate a decoupling config.

    Args:
        path: yaml file or directory containing decouple.yaml
        **overrides: Values replacing the file's (None values ignored)

    Returns:
        DecoupleConfig with absolute samples / output_dir
    """
    config_path = find_config(path)

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    # Merge: file overrides defaults, explicit overrides win
    merged = {**DEFAULTS, **raw}
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = DecoupleConfig.model_validate(merged)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidInputError(f"Invalid config {config_path}", errors) from exc

    base = config_path.parent
    if not config.samples.is_absolute():
        config.samples = (base / config.samples).resolve()
    if not config.output_dir.is_absolute():
        config.output_dir = (base / config.output_dir).resolve()

    return config


def resolve_kernel(path: str) -> Callable[[Any, Any], float]:
    """
    Import the kernel function named by `path`.

    Accepts 'package.module:function' or 'package.module.function'.
    """
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")

    if not module_name or not attr:
        raise InvalidInputError(f"Kernel path must name a module and a function, got {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidInputError(f"Cannot import kernel module {module_name!r}: {exc}") from exc

    fn = getattr(module, attr, None)
    if fn is None:
        raise InvalidInputError(f"Module {module_name!r} has no attribute {attr!r}")
    if not callable(fn):
        raise InvalidInputError(f"Kernel {path!r} is not callable")
    return fn
