"""Decoupling run configuration."""

from .schema import DecoupleConfig
from .loader import DEFAULTS, load_config, resolve_kernel

__all__ = ['DecoupleConfig', 'DEFAULTS', 'load_config', 'resolve_kernel']
