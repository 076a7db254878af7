"""
Kernel Capability

The kernel is the only caller-supplied logic: a function scoring two items
with a real number. The aggregator talks to it through a one-method
interface so any object with `evaluate(a, b)` works, including stateful
kernels.

Reentrancy: when n_jobs != 1 the kernel is called from several threads at
once and must be safe for that.
"""

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

from ustat_decouple.errors import InvalidInputError


@runtime_checkable
class Kernel(Protocol):
    """Anything that scores a pair of items."""

    def evaluate(self, a: Any, b: Any) -> float:
        ...


@dataclass(frozen=True)
class UStatKernel:
    """
    U-statistic kernel.

    Attributes:
        function: Callable taking two items, returning a real number
        name: Label carried into results
        symmetric: True if function(a, b) == function(b, a); selects the
            default pair mode of decouple_u_stat
    """
    function: Callable[[Any, Any], float]
    name: str = "Custom Kernel"
    symmetric: bool = True

    def evaluate(self, a: Any, b: Any) -> float:
        return self.function(a, b)

    def __call__(self, a: Any, b: Any) -> float:
        return self.function(a, b)


def create_kernel(
    function: Callable[[Any, Any], float],
    name: str,
    symmetric: bool = True,
) -> UStatKernel:
    """Wrap a two-argument function as a named UStatKernel."""
    if not callable(function):
        raise InvalidInputError(f"Kernel function must be callable, got {type(function).__name__}")
    return UStatKernel(function=function, name=name, symmetric=symmetric)


def as_kernel(kernel: Any) -> Kernel:
    """Return a Kernel for `kernel`, wrapping plain callables."""
    if isinstance(kernel, Kernel):
        return kernel
    if callable(kernel):
        return UStatKernel(function=kernel)
    raise InvalidInputError(
        f"Kernel must be a Kernel object or a function, got {type(kernel).__name__}"
    )


def kernel_name(kernel: Any) -> str:
    return getattr(kernel, "name", None) or "Custom Kernel"


def kernel_is_symmetric(kernel: Any) -> bool:
    return bool(getattr(kernel, "symmetric", True))
