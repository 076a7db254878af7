"""
Validation Module

Validates sample collections and kernels before a decoupling run.

Exports:
    - validate_input_data: Check sample list + kernel probe
    - InputValidationReport: Result of validation
"""

from .input_validation import (
    validate_input_data,
    InputValidationReport,
)

__all__ = [
    'validate_input_data',
    'InputValidationReport',
]
