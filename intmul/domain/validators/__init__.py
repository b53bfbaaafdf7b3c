"""Validators for operand input."""

from .input_validator import validate_operands, check_splittable, strip_newline

__all__ = [
    'validate_operands',
    'check_splittable',
    'strip_newline'
]
