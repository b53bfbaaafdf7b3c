"""Pure hexadecimal digit-string arithmetic."""

from .hex_arith import (
    HEX_DIGITS,
    digit_value,
    digit_char,
    add_hex,
    shift_left,
    pad_leading_zero,
    multiply_digits,
)

__all__ = [
    'HEX_DIGITS',
    'digit_value',
    'digit_char',
    'add_hex',
    'shift_left',
    'pad_leading_zero',
    'multiply_digits',
]
