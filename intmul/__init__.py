"""
Concurrent divide-and-conquer multiplication of hexadecimal integers.

Two equal-length hex digit strings are split into halves, the four
half-products are computed by independent worker units (OS processes or
threads talking over byte pipes) and the partial results are recombined
with shifted hexadecimal addition.

Usage:
    from intmul.core import multiply_hex

    multiply_hex("1a2b", "3c4d", backend="thread")  # -> "0629f2ef"
"""

__version__ = "0.1.0"
