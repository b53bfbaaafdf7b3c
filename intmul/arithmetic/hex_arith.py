"""Schoolbook arithmetic on hexadecimal digit strings.

Strings are most-significant digit first, without sign or ``0x`` prefix.
Results use lowercase digits. Leading zeros are never stripped: callers
rely on fixed-width partial products and extra zeros do not change the
value.
"""

from intmul.exceptions import InvalidDigit

HEX_DIGITS = '0123456789abcdef'

_DIGIT_VALUES = {c: i for i, c in enumerate(HEX_DIGITS)}
_DIGIT_VALUES.update({c.upper(): i for i, c in enumerate(HEX_DIGITS) if c.isalpha()})


def digit_value(c: str) -> int:
    """Decode one hex digit (either case) to 0..15.

    Raises:
        InvalidDigit: if ``c`` is not one of ``[0-9a-fA-F]``
    """
    try:
        return _DIGIT_VALUES[c]
    except KeyError:
        raise InvalidDigit(c) from None


def digit_char(v: int) -> str:
    """Encode 0..15 as a lowercase hex digit."""
    assert 0 <= v < 16, f"digit out of range: {v}"
    return HEX_DIGITS[v]


def multiply_digits(a: str, b: str) -> str:
    """Product of two single hex digits, one or two lowercase digits."""
    product = digit_value(a) * digit_value(b)
    if product < 16:
        return digit_char(product)
    return digit_char(product // 16) + digit_char(product % 16)


def add_hex(s1: str, s2: str) -> str:
    """Add two hex strings of any lengths.

    The result has ``max(len(s1), len(s2))`` digits, or one more when the
    final carry is set.
    """
    i = len(s1) - 1
    j = len(s2) - 1
    carry = 0
    out = []

    while i >= 0 or j >= 0:
        d1 = digit_value(s1[i]) if i >= 0 else 0
        d2 = digit_value(s2[j]) if j >= 0 else 0
        total = d1 + d2 + carry
        carry = 1 if total > 15 else 0
        out.append(digit_char(total % 16))
        i -= 1
        j -= 1

    if carry:
        out.append('1')

    return ''.join(reversed(out))


def shift_left(s: str, n: int) -> str:
    """Multiply by 16**n by appending ``n`` zero digits."""
    if n < 0:
        raise ValueError(f"shift must be non-negative, got {n}")
    return s + '0' * n


def pad_leading_zero(s: str) -> str:
    """Prepend one '0' when the digit count is odd."""
    if len(s) % 2:
        return '0' + s
    return s
