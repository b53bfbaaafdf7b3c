"""Validation of raw operand lines read from a unit's inbound channel."""

import logging

from intmul.arithmetic import digit_value
from intmul.domain.operands import OperandPair
from intmul.exceptions import (
    EmptyInput, LengthMismatch, InvalidCharacter, InvalidDigit, OddLengthError
)

logger = logging.getLogger(__name__)


def strip_newline(line: str) -> str:
    """Remove exactly one trailing newline, if present."""
    if line.endswith('\n'):
        return line[:-1]
    return line


def validate_operands(raw_a: str, raw_b: str) -> OperandPair:
    """
    Turn two raw input lines into an operand pair.

    Checks run in order: empty input, length mismatch, invalid
    characters. Digit case is preserved.

    Args:
        raw_a: First line, optionally newline-terminated
        raw_b: Second line, optionally newline-terminated

    Returns:
        OperandPair with the trailing newlines removed

    Raises:
        EmptyInput: if either line is empty
        LengthMismatch: if the lines differ in length
        InvalidCharacter: if any character is not a hex digit
    """
    a = strip_newline(raw_a)
    b = strip_newline(raw_b)

    if not a or not b:
        raise EmptyInput("no input given")

    if len(a) != len(b):
        raise LengthMismatch("A and B don't have equal length")

    for ca, cb in zip(a, b):
        try:
            digit_value(ca)
            digit_value(cb)
        except InvalidDigit as e:
            raise InvalidCharacter("input contained invalid character", e) from e

    logger.debug(f"Validated operands of {len(a)} digits")
    return OperandPair(a, b)


def check_splittable(length: int) -> None:
    """Reject operand lengths that cannot be halved down to one digit.

    Raises:
        OddLengthError: if some level of the recursion would see an odd
            length greater than one
    """
    n = length
    while n > 1:
        if n % 2:
            raise OddLengthError(
                "input is not even" if n == length
                else f"input is not even: length {length} reaches odd length {n} after splitting"
            )
        n //= 2
