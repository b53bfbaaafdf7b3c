"""Recursive split-compute-combine multiplication."""

import time
from typing import Optional

from intmul.arithmetic import add_hex, shift_left, multiply_digits
from intmul.domain import OperandPair, PartialProducts, split_tasks
from intmul.exceptions import EmptyInput, LengthMismatch, OddLengthError
from intmul.infrastructure.logging import get_logger, ROOT_NODE

from .channels import Spawner
from .dispatcher import Dispatcher

logger = get_logger(__name__)


def combine(partials: PartialProducts, n: int) -> str:
    """Recombine the four half-products of an ``n``-digit split.

    ``(HH << n) + (HL << n/2) + (LH << n/2) + LL``, added left to right.
    Leading zeros of the partial products are kept; they do not change
    the value.
    """
    result = ''
    for slot, product in partials.items():
        result = add_hex(result, shift_left(product, slot.shift(n)))
    return result


class Worker:
    """
    One node of the multiplication tree.

    Single digits are multiplied directly. Longer operands are split in
    half and the four half-products are delegated to new units through a
    Dispatcher; each of those units runs this same contract recursively.
    """

    def __init__(self, spawner: Spawner, node_id: Optional[str] = None):
        self.spawner = spawner
        self.node_id = node_id or ROOT_NODE

    def multiply(self, a: str, b: str) -> str:
        """
        Multiply two equal-length hex strings.

        Args:
            a: First operand, most significant digit first
            b: Second operand, same length as ``a``

        Returns:
            Lowercase hex product, unpadded; it may carry leading zeros

        Raises:
            OddLengthError: if the length is odd and greater than one
            ChildFailure, ChannelError: if any delegated unit fails
        """
        if not a or not b:
            raise EmptyInput("no input given")
        if len(a) != len(b):
            raise LengthMismatch("A and B don't have equal length")

        n = len(a)
        if n == 1:
            return multiply_digits(a, b)

        if n % 2:
            raise OddLengthError("input is not even")

        start = time.perf_counter()
        tasks = split_tasks(OperandPair(a, b))
        logger.debug(f"Splitting {n}-digit operands into four {n // 2}-digit products")

        partials = Dispatcher(self.spawner, self.node_id).run_four(tasks)
        result = combine(partials, n)

        logger.log_performance('multiply', time.perf_counter() - start,
                               digits=n, backend=self.spawner.backend)
        return result
