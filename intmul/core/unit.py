"""Entry contract shared by the top-level program and every worker unit."""

from typing import BinaryIO, Optional, TextIO

from intmul.arithmetic import pad_leading_zero
from intmul.config import Config, defaults
from intmul.domain.validators import validate_operands, check_splittable
from intmul.exceptions import IntmulError, AllocationFailure, ChannelError, format_diagnostic
from intmul.infrastructure.logging import get_logger, node_scope, ROOT_NODE

from .channels import (
    Spawner, read_line, write_line, make_spawner, EXIT_SUCCESS, EXIT_FAILURE
)
from .worker import Worker

logger = get_logger(__name__)


def report_failure(errstream: TextIO, program: str, error: IntmulError) -> None:
    """Write one diagnostic line to the error channel."""
    errstream.write(format_diagnostic(program, error.message, error.original_exception) + '\n')
    errstream.flush()


def run_unit(instream: BinaryIO,
             outstream: BinaryIO,
             errstream: TextIO,
             spawner: Spawner,
             node_id: Optional[str] = None,
             pad: bool = False) -> int:
    """
    Run one computation unit.

    Reads two operand lines from ``instream``, multiplies them (splitting
    across further units through ``spawner``) and writes the product as
    one line to ``outstream``. On failure a single diagnostic line goes to
    ``errstream`` and nothing is written to ``outstream``.

    Args:
        instream: Binary stream with the two operand lines
        outstream: Binary stream receiving the result line
        errstream: Text stream for diagnostics
        spawner: Creates the sub-units of a split
        node_id: Position in the recursion tree; None for the top level
        pad: Prepend a zero to odd-length results (top level only)

    Returns:
        EXIT_SUCCESS or EXIT_FAILURE
    """
    top_level = node_id is None
    node_id = node_id or ROOT_NODE
    program = spawner.program

    with node_scope(node_id, unit=spawner.backend):
        try:
            try:
                raw_a = read_line(instream, spawner.buffer_size)
                raw_b = read_line(instream, spawner.buffer_size)
            except (OSError, ValueError) as e:
                raise ChannelError("error reading data from stdin", e) from e

            pair = validate_operands(raw_a, raw_b)
            if top_level:
                check_splittable(len(pair))

            product = Worker(spawner, node_id).multiply(pair.a, pair.b)
            if pad:
                product = pad_leading_zero(product)

            try:
                write_line(outstream, product)
            except (OSError, ValueError) as e:
                raise ChannelError("failed to print result", e) from e

        except IntmulError as e:
            logger.debug(f"Unit {node_id} failed: {type(e).__name__}: {e}")
            report_failure(errstream, program, e)
            return EXIT_FAILURE
        except MemoryError as e:
            report_failure(errstream, program, AllocationFailure("out of memory", e))
            return EXIT_FAILURE

    return EXIT_SUCCESS


def multiply_hex(a: str, b: str, backend: Optional[str] = None,
                 config: Optional[Config] = None,
                 errstream: Optional[TextIO] = None) -> str:
    """
    Multiply two hex strings as the top-level caller.

    Validates the operands, runs the concurrent recursion and pads the
    product to an even number of digits.

    Args:
        a: First operand
        b: Second operand, same length as ``a``
        backend: 'process' or 'thread'; overrides the configured backend
        config: Configuration, loaded from the environment if omitted
        errstream: Where thread units write diagnostics

    Returns:
        Lowercase hex product with an even digit count

    Raises:
        ValidationError, OddLengthError: for unusable operands
        ChannelError, ChildFailure: if a unit fails
    """
    config = config or Config()
    if backend is not None:
        if backend not in defaults.BACKENDS:
            raise ValueError(f"Unknown worker backend: {backend}")
        config.set('workers.backend', backend)

    pair = validate_operands(a, b)
    check_splittable(len(pair))

    spawner = make_spawner(config, errstream=errstream)
    with node_scope(ROOT_NODE, unit=spawner.backend):
        product = Worker(spawner).multiply(pair.a, pair.b)
    return pad_leading_zero(product)
