"""Exceptions raised by the multiplication units, with diagnostic formatting."""

from typing import Optional


class IntmulError(Exception):
    """Base error for the multiplier."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class InvalidUsage(IntmulError):
    """Raised when the program is invoked with an unsupported shape."""
    pass


class ValidationError(IntmulError):
    """Base class for rejected operand input."""
    pass


class EmptyInput(ValidationError):
    """Raised when an operand line is empty."""
    pass


class LengthMismatch(ValidationError):
    """Raised when the two operands differ in digit count."""
    pass


class InvalidCharacter(ValidationError):
    """Raised when an operand contains a non-hex character."""
    pass


class InvalidDigit(IntmulError):
    """Raised when a single character is not a hex digit."""
    def __init__(self, char: str):
        super().__init__(f"invalid hex digit: {char!r}")
        self.char = char


class OddLengthError(IntmulError):
    """Raised when operands of length greater than one cannot be halved evenly."""
    pass


class ChannelError(IntmulError):
    """Raised when spawning, writing to or reading from a unit channel fails."""
    pass


class ChildFailure(IntmulError):
    """Raised when a delegated unit fails or returns an unusable result."""
    def __init__(self, message: str, slot: Optional[str] = None,
                 exit_status: Optional[int] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception)
        self.slot = slot
        self.exit_status = exit_status


class AllocationFailure(IntmulError):
    """Raised when a unit runs out of memory."""
    pass


def format_diagnostic(program: str, message: str,
                      original_exception: Optional[BaseException] = None) -> str:
    """Build a single-line diagnostic for the error channel.

    Args:
        program: Program identity shown as the prefix
        message: Human-readable description of the failure
        original_exception: Underlying cause; an OSError contributes its strerror

    Returns:
        Diagnostic line without trailing newline
    """
    line = f"[{program}]: {message}"
    if isinstance(original_exception, OSError) and original_exception.strerror:
        line += f", Error: {original_exception.strerror}"
    return line.replace('\n', ' ')
