"""Structured logging with recursion-node context for worker units."""

import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Any, Optional

# Context variables identifying the unit that emits a record
node_context: ContextVar[Optional[str]] = ContextVar('node_id', default=None)
unit_context: ContextVar[Optional[str]] = ContextVar('unit', default=None)


class StructuredLogger(logging.Logger):
    """Logger that attaches unit context, performance and tracebacks.

    Features:
    - Automatic context injection (node_id, unit backend)
    - Performance metrics logging
    - Full traceback capture for errors
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._context_fields: Dict[str, Any] = {}

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, **kwargs):
        """Enhance records with context vars, performance data and traceback."""
        context = {
            'node_id': node_context.get(),
            'unit': unit_context.get(),
            'logger_name': self.name,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            **self._context_fields
        }
        context = {k: v for k, v in context.items() if v is not None}

        if extra and isinstance(extra, dict):
            extra = dict(extra)
            performance = extra.pop('performance', None)
            context.update(extra.pop('context', {}))
            traceback_str = extra.pop('traceback', None)
        else:
            performance = None
            traceback_str = None

        if not traceback_str and exc_info:
            if isinstance(exc_info, bool):
                exc_info = sys.exc_info()
            elif isinstance(exc_info, BaseException):
                exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
            if exc_info[0] is not None:
                traceback_str = ''.join(traceback.format_exception(*exc_info))

        if extra is None:
            extra = {}
        extra.update({
            'context': context,
            'performance': performance,
            'traceback': traceback_str
        })

        super()._log(level, msg, args, exc_info=False, extra=extra,
                     stack_info=stack_info, **kwargs)

    def log_performance(self, operation: str, duration: float, **metrics):
        """Log performance metrics for an operation at DEBUG level.

        Args:
            operation: Operation name
            duration: Duration in seconds
            **metrics: Additional metrics (digits, units_spawned, ...)
        """
        performance_data = {
            'operation': operation,
            'duration_seconds': round(duration, 6),
            **metrics
        }

        if 'digits' in metrics and duration > 0:
            performance_data['digits_per_second'] = round(metrics['digits'] / duration, 2)

        self.debug(
            f"Performance: {operation} completed in {duration:.3f}s",
            extra={'performance': performance_data}
        )

    def log_error_with_context(self, error: BaseException, operation: Optional[str] = None, **context):
        """Log an error with its type, the operation and a traceback."""
        error_context = {
            'error_type': type(error).__name__,
            'error_module': type(error).__module__,
            **context
        }

        if operation:
            error_context['operation'] = operation

        self.error(
            f"{type(error).__name__}: {error}",
            exc_info=error,
            extra={'context': error_context}
        )


_logger_cache: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger instance.

    Example:
        from intmul.infrastructure.logging import get_logger
        logger = get_logger(__name__)
    """
    if name in _logger_cache:
        return _logger_cache[name]

    original_class = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)

    try:
        logger = logging.getLogger(name)
        _logger_cache[name] = logger
        return logger
    finally:
        logging.setLoggerClass(original_class)
