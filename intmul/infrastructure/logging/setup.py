"""Setup and configuration for the structured logging system."""

import logging
from typing import Optional

from .structured_logger import get_logger
from .handlers import ConsoleHandler, FileHandler


def _reset_root(level: int) -> logging.Logger:
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    return root_logger


def setup_logging(config, log_level: Optional[str] = None, stream=None):
    """Configure the root logger from a Config.

    Console output always goes to stderr (or ``stream``); stdout is the
    result channel of every unit and never receives log records.

    Args:
        config: Config instance (reads the ``logging`` section)
        log_level: Override for ``logging.level``
        stream: Console stream, defaults to stderr
    """
    level_name = (log_level or config.get('logging.level', 'WARNING')).upper()
    level = getattr(logging, level_name, logging.WARNING)
    root_logger = _reset_root(level)

    console_handler = ConsoleHandler(
        stream=stream,
        use_colors=config.get('logging.use_colors'),
        show_context=True
    )
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    log_file = config.get('logging.file')
    if log_file:
        file_handler = FileHandler(
            filename=str(log_file),
            max_bytes=config.get('logging.max_file_size', 10 * 1024 * 1024),
            backup_count=config.get('logging.backup_count', 3),
            use_json=True
        )
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        # File gets everything; the console handler keeps its own level
        root_logger.setLevel(logging.DEBUG)

    get_logger(__name__).debug(
        "Structured logging system initialized",
        extra={'context': {'log_level': level_name, 'file': str(log_file) if log_file else None}}
    )
