"""File handler with rotation support."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..formatters import JsonFormatter


class FileHandler(RotatingFileHandler):
    """Rotating file handler writing JSON records.

    Every process unit appends to the same file; rotation is size based.
    """

    def __init__(self,
                 filename: str,
                 max_bytes: int = 10 * 1024 * 1024,
                 backup_count: int = 3,
                 encoding: str = 'utf-8',
                 use_json: bool = True):
        """Initialize file handler.

        Args:
            filename: Log file path
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep
            encoding: File encoding
            use_json: Whether to use JSON formatting
        """
        log_path = Path(filename)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding=encoding
        )

        if use_json:
            self.setFormatter(JsonFormatter())
        else:
            self.setFormatter(logging.Formatter(
                '%(asctime)s - %(process)d - %(name)s - %(levelname)s - %(message)s'
            ))

        self.setLevel(logging.DEBUG)
