"""Logging configuration for mcp-hello."""

import logging
import json
from pathlib import Path
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from .config import get_config_value

# Extra record attributes copied into structured output when present
EXTRA_FIELDS = ("session_id", "method", "status_code", "tool", "staged", "bound")


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _parse_size(max_size: str) -> int:
    """Convert a size string such as '10MB' into bytes."""
    size_units = {'KB': 1024, 'MB': 1024**2, 'GB': 1024**3}
    for unit, multiplier in size_units.items():
        if str(max_size).upper().endswith(unit):
            try:
                return int(str(max_size)[:-2]) * multiplier
            except ValueError:
                break
    return 10 * 1024 * 1024


def setup_logging() -> None:
    """Configure logging based on settings."""
    log_level = str(get_config_value('logging.level', 'INFO')).upper()
    log_format = get_config_value('logging.format', 'text')
    log_file = get_config_value('logging.file')
    max_size = get_config_value('logging.max_size', '10MB')
    backup_count = get_config_value('logging.backup_count', 3)

    level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if log_format == 'json':
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=_parse_size(max_size),
            backupCount=backup_count
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Uvicorn logs every request on its own access logger
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if not logging.getLogger().handlers:
        setup_logging()

    return logging.getLogger(name)
