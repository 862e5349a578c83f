"""Logging configuration and logger factory for the HL7 Transcoder.

Codecs never log. Logging is configured once by the entry point (the CLI or
a hosting pipeline) and covers configuration, batch summaries and audit
events. Two handlers are installed on the root logger:

- console (stderr) at the requested level, so ``--json`` output on stdout
  stays machine readable
- rotating file at DEBUG level

Handlers installed here are tagged, so reconfiguring replaces only them and
leaves handlers added by a host application alone.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .formatters import PIIRedactingFormatter

# Constants
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "hl7-transcoder.log"
LOG_FILE_ENV_VAR = "HL7_TRANSCODER_LOG_FILE"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5
VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Attribute marking handlers owned by configure_logging
_HANDLER_TAG = "_hl7_transcoder_handler"


def _resolve_log_file(log_file: Optional[Path]) -> Path:
    """Pick the log file: explicit path, then environment, then default."""
    if log_file is not None:
        return Path(log_file)
    env_log_file = os.environ.get(LOG_FILE_ENV_VAR)
    if env_log_file:
        return Path(env_log_file)
    return DEFAULT_LOG_FILE


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_TAG, True)
    return handler


def _file_handler(log_file: Path, formatter: logging.Formatter) -> logging.Handler:
    handler = RotatingFileHandler(
        filename=str(log_file),
        maxBytes=MAX_LOG_FILE_SIZE,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_TAG, True)
    return handler


def _remove_owned_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_pii: bool = False,
) -> None:
    """Configure logging for the HL7 Transcoder.

    Safe to call repeatedly: each call replaces the handlers installed by the
    previous one.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               The file handler always records DEBUG.
        log_file: Path to log file. If None, HL7_TRANSCODER_LOG_FILE or
                 DEFAULT_LOG_FILE is used.
        redact_pii: Whether to redact PII (patient names, birth dates, PID segments) from logs

    Raises:
        ValueError: If invalid log level is provided
        RuntimeError: If log directory cannot be created

    Example:
        >>> configure_logging(level="DEBUG", redact_pii=True)
    """
    if level.upper() not in VALID_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: {', '.join(VALID_LEVELS)}"
        )
    numeric_level = getattr(logging, level.upper())

    log_file = _resolve_log_file(log_file)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(
            f"Failed to create log directory: {log_file.parent}. "
            f"Ensure write permissions are available. Error: {e}"
        ) from e

    formatter = PIIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)

    root_logger = logging.getLogger()
    _remove_owned_handlers(root_logger)
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(_console_handler(numeric_level, formatter))

    try:
        root_logger.addHandler(_file_handler(log_file, formatter))
    except OSError as e:
        root_logger.warning(
            f"Failed to create file handler for {log_file}: {e}. Logging to console only."
        )


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger for the specified module, typically ``__name__``."""
    return logging.getLogger(module_name)
