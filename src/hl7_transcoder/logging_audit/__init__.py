"""Logging Audit module.

This module provides logging configuration and audit trail functionality.
"""

from .audit import audit_observer, log_audit_event
from .formatters import PIIRedactingFormatter
from .logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_audit_event",
    "audit_observer",
    "PIIRedactingFormatter",
]
