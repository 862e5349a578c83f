"""Custom log formatters for the HL7 Transcoder.

This module provides specialized formatters for logging, including PII redaction.
"""

import logging
import re
from typing import List, Tuple


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts patient PII from log messages.

    Redacts HL7 v2 PID segments, FHIR name/birthDate JSON members, HL7 v3
    given/family/birthTime element text and name=... key/value pairs.

    Example:
        >>> formatter = PIIRedactingFormatter(redact_pii=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        """Initialize the PIIRedactingFormatter.

        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_pii: Whether to enable PII redaction
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        # (regex, replacement_text)
        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # HL7 v2 PID segment: keep the tag, drop every field
            (re.compile(r'PID\|[^\n\r]*'), 'PID|[PID-REDACTED]'),

            # FHIR JSON members: "family": [...], "given": [...], "birthDate": "..."
            (re.compile(r'"(family|given|line)"\s*:\s*(\[[^\]]*\]|"[^"]*")'),
             r'"\1": "[REDACTED]"'),
            (re.compile(r'"birthDate"\s*:\s*"[^"]*"'), '"birthDate": "[DOB-REDACTED]"'),

            # HL7 v3 elements
            (re.compile(r'<(given|family|streetAddressLine)>[^<]*</\1>'), r'<\1>[REDACTED]</\1>'),
            (re.compile(r'(<birthTime>\s*<value>)[^<]*(</value>)'), r'\1[DOB-REDACTED]\2'),

            # Matches: name="John Doe", name='Jane Smith', name=Bob
            (re.compile(r'name=["\']?([^"\'|,]+)["\']?'), 'name=[NAME-REDACTED]'),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional PII redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with PII redacted if enabled
        """
        original = super().format(record)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
