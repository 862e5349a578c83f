"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "conversion": {
        # FHIR Patient JSON in, JSON-wrapped HL7 v2 out
        "input_type": "fhir",
        "output_type": "hl7",
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/hl7-transcoder.log",
        # Do not redact PII by default (user must opt-in for privacy)
        "redact_pii": False,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
