"""Config module.

This module provides configuration management functionality.
"""

from hl7_transcoder.config.manager import (
    load_config,
    parse_processor_config,
)
from hl7_transcoder.config.schema import (
    Config,
    ConversionConfig,
    LoggingConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    "parse_processor_config",
    # Configuration models
    "Config",
    "ConversionConfig",
    "LoggingConfig",
]
