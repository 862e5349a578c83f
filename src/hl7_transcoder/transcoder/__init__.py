"""Transcoder module.

This module provides conversion routing (router), the batch record processor
(processor) and batch error summaries (error_summary). Import HL7Processor
from hl7_transcoder.transcoder.processor; config.schema imports this package.
"""

from hl7_transcoder.transcoder.router import (
    SUPPORTED_CONVERSIONS,
    Conversion,
    ConversionPair,
    Format,
    resolve_conversion,
    validate_conversion,
)

__all__ = [
    "SUPPORTED_CONVERSIONS",
    "Conversion",
    "ConversionPair",
    "Format",
    "resolve_conversion",
    "validate_conversion",
]
