"""Custom exception classes for HL7 Transcoder.

All exceptions inherit from TranscoderError to allow catching all custom exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TranscoderError(Exception):
    """Base exception for all HL7 Transcoder custom exceptions."""

    pass


class FormatError(TranscoderError):
    """Raised when an input record cannot be decoded.

    Examples:
        - Malformed JSON or XML
        - HL7 v2 text not starting with the MSH| header prefix
        - Missing mandatory field (patient id)
    """

    pass


class ConfigurationError(TranscoderError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Unsupported conversion pair (hl7 -> hl7v3)
        - Unknown input or output type
        - Invalid configuration file format
    """

    pass


class MappingError(TranscoderError):
    """Raised when a pivot value cannot be rendered into the target format.

    Examples:
        - Empty gender when HL7 v3 requires a single-letter code
        - Gender outside male/female/unknown
    """

    pass


class ErrorCategory(Enum):
    """Error categorization for per-record error reporting.

    No category is retryable: every failure is deterministic for the same
    input bytes.

    Attributes:
        FORMAT: Input record could not be decoded
        MAPPING: Decoded patient could not be rendered in the output format
        CONFIGURATION: Processor configuration rejects the conversion
        UNEXPECTED: Any other exception raised while transcoding
    """

    FORMAT = "FORMAT"
    MAPPING = "MAPPING"
    CONFIGURATION = "CONFIGURATION"
    UNEXPECTED = "UNEXPECTED"


@dataclass
class ErrorInfo:
    """Structured error information attached to an error record.

    Attributes:
        category: Error category
        error_type: Exception class name (e.g., "FormatError")
        message: Error message
        remediation: Actionable guidance for resolving the error
        technical_details: Optional chained cause for debugging
        position: Optional position of the record that failed

    Example:
        >>> error_info = ErrorInfo(
        ...     category=ErrorCategory.FORMAT,
        ...     error_type="FormatError",
        ...     message="HL7 message must start with MSH|",
        ...     remediation="Check the record payload",
        ... )
    """

    category: ErrorCategory
    error_type: str
    message: str
    remediation: str
    technical_details: Optional[str] = None
    position: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "error_type": self.error_type,
            "message": self.message,
            "remediation": self.remediation,
            "technical_details": self.technical_details,
            "position": self.position,
        }


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize an exception raised while transcoding a record.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory for the exception

    Example:
        >>> categorize_error(FormatError("bad json"))
        <ErrorCategory.FORMAT: 'FORMAT'>
    """
    if isinstance(exception, FormatError):
        return ErrorCategory.FORMAT

    if isinstance(exception, MappingError):
        return ErrorCategory.MAPPING

    if isinstance(exception, ConfigurationError):
        return ErrorCategory.CONFIGURATION

    return ErrorCategory.UNEXPECTED


def create_error_info(
    exception: Exception,
    position: Optional[str] = None,
) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred
        position: Optional position of the failing record

    Returns:
        ErrorInfo with categorization and remediation guidance
    """
    category = categorize_error(exception)

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        message=str(exception),
        remediation=_generate_remediation(category),
        technical_details=technical_details,
        position=position,
    )


def _generate_remediation(category: ErrorCategory) -> str:
    """Generate actionable remediation message for an error category.

    Args:
        category: Error category

    Returns:
        Actionable remediation message
    """
    if category == ErrorCategory.FORMAT:
        return (
            "Record payload could not be decoded. Check that it matches the configured "
            "inputType: FHIR Patient JSON, HL7 v2 text starting with MSH| (raw or wrapped "
            "as {\"hl7\": ...}), or an HL7 v3 Patient XML document."
        )

    if category == ErrorCategory.MAPPING:
        return (
            "Patient data cannot be represented in the output format. "
            "HL7 v3 requires gender to be one of: male, female, unknown."
        )

    if category == ErrorCategory.CONFIGURATION:
        return (
            "Conversion pair is not supported. Supported conversions: "
            "fhir->hl7, fhir->hl7v3, hl7->fhir, hl7v3->fhir."
        )

    return "Unexpected failure while transcoding. Check logs for the full traceback."
