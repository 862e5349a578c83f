"""Audit trail functionality for the HL7 Transcoder.

This module provides structured audit logging for batch runs and an
observer that can be handed to the processor to log each record outcome.
Codecs never log; observability is attached from the outside through these
helpers.
"""

import uuid
from typing import Any, Callable, Dict, Optional

from hl7_transcoder.models.records import ErrorRecord, ProcessedRecord, Record

from .logger import get_logger

logger = get_logger(__name__)

ResultObserver = Callable[[int, Record, ProcessedRecord], None]


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry. Events are logged at INFO level,
    or ERROR level when details["status"] is "failure".

    Args:
        event_type: Type of operation (e.g., "BATCH_TRANSCODED", "RECORD_FAILED")
        details: Dictionary with event details. Common fields include:
                - status: "success", "partial" or "failure"
                - conversion: Conversion pair (e.g. "fhir->hl7")
                - record_count: Number of records processed
                - error_count: Number of records that failed
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)
                - correlation_id: Optional correlation ID for tracking related events

    Example:
        >>> log_audit_event("BATCH_TRANSCODED", {
        ...     "conversion": "fhir->hl7",
        ...     "record_count": 100,
        ...     "status": "success",
        ...     "duration": 0.25
        ... })
    """
    details = dict(details)
    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "conversion",
        "record_count",
        "error_count",
        "duration",
        "error_message",
        "correlation_id",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order:
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)


def audit_observer(conversion: Optional[str] = None) -> ResultObserver:
    """Build a per-record observer that writes audit events.

    Args:
        conversion: Conversion pair label included in every event

    Returns:
        Callable accepted by HL7Processor(on_result=...)

    Example:
        >>> processor = HL7Processor(on_result=audit_observer("hl7->fhir"))
    """
    batch_id = str(uuid.uuid4())

    def observe(index: int, record: Record, result: ProcessedRecord) -> None:
        details: Dict[str, Any] = {
            "index": index,
            "position": record.position.decode("utf-8", errors="replace"),
            "correlation_id": batch_id,
        }
        if conversion:
            details["conversion"] = conversion

        if isinstance(result, ErrorRecord):
            details["status"] = "failure"
            details["error_type"] = result.error_info.error_type
            details["error_message"] = result.error_info.message
            log_audit_event("RECORD_FAILED", details)
        else:
            details["status"] = "success"
            details["payload_size"] = len(result.payload)
            log_audit_event("RECORD_TRANSCODED", details)

    return observe
