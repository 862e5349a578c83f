"""Pipeline record data models.

This module defines the envelope a hosting pipeline hands to the processor
and the two per-record outcomes the processor hands back.
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from hl7_transcoder.utils.exceptions import ErrorInfo


@dataclass
class Record:
    """An opaque byte record with its pipeline envelope.

    Attributes:
        payload: Raw record bytes
        position: Host-assigned position of the record
        metadata: Host-supplied metadata
        key: Optional record key
    """

    payload: bytes
    position: bytes = b""
    metadata: Dict[str, str] = field(default_factory=dict)
    key: bytes = b""


@dataclass
class TranscodedRecord:
    """A successfully transcoded record.

    Carries the envelope of the input record around the new payload.
    """

    payload: bytes
    position: bytes = b""
    metadata: Dict[str, str] = field(default_factory=dict)
    key: bytes = b""

    @property
    def is_success(self) -> bool:
        return True

    @classmethod
    def wrap(cls, record: Record, payload: bytes) -> "TranscodedRecord":
        """Wrap a new payload in a copy of the record's envelope."""
        return cls(
            payload=payload,
            position=record.position,
            metadata=dict(record.metadata),
            key=record.key,
        )


@dataclass
class ErrorRecord:
    """A record that failed to transcode.

    Attributes:
        error: The exception raised while transcoding
        error_info: Structured description of the failure
    """

    error: Exception
    error_info: ErrorInfo

    @property
    def is_success(self) -> bool:
        return False


ProcessedRecord = Union[TranscodedRecord, ErrorRecord]
