"""Models module.

This module provides data models and dataclasses for the application.
"""

from hl7_transcoder.models.hl7v2 import HL7v2Address, HL7v2Message, MSHSegment, PIDSegment
from hl7_transcoder.models.hl7v3 import HL7v3Address, HL7v3Patient
from hl7_transcoder.models.patient import Address, HumanName, PatientRecord
from hl7_transcoder.models.records import ErrorRecord, ProcessedRecord, Record, TranscodedRecord
from hl7_transcoder.models.specification import Parameter, Specification

__all__ = [
    "Address",
    "ErrorRecord",
    "HL7v2Address",
    "HL7v2Message",
    "HL7v3Address",
    "HL7v3Patient",
    "HumanName",
    "MSHSegment",
    "PIDSegment",
    "Parameter",
    "PatientRecord",
    "ProcessedRecord",
    "Record",
    "Specification",
    "TranscodedRecord",
]
