"""Formats module.

Codecs for the three patient representations: FHIR Patient JSON, HL7 v2.x
pipe-delimited text and HL7 v3 XML.
"""

from hl7_transcoder.formats.fhir import parse_fhir_patient, serialize_fhir_patient
from hl7_transcoder.formats.hl7v2 import (
    build_hl7v2_message,
    decode_hl7v2_payload,
    encode_hl7v2_payload,
    hl7v2_to_patient,
    parse_hl7v2_message,
)
from hl7_transcoder.formats.hl7v3 import (
    build_hl7v3_message,
    hl7v3_to_patient,
    parse_hl7v3_patient,
)

__all__ = [
    "build_hl7v2_message",
    "build_hl7v3_message",
    "decode_hl7v2_payload",
    "encode_hl7v2_payload",
    "hl7v2_to_patient",
    "hl7v3_to_patient",
    "parse_fhir_patient",
    "parse_hl7v2_message",
    "parse_hl7v3_patient",
    "serialize_fhir_patient",
]
