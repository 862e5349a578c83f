"""HL7 Transcoder.

Converts patient records between FHIR Patient JSON, HL7 v2.x pipe-delimited
messages and HL7 v3 XML documents.
"""

__version__ = "0.1.1"
