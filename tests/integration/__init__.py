"""Integration tests for HL7 Transcoder."""
