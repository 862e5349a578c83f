"""Unit tests for HL7 Transcoder."""
