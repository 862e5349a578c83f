"""
Shared pytest configuration and fixtures.

This module provides sample records in each supported format, used across
the unit and integration test suites.
"""

import json
from pathlib import Path

import pytest

from hl7_transcoder.models.patient import Address, HumanName, PatientRecord


SAMPLE_HL7V2 = (
    "MSH|^~\\&|FHIR_CONVERTER|FACILITY|HL7_PARSER|FACILITY|20230815120000||ADT^A01|123|P|2.5|\n"
    "PID|1||123||Smith^John||1990-01-01|male|||123 Main St^Springfield^IL^62701^USA||||||123"
)

SAMPLE_HL7V3 = """<?xml version="1.0" encoding="UTF-8"?>
<Patient xmlns="urn:hl7-org:v3">
  <id>pat-7335</id>
  <name>
    <given>Novella</given>
    <family>Hoeger</family>
  </name>
  <administrativeGenderCode>
    <code>M</code>
  </administrativeGenderCode>
  <birthTime>
    <value>19760320000000</value>
  </birthTime>
  <addr>
    <streetAddressLine>6847 Vistaside</streetAddressLine>
    <city>Greensboro</city>
    <state>Vermont</state>
    <postalCode>89755</postalCode>
  </addr>
</Patient>"""


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def fhir_resource() -> dict:
    """Return a complete FHIR Patient resource."""
    return {
        "resourceType": "Patient",
        "id": "123",
        "name": [{"family": ["Smith"], "given": ["John"]}],
        "birthDate": "1990-01-01",
        "gender": "male",
        "address": [
            {
                "line": ["123 Main St"],
                "city": "Springfield",
                "state": "IL",
                "postalCode": "62701",
                "country": "USA",
            }
        ],
    }


@pytest.fixture
def fhir_payload(fhir_resource: dict) -> bytes:
    """Return the complete FHIR Patient resource as JSON bytes."""
    return json.dumps(fhir_resource).encode("utf-8")


@pytest.fixture
def patient() -> PatientRecord:
    """Return a fully populated PatientRecord."""
    return PatientRecord(
        id="123",
        names=[HumanName(family=["Smith"], given=["John"])],
        birth_date="1990-01-01",
        gender="male",
        addresses=[
            Address(
                line=["123 Main St"],
                city="Springfield",
                state="IL",
                postal_code="62701",
                country="USA",
            )
        ],
    )


@pytest.fixture
def hl7v2_text() -> str:
    """Return a raw HL7 v2 ADT^A01 message."""
    return SAMPLE_HL7V2


@pytest.fixture
def hl7v2_envelope() -> bytes:
    """Return the HL7 v2 message wrapped as {"hl7": ...}."""
    return json.dumps({"hl7": SAMPLE_HL7V2}).encode("utf-8")


@pytest.fixture
def hl7v3_xml() -> bytes:
    """Return an HL7 v3 Patient XML document."""
    return SAMPLE_HL7V3.encode("utf-8")
