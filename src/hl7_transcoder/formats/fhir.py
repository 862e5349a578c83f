"""FHIR Patient JSON decoding and encoding.

Only the fields of the canonical patient model are read; the resource is not
validated for full FHIR conformance.
"""

import json
from typing import Any, List

from hl7_transcoder.formats.gender import GENDER_TO_CODE
from hl7_transcoder.models.patient import Address, HumanName, PatientRecord
from hl7_transcoder.utils.exceptions import FormatError

RESOURCE_TYPE = "Patient"


def _string(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise FormatError(f"FHIR Patient field '{field_name}' must be a string, got {type(value).__name__}")
    return value


def _string_list(value: Any, field_name: str) -> List[str]:
    # family is a list in this system's patient shape but a plain string in FHIR R4
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise FormatError(f"FHIR Patient field '{field_name}' must be a list of strings")
    return list(value)


def _objects(value: Any, field_name: str) -> List[dict]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise FormatError(f"FHIR Patient field '{field_name}' must be a list of objects")
    return value


def patient_from_fhir(resource: dict) -> PatientRecord:
    """Build a PatientRecord from a decoded FHIR Patient resource.

    Args:
        resource: Decoded JSON object

    Returns:
        PatientRecord

    Raises:
        FormatError: If the id is missing, a field has the wrong shape, or
            gender is not male, female or unknown
    """
    resource_type = resource.get("resourceType")
    if resource_type is not None and resource_type != RESOURCE_TYPE:
        raise FormatError(f"Unsupported FHIR resourceType '{resource_type}'. Expected {RESOURCE_TYPE}.")

    patient_id = _string(resource.get("id"), "id")
    if not patient_id:
        raise FormatError("FHIR Patient is missing required field: id")

    names = [
        HumanName(
            family=_string_list(name.get("family"), "name.family"),
            given=_string_list(name.get("given"), "name.given"),
        )
        for name in _objects(resource.get("name"), "name")
    ]

    gender = _string(resource.get("gender"), "gender")
    if gender and gender not in GENDER_TO_CODE:
        raise FormatError(
            f"Unsupported FHIR gender '{gender}'. Must be one of: male, female, unknown."
        )

    addresses = [
        Address(
            line=_string_list(address.get("line"), "address.line"),
            city=_string(address.get("city"), "address.city"),
            state=_string(address.get("state"), "address.state"),
            postal_code=_string(address.get("postalCode"), "address.postalCode"),
            country=_string(address.get("country"), "address.country"),
        )
        for address in _objects(resource.get("address"), "address")
    ]

    return PatientRecord(
        id=patient_id,
        names=names,
        birth_date=_string(resource.get("birthDate"), "birthDate"),
        gender=gender,
        addresses=addresses,
    )


def patient_to_fhir(patient: PatientRecord) -> dict:
    """Convert a PatientRecord to a FHIR Patient JSON object."""
    return {
        "id": patient.id,
        "name": [
            {"family": list(name.family), "given": list(name.given)}
            for name in patient.names
        ],
        "birthDate": patient.birth_date,
        "gender": patient.gender,
        "address": [
            {
                "line": list(address.line),
                "city": address.city,
                "state": address.state,
                "postalCode": address.postal_code,
                "country": address.country,
            }
            for address in patient.addresses
        ],
    }


def parse_fhir_patient(payload: bytes) -> PatientRecord:
    """Decode FHIR Patient JSON bytes into a PatientRecord.

    Raises:
        FormatError: If the payload is not a JSON object or has no id

    Example:
        >>> parse_fhir_patient(b'{"id": "456"}').id
        '456'
    """
    try:
        resource = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(f"Invalid FHIR JSON: {e}") from e

    if not isinstance(resource, dict):
        raise FormatError(
            f"Invalid FHIR JSON: expected an object, got {type(resource).__name__}"
        )

    return patient_from_fhir(resource)


def serialize_fhir_patient(patient: PatientRecord) -> bytes:
    """Encode a PatientRecord as FHIR Patient JSON bytes."""
    return json.dumps(patient_to_fhir(patient)).encode("utf-8")
