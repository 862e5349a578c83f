"""HL7 v2.x intermediate data models.

HL7 v2 carries exactly one name and one address per message, so these models
are a flattened, single-entry analogue of PatientRecord.
"""

from dataclasses import dataclass, field


@dataclass
class MSHSegment:
    """Message header (MSH) fields.

    Attributes:
        sending_application: MSH-3
        sending_facility: MSH-4
        date_time: MSH-7 message timestamp
        message_type: MSH-9 (e.g. "ADT^A01")
        control_id: MSH-10 message control id
    """

    sending_application: str = ""
    sending_facility: str = ""
    date_time: str = ""
    message_type: str = ""
    control_id: str = ""


@dataclass
class HL7v2Address:
    """PID-11 address components."""

    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


@dataclass
class PIDSegment:
    """Patient identification (PID) fields.

    Attributes:
        patient_id: PID-3 patient identifier
        last_name: PID-5 component 1
        first_name: PID-5 component 2
        birth_date: PID-7
        gender: PID-8
        address: PID-11
    """

    patient_id: str = ""
    last_name: str = ""
    first_name: str = ""
    birth_date: str = ""
    gender: str = ""
    address: HL7v2Address = field(default_factory=HL7v2Address)


@dataclass
class HL7v2Message:
    """Parsed ADT^A01 message: one header and one patient block."""

    msh: MSHSegment = field(default_factory=MSHSegment)
    pid: PIDSegment = field(default_factory=PIDSegment)
