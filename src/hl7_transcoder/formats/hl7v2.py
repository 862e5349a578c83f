"""HL7 v2.x ADT^A01 message parser and builder.

Segments are separated by a single newline rather than the carriage return
the HL7 standard uses. Fields are separated by ``|`` and components by ``^``.
PID values are written with HL7 escape sequences (``\\F\\`` for ``|``,
``\\S\\`` for ``^`` and so on) and unescaped again on parse, so separator
characters inside patient data do not shift fields.
Parsing and building are pure: no logging, no I/O.
"""

import json
import re
from datetime import datetime, timezone
from typing import Final, List, Optional

from hl7_transcoder.formats.gender import CODE_TO_GENDER, GENDER_TO_CODE
from hl7_transcoder.models.hl7v2 import HL7v2Address, HL7v2Message, MSHSegment, PIDSegment
from hl7_transcoder.models.patient import Address, HumanName, PatientRecord
from hl7_transcoder.utils.exceptions import FormatError

HEADER_PREFIX: Final[str] = "MSH|"
SEGMENT_SEPARATOR: Final[str] = "\n"
FIELD_SEPARATOR: Final[str] = "|"
COMPONENT_SEPARATOR: Final[str] = "^"
ENCODING_CHARACTERS: Final[str] = "^~\\&"

SENDING_APPLICATION: Final[str] = "FHIR_CONVERTER"
SENDING_FACILITY: Final[str] = "FACILITY"
MESSAGE_TYPE: Final[str] = "ADT^A01"
PROCESSING_ID: Final[str] = "P"
VERSION_ID: Final[str] = "2.5"

ESCAPE_CHARACTER: Final[str] = "\\"

ESCAPE_SEQUENCES: Final[dict[str, str]] = {
    FIELD_SEPARATOR: "F",
    COMPONENT_SEPARATOR: "S",
    "~": "R",
    ESCAPE_CHARACTER: "E",
    "&": "T",
    SEGMENT_SEPARATOR: "X0A",
    "\r": "X0D",
}

UNESCAPE_SEQUENCES: Final[dict[str, str]] = {
    **{code: char for char, code in ESCAPE_SEQUENCES.items()},
    ".br": SEGMENT_SEPARATOR,
}

_ESCAPE_PATTERN = re.compile(
    r"\\(" + "|".join(re.escape(code) for code in UNESCAPE_SEQUENCES) + r")\\"
)

# JSON key carrying HL7 v2 text in a wrapped payload
ENVELOPE_FIELD: Final[str] = "hl7"

# Field positions after splitting a segment on "|" (index 0 is the segment tag)
MSH_SENDING_APPLICATION = 2
MSH_SENDING_FACILITY = 3
MSH_DATE_TIME = 6
MSH_MESSAGE_TYPE = 8
MSH_CONTROL_ID = 9

PID_PATIENT_ID = 3
PID_NAME = 5
PID_BIRTH_DATE = 7
PID_GENDER = 8
PID_ADDRESS = 11


def format_hl7_timestamp(dt: datetime) -> str:
    """Format datetime as HL7 timestamp (YYYYMMDDHHMMSS).

    Example:
        >>> format_hl7_timestamp(datetime(2025, 11, 14, 15, 30, 0))
        '20251114153000'
    """
    return dt.strftime("%Y%m%d%H%M%S")


def escape_hl7(value: str) -> str:
    """Replace delimiter characters in a value with HL7 escape sequences.

    Example:
        >>> escape_hl7("Smith|Jones")
        'Smith\\\\F\\\\Jones'
    """
    return "".join(
        f"{ESCAPE_CHARACTER}{ESCAPE_SEQUENCES[char]}{ESCAPE_CHARACTER}"
        if char in ESCAPE_SEQUENCES
        else char
        for char in value
    )


def unescape_hl7(value: str) -> str:
    """Resolve HL7 escape sequences; unknown sequences are left as written."""
    if ESCAPE_CHARACTER not in value:
        return value
    return _ESCAPE_PATTERN.sub(lambda match: UNESCAPE_SEQUENCES[match.group(1)], value)


def _get_field(fields: List[str], index: int) -> str:
    """Get field by position, treating a short segment as field absent."""
    if index < 0 or index >= len(fields):
        return ""
    return fields[index]


def _get_component(value: str, index: int) -> str:
    """Get ^-separated component by position; absent components are empty."""
    components = value.split(COMPONENT_SEPARATOR)
    if index < 0 or index >= len(components):
        return ""
    return components[index]


def _parse_msh(fields: List[str]) -> MSHSegment:
    return MSHSegment(
        sending_application=_get_field(fields, MSH_SENDING_APPLICATION),
        sending_facility=_get_field(fields, MSH_SENDING_FACILITY),
        date_time=_get_field(fields, MSH_DATE_TIME),
        message_type=_get_field(fields, MSH_MESSAGE_TYPE),
        control_id=_get_field(fields, MSH_CONTROL_ID),
    )


def _parse_pid(fields: List[str]) -> PIDSegment:
    patient_id = unescape_hl7(_get_field(fields, PID_PATIENT_ID))
    if not patient_id:
        raise FormatError(
            "PID segment is missing the patient identifier (PID-3). "
            "Every HL7 v2 message must carry a patient id."
        )

    name = _get_field(fields, PID_NAME)
    address = _get_field(fields, PID_ADDRESS)

    return PIDSegment(
        patient_id=patient_id,
        last_name=unescape_hl7(_get_component(name, 0)),
        first_name=unescape_hl7(_get_component(name, 1)),
        birth_date=unescape_hl7(_get_field(fields, PID_BIRTH_DATE)),
        gender=unescape_hl7(_get_field(fields, PID_GENDER)),
        address=HL7v2Address(
            street=unescape_hl7(_get_component(address, 0)),
            city=unescape_hl7(_get_component(address, 1)),
            state=unescape_hl7(_get_component(address, 2)),
            postal_code=unescape_hl7(_get_component(address, 3)),
            country=unescape_hl7(_get_component(address, 4)),
        ),
    )


def parse_hl7v2_message(text: str) -> HL7v2Message:
    """Parse newline-separated HL7 v2 text into an HL7v2Message.

    Segments other than MSH and PID are ignored.

    Args:
        text: HL7 v2 message text

    Returns:
        Parsed HL7v2Message

    Raises:
        FormatError: If the text does not start with MSH|, the PID segment
            has no patient id, or no PID segment is present

    Example:
        >>> text = "MSH|^~&|A|B|||20230815120000||ADT^A01|1|P|2.5|" + SEGMENT_SEPARATOR + "PID|1||123||Smith^John"
        >>> parse_hl7v2_message(text).pid.last_name
        'Smith'
    """
    if not text.startswith(HEADER_PREFIX):
        raise FormatError(
            f"Invalid HL7 v2 message: must start with '{HEADER_PREFIX}'. "
            f"Got: {text[:20]!r}"
        )

    message = HL7v2Message()
    found_pid = False

    for segment in text.split(SEGMENT_SEPARATOR):
        fields = segment.split(FIELD_SEPARATOR)
        tag = fields[0]
        if tag == "MSH":
            message.msh = _parse_msh(fields)
        elif tag == "PID":
            message.pid = _parse_pid(fields)
            found_pid = True

    if not found_pid:
        raise FormatError("Invalid HL7 v2 message: no PID segment found.")

    return message


def _normalize_birth_date(value: str) -> str:
    """Convert an HL7 date (YYYYMMDD...) to YYYY-MM-DD; other values pass through."""
    if len(value) >= 8 and value[:8].isdigit():
        return f"{value[:4]}-{value[4:6]}-{value[6:8]}"
    return value


def _normalize_gender(value: str) -> str:
    """Map PID-8 to the pivot gender.

    Accepts both single-letter codes and the pivot values themselves.
    """
    if value in GENDER_TO_CODE:
        return value
    return CODE_TO_GENDER.get(value, "")


def hl7v2_to_patient(message: HL7v2Message) -> PatientRecord:
    """Map a parsed HL7 v2 message to a PatientRecord.

    Produces exactly one name entry and one address entry.

    Args:
        message: Parsed HL7 v2 message

    Returns:
        PatientRecord
    """
    pid = message.pid
    address = pid.address

    return PatientRecord(
        id=pid.patient_id,
        names=[
            HumanName(
                family=[pid.last_name] if pid.last_name else [],
                given=[pid.first_name] if pid.first_name else [],
            )
        ],
        birth_date=_normalize_birth_date(pid.birth_date),
        gender=_normalize_gender(pid.gender),
        addresses=[
            Address(
                line=[address.street] if address.street else [],
                city=address.city,
                state=address.state,
                postal_code=address.postal_code,
                country=address.country,
            )
        ],
    )


def patient_to_hl7v2(patient: PatientRecord, now: Optional[datetime] = None) -> HL7v2Message:
    """Map a PatientRecord to an HL7 v2 message.

    Only the first name and first address are carried. The current timestamp
    is used as both the message date/time and the control id.

    Args:
        patient: Patient to map
        now: Message timestamp (defaults to current UTC time)

    Returns:
        HL7v2Message
    """
    timestamp = format_hl7_timestamp(now or datetime.now(timezone.utc))
    name = patient.first_name()
    address = patient.first_address()

    return HL7v2Message(
        msh=MSHSegment(
            sending_application=SENDING_APPLICATION,
            sending_facility=SENDING_FACILITY,
            date_time=timestamp,
            message_type=MESSAGE_TYPE,
            control_id=timestamp,
        ),
        pid=PIDSegment(
            patient_id=patient.id,
            last_name=name.first_family,
            first_name=name.first_given,
            birth_date=patient.birth_date,
            gender=patient.gender,
            address=HL7v2Address(
                street=address.first_line,
                city=address.city,
                state=address.state,
                postal_code=address.postal_code,
                country=address.country,
            ),
        ),
    )


def _escape_pid(pid: PIDSegment) -> PIDSegment:
    address = pid.address
    return PIDSegment(
        patient_id=escape_hl7(pid.patient_id),
        last_name=escape_hl7(pid.last_name),
        first_name=escape_hl7(pid.first_name),
        birth_date=escape_hl7(pid.birth_date),
        gender=escape_hl7(pid.gender),
        address=HL7v2Address(
            street=escape_hl7(address.street),
            city=escape_hl7(address.city),
            state=escape_hl7(address.state),
            postal_code=escape_hl7(address.postal_code),
            country=escape_hl7(address.country),
        ),
    )


def format_hl7v2_message(message: HL7v2Message) -> str:
    """Render an HL7v2Message as MSH and PID segments joined by a newline.

    Unset name and address components are emitted as empty strings so the
    field count never changes. PID values are escaped.
    """
    msh = message.msh
    pid = _escape_pid(message.pid)
    address = pid.address

    msh_fields = [
        "MSH",
        ENCODING_CHARACTERS,
        msh.sending_application,
        msh.sending_facility,
        msh.date_time,
        "",
        msh.message_type,
        msh.control_id,
        PROCESSING_ID,
        VERSION_ID,
        "",
    ]

    name = COMPONENT_SEPARATOR.join([pid.last_name, pid.first_name])
    addr = COMPONENT_SEPARATOR.join(
        [address.street, address.city, address.state, address.postal_code, address.country]
    )
    pid_fields = [
        "PID",
        "1",
        "",
        pid.patient_id,
        "",
        name,
        "",
        pid.birth_date,
        pid.gender,
        "",
        "",
        addr,
        "",
        "",
        "",
        "",
        "",
        pid.patient_id,
    ]

    return SEGMENT_SEPARATOR.join(
        [FIELD_SEPARATOR.join(msh_fields), FIELD_SEPARATOR.join(pid_fields)]
    )


def build_hl7v2_message(patient: PatientRecord, now: Optional[datetime] = None) -> str:
    """Build HL7 v2 ADT^A01 text from a PatientRecord.

    Never fails: absent data degrades to empty fields.

    Args:
        patient: Patient to render
        now: Message timestamp (defaults to current UTC time)

    Returns:
        HL7 v2 text with exactly two newline-separated segments

    Example:
        >>> text = build_hl7v2_message(PatientRecord(id="456"))
        >>> text.startswith("MSH|")
        True
    """
    return format_hl7v2_message(patient_to_hl7v2(patient, now))


def decode_hl7v2_payload(payload: bytes) -> str:
    """Extract HL7 v2 text from a record payload.

    A payload starting with MSH| is raw HL7 text; anything else is read as a
    JSON envelope carrying the text under the "hl7" key.

    Raises:
        FormatError: If the payload is neither raw HL7 text nor a valid envelope
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"HL7 v2 payload is not valid UTF-8: {e}") from e

    if text.startswith(HEADER_PREFIX):
        return text

    try:
        envelope = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(
            f"HL7 v2 payload is neither raw text starting with '{HEADER_PREFIX}' "
            f"nor a JSON envelope: {e}"
        ) from e

    if not isinstance(envelope, dict) or not isinstance(envelope.get(ENVELOPE_FIELD), str):
        raise FormatError(
            f"HL7 v2 JSON envelope must be an object with a string '{ENVELOPE_FIELD}' field"
        )
    return envelope[ENVELOPE_FIELD]


def encode_hl7v2_payload(text: str) -> bytes:
    """Wrap HL7 v2 text as the JSON envelope {"hl7": "<text>"}."""
    return json.dumps({ENVELOPE_FIELD: text}).encode("utf-8")
