"""HL7 v3 Patient XML parser and builder.

Documents have a ``Patient`` root in the ``urn:hl7-org:v3`` namespace with a
fixed child layout::

    <Patient xmlns="urn:hl7-org:v3">
      <id>...</id>
      <name><given>...</given><family>...</family></name>
      <administrativeGenderCode><code>M</code></administrativeGenderCode>
      <birthTime><value>19760320000000</value></birthTime>
      <addr>
        <streetAddressLine/><city/><state/><postalCode/>
      </addr>
    </Patient>
"""

from typing import Optional, Union

from lxml import etree

from hl7_transcoder.formats.gender import gender_from_code, gender_to_code
from hl7_transcoder.models.hl7v3 import HL7v3Address, HL7v3Patient
from hl7_transcoder.models.patient import Address, HumanName, PatientRecord
from hl7_transcoder.utils.exceptions import FormatError

HL7_NS = "urn:hl7-org:v3"

NSMAP = {
    None: HL7_NS,
}

ROOT_ELEMENT = "Patient"

# Time-of-day suffix appended to a birth date to form an HL7 v3 timestamp
MIDNIGHT_SUFFIX = "000000"


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


def _child_text(parent: Optional[etree._Element], ns: Optional[str], *path: str) -> str:
    """Return stripped text of the element at path below parent, or ''."""
    elem = parent
    for tag in path:
        if elem is None:
            return ""
        elem = elem.find(f"{{{ns}}}{tag}" if ns else tag)
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def parse_hl7v3_patient(xml_data: Union[bytes, str]) -> HL7v3Patient:
    """Parse an HL7 v3 Patient XML document.

    Args:
        xml_data: XML document as bytes or string

    Returns:
        HL7v3Patient with element text extracted

    Raises:
        FormatError: If XML is malformed, the root element is not Patient,
            or the id element is missing or empty
    """
    if isinstance(xml_data, str):
        xml_data = xml_data.encode("utf-8")

    try:
        root = etree.fromstring(xml_data.strip(), parser=_xml_parser())
    except etree.XMLSyntaxError as e:
        raise FormatError(
            f"Invalid HL7 v3 XML: {e}. "
            "Check that the record is a well-formed Patient document."
        ) from e

    qname = etree.QName(root)
    if qname.localname != ROOT_ELEMENT or qname.namespace not in (HL7_NS, None):
        raise FormatError(
            f"Unexpected root element {root.tag}. "
            f"Expected {ROOT_ELEMENT} in namespace {HL7_NS}."
        )

    ns = qname.namespace
    patient_id = _child_text(root, ns, "id")
    if not patient_id:
        raise FormatError("HL7 v3 Patient is missing required element: id")

    addr = root.find(f"{{{ns}}}addr" if ns else "addr")

    return HL7v3Patient(
        id=patient_id,
        given=_child_text(root, ns, "name", "given"),
        family=_child_text(root, ns, "name", "family"),
        gender_code=_child_text(root, ns, "administrativeGenderCode", "code"),
        birth_time=_child_text(root, ns, "birthTime", "value"),
        addr=HL7v3Address(
            street_address_line=_child_text(addr, ns, "streetAddressLine"),
            city=_child_text(addr, ns, "city"),
            state=_child_text(addr, ns, "state"),
            postal_code=_child_text(addr, ns, "postalCode"),
        ),
    )


def format_birth_time(birth_time: str) -> str:
    """Convert an HL7 v3 timestamp to YYYY-MM-DD.

    Anything after the first 8 characters (the time of day) is discarded.
    Values shorter than 8 characters yield an empty string.

    Example:
        >>> format_birth_time("19760320000000")
        '1976-03-20'
        >>> format_birth_time("1976")
        ''
    """
    if len(birth_time) < 8:
        return ""
    return f"{birth_time[:4]}-{birth_time[4:6]}-{birth_time[6:8]}"


def hl7v3_to_patient(v3_patient: HL7v3Patient) -> PatientRecord:
    """Map an HL7 v3 Patient to a PatientRecord.

    Args:
        v3_patient: Parsed HL7 v3 patient

    Returns:
        PatientRecord with no country in its address
    """
    addr = v3_patient.addr

    return PatientRecord(
        id=v3_patient.id,
        names=[
            HumanName(
                family=[v3_patient.family] if v3_patient.family else [],
                given=[v3_patient.given] if v3_patient.given else [],
            )
        ],
        birth_date=format_birth_time(v3_patient.birth_time),
        gender=gender_from_code(v3_patient.gender_code),
        addresses=[
            Address(
                line=[addr.street_address_line] if addr.street_address_line else [],
                city=addr.city,
                state=addr.state,
                postal_code=addr.postal_code,
            )
        ],
    )


def patient_to_hl7v3(patient: PatientRecord) -> HL7v3Patient:
    """Map a PatientRecord to an HL7 v3 Patient.

    Only the first name and first address are rendered. Country has no
    target element and is dropped.

    Raises:
        MappingError: If the patient gender is empty or not male, female
            or unknown
    """
    name = patient.first_name()
    address = patient.first_address()

    return HL7v3Patient(
        id=patient.id,
        given=name.first_given,
        family=name.first_family,
        gender_code=gender_to_code(patient.gender),
        birth_time=patient.birth_date.replace("-", "") + MIDNIGHT_SUFFIX,
        addr=HL7v3Address(
            street_address_line=address.first_line,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
        ),
    )


def build_hl7v3_patient(v3_patient: HL7v3Patient) -> bytes:
    """Serialize an HL7v3Patient to XML bytes.

    Args:
        v3_patient: Patient to serialize

    Returns:
        UTF-8 encoded XML document with declaration
    """
    root = etree.Element(f"{{{HL7_NS}}}{ROOT_ELEMENT}", nsmap=NSMAP)

    id_elem = etree.SubElement(root, f"{{{HL7_NS}}}id")
    id_elem.text = v3_patient.id

    name_elem = etree.SubElement(root, f"{{{HL7_NS}}}name")
    given_elem = etree.SubElement(name_elem, f"{{{HL7_NS}}}given")
    given_elem.text = v3_patient.given
    family_elem = etree.SubElement(name_elem, f"{{{HL7_NS}}}family")
    family_elem.text = v3_patient.family

    gender_elem = etree.SubElement(root, f"{{{HL7_NS}}}administrativeGenderCode")
    code_elem = etree.SubElement(gender_elem, f"{{{HL7_NS}}}code")
    code_elem.text = v3_patient.gender_code

    birth_elem = etree.SubElement(root, f"{{{HL7_NS}}}birthTime")
    value_elem = etree.SubElement(birth_elem, f"{{{HL7_NS}}}value")
    value_elem.text = v3_patient.birth_time

    addr = v3_patient.addr
    addr_elem = etree.SubElement(root, f"{{{HL7_NS}}}addr")
    street_elem = etree.SubElement(addr_elem, f"{{{HL7_NS}}}streetAddressLine")
    street_elem.text = addr.street_address_line
    city_elem = etree.SubElement(addr_elem, f"{{{HL7_NS}}}city")
    city_elem.text = addr.city
    state_elem = etree.SubElement(addr_elem, f"{{{HL7_NS}}}state")
    state_elem.text = addr.state
    postal_elem = etree.SubElement(addr_elem, f"{{{HL7_NS}}}postalCode")
    postal_elem.text = addr.postal_code

    return etree.tostring(
        root,
        pretty_print=True,
        xml_declaration=True,
        encoding="UTF-8",
    )


def build_hl7v3_message(patient: PatientRecord) -> bytes:
    """Build an HL7 v3 Patient XML document from a PatientRecord.

    Raises:
        MappingError: If the patient gender cannot be rendered as a code
    """
    return build_hl7v3_patient(patient_to_hl7v3(patient))
