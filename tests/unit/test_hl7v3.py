"""Unit tests for the HL7 v3 Patient XML parser and builder."""

import pytest
from lxml import etree

from hl7_transcoder.formats.hl7v3 import (
    HL7_NS,
    build_hl7v3_message,
    format_birth_time,
    hl7v3_to_patient,
    parse_hl7v3_patient,
)
from hl7_transcoder.models.patient import Address, HumanName, PatientRecord
from hl7_transcoder.utils.exceptions import FormatError, MappingError

NS = {"hl7": HL7_NS}


class TestParseHL7v3Patient:
    """Test HL7 v3 XML parsing."""

    def test_parse_sample_document(self, hl7v3_xml):
        """Test every element of the Patient document is extracted."""
        # Act
        v3 = parse_hl7v3_patient(hl7v3_xml)

        # Assert
        assert v3.id == "pat-7335"
        assert v3.given == "Novella"
        assert v3.family == "Hoeger"
        assert v3.gender_code == "M"
        assert v3.birth_time == "19760320000000"
        assert v3.addr.street_address_line == "6847 Vistaside"
        assert v3.addr.city == "Greensboro"
        assert v3.addr.state == "Vermont"
        assert v3.addr.postal_code == "89755"

    def test_parse_accepts_string(self, hl7v3_xml):
        """Test a str document with an encoding declaration is accepted."""
        v3 = parse_hl7v3_patient(hl7v3_xml.decode("utf-8"))

        assert v3.id == "pat-7335"

    def test_parse_tolerates_surrounding_whitespace(self, hl7v3_xml):
        """Test leading whitespace before the declaration is ignored."""
        v3 = parse_hl7v3_patient(b"\n\t  " + hl7v3_xml + b"\n")

        assert v3.family == "Hoeger"

    def test_parse_without_namespace(self):
        """Test a Patient root without a namespace is accepted."""
        xml = b"<Patient><id>1</id><name><family>Doe</family></name></Patient>"

        v3 = parse_hl7v3_patient(xml)

        assert v3.id == "1"
        assert v3.family == "Doe"
        assert v3.given == ""
        assert v3.addr.city == ""

    def test_malformed_xml_raises(self):
        """Test malformed XML is rejected."""
        with pytest.raises(FormatError) as exc_info:
            parse_hl7v3_patient(b"<Patient><id>1</Patient>")

        assert "Invalid HL7 v3 XML" in str(exc_info.value)

    def test_wrong_root_raises(self):
        """Test a document whose root is not Patient is rejected."""
        with pytest.raises(FormatError) as exc_info:
            parse_hl7v3_patient(b'<Person xmlns="urn:hl7-org:v3"><id>1</id></Person>')

        assert "Unexpected root element" in str(exc_info.value)

    @pytest.mark.parametrize(
        "xml",
        [
            b'<Patient xmlns="urn:hl7-org:v3"><name><given>A</given><family>B</family></name>'
            b"<administrativeGenderCode><code>M</code></administrativeGenderCode></Patient>",
            b'<Patient xmlns="urn:hl7-org:v3"><id>  </id></Patient>',
            b"<Patient><id/></Patient>",
        ],
    )
    def test_missing_id_raises(self, xml):
        """Test a Patient without an id value is rejected."""
        with pytest.raises(FormatError) as exc_info:
            parse_hl7v3_patient(xml)

        assert "missing required element: id" in str(exc_info.value)

    def test_wrong_namespace_raises(self):
        """Test a Patient root in another namespace is rejected."""
        with pytest.raises(FormatError):
            parse_hl7v3_patient(b'<Patient xmlns="http://hl7.org/fhir"><id>1</id></Patient>')


class TestHL7v3ToPatient:
    """Test mapping HL7 v3 to the patient model."""

    def test_gender_code_and_birth_time_map_to_patient(self, hl7v3_xml):
        """Test code M and birthTime 19760320000000 map to male and 1976-03-20."""
        # Act
        patient = hl7v3_to_patient(parse_hl7v3_patient(hl7v3_xml))

        # Assert
        assert patient.gender == "male"
        assert patient.birth_date == "1976-03-20"
        assert patient.id == "pat-7335"
        assert patient.names == [HumanName(family=["Hoeger"], given=["Novella"])]
        assert patient.addresses == [
            Address(
                line=["6847 Vistaside"],
                city="Greensboro",
                state="Vermont",
                postal_code="89755",
            )
        ]

    def test_unmapped_gender_code_yields_empty(self):
        """Test an unknown gender code maps to empty gender."""
        xml = (
            b'<Patient xmlns="urn:hl7-org:v3"><id>1</id>'
            b"<administrativeGenderCode><code>X</code></administrativeGenderCode></Patient>"
        )

        patient = hl7v3_to_patient(parse_hl7v3_patient(xml))

        assert patient.gender == ""

    @pytest.mark.parametrize(
        "birth_time,expected",
        [("19760320000000", "1976-03-20"), ("19760320", "1976-03-20"), ("1976", ""), ("", "")],
    )
    def test_format_birth_time(self, birth_time, expected):
        """Test time-of-day is discarded and short values are empty."""
        assert format_birth_time(birth_time) == expected


class TestBuildHL7v3Message:
    """Test HL7 v3 XML generation."""

    def test_build_document_structure(self, patient):
        """Test the generated document has the fixed element layout."""
        # Act
        xml = build_hl7v3_message(patient)
        root = etree.fromstring(xml)

        # Assert
        assert xml.startswith(b"<?xml")
        assert root.tag == f"{{{HL7_NS}}}Patient"
        assert root.findtext("hl7:id", namespaces=NS) == "123"
        assert root.findtext("hl7:name/hl7:given", namespaces=NS) == "John"
        assert root.findtext("hl7:name/hl7:family", namespaces=NS) == "Smith"
        assert root.findtext("hl7:administrativeGenderCode/hl7:code", namespaces=NS) == "M"
        assert root.findtext("hl7:birthTime/hl7:value", namespaces=NS) == "19900101000000"
        assert root.findtext("hl7:addr/hl7:streetAddressLine", namespaces=NS) == "123 Main St"
        assert root.findtext("hl7:addr/hl7:city", namespaces=NS) == "Springfield"
        assert root.findtext("hl7:addr/hl7:state", namespaces=NS) == "IL"
        assert root.findtext("hl7:addr/hl7:postalCode", namespaces=NS) == "62701"

    def test_country_is_dropped(self, patient):
        """Test the address country has no element in the output."""
        xml = build_hl7v3_message(patient)

        assert b"USA" not in xml
        assert b"country" not in xml

    @pytest.mark.parametrize("gender,code", [("female", "F"), ("unknown", "U")])
    def test_gender_codes(self, gender, code):
        """Test female and unknown render as F and U."""
        xml = build_hl7v3_message(PatientRecord(id="1", gender=gender))

        root = etree.fromstring(xml)
        assert root.findtext("hl7:administrativeGenderCode/hl7:code", namespaces=NS) == code

    def test_empty_gender_raises_mapping_error(self):
        """Test a patient without gender cannot be rendered."""
        with pytest.raises(MappingError):
            build_hl7v3_message(PatientRecord(id="456"))

    def test_build_then_parse_drops_only_country(self, patient):
        """Test the round trip preserves every field except country."""
        # Act
        parsed = hl7v3_to_patient(parse_hl7v3_patient(build_hl7v3_message(patient)))

        # Assert
        assert parsed.id == patient.id
        assert parsed.names == patient.names
        assert parsed.birth_date == patient.birth_date
        assert parsed.gender == patient.gender
        assert parsed.addresses[0].line == ["123 Main St"]
        assert parsed.addresses[0].postal_code == "62701"
        assert parsed.addresses[0].country == ""
