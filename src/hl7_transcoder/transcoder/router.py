"""Conversion routing between patient record formats.

Every conversion decodes the input into a PatientRecord and encodes that
record into the output format. Only the pairs in SUPPORTED_CONVERSIONS are
exposed: hl7 <-> hl7v3 is not supported even though both ends could transit
the PatientRecord.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Union

from hl7_transcoder.formats.fhir import parse_fhir_patient, serialize_fhir_patient
from hl7_transcoder.formats.hl7v2 import (
    build_hl7v2_message,
    decode_hl7v2_payload,
    encode_hl7v2_payload,
    hl7v2_to_patient,
    parse_hl7v2_message,
)
from hl7_transcoder.formats.hl7v3 import build_hl7v3_message, hl7v3_to_patient, parse_hl7v3_patient
from hl7_transcoder.models.patient import PatientRecord
from hl7_transcoder.utils.exceptions import ConfigurationError


class Format(str, Enum):
    """Record formats understood by the transcoder."""

    FHIR = "fhir"
    HL7 = "hl7"
    HL7V3 = "hl7v3"


SUPPORTED_CONVERSIONS: Dict[Format, FrozenSet[Format]] = {
    Format.FHIR: frozenset({Format.HL7, Format.HL7V3}),
    Format.HL7: frozenset({Format.FHIR}),
    Format.HL7V3: frozenset({Format.FHIR}),
}


class ConversionPair(Enum):
    """Supported (input, output) format pairs."""

    FHIR_TO_HL7 = (Format.FHIR, Format.HL7)
    FHIR_TO_HL7V3 = (Format.FHIR, Format.HL7V3)
    HL7_TO_FHIR = (Format.HL7, Format.FHIR)
    HL7V3_TO_FHIR = (Format.HL7V3, Format.FHIR)

    @property
    def input_format(self) -> Format:
        return self.value[0]

    @property
    def output_format(self) -> Format:
        return self.value[1]

    def __str__(self) -> str:
        return f"{self.input_format.value}->{self.output_format.value}"


def decode_hl7v2(payload: bytes) -> PatientRecord:
    """Decode a raw or JSON-wrapped HL7 v2 payload into a PatientRecord."""
    return hl7v2_to_patient(parse_hl7v2_message(decode_hl7v2_payload(payload)))


def encode_hl7v2(patient: PatientRecord) -> bytes:
    """Encode a PatientRecord as JSON-wrapped HL7 v2 text."""
    return encode_hl7v2_payload(build_hl7v2_message(patient))


def decode_hl7v3(payload: bytes) -> PatientRecord:
    """Decode HL7 v3 Patient XML into a PatientRecord."""
    return hl7v3_to_patient(parse_hl7v3_patient(payload))


DECODERS: Dict[Format, Callable[[bytes], PatientRecord]] = {
    Format.FHIR: parse_fhir_patient,
    Format.HL7: decode_hl7v2,
    Format.HL7V3: decode_hl7v3,
}

ENCODERS: Dict[Format, Callable[[PatientRecord], bytes]] = {
    Format.FHIR: serialize_fhir_patient,
    Format.HL7: encode_hl7v2,
    Format.HL7V3: build_hl7v3_message,
}


def parse_format(value: Union[str, Format], field_name: str = "format") -> Format:
    """Parse a format name (case-insensitive).

    Raises:
        ConfigurationError: If the name is not fhir, hl7 or hl7v3
    """
    if isinstance(value, Format):
        return value
    try:
        return Format(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(f.value for f in Format)
        raise ConfigurationError(
            f"Invalid {field_name}: '{value}'. Must be one of: {valid}"
        ) from None


def validate_conversion(input_format: Format, output_format: Format) -> ConversionPair:
    """Check a format pair against the allow-list.

    Args:
        input_format: Input format
        output_format: Output format

    Returns:
        The matching ConversionPair

    Raises:
        ConfigurationError: If the pair is not supported

    Example:
        >>> validate_conversion(Format.FHIR, Format.HL7)
        <ConversionPair.FHIR_TO_HL7: (<Format.FHIR: 'fhir'>, <Format.HL7: 'hl7'>)>
    """
    if output_format not in SUPPORTED_CONVERSIONS.get(input_format, frozenset()):
        raise ConfigurationError(
            f"Unsupported conversion: {input_format.value} -> {output_format.value}. "
            f"Supported conversions: {supported_conversions_text()}"
        )
    return ConversionPair((input_format, output_format))


def supported_conversions_text() -> str:
    """Return the allow-list as 'fhir->hl7, fhir->hl7v3, ...'."""
    return ", ".join(str(pair) for pair in ConversionPair)


@dataclass(frozen=True)
class Conversion:
    """A resolved conversion holding its decode and encode functions.

    Attributes:
        pair: The (input, output) pair
        decode: Input bytes -> PatientRecord
        encode: PatientRecord -> output bytes
    """

    pair: ConversionPair
    decode: Callable[[bytes], PatientRecord]
    encode: Callable[[PatientRecord], bytes]

    def convert(self, payload: bytes) -> bytes:
        """Transcode one payload.

        The pair is re-checked against the allow-list before any decoding.

        Raises:
            ConfigurationError: If the pair is no longer supported
            FormatError: If the payload cannot be decoded
            MappingError: If the patient cannot be encoded
        """
        validate_conversion(self.pair.input_format, self.pair.output_format)
        return self.encode(self.decode(payload))


def resolve_conversion(
    input_type: Union[str, Format],
    output_type: Union[str, Format],
) -> Conversion:
    """Resolve configured input and output types to a Conversion.

    Args:
        input_type: Input format name (fhir, hl7, hl7v3)
        output_type: Output format name (fhir, hl7, hl7v3)

    Returns:
        Conversion for the pair

    Raises:
        ConfigurationError: If either name is unknown or the pair is unsupported

    Example:
        >>> conversion = resolve_conversion("hl7", "fhir")
        >>> str(conversion.pair)
        'hl7->fhir'
    """
    pair = validate_conversion(
        parse_format(input_type, "inputType"),
        parse_format(output_type, "outputType"),
    )
    return Conversion(
        pair=pair,
        decode=DECODERS[pair.input_format],
        encode=ENCODERS[pair.output_format],
    )
