"""HL7 v3 intermediate data model.

Mirrors the fixed element shape of the HL7 v3 Patient document. There is no
country element, so country never survives a trip through HL7 v3.
"""

from dataclasses import dataclass, field


@dataclass
class HL7v3Address:
    """addr element children."""

    street_address_line: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""


@dataclass
class HL7v3Patient:
    """HL7 v3 Patient document.

    Attributes:
        id: id element text
        given: name/given text
        family: name/family text
        gender_code: administrativeGenderCode/code text (M, F, U)
        birth_time: birthTime/value text (YYYYMMDDHHMMSS)
        addr: addr element
    """

    id: str = ""
    given: str = ""
    family: str = ""
    gender_code: str = ""
    birth_time: str = ""
    addr: HL7v3Address = field(default_factory=HL7v3Address)
