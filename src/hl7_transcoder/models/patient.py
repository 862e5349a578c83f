"""Canonical patient data model.

This module defines the PatientRecord dataclass that every conversion pivots
through. Codecs read and write only the first name and first address entry.
"""

from dataclasses import dataclass, field
from typing import List

MALE = "male"
FEMALE = "female"
UNKNOWN = "unknown"


@dataclass
class HumanName:
    """A patient name.

    Attributes:
        family: Family names
        given: Given names
    """

    family: List[str] = field(default_factory=list)
    given: List[str] = field(default_factory=list)

    @property
    def first_family(self) -> str:
        return self.family[0] if self.family else ""

    @property
    def first_given(self) -> str:
        return self.given[0] if self.given else ""


@dataclass
class Address:
    """A patient postal address.

    Attributes:
        line: Street address lines
        city: City
        state: State/province
        postal_code: Postal code
        country: Country
    """

    line: List[str] = field(default_factory=list)
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @property
    def first_line(self) -> str:
        return self.line[0] if self.line else ""


@dataclass
class PatientRecord:
    """Canonical patient representation shared by all formats.

    Attributes:
        id: Patient identifier (required for every conversion)
        names: Ordered names; only the first is consumed by codecs
        birth_date: Date of birth in YYYY-MM-DD form
        gender: male, female, unknown, or empty if unmapped
        addresses: Ordered addresses; only the first is consumed by codecs
    """

    id: str
    names: List[HumanName] = field(default_factory=list)
    birth_date: str = ""
    gender: str = ""
    addresses: List[Address] = field(default_factory=list)

    def first_name(self) -> HumanName:
        """Return the first name entry, or an empty one."""
        return self.names[0] if self.names else HumanName()

    def first_address(self) -> Address:
        """Return the first address entry, or an empty one."""
        return self.addresses[0] if self.addresses else Address()
