"""Administrative gender mapping between single-letter codes and FHIR values.

The mapping is a fixed bijection over M/F/U and male/female/unknown.
"""

from typing import Final

from hl7_transcoder.models.patient import FEMALE, MALE, UNKNOWN
from hl7_transcoder.utils.exceptions import MappingError

CODE_TO_GENDER: Final[dict[str, str]] = {
    "M": MALE,
    "F": FEMALE,
    "U": UNKNOWN,
}

GENDER_TO_CODE: Final[dict[str, str]] = {value: code for code, value in CODE_TO_GENDER.items()}


def gender_from_code(code: str) -> str:
    """Map a single-letter gender code to the pivot gender.

    Args:
        code: Gender code (M, F, U)

    Returns:
        male, female or unknown; empty string for any other code

    Example:
        >>> gender_from_code("M")
        'male'
        >>> gender_from_code("X")
        ''
    """
    return CODE_TO_GENDER.get(code, "")


def gender_to_code(gender: str) -> str:
    """Render a pivot gender as a single-letter code.

    The code is the upper-cased first character of the pivot value.

    Args:
        gender: Pivot gender (male, female, unknown)

    Returns:
        Single-letter gender code

    Raises:
        MappingError: If gender is empty or not one of the pivot values
    """
    if not gender:
        raise MappingError(
            "Cannot render empty gender as an administrative gender code. "
            "Gender must be one of: male, female, unknown."
        )
    if gender not in GENDER_TO_CODE:
        raise MappingError(
            f"Invalid gender '{gender}'. Must be one of: male, female, unknown."
        )
    return gender[0].upper()
