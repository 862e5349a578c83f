"""Processor specification metadata reported to a hosting pipeline."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class Parameter:
    """Description of one configuration parameter.

    Attributes:
        default: Default value ("" when the parameter is required)
        description: Human-readable description
        type: Parameter type name
        validations: Validation rules (e.g. "required", "inclusion=fhir,hl7")
    """

    default: str
    description: str
    type: str = "string"
    validations: List[str] = field(default_factory=list)


@dataclass
class Specification:
    """Processor metadata.

    Attributes:
        name: Processor name used by the host to reference it
        summary: One-line summary
        description: Detailed description
        version: Processor version
        author: Author
        parameters: Configuration parameters keyed by name
    """

    name: str
    summary: str
    description: str
    version: str
    author: str
    parameters: Dict[str, Parameter] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "summary": self.summary,
            "description": self.description,
            "version": self.version,
            "author": self.author,
            "parameters": {
                name: {
                    "default": param.default,
                    "description": param.description,
                    "type": param.type,
                    "validations": list(param.validations),
                }
                for name, param in self.parameters.items()
            },
        }
