"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hl7_transcoder.transcoder.router import SUPPORTED_CONVERSIONS, Format, supported_conversions_text


class ConversionConfig(BaseModel):
    """Configuration for the conversion a processor performs.

    Accepts both the host's camelCase keys (inputType, outputType) and the
    snake_case field names.

    Attributes:
        input_type: Format of incoming records (fhir, hl7, hl7v3)
        output_type: Format of outgoing records (fhir, hl7, hl7v3)

    Example:
        >>> ConversionConfig(inputType="fhir", outputType="hl7").output_type
        'hl7'
    """

    model_config = ConfigDict(populate_by_name=True)

    input_type: str = Field(
        default="fhir",
        alias="inputType",
        description="Input record format: fhir, hl7, hl7v3",
    )
    output_type: str = Field(
        default="hl7",
        alias="outputType",
        description="Output record format: fhir, hl7, hl7v3",
    )

    @field_validator("input_type", "output_type")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate format name.

        Args:
            v: Format name

        Returns:
            Validated format name (lowercase)

        Raises:
            ValueError: If format is not one of fhir, hl7, hl7v3
        """
        valid_formats = [f.value for f in Format]
        v_lower = v.strip().lower()
        if v_lower not in valid_formats:
            raise ValueError(
                f"Invalid format: {v}. Must be one of: {', '.join(valid_formats)}"
            )
        return v_lower

    @model_validator(mode="after")
    def validate_conversion_pair(self) -> "ConversionConfig":
        """Validate the pair against the supported conversions.

        Returns:
            Validated ConversionConfig instance

        Raises:
            ValueError: If the pair is not supported
        """
        allowed = SUPPORTED_CONVERSIONS[Format(self.input_type)]
        if Format(self.output_type) not in allowed:
            raise ValueError(
                f"Unsupported conversion: {self.input_type} -> {self.output_type}. "
                f"Supported conversions: {supported_conversions_text()}"
            )
        return self


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact PII from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/hl7-transcoder.log"),
        description="Log file path"
    )
    redact_pii: bool = Field(
        default=False,
        description="Redact PII from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level string

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        conversion: Input/output format configuration
        logging: Logging configuration

    Example:
        >>> config = Config(conversion=ConversionConfig(input_type="hl7", output_type="fhir"))
        >>> config.conversion.input_type
        'hl7'
    """

    conversion: ConversionConfig = ConversionConfig()
    logging: LoggingConfig = LoggingConfig()
