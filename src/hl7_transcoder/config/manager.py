"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and validation of the flat key/value configuration a hosting pipeline supplies.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import ValidationError

from hl7_transcoder.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from hl7_transcoder.config.schema import Config, ConversionConfig
from hl7_transcoder.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "HL7_TRANSCODER_"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (HL7_TRANSCODER_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.conversion.input_type
        'fhir'
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file must contain a JSON object: {config_path}"
            )
        return config_dict

    logger.info(
        f"Config file not found: {config_path}. Using default configuration."
    )
    # Return a deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with HL7_TRANSCODER_ prefix.

    See ENV_OVERRIDES for the variable names and the fields they set.

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    for suffix, section, key, convert in ENV_OVERRIDES:
        raw = os.getenv(f"{ENV_PREFIX}{suffix}")
        if not raw:
            continue
        section_dict = config_dict.setdefault(section, {})
        # A camelCase key in the file would otherwise win over the override
        section_dict.pop(FIELD_ALIASES.get(key, ""), None)
        section_dict[key] = convert(raw)
        logger.debug(f"Override: {section}.{key} from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse a case-insensitive boolean string (true/1/yes/on)."""
    return value.lower() in ("true", "1", "yes", "on")


def _as_is(value: str) -> str:
    return value


FIELD_ALIASES = {"input_type": "inputType", "output_type": "outputType"}

# (variable suffix, config section, field, converter)
ENV_OVERRIDES: List[Tuple[str, str, str, Callable[[str], Any]]] = [
    ("INPUT_TYPE", "conversion", "input_type", _as_is),
    ("OUTPUT_TYPE", "conversion", "output_type", _as_is),
    ("LOG_LEVEL", "logging", "level", _as_is),
    ("LOG_FILE", "logging", "log_file", _as_is),
    ("REDACT_PII", "logging", "redact_pii", _parse_bool),
]


def parse_processor_config(cfg: Mapping[str, str]) -> ConversionConfig:
    """Validate the flat configuration map a hosting pipeline supplies.

    Args:
        cfg: Mapping with inputType and outputType keys

    Returns:
        Validated ConversionConfig

    Raises:
        ConfigurationError: If a key is missing, a format is unknown, or the
            pair is not supported

    Example:
        >>> parse_processor_config({"inputType": "hl7", "outputType": "fhir"}).input_type
        'hl7'
    """
    missing = [key for key in ("inputType", "outputType") if not cfg.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration parameter(s): {', '.join(missing)}"
        )

    try:
        return ConversionConfig(
            input_type=cfg["inputType"],
            output_type=cfg["outputType"],
        )
    except ValidationError as e:
        raise ConfigurationError(f"Failed to parse configuration: {e}") from e
