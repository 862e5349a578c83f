"""Main CLI entry point for HL7 Transcoder.

The ``hl7-transcoder`` command group loads configuration, sets up logging and
dispatches to the transcoding and configuration commands.
"""

from pathlib import Path
from typing import Optional

import click

from hl7_transcoder import __version__
from hl7_transcoder.cli.transcode_commands import conversions, spec, transcode
from hl7_transcoder.config import Config, load_config
from hl7_transcoder.logging_audit import configure_logging
from hl7_transcoder.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="hl7-transcoder")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact PII (patient names, birth dates, PID segments) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """HL7 Transcoder - convert patient records between FHIR, HL7 v2 and HL7 v3.

    Examples:

        # FHIR Patient JSON to JSON-wrapped HL7 v2
        hl7-transcoder transcode patient.json --input-type fhir --output-type hl7

        # HL7 v3 Patient XML to FHIR, using a custom configuration
        hl7-transcoder --config my.json transcode patient.xml --input-type hl7v3 --output-type fhir

        # List supported conversions
        hl7-transcoder conversions
    """
    ctx.ensure_object(dict)

    try:
        app_config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["config"] = app_config
    ctx.obj["verbose"] = verbose

    # CLI flags win over the config file, which wins over defaults
    logging_cfg = app_config.logging
    try:
        configure_logging(
            level="DEBUG" if verbose else logging_cfg.level,
            log_file=log_file or logging_cfg.log_file,
            redact_pii=redact_pii or logging_cfg.redact_pii,
        )
    except RuntimeError as e:
        click.echo(f"Error configuring logging: {e}", err=True)
        ctx.exit(1)


cli.add_command(transcode)
cli.add_command(conversions)
cli.add_command(spec)


def _print_config(app_config: Config) -> None:
    conversion = app_config.conversion
    logging_cfg = app_config.logging
    click.echo("\nConversion:")
    click.echo(f"  Input type:  {conversion.input_type}")
    click.echo(f"  Output type: {conversion.output_type}")
    click.echo("\nLogging:")
    click.echo(f"  Level:       {logging_cfg.level}")
    click.echo(f"  Log file:    {logging_cfg.log_file}")
    click.echo(f"  Redact PII:  {logging_cfg.redact_pii}")


@cli.group("config")
def config_group() -> None:
    """Configuration management commands."""


@config_group.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate_config(config_file: Path) -> None:
    """Validate a configuration file, environment overrides included.

    Example:
        hl7-transcoder config validate config/config.json
    """
    try:
        app_config = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    _print_config(app_config)


@config_group.command("show")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the effective configuration as JSON."""
    app_config: Config = ctx.obj["config"]
    click.echo(app_config.model_dump_json(indent=2))


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"hl7-transcoder version {__version__}")


if __name__ == "__main__":
    cli()
