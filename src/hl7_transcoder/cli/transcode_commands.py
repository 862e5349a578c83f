"""Transcoding CLI commands for HL7 Transcoder.

This module provides CLI commands that run the batch processor over files,
list the supported conversions and print the processor specification.
"""

import json as json_lib
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from hl7_transcoder.logging_audit import audit_observer, log_audit_event
from hl7_transcoder.models.records import ErrorRecord, Record, TranscodedRecord
from hl7_transcoder.transcoder.error_summary import ErrorSummaryCollector, generate_error_report
from hl7_transcoder.transcoder.processor import HL7Processor
from hl7_transcoder.transcoder.router import ConversionPair, Format
from hl7_transcoder.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Files with these suffixes hold one record per non-empty line
LINE_DELIMITED_SUFFIXES = {".jsonl", ".ndjson"}

OUTPUT_SUFFIXES = {
    Format.FHIR: ".json",
    Format.HL7: ".json",
    Format.HL7V3: ".xml",
}

FORMAT_CHOICE = click.Choice([f.value for f in Format], case_sensitive=False)


def read_records(files: Tuple[Path, ...]) -> List[Record]:
    """Read records from files.

    Each file is one record, except .jsonl/.ndjson files where each non-empty
    line is one record. Positions are "<file name>" or "<file name>:<line>".
    """
    records: List[Record] = []
    for path in files:
        data = path.read_bytes()
        if path.suffix.lower() in LINE_DELIMITED_SUFFIXES:
            for line_no, line in enumerate(data.splitlines(), start=1):
                if not line.strip():
                    continue
                records.append(
                    Record(
                        payload=line,
                        position=f"{path.name}:{line_no}".encode("utf-8"),
                        metadata={"source": str(path)},
                    )
                )
        else:
            records.append(
                Record(
                    payload=data,
                    position=path.name.encode("utf-8"),
                    metadata={"source": str(path)},
                )
            )
    return records


@click.command("transcode")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--input-type", "input_type", type=FORMAT_CHOICE, default=None, help="Input format (overrides config)")
@click.option("--output-type", "output_type", type=FORMAT_CHOICE, default=None, help="Output format (overrides config)")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write each transcoded record to this directory",
)
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.option("--audit", is_flag=True, help="Write an audit log entry for every record")
@click.pass_context
def transcode(
    ctx: click.Context,
    files: Tuple[Path, ...],
    input_type: Optional[str],
    output_type: Optional[str],
    output_dir: Optional[Path],
    json_output: bool,
    audit: bool,
) -> None:
    """Transcode patient records between FHIR, HL7 v2 and HL7 v3.

    Exits with code 0 when every record converts, 1 when any record fails,
    and 2 when the conversion pair is not supported.

    Examples:

        # FHIR Patient JSON to HL7 v2
        hl7-transcoder transcode patient.json --input-type fhir --output-type hl7

        # Batch of HL7 v2 messages (one JSON envelope per line) to FHIR
        hl7-transcoder transcode messages.jsonl --input-type hl7 --output-type fhir --json
    """
    obj = ctx.obj or {}
    config = obj.get("config")
    if config is not None:
        input_type = input_type or config.conversion.input_type
        output_type = output_type or config.conversion.output_type

    if not input_type or not output_type:
        click.secho("Error: --input-type and --output-type are required", fg="red", err=True)
        sys.exit(2)

    conversion_label = f"{input_type.lower()}->{output_type.lower()}"
    processor = HL7Processor(on_result=audit_observer(conversion_label) if audit else None)
    try:
        processor.configure({"inputType": input_type, "outputType": output_type})
    except ConfigurationError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(2)

    records = read_records(files)
    logger.info(f"Transcoding {len(records)} record(s) from {len(files)} file(s): {conversion_label}")
    results = processor.process(records)

    collector = ErrorSummaryCollector()
    collector.add_results(results)
    summary = collector.get_summary()
    log_audit_event(
        "BATCH_TRANSCODED",
        {
            "status": _batch_status(summary.total_errors, summary.total_records),
            "conversion": conversion_label,
            "record_count": summary.total_records,
            "error_count": summary.total_errors,
        },
    )

    output_format = Format(output_type.lower())
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)

    report = []
    for index, (record, result) in enumerate(zip(records, results)):
        position = record.position.decode("utf-8")
        if isinstance(result, TranscodedRecord):
            written: Optional[Path] = None
            if output_dir is not None:
                written = output_dir / f"{index:05d}{OUTPUT_SUFFIXES[output_format]}"
                written.write_bytes(result.payload)
            report.append(
                {
                    "index": index,
                    "position": position,
                    "status": "success",
                    "payload": result.payload.decode("utf-8"),
                    "output_file": str(written) if written else None,
                }
            )
        else:
            report.append(
                {
                    "index": index,
                    "position": position,
                    "status": "failed",
                    "error": result.error_info.to_dict(),
                }
            )

    if json_output:
        click.echo(json_lib.dumps(report, indent=2))
    else:
        for entry in report:
            if entry["status"] == "success":
                if output_dir is None:
                    click.echo(entry["payload"])
                else:
                    click.secho(f"✓ {entry['position']} -> {entry['output_file']}", fg="green")
            else:
                click.secho(f"✗ {entry['position']}: {entry['error']['message']}", fg="red", err=True)
        if summary.total_errors:
            click.echo(generate_error_report(summary), err=True)

    if any(isinstance(r, ErrorRecord) for r in results):
        sys.exit(1)


def _batch_status(error_count: int, record_count: int) -> str:
    if error_count == 0:
        return "success"
    if error_count == record_count:
        return "failure"
    return "partial"


@click.command("conversions")
def conversions() -> None:
    """List supported conversion pairs."""
    for pair in ConversionPair:
        click.echo(str(pair))


@click.command("spec")
def spec() -> None:
    """Print the processor specification as JSON."""
    click.echo(json_lib.dumps(HL7Processor().specification().to_dict(), indent=2))
